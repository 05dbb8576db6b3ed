from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'commissions'

router = DefaultRouter()
router.register(r'professionals', views.ProfessionalLedgerViewSet, basename='professional-ledger')
router.register(r'entries', views.LedgerEntryViewSet, basename='entry')
router.register(r'payouts', views.PayoutViewSet, basename='payout')

urlpatterns = [
    # Professional ledger
    # GET    /api/commissions/professionals/{id}/balance/
    # GET    /api/commissions/professionals/{id}/pending/
    # GET    /api/commissions/professionals/{id}/paid/
    # GET    /api/commissions/professionals/{id}/period/?year=&month=
    # POST   /api/commissions/professionals/{id}/recalculate/
    # POST   /api/commissions/professionals/{id}/bonus/
    # POST   /api/commissions/professionals/{id}/employee_purchase/

    # Entries
    # POST   /api/commissions/entries/
    # GET    /api/commissions/entries/{id}/
    # POST   /api/commissions/entries/{id}/adjust_rate/
    # POST   /api/commissions/entries/{id}/mark_paid/

    # Payouts
    # GET    /api/commissions/payouts/
    # POST   /api/commissions/payouts/              - Settle
    # GET    /api/commissions/payouts/{id}/
    # POST   /api/commissions/payouts/{id}/undo/
    # GET    /api/commissions/payouts/{id}/check/

    path('pot/distribute/', views.distribute_pot, name='pot-distribute'),

    path('', include(router.urls)),
]
