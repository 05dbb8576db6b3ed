from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'professionals'

router = DefaultRouter()
router.register(r'', views.ProfessionalViewSet, basename='professional')

urlpatterns = [
    path('', include(router.urls)),
]
