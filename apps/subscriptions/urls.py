from django.urls import path
from . import views

app_name = 'subscriptions'

urlpatterns = [
    path('metrics/', views.metrics, name='metrics'),
    path('delinquency/', views.delinquency, name='delinquency'),
]
