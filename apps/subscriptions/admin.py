# ==========================================
# apps/subscriptions/admin.py
# ==========================================

from django.contrib import admin
from .models import Subscription, Appointment


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    """Admin interface for subscriptions mirrored from the payment gateway."""

    list_display = [
        'customer_name',
        'plan_name',
        'amount',
        'status',
        'last_payment_status',
        'next_renewal_at',
        'created_at',
    ]

    list_filter = [
        'status',
        'last_payment_status',
        'created_at',
    ]

    search_fields = [
        'customer_name',
        'customer_id',
        'plan_name',
    ]

    readonly_fields = ['updated_at']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['start_time', 'professional', 'subscription', 'status']
    list_filter = ['status', 'start_time']
    ordering = ['-start_time']

    def get_queryset(self, request):
        """Optimize query with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('professional', 'subscription')
