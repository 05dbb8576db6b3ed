from django.db import models
from django.utils import timezone
import uuid


class SubscriptionStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    PAST_DUE = 'past_due', 'Past due'
    CANCELED = 'canceled', 'Canceled'


class PaymentStatus(models.TextChoices):
    NONE = '', 'None'
    PAID = 'paid', 'Paid'
    FAILED = 'failed', 'Failed'
    PAST_DUE = 'past_due', 'Past due'


class AppointmentStatus(models.TextChoices):
    SCHEDULED = 'SCHEDULED', 'Scheduled'
    CONFIRMED = 'CONFIRMED', 'Confirmed'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELED = 'CANCELED', 'Canceled'
    BLOCKED = 'BLOCKED', 'Blocked'


class Subscription(models.Model):
    """
    A customer's recurring plan.

    Kept in sync by the payment-gateway integration; the ledger only reads it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer_id = models.CharField(max_length=64, blank=True)
    customer_name = models.CharField(max_length=150, blank=True)
    plan_id = models.CharField(max_length=64, blank=True)
    plan_name = models.CharField(max_length=150, blank=True)

    # Monthly price
    amount = models.DecimalField(max_digits=10, decimal_places=2)

    status = models.CharField(
        max_length=20,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.ACTIVE
    )
    last_payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.NONE,
        blank=True
    )

    next_renewal_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now)
    canceled_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscriptions'
        indexes = [
            models.Index(fields=['status'], name='subscriptio_status_5e2c91_idx'),
            models.Index(fields=['last_payment_status'], name='subscriptio_last_pa_7b4d02_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.customer_name or self.customer_id} - {self.plan_name} ({self.status})"


class Appointment(models.Model):
    """A booked visit. Only status and subscription linkage matter here."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    status = models.CharField(
        max_length=20,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED
    )

    subscription = models.ForeignKey(
        Subscription,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='appointments'
    )

    professional = models.ForeignKey(
        'professionals.Professional',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='appointments'
    )

    start_time = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'appointments'
        indexes = [
            models.Index(fields=['status', 'start_time'], name='appointment_status_3a9f47_idx'),
        ]
        ordering = ['-start_time']

    def __str__(self):
        return f"Appointment {self.start_time:%Y-%m-%d %H:%M} ({self.status})"
