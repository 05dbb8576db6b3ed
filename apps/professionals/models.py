from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
import uuid


class ProfessionalStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    VACATION = 'VACATION', 'Vacation'


class Professional(models.Model):
    """Barber or other professional who earns commissions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    role = models.CharField(max_length=100, blank=True)
    specialties = models.JSONField(default=list, blank=True)

    # Rate copied onto each ledger entry when it is recorded
    default_commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('50.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )

    status = models.CharField(
        max_length=20,
        choices=ProfessionalStatus.choices,
        default=ProfessionalStatus.ACTIVE
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'professionals'
        indexes = [
            models.Index(fields=['status'], name='professiona_status_8a1f3c_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.default_commission_rate}%)"
