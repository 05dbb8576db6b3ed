from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal, ROUND_HALF_UP
import uuid


CENTS = Decimal('0.01')


class EntryKind(models.TextChoices):
    SERVICE = 'SERVICE', 'Service'
    PRODUCT_SALE = 'PRODUCT_SALE', 'Product sale'
    BONUS = 'BONUS', 'Bonus'
    EMPLOYEE_PURCHASE = 'EMPLOYEE_PURCHASE', 'Employee purchase'
    SUBSCRIPTION_PAYOUT = 'SUBSCRIPTION_PAYOUT', 'Subscription pot payout'
    OTHER = 'OTHER', 'Other'


class EntryStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PAID = 'PAID', 'Paid'


class FundingSource(models.TextChoices):
    CASH = 'cash', 'Cash drawer'
    BANK = 'bank', 'Bank'


def compute_net(gross_amount, rate):
    """Commission owed for a gross amount at a percentage rate, in cents."""
    return (Decimal(gross_amount) * Decimal(rate) / Decimal(100)).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )


class LedgerEntry(models.Model):
    """One commission-bearing or debit event owned by a professional."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    professional = models.ForeignKey(
        'professionals.Professional',
        on_delete=models.PROTECT,
        related_name='ledger_entries'
    )

    kind = models.CharField(
        max_length=30,
        choices=EntryKind.choices,
        default=EntryKind.SERVICE
    )

    # Signed: debits such as employee purchases are negative
    gross_amount = models.DecimalField(max_digits=10, decimal_places=2)

    # Percentage captured when the entry is recorded
    commission_rate_snapshot = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )

    status = models.CharField(
        max_length=10,
        choices=EntryStatus.choices,
        default=EntryStatus.PENDING
    )

    # Id of the settlement that paid this entry. Not a foreign key: it has to
    # outlive the Payout row so an interrupted reversal can be re-run.
    settlement_ref = models.UUIDField(null=True, blank=True, db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    # Marked paid outside a batch settlement; no Payout row backs the ref
    paid_individually = models.BooleanField(default=False)

    # Descriptive fields
    occurred_at = models.DateTimeField()
    label = models.CharField(max_length=200, blank=True)
    counterparty_label = models.CharField(max_length=200, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'ledger_entries'
        indexes = [
            models.Index(fields=['professional', 'status'], name='ledger_entr_profess_4d2b1e_idx'),
            models.Index(fields=['status', 'occurred_at'], name='ledger_entr_status_9c7e0a_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(status=EntryStatus.PENDING, settlement_ref__isnull=True)
                    | models.Q(status=EntryStatus.PAID, settlement_ref__isnull=False)
                ),
                name='ledger_entry_status_matches_settlement_ref',
            ),
        ]
        ordering = ['occurred_at', 'created_at']

    def __str__(self):
        return f"{self.get_kind_display()} {self.gross_amount} @ {self.commission_rate_snapshot}% ({self.status})"

    @property
    def net_amount(self):
        """Commission owed for this entry; always derived from gross and rate."""
        return compute_net(self.gross_amount, self.commission_rate_snapshot)

    @property
    def is_pending(self):
        return self.status == EntryStatus.PENDING


class Payout(models.Model):
    """One settlement batch, recorded as an expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    professional = models.ForeignKey(
        'professionals.Professional',
        on_delete=models.PROTECT,
        related_name='payouts'
    )

    # Negative: an expense leaving the shop
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    funding_source = models.CharField(
        max_length=10,
        choices=FundingSource.choices
    )

    description = models.CharField(max_length=255, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payouts_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payouts'
        indexes = [
            models.Index(fields=['professional', 'created_at'], name='payouts_profess_2f6a3d_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Payout {self.amount} via {self.funding_source} ({self.professional_id})"

    @property
    def expected_total(self):
        """Sum of member entry nets implied by the recorded expense."""
        return -self.amount
