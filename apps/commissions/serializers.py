from rest_framework import serializers
from django.conf import settings
from apps.accounts.serializers import UserMinimalSerializer
from .models import EntryKind, FundingSource, LedgerEntry, Payout


# =============================================================================
# Input Serializers
# =============================================================================

class LedgerEntryCreateSerializer(serializers.Serializer):
    """
    Validate input for recording a ledger entry.

    Fields:
        professional (UUID): Owner of the entry
        kind (str): Entry kind, defaults to SERVICE
        gross_amount (Decimal): Signed amount, negative for debits
        commission_rate (Decimal): Optional, defaults to the professional's rate
        occurred_at (datetime): Optional, defaults to now
    """

    professional = serializers.UUIDField()
    kind = serializers.ChoiceField(choices=EntryKind.choices, default=EntryKind.SERVICE)
    gross_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    commission_rate = serializers.DecimalField(
        max_digits=6, decimal_places=2, required=False, allow_null=True
    )
    occurred_at = serializers.DateTimeField(required=False)
    label = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    counterparty_label = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    metadata = serializers.JSONField(required=False)


class RateInputSerializer(serializers.Serializer):
    """Validate a commission rate for adjust_rate and recalculate."""

    commission_rate = serializers.DecimalField(max_digits=6, decimal_places=2)


class BonusInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    label = serializers.CharField(max_length=200, required=False, default='Bonus')


class EmployeePurchaseInputSerializer(serializers.Serializer):
    """
    Validate input for an employee purchase.

    Fields:
        amount (Decimal): Price charged, positive; stored as a debit
        product_name (str): What was taken
    """

    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    product_name = serializers.CharField(max_length=150)


class PeriodQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)


class SettleInputSerializer(serializers.Serializer):
    """
    Validate input for settling a professional's pending commissions.

    Fields:
        professional (UUID): Professional being paid
        funding_source (str): 'cash' or 'bank'
    """

    professional = serializers.UUIDField()
    funding_source = serializers.ChoiceField(choices=FundingSource.choices)


class PayoutFilterSerializer(serializers.Serializer):
    professional = serializers.UUIDField(required=False)


class PotDistributeInputSerializer(serializers.Serializer):
    """
    Validate input for a subscription pot distribution.

    Fields:
        professional (UUID): Professional receiving the share
        shop_percent (Decimal): House share, optional
        pro_percent (Decimal): Professional share, optional
        total_amount (Decimal): Pot size; current MRR when omitted
    """

    professional = serializers.UUIDField()
    shop_percent = serializers.DecimalField(max_digits=6, decimal_places=2, required=False)
    pro_percent = serializers.DecimalField(max_digits=6, decimal_places=2, required=False)
    total_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )


# =============================================================================
# Output Serializers
# =============================================================================

class LedgerEntrySerializer(serializers.ModelSerializer):
    """Serializer for ledger entries, including the derived net amount."""

    net_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = LedgerEntry
        fields = [
            'id',
            'professional',
            'kind',
            'gross_amount',
            'commission_rate_snapshot',
            'net_amount',
            'status',
            'settlement_ref',
            'paid_at',
            'paid_individually',
            'occurred_at',
            'label',
            'counterparty_label',
            'metadata',
            'created_at',
        ]
        read_only_fields = fields


class BalanceSerializer(serializers.Serializer):
    professional_id = serializers.UUIDField()
    pending_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending_count = serializers.IntegerField()
    currency = serializers.CharField()


class RateAdjustmentSerializer(serializers.Serializer):
    entry_id = serializers.UUIDField()
    previous_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    new_rate = serializers.DecimalField(max_digits=5, decimal_places=2)


class PayoutSerializer(serializers.ModelSerializer):
    """Serializer for payouts (payout history)."""

    professional_name = serializers.CharField(source='professional.name', read_only=True)
    created_by = UserMinimalSerializer(read_only=True)
    item_count = serializers.SerializerMethodField()
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Payout
        fields = [
            'id',
            'professional',
            'professional_name',
            'amount',
            'currency',
            'funding_source',
            'description',
            'created_by',
            'item_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_item_count(self, obj):
        # Only present on querysets from list_payouts()
        return getattr(obj, 'item_count', None)

    def get_currency(self, obj):
        return settings.CURRENCY


class PayoutSummarySerializer(serializers.Serializer):
    payout = PayoutSerializer()
    entry_ids = serializers.ListField(child=serializers.UUIDField())
    skipped_ids = serializers.ListField(child=serializers.UUIDField())
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class ReversalResultSerializer(serializers.Serializer):
    payout_id = serializers.UUIDField()
    payout_deleted = serializers.BooleanField()
    reverted = serializers.ListField(child=serializers.UUIDField())
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)


class PotDistributionSerializer(serializers.Serializer):
    entry = LedgerEntrySerializer()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    shop_share = serializers.DecimalField(max_digits=12, decimal_places=2)
    pro_share = serializers.DecimalField(max_digits=12, decimal_places=2)


class PayoutCheckSerializer(serializers.Serializer):
    payout_id = serializers.UUIDField()
    professional_id = serializers.UUIDField()
    expected = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    actual = serializers.DecimalField(max_digits=12, decimal_places=2)
    entry_ids = serializers.ListField(child=serializers.UUIDField())
    orphaned = serializers.BooleanField()
    consistent = serializers.BooleanField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()


class PartialFailureSerializer(serializers.Serializer):
    """Body of a 207 response: the write only partly went through."""

    error = serializers.CharField()
    payout_id = serializers.UUIDField()
    settled = serializers.ListField(child=serializers.UUIDField(), required=False)
    unsettled = serializers.ListField(child=serializers.UUIDField(), required=False)
    skipped = serializers.ListField(child=serializers.UUIDField(), required=False)
    reverted = serializers.ListField(child=serializers.UUIDField(), required=False)
    unreverted = serializers.ListField(child=serializers.UUIDField(), required=False)
