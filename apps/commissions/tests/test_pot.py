import pytest
from decimal import Decimal

from django.test import override_settings

from apps.commissions.models import EntryKind, EntryStatus
from apps.commissions.services import distribute, pending_balance
from apps.commissions.services.exceptions import InvalidAmountError, InvalidSplitError
from apps.subscriptions.models import Subscription, SubscriptionStatus


@pytest.mark.django_db
class TestDistribute:

    def test_sixty_forty_of_thousand(self, professional):
        result = distribute(
            professional_id=professional.id,
            shop_percent=60,
            pro_percent=40,
            total_amount='1000.00',
        )

        entry = result.entry
        assert entry.kind == EntryKind.SUBSCRIPTION_PAYOUT
        assert entry.status == EntryStatus.PENDING
        assert entry.gross_amount == Decimal('400.00')
        assert entry.commission_rate_snapshot == Decimal('100.00')
        assert entry.net_amount == Decimal('400.00')
        assert entry.metadata == {
            'pot_total': '1000.00',
            'shop_percent': '60.00',
            'pro_percent': '40.00',
        }
        assert result.shop_share == Decimal('600.00')
        assert result.pro_share == Decimal('400.00')
        assert pending_balance(professional_id=professional.id) == Decimal('400.00')

    def test_uses_live_mrr_when_total_omitted(self, professional):
        Subscription.objects.create(customer_name='Ana', amount=Decimal('90.00'))
        Subscription.objects.create(customer_name='Bia', amount=Decimal('50.00'))
        Subscription.objects.create(
            customer_name='Caio', amount=Decimal('70.00'), status=SubscriptionStatus.CANCELED
        )

        result = distribute(professional_id=professional.id, shop_percent=50, pro_percent=50)

        assert result.total == Decimal('140.00')
        assert result.entry.gross_amount == Decimal('70.00')

    @override_settings(POT_DEFAULT_PRO_PERCENT=30)
    def test_default_split(self, professional):
        result = distribute(professional_id=professional.id, total_amount='200')

        assert result.pro_share == Decimal('60.00')
        assert result.shop_share == Decimal('140.00')

    def test_rounds_share_half_up(self, professional):
        result = distribute(
            professional_id=professional.id,
            shop_percent='66.67',
            pro_percent='33.33',
            total_amount='100.05',
        )

        assert result.pro_share == Decimal('33.35')
        assert result.shop_share + result.pro_share == Decimal('100.05')

    @pytest.mark.parametrize('shop,pro', [(60, 50), (-10, 110), (101, -1), ('x', 50)])
    def test_invalid_split(self, professional, shop, pro):
        with pytest.raises(InvalidSplitError):
            distribute(professional_id=professional.id, shop_percent=shop, pro_percent=pro, total_amount='100')

    @pytest.mark.parametrize('total', ['-1', 'abc'])
    def test_invalid_total(self, professional, total):
        with pytest.raises(InvalidAmountError):
            distribute(professional_id=professional.id, shop_percent=50, pro_percent=50, total_amount=total)

    def test_empty_pot_rejected(self, professional):
        """No active subscriptions means nothing to share."""
        with pytest.raises(InvalidAmountError):
            distribute(professional_id=professional.id, shop_percent=50, pro_percent=50)

    def test_zero_professional_share_rejected(self, professional):
        with pytest.raises(InvalidAmountError):
            distribute(professional_id=professional.id, shop_percent=100, pro_percent=0, total_amount='500')
