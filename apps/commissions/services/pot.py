"""
Subscription revenue pot.

Part of the monthly subscription revenue is shared with a professional as a
bonus. The share becomes an ordinary ledger entry at 100% and is settled
with the rest of the professional's pending commissions.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings

from apps.commissions.models import EntryKind, LedgerEntry, compute_net
from apps.subscriptions.metrics import SubscriptionMetrics

from .exceptions import InvalidAmountError, InvalidSplitError
from .ledger import parse_amount, record_entry

logger = logging.getLogger(__name__)


@dataclass
class PotDistribution:
    entry: LedgerEntry
    total: Decimal
    shop_share: Decimal
    pro_share: Decimal


def _parse_percent(value, name):
    try:
        percent = parse_amount(value, field=name)
    except InvalidAmountError as e:
        raise InvalidSplitError(str(e))
    if percent < 0 or percent > 100:
        raise InvalidSplitError(f"{name} must be between 0 and 100, got {percent}")
    return percent


def distribute(
    *,
    professional_id: UUID,
    shop_percent=None,
    pro_percent=None,
    total_amount=None,
) -> PotDistribution:
    """
    Record a professional's share of the subscription pot.

    Args:
        professional_id: Professional receiving the share
        shop_percent: House share in percent. Defaults to 100 - pro_percent.
        pro_percent: Professional share in percent. Defaults to
            POT_DEFAULT_PRO_PERCENT.
        total_amount: Pot size. When omitted the current MRR is used.

    Returns:
        PotDistribution with the new entry and both shares

    Raises:
        InvalidSplitError: If a percentage is outside 0-100 or the two don't
            add up to 100
        InvalidAmountError: If the total is invalid or the share rounds to zero
        ProfessionalNotFoundError: If the professional doesn't exist
    """
    if pro_percent is None:
        pro_percent = settings.POT_DEFAULT_PRO_PERCENT
    pro = _parse_percent(pro_percent, 'pro_percent')
    shop = _parse_percent(100 - pro if shop_percent is None else shop_percent, 'shop_percent')

    if shop + pro != 100:
        raise InvalidSplitError(f"Shares must add up to 100%, got {shop} + {pro}")

    if total_amount is None:
        total = SubscriptionMetrics.mrr()
    else:
        total = parse_amount(total_amount, field='total amount')
    if total < 0:
        raise InvalidAmountError("Pot total cannot be negative")

    pro_share = compute_net(total, pro)
    if pro_share <= 0:
        raise InvalidAmountError(f"Nothing to distribute: {pro}% of {total} is {pro_share}")
    shop_share = total - pro_share

    entry = record_entry(
        professional_id=professional_id,
        gross_amount=pro_share,
        kind=EntryKind.SUBSCRIPTION_PAYOUT,
        commission_rate=Decimal('100'),
        label='Subscription pot share',
        counterparty_label='Subscription club',
        metadata={
            'pot_total': str(total),
            'shop_percent': str(shop),
            'pro_percent': str(pro),
        },
    )

    logger.info(
        "Pot %s split %s/%s: %s to professional %s",
        total, shop, pro, pro_share, professional_id,
    )
    return PotDistribution(entry=entry, total=total, shop_share=shop_share, pro_share=pro_share)
