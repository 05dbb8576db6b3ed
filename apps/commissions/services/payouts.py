"""
Payout engine.

Settles a professional's pending commission entries in one batch:

    1. Snapshot the pending entries and their balance.
    2. Record a Payout (a negative expense).
    3. Claim each snapshot entry with a conditional update that only succeeds
       while the entry is still PENDING, unreferenced and at the same rate.

The two writes are not wrapped in a transaction. Entries lost to a
concurrent writer are reported as skipped and the payout is corrected to
what was actually claimed; a store failure in step 3 is surfaced as
PartialSettlementError with the ids on both sides.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models import Count, IntegerField, OuterRef, QuerySet, Subquery
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.commissions.models import EntryStatus, FundingSource, LedgerEntry, Payout
from apps.commissions.signals import cash_drawer_refresh_requested
from apps.professionals.services import get_professional

from .exceptions import (
    LedgerValidationError,
    NothingToSettleError,
    PartialSettlementError,
    PayoutNotFoundError,
    PreconditionFailedError,
)
from .ledger import ZERO, list_pending

logger = logging.getLogger(__name__)


@dataclass
class PayoutSummary:
    """Outcome of a settlement."""

    payout: Payout
    entry_ids: List[UUID] = field(default_factory=list)
    skipped_ids: List[UUID] = field(default_factory=list)
    total: Decimal = ZERO


def get_payout(*, payout_id: UUID) -> Payout:
    """
    Fetch a payout.

    Raises:
        PayoutNotFoundError: If the payout doesn't exist
    """
    try:
        return Payout.objects.select_related('professional').get(id=payout_id)
    except (Payout.DoesNotExist, ValidationError):
        raise PayoutNotFoundError(f"Payout with ID {payout_id} not found")


def list_payouts(*, professional_id: Optional[UUID] = None) -> QuerySet[Payout]:
    """
    Payout history, newest first, annotated with ``item_count``.

    Args:
        professional_id: Restrict to one professional (optional)
    """
    items = (
        LedgerEntry.objects
        .filter(settlement_ref=OuterRef('id'))
        .order_by()
        .values('settlement_ref')
        .annotate(count=Count('id'))
        .values('count')
    )

    queryset = (
        Payout.objects
        .select_related('professional', 'created_by')
        .annotate(item_count=Coalesce(Subquery(items, output_field=IntegerField()), 0))
        .order_by('-created_at')
    )
    if professional_id is not None:
        queryset = queryset.filter(professional_id=professional_id)
    return queryset


def _release(payout_id, entry_ids):
    """Put claimed entries back to PENDING after an aborted settlement."""
    return (
        LedgerEntry.objects
        .filter(id__in=entry_ids, status=EntryStatus.PAID, settlement_ref=payout_id)
        .update(
            status=EntryStatus.PENDING,
            settlement_ref=None,
            paid_at=None,
            updated_at=timezone.now(),
        )
    )


def settle(*, professional_id: UUID, funding_source: str, created_by=None) -> PayoutSummary:
    """
    Pay out everything a professional is currently owed.

    Args:
        professional_id: Professional being paid
        funding_source: 'cash' (drawer) or 'bank'
        created_by: User recording the payout (optional)

    Returns:
        PayoutSummary with the payout, claimed entry ids, skipped ids and
        the settled total

    Raises:
        ProfessionalNotFoundError: If the professional doesn't exist
        LedgerValidationError: If the funding source is unknown
        NothingToSettleError: If the pending balance is zero or negative
        PreconditionFailedError: If concurrent writers left nothing positive to
            pay, or took a debit the payout was netted against
        PartialSettlementError: If the store failed while claiming entries
    """
    if funding_source not in FundingSource.values:
        raise LedgerValidationError(f"Unknown funding source: {funding_source}")

    professional = get_professional(professional_id=professional_id)

    snapshot = list(list_pending(professional_id=professional.id))
    total = sum((entry.net_amount for entry in snapshot), ZERO)

    if total <= 0:
        raise NothingToSettleError(
            f"Nothing to settle for {professional.name}: pending balance is {total}",
            balance=total,
        )

    payout = Payout.objects.create(
        professional=professional,
        amount=-total,
        funding_source=funding_source,
        description=f"Commission payout - {professional.name}",
        created_by=created_by,
    )
    logger.info(
        "Payout %s recorded for professional %s: %s via %s (%d entries)",
        payout.id, professional.id, total, funding_source, len(snapshot),
    )

    claimed = []
    skipped = []
    now = timezone.now()

    for index, entry in enumerate(snapshot):
        try:
            updated = (
                LedgerEntry.objects
                .filter(
                    id=entry.id,
                    status=EntryStatus.PENDING,
                    settlement_ref__isnull=True,
                    commission_rate_snapshot=entry.commission_rate_snapshot,
                )
                .update(
                    status=EntryStatus.PAID,
                    settlement_ref=payout.id,
                    paid_at=now,
                    updated_at=now,
                )
            )
        except DatabaseError as exc:
            settled = [c.id for c in claimed]
            unsettled = [s.id for s in snapshot[index:]]
            logger.error(
                "Settlement %s interrupted: %d entries settled, %d unsettled, %d skipped: %s",
                payout.id, len(settled), len(unsettled), len(skipped), unsettled,
            )
            raise PartialSettlementError(
                f"Payout {payout.id} was recorded but {len(unsettled)} entries could not be marked paid",
                payout_id=payout.id,
                settled=settled,
                unsettled=unsettled,
                skipped=skipped,
            ) from exc

        if updated:
            claimed.append(entry)
        else:
            skipped.append(entry.id)

    claimed_total = sum((entry.net_amount for entry in claimed), ZERO)

    if skipped:
        # A skipped debit would leave the payout above the balance it was
        # computed from; a concurrent settlement may hold that debit.
        if claimed_total <= 0 or claimed_total > total:
            released = _release(payout.id, [entry.id for entry in claimed])
            Payout.objects.filter(id=payout.id).delete()
            logger.warning(
                "Settlement %s aborted: %d entries changed concurrently, released %d",
                payout.id, len(skipped), released,
            )
            raise PreconditionFailedError(
                "Pending entries changed while settling; reload and try again",
                entry_ids=skipped,
            )

        Payout.objects.filter(id=payout.id).update(amount=-claimed_total)
        payout.amount = -claimed_total
        logger.warning(
            "Settlement %s skipped %d entries changed concurrently; amount corrected %s -> %s",
            payout.id, len(skipped), total, claimed_total,
        )

    if funding_source == FundingSource.CASH:
        cash_drawer_refresh_requested.send(
            sender=Payout,
            professional_id=professional.id,
            payout_id=payout.id,
            amount=payout.amount,
        )

    return PayoutSummary(
        payout=payout,
        entry_ids=[entry.id for entry in claimed],
        skipped_ids=skipped,
        total=claimed_total,
    )
