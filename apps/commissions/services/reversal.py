"""
Reversal engine.

Undoes a settlement: the Payout row is removed first, then every entry that
carries the settlement reference goes back to PENDING. Safe to re-run after
an interruption; entries that are already PENDING are left alone.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from apps.commissions.models import EntryStatus, FundingSource, LedgerEntry, Payout
from apps.commissions.signals import cash_drawer_refresh_requested

from .exceptions import PayoutNotFoundError, ReversalPartialFailure

logger = logging.getLogger(__name__)


@dataclass
class ReversalResult:
    payout_id: UUID
    payout_deleted: bool = False
    reverted: List[UUID] = field(default_factory=list)
    amount: Optional[Decimal] = None


def undo(*, payout_id: UUID) -> ReversalResult:
    """
    Reverse a settlement (or an individual mark-paid reference).

    Args:
        payout_id: Settlement reference to reverse

    Returns:
        ReversalResult acknowledging what was removed and reopened

    Raises:
        PayoutNotFoundError: If payout_id is not a valid id
        ReversalPartialFailure: If some entries could not be reopened; the
            payout is already gone and the listed ids are still PAID
    """
    try:
        payout = Payout.objects.filter(id=payout_id).first()
    except ValidationError:
        raise PayoutNotFoundError(f"Payout with ID {payout_id} not found")

    deleted = False
    if payout is not None:
        deleted, _ = Payout.objects.filter(id=payout.id).delete()
        deleted = bool(deleted)
        logger.info("Payout %s deleted (%s via %s)", payout.id, payout.amount, payout.funding_source)
    else:
        logger.info("Payout %s already gone; reopening any entries still referencing it", payout_id)

    entry_ids = list(
        LedgerEntry.objects
        .filter(settlement_ref=payout_id)
        .values_list('id', flat=True)
    )

    reverted = []
    unreverted = []
    for entry_id in entry_ids:
        try:
            updated = (
                LedgerEntry.objects
                .filter(id=entry_id, status=EntryStatus.PAID, settlement_ref=payout_id)
                .update(
                    status=EntryStatus.PENDING,
                    settlement_ref=None,
                    paid_at=None,
                    paid_individually=False,
                    updated_at=timezone.now(),
                )
            )
        except DatabaseError:
            logger.exception("Could not reopen entry %s of payout %s", entry_id, payout_id)
            unreverted.append(entry_id)
            continue

        if updated:
            reverted.append(entry_id)

    if payout is not None and payout.funding_source == FundingSource.CASH:
        cash_drawer_refresh_requested.send(
            sender=Payout,
            professional_id=payout.professional_id,
            payout_id=payout.id,
            amount=-payout.amount,
        )

    if unreverted:
        logger.error(
            "Reversal of payout %s incomplete: %d reopened, %d still paid: %s",
            payout_id, len(reverted), len(unreverted), unreverted,
        )
        raise ReversalPartialFailure(
            f"Payout {payout_id} was removed but {len(unreverted)} entries are still marked paid",
            payout_id=payout_id,
            reverted=reverted,
            unreverted=unreverted,
        )

    logger.info("Payout %s reversed: %d entries reopened", payout_id, len(reverted))
    return ReversalResult(
        payout_id=payout_id,
        payout_deleted=deleted,
        reverted=reverted,
        amount=payout.amount if payout is not None else None,
    )
