"""
Payout reconciliation.

Settlement and reversal are two-step writes without a surrounding
transaction. An interrupted run leaves a payout whose amount no longer
matches its member entries, or paid entries whose payout is gone. These
helpers find both so they can be repaired (usually by re-running undo).
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from apps.commissions.models import EntryStatus, LedgerEntry, Payout

from .ledger import ZERO
from .payouts import get_payout

logger = logging.getLogger(__name__)


@dataclass
class PayoutCheck:
    """Expected vs. actual settled total for one settlement reference."""

    payout_id: UUID
    professional_id: UUID
    expected: Optional[Decimal]
    actual: Decimal
    entry_ids: List[UUID] = field(default_factory=list)
    orphaned: bool = False

    @property
    def consistent(self):
        return not self.orphaned and self.expected == self.actual


def _check(payout, entries):
    return PayoutCheck(
        payout_id=payout.id,
        professional_id=payout.professional_id,
        expected=payout.expected_total,
        actual=sum((entry.net_amount for entry in entries), ZERO),
        entry_ids=[entry.id for entry in entries],
    )


def check_payout(*, payout_id: UUID) -> PayoutCheck:
    """
    Compare a payout's recorded amount with the entries that reference it.

    Raises:
        PayoutNotFoundError: If the payout doesn't exist
    """
    payout = get_payout(payout_id=payout_id)
    entries = list(LedgerEntry.objects.filter(settlement_ref=payout.id))
    return _check(payout, entries)


def find_inconsistent_payouts(*, professional_id: Optional[UUID] = None) -> List[PayoutCheck]:
    """
    Every settlement reference that doesn't add up.

    Covers payouts whose amount differs from their members' net total and
    orphaned references: paid entries pointing at a payout that no longer
    exists (entries paid individually are excluded).
    """
    payouts = Payout.objects.all()
    entries = LedgerEntry.objects.filter(status=EntryStatus.PAID)
    if professional_id is not None:
        payouts = payouts.filter(professional_id=professional_id)
        entries = entries.filter(professional_id=professional_id)

    by_ref = defaultdict(list)
    for entry in entries:
        by_ref[entry.settlement_ref].append(entry)

    problems = []
    payout_ids = set()
    for payout in payouts:
        payout_ids.add(payout.id)
        check = _check(payout, by_ref.get(payout.id, []))
        if not check.consistent:
            problems.append(check)

    for ref, members in by_ref.items():
        if ref in payout_ids or all(entry.paid_individually for entry in members):
            continue
        if Payout.objects.filter(id=ref).exists():
            continue
        problems.append(PayoutCheck(
            payout_id=ref,
            professional_id=members[0].professional_id,
            expected=None,
            actual=sum((entry.net_amount for entry in members), ZERO),
            entry_ids=[entry.id for entry in members],
            orphaned=True,
        ))

    if problems:
        logger.warning("Found %d inconsistent settlement references", len(problems))
    return problems
