"""
Transaction ledger service.

Read, query and mutate the commission entries of one professional.

Every balance is recomputed from the ledger store on each call; nothing is
cached between operations. Mutations are single conditional UPDATE
statements ("only if still PENDING"), so a concurrent settlement, rate edit
or manual mark-paid on the same entry can never be silently overwritten.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID, uuid4

from django.core.exceptions import ValidationError
from django.db.models import QuerySet
from django.utils import timezone

from apps.commissions.models import CENTS, EntryKind, EntryStatus, LedgerEntry
from apps.professionals.services import get_professional

from .exceptions import (
    EntryNotFoundError,
    InvalidAmountError,
    InvalidEntryStateError,
    InvalidRateError,
    LedgerValidationError,
    PreconditionFailedError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class RateAdjustment:
    """A rate edit together with the rate it replaced, so it can be undone."""

    entry_id: UUID
    previous_rate: Decimal
    new_rate: Decimal


def parse_amount(value, field='amount') -> Decimal:
    """Coerce user input to a cent-precision Decimal or raise InvalidAmountError."""
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(f"{field} is required")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"{field} must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidAmountError(f"{field} must be a finite number")
    return amount.quantize(CENTS)


def parse_rate(value) -> Decimal:
    """Coerce a percentage to Decimal and check it lies within 0-100."""
    try:
        rate = parse_amount(value, field='commission rate')
    except InvalidAmountError as e:
        raise InvalidRateError(str(e))
    if rate < 0 or rate > 100:
        raise InvalidRateError(f"Commission rate must be between 0 and 100, got {rate}")
    return rate


def get_entry(*, entry_id: UUID) -> LedgerEntry:
    """
    Fetch a single ledger entry.

    Raises:
        EntryNotFoundError: If the entry doesn't exist
    """
    try:
        return LedgerEntry.objects.get(id=entry_id)
    except (LedgerEntry.DoesNotExist, ValidationError):
        raise EntryNotFoundError(f"Ledger entry with ID {entry_id} not found")


def list_pending(*, professional_id: UUID) -> QuerySet[LedgerEntry]:
    """
    Pending entries of a professional, oldest occurrence first.

    Args:
        professional_id: UUID of the professional

    Returns:
        QuerySet of PENDING LedgerEntry instances
    """
    return (
        LedgerEntry.objects
        .filter(professional_id=professional_id, status=EntryStatus.PENDING)
        .order_by('occurred_at', 'created_at')
    )


def pending_balance(*, professional_id: UUID) -> Decimal:
    """
    Sum of net amounts over the professional's pending entries.

    May be negative when debits (employee purchases) exceed credits.
    """
    return sum((entry.net_amount for entry in list_pending(professional_id=professional_id)), ZERO)


def list_paid(*, professional_id: UUID) -> QuerySet[LedgerEntry]:
    """Paid entries of a professional, most recently paid first."""
    return (
        LedgerEntry.objects
        .filter(professional_id=professional_id, status=EntryStatus.PAID)
        .order_by('-paid_at', '-occurred_at')
    )


def list_for_period(*, professional_id: UUID, year: int, month: int) -> QuerySet[LedgerEntry]:
    """
    All entries of a professional that occurred in one calendar month.

    Raises:
        LedgerValidationError: If month is not 1-12
    """
    if not 1 <= month <= 12:
        raise LedgerValidationError(f"Invalid month: {month}")

    tz = timezone.get_current_timezone()
    start = datetime(year, month, 1, tzinfo=tz)
    last_day = calendar.monthrange(year, month)[1]
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=tz)

    return (
        LedgerEntry.objects
        .filter(professional_id=professional_id, occurred_at__range=(start, end))
        .order_by('occurred_at', 'created_at')
    )


def record_entry(
    *,
    professional_id: UUID,
    gross_amount,
    kind: str = EntryKind.SERVICE,
    commission_rate=None,
    occurred_at: Optional[datetime] = None,
    label: str = '',
    counterparty_label: str = '',
    metadata: Optional[dict] = None,
) -> LedgerEntry:
    """
    Append a new PENDING entry to the ledger.

    Used for service completions, product sales, bonuses, employee purchases
    and subscription pot payouts. The entry shows up in list_pending
    immediately.

    Args:
        professional_id: Owner of the entry
        gross_amount: Signed amount; negative for debits
        kind: One of EntryKind
        commission_rate: Percentage 0-100. Defaults to the professional's
            default commission rate.
        occurred_at: When the event happened (defaults to now)
        label: Free text, e.g. the service name
        counterparty_label: Free text, e.g. the client name
        metadata: Extra JSON data kept with the entry

    Returns:
        The created LedgerEntry

    Raises:
        ProfessionalNotFoundError: If the professional doesn't exist
        InvalidAmountError: If the amount is non-numeric, zero, or a positive
            employee purchase
        InvalidRateError: If the rate is outside 0-100
        LedgerValidationError: If the kind is unknown
    """
    if kind not in EntryKind.values:
        raise LedgerValidationError(f"Unknown entry kind: {kind}")

    amount = parse_amount(gross_amount, field='gross amount')
    if amount == 0:
        raise InvalidAmountError("gross amount must be non-zero")
    if kind == EntryKind.EMPLOYEE_PURCHASE and amount > 0:
        raise InvalidAmountError("Employee purchases are debits and must be negative")

    professional = get_professional(professional_id=professional_id)

    if commission_rate is None:
        rate = parse_rate(professional.default_commission_rate)
    else:
        rate = parse_rate(commission_rate)

    entry = LedgerEntry.objects.create(
        professional=professional,
        kind=kind,
        gross_amount=amount,
        commission_rate_snapshot=rate,
        status=EntryStatus.PENDING,
        occurred_at=occurred_at or timezone.now(),
        label=label,
        counterparty_label=counterparty_label,
        metadata=metadata or {},
    )

    logger.info(
        "Recorded %s entry %s for professional %s: gross=%s rate=%s",
        kind, entry.id, professional.id, amount, rate,
    )
    return entry


def record_bonus(*, professional_id: UUID, amount, label: str = 'Bonus') -> LedgerEntry:
    """Credit a bonus paid in full to the professional."""
    value = parse_amount(amount, field='bonus amount')
    if value <= 0:
        raise InvalidAmountError("Bonus amount must be positive")

    return record_entry(
        professional_id=professional_id,
        gross_amount=value,
        kind=EntryKind.BONUS,
        commission_rate=Decimal('100'),
        label=label,
        counterparty_label='Admin',
    )


def record_employee_purchase(*, professional_id: UUID, amount, product_name: str) -> LedgerEntry:
    """
    Debit a product the professional took from the shop.

    ``amount`` is the (positive) price charged; it is stored as a negative
    gross amount at 100% so the full value comes off the next payout.
    """
    value = parse_amount(amount, field='purchase amount')
    if value <= 0:
        raise InvalidAmountError("Purchase amount must be positive")

    return record_entry(
        professional_id=professional_id,
        gross_amount=-value,
        kind=EntryKind.EMPLOYEE_PURCHASE,
        commission_rate=Decimal('100'),
        label=f"Consumption: {product_name}",
        counterparty_label='Payroll deduction',
    )


def adjust_rate(*, entry_id: UUID, new_rate) -> RateAdjustment:
    """
    Change the commission rate snapshot of a pending entry.

    The net amount is derived, so the new rate is reflected on the next read.

    Returns:
        RateAdjustment holding the previous rate, so the edit can be reverted

    Raises:
        InvalidRateError: If the rate is outside 0-100
        EntryNotFoundError: If the entry doesn't exist
        InvalidEntryStateError: If the entry is (or just became) PAID
    """
    rate = parse_rate(new_rate)
    entry = get_entry(entry_id=entry_id)

    if entry.status != EntryStatus.PENDING:
        raise InvalidEntryStateError("Cannot change the rate of a paid entry")

    updated = (
        LedgerEntry.objects
        .filter(id=entry.id, status=EntryStatus.PENDING)
        .update(commission_rate_snapshot=rate, updated_at=timezone.now())
    )
    if not updated:
        raise InvalidEntryStateError("Entry was paid before the rate change was applied")

    logger.info("Rate of entry %s changed %s -> %s", entry.id, entry.commission_rate_snapshot, rate)
    return RateAdjustment(
        entry_id=entry.id,
        previous_rate=entry.commission_rate_snapshot,
        new_rate=rate,
    )


def revert_rate_adjustment(adjustment: RateAdjustment) -> RateAdjustment:
    """Undo a rate edit; only possible while the entry is still pending."""
    return adjust_rate(entry_id=adjustment.entry_id, new_rate=adjustment.previous_rate)


def recalculate_rates(*, professional_id: UUID, new_rate) -> int:
    """
    Apply one rate to every pending entry of a professional.

    Paid entries keep their snapshot.

    Returns:
        Number of entries updated
    """
    rate = parse_rate(new_rate)
    get_professional(professional_id=professional_id)

    updated = (
        LedgerEntry.objects
        .filter(professional_id=professional_id, status=EntryStatus.PENDING)
        .update(commission_rate_snapshot=rate, updated_at=timezone.now())
    )

    logger.info("Applied rate %s to %d pending entries of professional %s", rate, updated, professional_id)
    return updated


def mark_paid_individually(*, entry_id: UUID) -> LedgerEntry:
    """
    Mark one entry paid outside the batch settlement flow.

    No Payout is created, so the payment never reaches the expense ledger.
    The entry gets its own settlement reference to keep "paid entries always
    carry a reference" true; undo() on that reference reopens it.

    Raises:
        EntryNotFoundError: If the entry doesn't exist
        PreconditionFailedError: If the entry is no longer PENDING
    """
    entry = get_entry(entry_id=entry_id)
    now = timezone.now()
    ref = uuid4()

    updated = (
        LedgerEntry.objects
        .filter(id=entry.id, status=EntryStatus.PENDING, settlement_ref__isnull=True)
        .update(
            status=EntryStatus.PAID,
            settlement_ref=ref,
            paid_individually=True,
            paid_at=now,
            updated_at=now,
        )
    )
    if not updated:
        raise PreconditionFailedError(
            f"Entry {entry.id} is no longer pending",
            entry_ids=[entry.id],
        )

    logger.warning(
        "Entry %s marked paid individually (ref %s); no payout recorded",
        entry.id, ref,
    )
    entry.refresh_from_db()
    return entry
