"""
Commissions services.

    ledger          - pending/paid entries, balances, rate edits, new entries
    payouts         - batch settlement of pending entries
    reversal        - undo of a settlement
    pot             - subscription revenue pot shares
    reconciliation  - payout vs. member entry checks
"""

from .exceptions import (
    CommissionsServiceError,
    EntryNotFoundError,
    InvalidAmountError,
    InvalidEntryStateError,
    InvalidRateError,
    InvalidSplitError,
    LedgerValidationError,
    NothingToSettleError,
    PartialSettlementError,
    PartialWriteFailure,
    PayoutNotFoundError,
    PreconditionFailedError,
    ReversalPartialFailure,
)
from .ledger import (
    RateAdjustment,
    adjust_rate,
    get_entry,
    list_for_period,
    list_paid,
    list_pending,
    mark_paid_individually,
    pending_balance,
    recalculate_rates,
    record_bonus,
    record_employee_purchase,
    record_entry,
    revert_rate_adjustment,
)
from .payouts import PayoutSummary, get_payout, list_payouts, settle
from .pot import PotDistribution, distribute
from .reconciliation import PayoutCheck, check_payout, find_inconsistent_payouts
from .reversal import ReversalResult, undo

__all__ = [
    # Exceptions
    'CommissionsServiceError',
    'LedgerValidationError',
    'InvalidRateError',
    'InvalidAmountError',
    'InvalidSplitError',
    'InvalidEntryStateError',
    'EntryNotFoundError',
    'PayoutNotFoundError',
    'NothingToSettleError',
    'PreconditionFailedError',
    'PartialWriteFailure',
    'PartialSettlementError',
    'ReversalPartialFailure',
    # Ledger
    'RateAdjustment',
    'get_entry',
    'list_pending',
    'pending_balance',
    'list_paid',
    'list_for_period',
    'record_entry',
    'record_bonus',
    'record_employee_purchase',
    'adjust_rate',
    'revert_rate_adjustment',
    'recalculate_rates',
    'mark_paid_individually',
    # Payouts
    'PayoutSummary',
    'get_payout',
    'list_payouts',
    'settle',
    # Reversal
    'ReversalResult',
    'undo',
    # Pot
    'PotDistribution',
    'distribute',
    # Reconciliation
    'PayoutCheck',
    'check_payout',
    'find_inconsistent_payouts',
]
