"""
Domain exceptions for the commissions app.

These exceptions represent business rule violations and partial write
outcomes. Views catch them and convert them to HTTP responses.

Exception Hierarchy:
    CommissionsServiceError (base)
    ├── LedgerValidationError
    │   ├── InvalidRateError
    │   ├── InvalidAmountError
    │   ├── InvalidSplitError
    │   └── InvalidEntryStateError
    ├── EntryNotFoundError
    ├── PayoutNotFoundError
    ├── NothingToSettleError
    ├── PreconditionFailedError
    └── PartialWriteFailure
        ├── PartialSettlementError
        └── ReversalPartialFailure

Store failures (django.db.DatabaseError) are not wrapped; they reach the
caller unchanged.
"""


class CommissionsServiceError(Exception):
    """Base exception for all commissions service errors."""
    pass


class LedgerValidationError(CommissionsServiceError):
    """Input rejected locally, before anything is written."""
    pass


class InvalidRateError(LedgerValidationError):
    """Raised when a commission rate is outside 0-100."""
    pass


class InvalidAmountError(LedgerValidationError):
    """Raised when an amount is missing, non-numeric or has the wrong sign."""
    pass


class InvalidSplitError(LedgerValidationError):
    """Raised when house and professional percentages don't add up to 100."""
    pass


class InvalidEntryStateError(LedgerValidationError):
    """Raised when editing an entry that is already paid."""
    pass


class EntryNotFoundError(CommissionsServiceError):
    """Raised when a ledger entry does not exist."""
    pass


class PayoutNotFoundError(CommissionsServiceError):
    """Raised when a payout does not exist."""
    pass


class NothingToSettleError(CommissionsServiceError):
    """Raised when a professional's pending balance is zero or negative."""

    def __init__(self, message, balance=None):
        super().__init__(message)
        self.balance = balance


class PreconditionFailedError(CommissionsServiceError):
    """
    Raised when an entry is no longer in the state an operation expected.

    Recoverable: re-read the ledger and try again.
    """

    def __init__(self, message, entry_ids=None):
        super().__init__(message)
        self.entry_ids = list(entry_ids or [])


class PartialWriteFailure(CommissionsServiceError):
    """
    The second step of a two-step write did not complete.

    Never retried automatically. Carries enough ids for manual or automated
    reconciliation.
    """

    def __init__(self, message, payout_id=None):
        super().__init__(message)
        self.payout_id = payout_id


class PartialSettlementError(PartialWriteFailure):
    """The payout was recorded but not every entry could be marked paid."""

    def __init__(self, message, payout_id=None, settled=None, unsettled=None, skipped=None):
        super().__init__(message, payout_id=payout_id)
        self.settled = list(settled or [])
        self.unsettled = list(unsettled or [])
        # Changed by concurrent writers before the failure; never claimed
        self.skipped = list(skipped or [])


class ReversalPartialFailure(PartialWriteFailure):
    """The payout was removed but some entries are still marked paid."""

    def __init__(self, message, payout_id=None, reverted=None, unreverted=None):
        super().__init__(message, payout_id=payout_id)
        self.reverted = list(reverted or [])
        self.unreverted = list(unreverted or [])
