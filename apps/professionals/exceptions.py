"""
Domain exceptions for the professionals directory.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ProfessionalsServiceError(Exception):
    """Base exception for professional directory errors."""
    pass


class ProfessionalNotFoundError(ProfessionalsServiceError):
    """Raised when a professional does not exist."""
    pass


class ProfessionalInUseError(ProfessionalsServiceError):
    """Raised when removing a professional that ledger records still reference."""
    pass
