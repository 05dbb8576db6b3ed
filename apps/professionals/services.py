"""
Professional directory services.

The commission ledger only reads from the directory: it needs a
professional's existence and default commission rate. Removal is the one
write that the ledger cares about, because settled and pending entries keep
a protected reference to their owner.
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import ProtectedError

from apps.commissions.models import EntryStatus

from .exceptions import ProfessionalNotFoundError, ProfessionalInUseError
from .models import Professional

logger = logging.getLogger(__name__)


def get_professional(*, professional_id: UUID) -> Professional:
    """
    Fetch a professional by id.

    Raises:
        ProfessionalNotFoundError: If the professional doesn't exist
    """
    try:
        return Professional.objects.get(id=professional_id)
    except (Professional.DoesNotExist, ValidationError):
        raise ProfessionalNotFoundError(f"Professional with ID {professional_id} not found")


def remove_professional(*, professional_id: UUID) -> None:
    """
    Delete a professional from the directory.

    Rejected while any ledger entry or payout still references the
    professional, pending or settled.

    Raises:
        ProfessionalNotFoundError: If the professional doesn't exist
        ProfessionalInUseError: If ledger records reference the professional
    """
    professional = get_professional(professional_id=professional_id)

    pending = professional.ledger_entries.filter(status=EntryStatus.PENDING).count()
    if pending:
        raise ProfessionalInUseError(
            f"{professional.name} still has {pending} pending commission entries"
        )

    try:
        professional.delete()
    except ProtectedError:
        raise ProfessionalInUseError(
            f"{professional.name} has settlement history and cannot be removed"
        )

    logger.info("Removed professional %s", professional_id)
