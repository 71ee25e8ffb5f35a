"""Domain layer for finai application.

Services are imported from their modules (``finai.domain.ledger`` and so
on); this package only re-exports the plain entities and errors so that the
database layer can import them without pulling in the services.
"""

from finai.domain.entities import (
    Box,
    Projection,
    Transaction,
    TransactionDraft,
    TransactionKind,
    UserProfile,
)
from finai.domain.errors import (
    DomainError,
    NotFoundError,
    QuotaExceededError,
    StorageUnavailableError,
    ValidationError,
)

__all__ = [
    "Box",
    "Projection",
    "Transaction",
    "TransactionDraft",
    "TransactionKind",
    "UserProfile",
    "DomainError",
    "NotFoundError",
    "QuotaExceededError",
    "StorageUnavailableError",
    "ValidationError",
]
