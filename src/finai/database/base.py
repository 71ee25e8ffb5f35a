"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from finai.domain.entities import (
    Box,
    Transaction,
    TransactionDraft,
    UserProfile,
)


class Database(ABC):
    """Abstract storage backend for the ledger.

    Backends are the only writers of cached box balances. Every mutating
    method applies the transaction write and its box balance delta as one
    step and raises StorageUnavailableError when persistence fails.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the storage medium."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the storage medium."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Create tables or collections if they do not exist."""
        pass

    # Transaction operations
    @abstractmethod
    def list_transactions(self) -> list[Transaction]:
        """List all transactions, most recently created first."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """Record a transaction and apply its delta to the referenced box.

        A box reference that matches no box records the transaction without
        touching any balance.
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Remove a transaction and reverse its box delta.

        Returns the removed transaction, or None if the ID was unknown.
        """
        pass

    # Box operations
    @abstractmethod
    def list_boxes(self) -> list[Box]:
        """List boxes in creation order."""
        pass

    @abstractmethod
    def get_box(self, box_id: str) -> Optional[Box]:
        """Get box by ID."""
        pass

    @abstractmethod
    def count_boxes(self) -> int:
        """Return the number of boxes."""
        pass

    @abstractmethod
    def create_box(
        self, name: str, goal_amount: Decimal, emoji: str, bank: Optional[str] = None
    ) -> Box:
        """Create a box with a zero balance."""
        pass

    @abstractmethod
    def update_box(
        self,
        box_id: str,
        name: Optional[str] = None,
        goal_amount: Optional[Decimal] = None,
        emoji: Optional[str] = None,
        bank: Optional[str] = None,
    ) -> bool:
        """Merge the provided fields into a box. Returns False if not found."""
        pass

    @abstractmethod
    def delete_box(self, box_id: str) -> bool:
        """Delete a box. Returns False if not found."""
        pass

    @abstractmethod
    def reset_box_balances(self, balances: dict[str, Decimal]) -> None:
        """Overwrite cached balances (reconciliation from the log only)."""
        pass

    # Profile operations
    @abstractmethod
    def get_profile(self) -> Optional[UserProfile]:
        """Get the stored profile, or None if none was saved."""
        pass

    @abstractmethod
    def save_profile(self, profile: UserProfile) -> None:
        """Persist the profile."""
        pass
