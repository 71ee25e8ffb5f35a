"""Generic SQLAlchemy database implementation."""

from contextlib import contextmanager
from datetime import datetime, UTC
from decimal import Decimal
from typing import Iterator, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finai.database.base import Database
from finai.database.models import (
    Box,
    Transaction,
    UserProfile,
    create_session_factory,
)
from finai.database.mappers import (
    box_to_domain,
    profile_to_domain,
    transaction_to_domain,
)
from finai.domain.entities import (
    Box as DomainBox,
    Transaction as DomainTransaction,
    TransactionDraft,
    TransactionKind,
    UserProfile as DomainUserProfile,
)
from finai.domain.errors import StorageUnavailableError, storage_unavailable
from finai.utils.amount_parser import to_minor_units

PROFILE_ROW_ID = 1


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface.

    A transaction row and its box balance delta are committed together, so
    the cached balances cannot drift from the log on this backend. Any
    SQLAlchemy failure rolls the session back and surfaces as
    StorageUnavailableError.
    """

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        try:
            self.session_factory = create_session_factory(database_url)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(storage_unavailable("open the database", e)) from e
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    @contextmanager
    def _storage(self, operation: str) -> Iterator[Session]:
        """Yield the session; on SQLAlchemy errors roll back and raise StorageUnavailableError."""
        session = self._get_session()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageUnavailableError(storage_unavailable(operation, e)) from e

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    # Transaction operations
    def list_transactions(self) -> list[DomainTransaction]:
        """List all transactions, newest first."""
        with self._storage("read transactions") as session:
            rows = session.query(Transaction).order_by(Transaction.seq.desc()).all()
            try:
                return [transaction_to_domain(row) for row in rows]
            except ValueError as e:
                raise StorageUnavailableError(storage_unavailable("read transactions", e)) from e

    def get_transaction(self, transaction_id: str) -> Optional[DomainTransaction]:
        """Get transaction by ID."""
        with self._storage("read the transaction") as session:
            row = session.query(Transaction).filter(Transaction.id == transaction_id).first()
            if row is None:
                return None
            return transaction_to_domain(row)

    def add_transaction(self, draft: TransactionDraft) -> DomainTransaction:
        """Record a transaction and move the referenced box balance in one commit."""
        with self._storage("record the transaction") as session:
            row = Transaction(
                id=uuid4().hex,
                kind=draft.kind.value,
                amount_minor=to_minor_units(draft.amount),
                category=draft.category,
                occurred_on=draft.occurred_on,
                due_on=draft.due_on,
                description=draft.description,
                created_at=datetime.now(UTC),
                box_id=draft.box_id,
            )
            session.add(row)
            if draft.box_id is not None:
                box = session.query(Box).filter(Box.id == draft.box_id).first()
                if box is not None:
                    box.balance_minor += to_minor_units(draft.kind.box_delta(draft.amount))
            session.commit()
            return transaction_to_domain(row)

    def delete_transaction(self, transaction_id: str) -> Optional[DomainTransaction]:
        """Remove a transaction and reverse its box delta in one commit."""
        with self._storage("delete the transaction") as session:
            row = session.query(Transaction).filter(Transaction.id == transaction_id).first()
            if row is None:
                return None
            removed = transaction_to_domain(row)
            if row.box_id is not None:
                box = session.query(Box).filter(Box.id == row.box_id).first()
                if box is not None:
                    delta = TransactionKind(row.kind).box_delta(removed.amount)
                    box.balance_minor -= to_minor_units(delta)
            session.delete(row)
            session.commit()
            return removed

    # Box operations
    def list_boxes(self) -> list[DomainBox]:
        """List boxes in creation order."""
        with self._storage("read boxes") as session:
            rows = session.query(Box).order_by(Box.seq).all()
            return [box_to_domain(row) for row in rows]

    def get_box(self, box_id: str) -> Optional[DomainBox]:
        """Get box by ID."""
        with self._storage("read the box") as session:
            row = session.query(Box).filter(Box.id == box_id).first()
            if row is None:
                return None
            return box_to_domain(row)

    def count_boxes(self) -> int:
        """Return the number of boxes."""
        with self._storage("count boxes") as session:
            return session.query(Box).count()

    def create_box(
        self, name: str, goal_amount: Decimal, emoji: str, bank: Optional[str] = None
    ) -> DomainBox:
        """Create a box with a zero balance."""
        with self._storage("create the box") as session:
            row = Box(
                id=uuid4().hex,
                name=name,
                goal_minor=to_minor_units(goal_amount),
                balance_minor=0,
                emoji=emoji,
                bank=bank,
                created_at=datetime.now(UTC),
            )
            session.add(row)
            session.commit()
            return box_to_domain(row)

    def update_box(
        self,
        box_id: str,
        name: Optional[str] = None,
        goal_amount: Optional[Decimal] = None,
        emoji: Optional[str] = None,
        bank: Optional[str] = None,
    ) -> bool:
        """Merge the provided fields into a box."""
        with self._storage("update the box") as session:
            row = session.query(Box).filter(Box.id == box_id).first()
            if row is None:
                return False

            if name is not None:
                row.name = name
            if goal_amount is not None:
                row.goal_minor = to_minor_units(goal_amount)
            if emoji is not None:
                row.emoji = emoji
            if bank is not None:
                row.bank = bank

            session.commit()
            return True

    def delete_box(self, box_id: str) -> bool:
        """Delete a box, leaving its transactions in the log."""
        with self._storage("delete the box") as session:
            row = session.query(Box).filter(Box.id == box_id).first()
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def reset_box_balances(self, balances: dict[str, Decimal]) -> None:
        """Overwrite cached balances for the given boxes."""
        with self._storage("reconcile box balances") as session:
            for row in session.query(Box).filter(Box.id.in_(list(balances))).all():
                row.balance_minor = to_minor_units(balances[row.id])
            session.commit()

    # Profile operations
    def get_profile(self) -> Optional[DomainUserProfile]:
        """Get the stored profile."""
        with self._storage("read the profile") as session:
            row = session.get(UserProfile, PROFILE_ROW_ID)
            if row is None:
                return None
            return profile_to_domain(row)

    def save_profile(self, profile: DomainUserProfile) -> None:
        """Persist the profile row."""
        with self._storage("save the profile") as session:
            row = session.get(UserProfile, PROFILE_ROW_ID)
            if row is None:
                row = UserProfile(id=PROFILE_ROW_ID)
                session.add(row)
            row.name = profile.name
            row.is_premium = profile.is_premium
            row.currency = profile.currency
            row.free_box_limit = profile.free_box_limit
            session.commit()
