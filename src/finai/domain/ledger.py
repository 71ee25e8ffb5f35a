"""Ledger domain service.

The ledger owns the transaction log and is the only path by which cached
box balances move. For every box B the following must hold at all times:

    B.balance == sum(transfers into B) - sum(withdrawals from B)

Backends maintain it incrementally; ``verify_box_balances`` recomputes it
from the log.
"""

from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

import structlog

from finai.database.base import Database
from finai.domain.entities import (
    ZERO,
    BoxDiscrepancy,
    Transaction,
    TransactionDraft,
    TransactionKind,
)
from finai.domain.errors import (
    StorageUnavailableError,
    ValidationError,
    insufficient_box_balance,
    non_positive_amount,
)
from finai.utils.amount_parser import quantize_amount

logger = structlog.get_logger(__name__)


def recompute_box_balances(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Balance of every referenced box, computed fresh from the log."""
    balances: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in transactions:
        if t.kind.is_box_movement and t.box_id is not None:
            balances[t.box_id] += t.kind.box_delta(t.amount)
    return dict(balances)


class LedgerService:
    """Service for recording and removing transactions."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_transactions(self) -> list[Transaction]:
        """List the full log, most recently created first.

        Returns an empty list if storage is unreadable or corrupt.
        """
        try:
            return self.db.list_transactions()
        except StorageUnavailableError as e:
            logger.warning("transactions_unreadable", error=str(e))
            return []

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def search_transactions(self, term: str) -> list[Transaction]:
        """Case-insensitive substring search over description and category."""
        needle = term.strip().casefold()
        if not needle:
            return self.list_transactions()
        return [
            t
            for t in self.list_transactions()
            if needle in t.description.casefold() or needle in t.category.casefold()
        ]

    def due_transactions(self, on: date) -> list[Transaction]:
        """Transactions whose due date falls on the given day."""
        return [t for t in self.list_transactions() if t.due_on == on]

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """Record a transaction.

        Box movements shift the referenced box balance in the same storage
        step. A reference to a box that no longer exists is recorded as-is
        with a warning and moves no balance.

        Args:
            draft: Transaction fields

        Returns:
            Recorded transaction with ID and creation timestamp

        Raises:
            ValidationError: If the draft is malformed or a withdrawal exceeds
                the box balance
            StorageUnavailableError: If the write fails
        """
        draft = self._validated(draft)

        if draft.kind.is_box_movement:
            box = self.db.get_box(draft.box_id)
            if box is None:
                logger.warning(
                    "transaction_box_missing", box_id=draft.box_id, kind=draft.kind.value
                )
            elif draft.kind is TransactionKind.WITHDRAW_FROM_BOX and draft.amount > box.balance:
                raise ValidationError(insufficient_box_balance(box.name, box.balance, draft.amount))

        transaction = self.db.add_transaction(draft)
        logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            kind=transaction.kind.value,
            amount=str(transaction.amount),
            box_id=transaction.box_id,
        )
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction, reversing its effect on its box.

        Deleting an unknown ID does nothing. Removing a deposit that later
        withdrawals relied on leaves the box negative; that is logged and
        reported by the projection rather than refused.
        """
        removed = self.db.delete_transaction(transaction_id)
        if removed is None:
            logger.debug("transaction_delete_skipped", transaction_id=transaction_id)
            return
        logger.info(
            "transaction_deleted",
            transaction_id=transaction_id,
            kind=removed.kind.value,
            box_id=removed.box_id,
        )
        if removed.kind is TransactionKind.TRANSFER_TO_BOX:
            box = self.db.get_box(removed.box_id)
            if box is not None and box.balance < 0:
                # Reversal stays exact even below zero
                logger.warning("box_balance_negative", box_id=box.id, balance=str(box.balance))

    def verify_box_balances(self) -> list[BoxDiscrepancy]:
        """Compare every cached box balance with the log."""
        expected = recompute_box_balances(self.db.list_transactions())
        return [
            BoxDiscrepancy(
                box_id=box.id,
                name=box.name,
                cached=box.balance,
                expected=expected.get(box.id, ZERO),
            )
            for box in self.db.list_boxes()
            if box.balance != expected.get(box.id, ZERO)
        ]

    def reconcile_box_balances(self) -> list[BoxDiscrepancy]:
        """Rewrite drifted cached balances from the log.

        Returns:
            The discrepancies that were corrected
        """
        discrepancies = self.verify_box_balances()
        if discrepancies:
            self.db.reset_box_balances({d.box_id: d.expected for d in discrepancies})
            for d in discrepancies:
                logger.warning(
                    "box_balance_reconciled",
                    box_id=d.box_id,
                    cached=str(d.cached),
                    expected=str(d.expected),
                )
        return discrepancies

    def _validated(self, draft: TransactionDraft) -> TransactionDraft:
        try:
            amount = quantize_amount(Decimal(draft.amount))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid amount '{draft.amount}'")
        if amount <= 0:
            raise ValidationError(non_positive_amount())

        category = (draft.category or "").strip()
        if draft.kind.is_box_movement:
            if not draft.box_id:
                raise ValidationError(f"A {draft.kind.value} transaction requires a box")
        else:
            if draft.box_id is not None:
                raise ValidationError(f"A {draft.kind.value} transaction cannot reference a box")
            if not category:
                raise ValidationError("Category is required for income and expenses")

        return replace(
            draft,
            amount=amount,
            category=category,
            description=(draft.description or "").strip(),
        )
