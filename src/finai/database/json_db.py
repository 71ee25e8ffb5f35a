"""JSON collection database implementation.

State lives in three independent named collections, one JSON file each,
inside a data directory:

- ``finai_transactions``: array of transaction records, newest first
- ``finai_boxes``: array of box records, creation order
- ``finai_user_profile``: singleton profile object

Each collection write is atomic (temp file + rename), but two collections
are never written together atomically. Mutations that touch both write the
boxes first and the transaction log second; a failure between the two
leaves a cached balance that ``LedgerService.reconcile_box_balances`` can
repair from the log.
"""

import json
import os
import tempfile
from dataclasses import replace
from datetime import datetime, UTC
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

from finai.database.base import Database
from finai.database.mappers import (
    box_to_record,
    profile_to_record,
    record_to_box,
    record_to_profile,
    record_to_transaction,
    transaction_to_record,
)
from finai.domain.entities import (
    Box,
    Transaction,
    TransactionDraft,
    UserProfile,
)
from finai.domain.errors import StorageUnavailableError, storage_unavailable
from finai.utils.amount_parser import quantize_amount

TRANSACTIONS_KEY = "finai_transactions"
BOXES_KEY = "finai_boxes"
PROFILE_KEY = "finai_user_profile"

_RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


class JSONCollectionDatabase(Database):
    """File-backed implementation of the Database interface."""

    def __init__(self, data_dir: str | Path):
        """Initialize JSON collection database.

        Args:
            data_dir: Directory holding one JSON file per collection
        """
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str, default: Any) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as e:
            raise StorageUnavailableError(storage_unavailable(f"read {key}", e)) from e

    def _write(self, key: str, value: Any) -> None:
        tmp_path = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path(key))
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageUnavailableError(storage_unavailable(f"write {key}", e)) from e

    def _load_transactions(self) -> list[Transaction]:
        records = self._read(TRANSACTIONS_KEY, [])
        try:
            return [record_to_transaction(record) for record in records]
        except _RECORD_ERRORS as e:
            raise StorageUnavailableError(
                storage_unavailable(f"read {TRANSACTIONS_KEY}", e)
            ) from e

    def _load_boxes(self) -> list[Box]:
        records = self._read(BOXES_KEY, [])
        try:
            return [record_to_box(record) for record in records]
        except _RECORD_ERRORS as e:
            raise StorageUnavailableError(storage_unavailable(f"read {BOXES_KEY}", e)) from e

    def _save_transactions(self, transactions: list[Transaction]) -> None:
        self._write(TRANSACTIONS_KEY, [transaction_to_record(t) for t in transactions])

    def _save_boxes(self, boxes: list[Box]) -> None:
        self._write(BOXES_KEY, [box_to_record(b) for b in boxes])

    def _shift_box_balance(self, boxes: list[Box], box_id: str, delta: Decimal) -> bool:
        """Apply a balance delta in the given list. Returns False if box is absent."""
        for index, box in enumerate(boxes):
            if box.id == box_id:
                boxes[index] = replace(box, balance=quantize_amount(box.balance + delta))
                return True
        return False

    def connect(self) -> None:
        """Nothing to open; files are read on demand."""
        pass

    def disconnect(self) -> None:
        """Nothing to close."""
        pass

    def initialize_schema(self) -> None:
        """Create the data directory."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(storage_unavailable("create the data directory", e)) from e

    # Transaction operations
    def list_transactions(self) -> list[Transaction]:
        return self._load_transactions()

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._load_transactions():
            if transaction.id == transaction_id:
                return transaction
        return None

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        transactions = self._load_transactions()
        transaction = Transaction(
            id=uuid4().hex,
            kind=draft.kind,
            amount=draft.amount,
            category=draft.category,
            occurred_on=draft.occurred_on,
            due_on=draft.due_on,
            description=draft.description,
            created_at=datetime.now(UTC),
            box_id=draft.box_id,
        )
        if draft.box_id is not None:
            boxes = self._load_boxes()
            if self._shift_box_balance(boxes, draft.box_id, draft.kind.box_delta(draft.amount)):
                self._save_boxes(boxes)
        self._save_transactions([transaction, *transactions])
        return transaction

    def delete_transaction(self, transaction_id: str) -> Optional[Transaction]:
        transactions = self._load_transactions()
        removed = next((t for t in transactions if t.id == transaction_id), None)
        if removed is None:
            return None
        if removed.box_id is not None:
            boxes = self._load_boxes()
            delta = -removed.kind.box_delta(removed.amount)
            if self._shift_box_balance(boxes, removed.box_id, delta):
                self._save_boxes(boxes)
        self._save_transactions([t for t in transactions if t.id != transaction_id])
        return removed

    # Box operations
    def list_boxes(self) -> list[Box]:
        return self._load_boxes()

    def get_box(self, box_id: str) -> Optional[Box]:
        for box in self._load_boxes():
            if box.id == box_id:
                return box
        return None

    def count_boxes(self) -> int:
        return len(self._load_boxes())

    def create_box(
        self, name: str, goal_amount: Decimal, emoji: str, bank: Optional[str] = None
    ) -> Box:
        boxes = self._load_boxes()
        box = Box(
            id=uuid4().hex,
            name=name,
            goal_amount=goal_amount,
            balance=Decimal("0.00"),
            emoji=emoji,
            bank=bank,
            created_at=datetime.now(UTC),
        )
        self._save_boxes([*boxes, box])
        return box

    def update_box(
        self,
        box_id: str,
        name: Optional[str] = None,
        goal_amount: Optional[Decimal] = None,
        emoji: Optional[str] = None,
        bank: Optional[str] = None,
    ) -> bool:
        boxes = self._load_boxes()
        for index, box in enumerate(boxes):
            if box.id == box_id:
                boxes[index] = replace(
                    box,
                    name=name if name is not None else box.name,
                    goal_amount=goal_amount if goal_amount is not None else box.goal_amount,
                    emoji=emoji if emoji is not None else box.emoji,
                    bank=bank if bank is not None else box.bank,
                )
                self._save_boxes(boxes)
                return True
        return False

    def delete_box(self, box_id: str) -> bool:
        boxes = self._load_boxes()
        remaining = [b for b in boxes if b.id != box_id]
        if len(remaining) == len(boxes):
            return False
        self._save_boxes(remaining)
        return True

    def reset_box_balances(self, balances: dict[str, Decimal]) -> None:
        boxes = [
            replace(b, balance=balances[b.id]) if b.id in balances else b
            for b in self._load_boxes()
        ]
        self._save_boxes(boxes)

    # Profile operations
    def get_profile(self) -> Optional[UserProfile]:
        record = self._read(PROFILE_KEY, None)
        if record is None:
            return None
        try:
            return record_to_profile(record)
        except _RECORD_ERRORS as e:
            raise StorageUnavailableError(storage_unavailable(f"read {PROFILE_KEY}", e)) from e

    def save_profile(self, profile: UserProfile) -> None:
        self._write(PROFILE_KEY, profile_to_record(profile))
