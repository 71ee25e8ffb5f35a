"""Domain model entities for finai.

These are pure data classes representing ledger concepts, independent of
the storage backend. Amounts are Decimal values at cent precision; backends
persist them as integer minor units.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0.00")

DEFAULT_BOX_EMOJI = "💰"
DEFAULT_FREE_BOX_LIMIT = 2


class TransactionKind(str, Enum):
    """Kinds of ledger movements."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER_TO_BOX = "transfer_to_box"
    WITHDRAW_FROM_BOX = "withdraw_from_box"

    @property
    def is_box_movement(self) -> bool:
        """True for kinds that move money between free balance and a box."""
        return self in (TransactionKind.TRANSFER_TO_BOX, TransactionKind.WITHDRAW_FROM_BOX)

    def box_delta(self, amount: Decimal) -> Decimal:
        """Signed change this movement applies to its box balance."""
        if self is TransactionKind.TRANSFER_TO_BOX:
            return amount
        if self is TransactionKind.WITHDRAW_FROM_BOX:
            return -amount
        return ZERO

    def free_balance_delta(self, amount: Decimal) -> Decimal:
        """Signed change this movement applies to the free balance."""
        if self in (TransactionKind.INCOME, TransactionKind.WITHDRAW_FROM_BOX):
            return amount
        return -amount


@dataclass(frozen=True)
class TransactionDraft:
    """Caller-supplied fields of a transaction before it is recorded."""

    kind: TransactionKind
    amount: Decimal
    category: str
    occurred_on: date
    description: str = ""
    due_on: Optional[date] = None
    box_id: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Recorded transaction. Immutable; only deletion is supported."""

    id: str
    kind: TransactionKind
    amount: Decimal
    category: str
    occurred_on: date
    due_on: Optional[date]
    description: str
    created_at: datetime
    box_id: Optional[str] = None


@dataclass(frozen=True)
class Box:
    """Goal-based savings box with a cached balance."""

    id: str
    name: str
    goal_amount: Decimal
    balance: Decimal
    emoji: str
    bank: Optional[str]
    created_at: datetime

    @property
    def progress(self) -> Decimal:
        """Percent of the goal reached, capped at 100."""
        if self.goal_amount <= 0:
            return ZERO
        percent = (self.balance / self.goal_amount * 100).quantize(Decimal("0.1"))
        return min(percent, Decimal("100.0"))

    @property
    def goal_reached(self) -> bool:
        return self.balance >= self.goal_amount


@dataclass(frozen=True)
class UserProfile:
    """Single-user profile gating box creation."""

    name: str = "User"
    is_premium: bool = False
    currency: str = "BRL"
    free_box_limit: int = DEFAULT_FREE_BOX_LIMIT

    def can_create_box(self, existing_count: int) -> bool:
        return self.is_premium or existing_count < self.free_box_limit


@dataclass(frozen=True)
class Projection:
    """Summary figures folded from the transaction log and box list."""

    income: Decimal = ZERO
    expenses: Decimal = ZERO
    free_balance: Decimal = ZERO
    invested: Decimal = ZERO
    total_in_boxes: Decimal = ZERO
    orphaned_transfers: int = 0
    negative_boxes: tuple[str, ...] = ()

    @property
    def is_consistent(self) -> bool:
        """Cached box balances agree with the movements in the log."""
        return self.total_in_boxes == self.invested


@dataclass(frozen=True)
class CategoryTotal:
    """Expense total for one category."""

    name: str
    amount: Decimal


@dataclass(frozen=True)
class MonthlyTotals:
    """Income and expenses for one calendar month (YYYY-MM)."""

    month: str
    income: Decimal
    expenses: Decimal


@dataclass(frozen=True)
class BoxDiscrepancy:
    """Cached box balance that disagrees with the transaction log."""

    box_id: str
    name: str
    cached: Decimal
    expected: Decimal
