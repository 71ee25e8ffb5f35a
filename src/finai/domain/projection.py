"""Balance projection domain service.

All figures are folded from the transaction log on demand and never cached.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from finai.database.base import Database
from finai.domain.box import BoxService
from finai.domain.entities import (
    ZERO,
    Box,
    CategoryTotal,
    MonthlyTotals,
    Projection,
    Transaction,
    TransactionKind,
)
from finai.domain.ledger import LedgerService


def project(transactions: Iterable[Transaction], boxes: Sequence[Box]) -> Projection:
    """Fold the log once into summary figures.

    Box movements whose box no longer exists count as returned to the free
    balance: they are left out of both the free-balance deduction and
    ``invested``.
    """
    live_box_ids = {box.id for box in boxes}
    income = expenses = free_balance = invested = ZERO
    orphaned = 0

    for t in transactions:
        if t.kind is TransactionKind.INCOME:
            income += t.amount
        elif t.kind is TransactionKind.EXPENSE:
            expenses += t.amount
        elif t.box_id not in live_box_ids:
            orphaned += 1
            continue
        else:
            invested += t.kind.box_delta(t.amount)
        free_balance += t.kind.free_balance_delta(t.amount)

    return Projection(
        income=income,
        expenses=expenses,
        free_balance=free_balance,
        invested=invested,
        total_in_boxes=sum((box.balance for box in boxes), ZERO),
        orphaned_transfers=orphaned,
        negative_boxes=tuple(box.name for box in boxes if box.balance < 0),
    )


def category_distribution(transactions: Iterable[Transaction]) -> list[CategoryTotal]:
    """Expense totals per category, largest first."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for t in transactions:
        if t.kind is TransactionKind.EXPENSE:
            totals[t.category or "Other"] += t.amount
    return [
        CategoryTotal(name=name, amount=amount)
        for name, amount in sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    ]


def monthly_trend(transactions: Iterable[Transaction]) -> list[MonthlyTotals]:
    """Income and expenses per month of occurrence, oldest month first."""
    months: dict[str, list[Decimal]] = defaultdict(lambda: [ZERO, ZERO])
    for t in transactions:
        key = t.occurred_on.strftime("%Y-%m")
        if t.kind is TransactionKind.INCOME:
            months[key][0] += t.amount
        elif t.kind is TransactionKind.EXPENSE:
            months[key][1] += t.amount
    return [
        MonthlyTotals(month=month, income=income, expenses=expenses)
        for month, (income, expenses) in sorted(months.items())
    ]


class ProjectionService:
    """Read-only summaries over the ledger."""

    def __init__(self, db: Database):
        """Initialize projection service.

        Args:
            db: Database instance
        """
        self.ledger = LedgerService(db)
        self.boxes = BoxService(db)

    def get_projection(self) -> Projection:
        return project(self.ledger.list_transactions(), self.boxes.list_boxes())

    def category_distribution(self) -> list[CategoryTotal]:
        return category_distribution(self.ledger.list_transactions())

    def monthly_trend(self) -> list[MonthlyTotals]:
        return monthly_trend(self.ledger.list_transactions())
