"""Tests for LedgerService."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from finai.database.json_db import TRANSACTIONS_KEY
from finai.domain.entities import TransactionDraft, TransactionKind
from finai.domain.errors import ValidationError
from finai.domain.ledger import LedgerService, recompute_box_balances


def _draft(
    kind,
    amount,
    category="Food",
    box_id=None,
    occurred_on=date(2024, 5, 10),
    description="",
    due_on=None,
):
    return TransactionDraft(
        kind=kind,
        amount=Decimal(amount),
        category=category,
        occurred_on=occurred_on,
        description=description,
        due_on=due_on,
        box_id=box_id,
    )


def test_add_income(ledger):
    """Test recording an income transaction."""
    txn = ledger.add_transaction(_draft(TransactionKind.INCOME, "3000", category="Salary"))

    assert txn.id
    assert txn.kind is TransactionKind.INCOME
    assert txn.amount == Decimal("3000.00")
    assert txn.category == "Salary"
    assert txn.box_id is None
    assert ledger.get_transaction(txn.id) == txn


def test_add_transaction_rounds_to_cents(ledger):
    txn = ledger.add_transaction(_draft(TransactionKind.EXPENSE, "10.005"))
    assert txn.amount == Decimal("10.01")


def test_list_newest_first(ledger):
    """Transactions are listed most recently created first."""
    first = ledger.add_transaction(_draft(TransactionKind.INCOME, "100", category="Salary"))
    second = ledger.add_transaction(
        _draft(TransactionKind.EXPENSE, "20", occurred_on=date(2023, 1, 1))
    )

    assert [t.id for t in ledger.list_transactions()] == [second.id, first.id]


def test_deposit_moves_box_balance(ledger, box_service, trip_box, salary):
    """A transfer into a box raises the box balance by its amount."""
    ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "200", category="Investment", box_id=trip_box.id)
    )
    assert box_service.get_box(trip_box.id).balance == Decimal("200.00")

    ledger.add_transaction(
        _draft(TransactionKind.WITHDRAW_FROM_BOX, "50", category="Investment", box_id=trip_box.id)
    )
    assert box_service.get_box(trip_box.id).balance == Decimal("150.00")
    assert ledger.verify_box_balances() == []


def test_delete_reverses_box_delta(ledger, box_service, trip_box):
    """Deleting a box movement restores the previous box balance."""
    txn = ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "200", category="Investment", box_id=trip_box.id)
    )
    ledger.delete_transaction(txn.id)

    assert box_service.get_box(trip_box.id).balance == Decimal("0.00")
    assert ledger.get_transaction(txn.id) is None
    assert ledger.list_transactions() == []


def test_delete_withdrawal_restores_balance(ledger, box_service, trip_box):
    ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "200", category="Investment", box_id=trip_box.id)
    )
    withdrawal = ledger.add_transaction(
        _draft(TransactionKind.WITHDRAW_FROM_BOX, "80", category="Investment", box_id=trip_box.id)
    )
    ledger.delete_transaction(withdrawal.id)

    assert box_service.get_box(trip_box.id).balance == Decimal("200.00")


def test_delete_unknown_is_noop(ledger, salary):
    """Deleting an unknown ID changes nothing and does not raise."""
    ledger.delete_transaction("does-not-exist")
    ledger.delete_transaction("does-not-exist")

    assert [t.id for t in ledger.list_transactions()] == [salary.id]


def test_delete_twice_is_idempotent(ledger, box_service, trip_box):
    txn = ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "200", category="Investment", box_id=trip_box.id)
    )
    ledger.delete_transaction(txn.id)
    ledger.delete_transaction(txn.id)

    assert box_service.get_box(trip_box.id).balance == Decimal("0.00")


def test_transfer_to_missing_box_is_recorded(ledger, box_service, trip_box):
    """A movement naming a deleted box is kept in the log but moves nothing."""
    box_service.delete_box(trip_box.id)

    txn = ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "75", category="Investment", box_id=trip_box.id)
    )

    assert ledger.get_transaction(txn.id).box_id == trip_box.id
    assert box_service.list_boxes() == []


def test_withdraw_more_than_balance_rejected(ledger, box_service, trip_box):
    ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "100", category="Investment", box_id=trip_box.id)
    )

    with pytest.raises(ValidationError, match="Cannot withdraw"):
        ledger.add_transaction(
            _draft(TransactionKind.WITHDRAW_FROM_BOX, "100.01", category="Investment", box_id=trip_box.id)
        )
    assert box_service.get_box(trip_box.id).balance == Decimal("100.00")
    assert len(ledger.list_transactions()) == 1


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_non_positive_amount_rejected(ledger, amount):
    with pytest.raises(ValidationError, match="greater than zero"):
        ledger.add_transaction(_draft(TransactionKind.EXPENSE, amount))


def test_box_movement_requires_box(ledger):
    with pytest.raises(ValidationError, match="requires a box"):
        ledger.add_transaction(_draft(TransactionKind.TRANSFER_TO_BOX, "10", category="Investment"))


def test_income_cannot_reference_box(ledger, trip_box):
    with pytest.raises(ValidationError, match="cannot reference a box"):
        ledger.add_transaction(_draft(TransactionKind.INCOME, "10", box_id=trip_box.id))


def test_blank_category_rejected(ledger):
    with pytest.raises(ValidationError, match="Category is required"):
        ledger.add_transaction(_draft(TransactionKind.EXPENSE, "10", category="  "))


def test_search_transactions(ledger):
    """Search matches description or category, case-insensitively."""
    rent = ledger.add_transaction(
        _draft(TransactionKind.EXPENSE, "1200", category="Housing", description="May rent")
    )
    ledger.add_transaction(_draft(TransactionKind.EXPENSE, "40", category="Food", description="Pizza"))

    assert [t.id for t in ledger.search_transactions("RENT")] == [rent.id]
    assert [t.id for t in ledger.search_transactions("housing")] == [rent.id]
    assert len(ledger.search_transactions("  ")) == 2


def test_due_transactions(ledger):
    bill = ledger.add_transaction(
        _draft(TransactionKind.EXPENSE, "89.90", category="Internet", due_on=date(2024, 6, 10))
    )
    ledger.add_transaction(_draft(TransactionKind.EXPENSE, "10"))

    assert [t.id for t in ledger.due_transactions(date(2024, 6, 10))] == [bill.id]
    assert ledger.due_transactions(date(2024, 6, 11)) == []


def test_verify_and_reconcile_drift(db, ledger, box_service, trip_box):
    """Reconciliation rewrites a drifted cached balance from the log."""
    ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "200", category="Investment", box_id=trip_box.id)
    )
    db.reset_box_balances({trip_box.id: Decimal("999.00")})

    discrepancies = ledger.verify_box_balances()
    assert len(discrepancies) == 1
    assert discrepancies[0].cached == Decimal("999.00")
    assert discrepancies[0].expected == Decimal("200.00")

    fixed = ledger.reconcile_box_balances()
    assert len(fixed) == 1
    assert box_service.get_box(trip_box.id).balance == Decimal("200.00")
    assert ledger.verify_box_balances() == []


def test_recompute_box_balances(ledger, trip_box):
    ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "300", category="Investment", box_id=trip_box.id)
    )
    ledger.add_transaction(
        _draft(TransactionKind.WITHDRAW_FROM_BOX, "120", category="Investment", box_id=trip_box.id)
    )

    assert recompute_box_balances(ledger.list_transactions()) == {trip_box.id: Decimal("180.00")}


def test_list_fails_open_on_corrupt_storage(json_db):
    """Unreadable log reads as empty instead of raising."""
    (json_db.data_dir / f"{TRANSACTIONS_KEY}.json").write_text("{not json", encoding="utf-8")

    assert LedgerService(json_db).list_transactions() == []


def test_delete_deposit_backing_withdrawal_flags_negative_box(ledger, box_service, projection_service, trip_box):
    """The reversal stays exact, and the resulting negative balance is reported."""
    deposit = ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "200", category="Investment", box_id=trip_box.id)
    )
    ledger.add_transaction(
        _draft(TransactionKind.WITHDRAW_FROM_BOX, "150", category="Investment", box_id=trip_box.id)
    )

    with capture_logs() as logs:
        ledger.delete_transaction(deposit.id)

    assert box_service.get_box(trip_box.id).balance == Decimal("-150.00")
    assert ledger.verify_box_balances() == []
    assert {
        "event": "box_balance_negative",
        "log_level": "warning",
        "box_id": trip_box.id,
        "balance": "-150.00",
    } in logs
    assert projection_service.get_projection().negative_boxes == ("Trip",)


def test_delete_leaving_box_non_negative_is_quiet(ledger, trip_box):
    deposit = ledger.add_transaction(
        _draft(TransactionKind.TRANSFER_TO_BOX, "200", category="Investment", box_id=trip_box.id)
    )

    with capture_logs() as logs:
        ledger.delete_transaction(deposit.id)

    assert [e for e in logs if e["event"] == "box_balance_negative"] == []


def test_created_at_is_utc(ledger, box_service, trip_box):
    """Both backends hand back timezone-aware UTC timestamps."""
    txn = ledger.add_transaction(_draft(TransactionKind.INCOME, "10", category="Salary"))

    assert ledger.get_transaction(txn.id).created_at.utcoffset() == timedelta(0)
    assert box_service.get_box(trip_box.id).created_at.utcoffset() == timedelta(0)


# Steps: (action, label, box, amount). "delete" and "delete_box" ignore the
# unused slots; labels name the transactions a later delete refers to.
SEQUENCES = {
    "deposit_withdraw_delete": [
        ("deposit", "d1", "trip", "200"),
        ("withdraw", "w1", "trip", "50"),
        ("delete", "d1", None, None),
        ("delete", "d1", None, None),
        ("deposit", "d2", "trip", "80"),
        ("delete", "w1", None, None),
        ("withdraw", "w2", "trip", "80"),
    ],
    "two_boxes_and_box_deletion": [
        ("deposit", "d1", "trip", "300"),
        ("deposit", "d2", "car", "100"),
        ("withdraw", "w1", "car", "40"),
        ("delete_box", None, "car", None),
        ("delete", "w1", None, None),
        ("delete", "w1", None, None),
        ("deposit", "d3", "car", "20"),
        ("withdraw", "w2", "trip", "300"),
        ("delete", "d1", None, None),
        ("delete", "d2", None, None),
    ],
    "many_small_transfers": [
        *[("deposit", f"d{i}", "trip", "0.10") for i in range(10)],
        ("withdraw", "w1", "trip", "1.00"),
        ("delete", "d3", None, None),
        ("delete", "w1", None, None),
        ("delete", "d3", None, None),
    ],
}


@pytest.mark.parametrize("steps", list(SEQUENCES.values()), ids=list(SEQUENCES))
def test_box_balances_match_log_after_every_step(
    steps, ledger, box_service, projection_service, trip_box, salary
):
    """Cached balances equal the log, and the boxes sum to invested, at every step."""
    boxes = {
        "trip": trip_box.id,
        "car": box_service.create_box(name="Car", goal_amount=Decimal("20000")).id,
    }
    kinds = {"deposit": TransactionKind.TRANSFER_TO_BOX, "withdraw": TransactionKind.WITHDRAW_FROM_BOX}
    recorded = {}

    for action, label, box, amount in steps:
        if action in kinds:
            txn = ledger.add_transaction(
                _draft(kinds[action], amount, category="Investment", box_id=boxes[box])
            )
            recorded[label] = txn.id
        elif action == "delete":
            ledger.delete_transaction(recorded[label])
        else:
            box_service.delete_box(boxes[box])

        assert ledger.verify_box_balances() == []
        projection = projection_service.get_projection()
        assert sum((b.balance for b in box_service.list_boxes()), Decimal("0")) == projection.invested
        assert projection.is_consistent
