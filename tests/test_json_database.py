"""Tests for the JSON collection backend."""

import json
from datetime import date
from decimal import Decimal

import pytest

from finai.database.json_db import BOXES_KEY, PROFILE_KEY, TRANSACTIONS_KEY
from finai.domain.box import BoxService
from finai.domain.entities import TransactionDraft, TransactionKind, UserProfile
from finai.domain.errors import StorageUnavailableError
from finai.domain.ledger import LedgerService
from finai.domain.profile import ProfileService


def _load(json_db, key):
    return json.loads((json_db.data_dir / f"{key}.json").read_text(encoding="utf-8"))


def test_collection_layout(json_db):
    """Boxes, transactions and profile live in separate collection files."""
    box = BoxService(json_db).create_box(name="Trip", goal_amount=Decimal("1000"))
    txn = LedgerService(json_db).add_transaction(
        TransactionDraft(
            kind=TransactionKind.TRANSFER_TO_BOX,
            amount=Decimal("12.34"),
            category="Investment",
            occurred_on=date(2024, 5, 20),
            box_id=box.id,
        )
    )

    [box_record] = _load(json_db, BOXES_KEY)
    assert box_record["id"] == box.id
    assert box_record["goalMinor"] == 100000
    assert box_record["balanceMinor"] == 1234

    [txn_record] = _load(json_db, TRANSACTIONS_KEY)
    assert txn_record["id"] == txn.id
    assert txn_record["kind"] == "transfer_to_box"
    assert txn_record["amountMinor"] == 1234
    assert txn_record["occurredOn"] == "2024-05-20"
    assert txn_record["dueOn"] is None
    assert txn_record["boxRef"] == box.id

    assert not (json_db.data_dir / f"{PROFILE_KEY}.json").exists()


def test_profile_round_trip(json_db):
    assert json_db.get_profile() is None

    json_db.save_profile(UserProfile(name="Ana", is_premium=True, currency="USD"))

    assert _load(json_db, PROFILE_KEY) == {
        "name": "Ana",
        "isPremium": True,
        "currency": "USD",
        "freeBoxLimit": 2,
    }
    assert json_db.get_profile() == UserProfile(name="Ana", is_premium=True, currency="USD")


def test_partial_profile_record_uses_defaults(json_db):
    (json_db.data_dir / f"{PROFILE_KEY}.json").write_text('{"name": "Ana"}', encoding="utf-8")

    assert json_db.get_profile() == UserProfile(name="Ana")


def test_corrupt_collection_raises(json_db):
    (json_db.data_dir / f"{BOXES_KEY}.json").write_text("[{\"id\": 1}]", encoding="utf-8")

    with pytest.raises(StorageUnavailableError):
        json_db.list_boxes()
    assert BoxService(json_db).list_boxes() == []


def test_corrupt_profile_falls_back_to_defaults(json_db):
    (json_db.data_dir / f"{PROFILE_KEY}.json").write_text("oops", encoding="utf-8")

    assert ProfileService(json_db).get_profile() == UserProfile()


def test_drift_after_interrupted_write_is_repairable(json_db):
    """A log write lost after the box write leaves drift that reconcile fixes."""
    box = BoxService(json_db).create_box(name="Trip", goal_amount=Decimal("1000"))
    ledger = LedgerService(json_db)
    ledger.add_transaction(
        TransactionDraft(
            kind=TransactionKind.TRANSFER_TO_BOX,
            amount=Decimal("100"),
            category="Investment",
            occurred_on=date(2024, 5, 20),
            box_id=box.id,
        )
    )
    # Simulate the second write never landing
    (json_db.data_dir / f"{TRANSACTIONS_KEY}.json").write_text("[]", encoding="utf-8")

    assert len(ledger.verify_box_balances()) == 1
    ledger.reconcile_box_balances()
    assert json_db.get_box(box.id).balance == Decimal("0.00")


def test_fractional_minor_units_are_corrupt(json_db):
    """A float amountMinor is reported as corrupt instead of being truncated."""
    LedgerService(json_db).add_transaction(
        TransactionDraft(
            kind=TransactionKind.EXPENSE,
            amount=Decimal("150.00"),
            category="Food",
            occurred_on=date(2024, 5, 20),
        )
    )
    [record] = _load(json_db, TRANSACTIONS_KEY)
    record["amountMinor"] = 150.7
    (json_db.data_dir / f"{TRANSACTIONS_KEY}.json").write_text(json.dumps([record]), encoding="utf-8")

    with pytest.raises(StorageUnavailableError):
        json_db.list_transactions()
    assert LedgerService(json_db).list_transactions() == []
