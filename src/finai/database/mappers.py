"""Mapper functions between domain entities and stored representations.

Two representations exist: SQLAlchemy rows and the JSON collection records
(camelCase keys, integer minor-unit amounts). Conversion to and from minor
units happens only here.
"""

from datetime import date, datetime, UTC
from typing import Any, Optional

from finai.domain import entities as domain
from finai.database.models import (
    Box as ORMBox,
    Transaction as ORMTransaction,
    UserProfile as ORMUserProfile,
)
from finai.utils.amount_parser import from_minor_units, to_minor_units


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on the way back; stored timestamps are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        kind=domain.TransactionKind(orm_transaction.kind),
        amount=from_minor_units(orm_transaction.amount_minor),
        category=orm_transaction.category,
        occurred_on=orm_transaction.occurred_on,
        due_on=orm_transaction.due_on,
        description=orm_transaction.description,
        created_at=_as_utc(orm_transaction.created_at),
        box_id=orm_transaction.box_id,
    )


def box_to_domain(orm_box: ORMBox) -> domain.Box:
    """Convert SQLAlchemy Box model to domain Box entity."""
    return domain.Box(
        id=orm_box.id,
        name=orm_box.name,
        goal_amount=from_minor_units(orm_box.goal_minor),
        balance=from_minor_units(orm_box.balance_minor),
        emoji=orm_box.emoji,
        bank=orm_box.bank,
        created_at=_as_utc(orm_box.created_at),
    )


def profile_to_domain(orm_profile: ORMUserProfile) -> domain.UserProfile:
    """Convert SQLAlchemy UserProfile model to domain UserProfile entity."""
    return domain.UserProfile(
        name=orm_profile.name,
        is_premium=orm_profile.is_premium,
        currency=orm_profile.currency,
        free_box_limit=orm_profile.free_box_limit,
    )


def _date_or_none(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def transaction_to_record(transaction: domain.Transaction) -> dict[str, Any]:
    """Convert a domain Transaction to a JSON collection record."""
    return {
        "id": transaction.id,
        "kind": transaction.kind.value,
        "amountMinor": to_minor_units(transaction.amount),
        "category": transaction.category,
        "occurredOn": transaction.occurred_on.isoformat(),
        "dueOn": transaction.due_on.isoformat() if transaction.due_on else None,
        "description": transaction.description,
        "createdAt": transaction.created_at.isoformat(),
        "boxRef": transaction.box_id,
    }


def record_to_transaction(record: dict[str, Any]) -> domain.Transaction:
    """Convert a JSON collection record to a domain Transaction.

    Raises:
        KeyError, TypeError, ValueError: If the record is malformed
    """
    return domain.Transaction(
        id=str(record["id"]),
        kind=domain.TransactionKind(record["kind"]),
        amount=from_minor_units(record["amountMinor"]),
        category=record.get("category") or "",
        occurred_on=date.fromisoformat(record["occurredOn"]),
        due_on=_date_or_none(record.get("dueOn")),
        description=record.get("description") or "",
        created_at=_as_utc(datetime.fromisoformat(record["createdAt"])),
        box_id=record.get("boxRef"),
    )


def box_to_record(box: domain.Box) -> dict[str, Any]:
    """Convert a domain Box to a JSON collection record."""
    return {
        "id": box.id,
        "name": box.name,
        "goalMinor": to_minor_units(box.goal_amount),
        "balanceMinor": to_minor_units(box.balance),
        "emoji": box.emoji,
        "bank": box.bank,
        "createdAt": box.created_at.isoformat(),
    }


def record_to_box(record: dict[str, Any]) -> domain.Box:
    """Convert a JSON collection record to a domain Box.

    Raises:
        KeyError, TypeError, ValueError: If the record is malformed
    """
    return domain.Box(
        id=str(record["id"]),
        name=record["name"],
        goal_amount=from_minor_units(record["goalMinor"]),
        balance=from_minor_units(record.get("balanceMinor", 0)),
        emoji=record.get("emoji") or "",
        bank=record.get("bank"),
        created_at=_as_utc(datetime.fromisoformat(record["createdAt"])),
    )


def profile_to_record(profile: domain.UserProfile) -> dict[str, Any]:
    """Convert a domain UserProfile to its JSON record."""
    return {
        "name": profile.name,
        "isPremium": profile.is_premium,
        "currency": profile.currency,
        "freeBoxLimit": profile.free_box_limit,
    }


def record_to_profile(record: dict[str, Any]) -> domain.UserProfile:
    """Convert a JSON record to a domain UserProfile, defaulting missing keys."""
    defaults = domain.UserProfile()
    return domain.UserProfile(
        name=record.get("name", defaults.name),
        is_premium=bool(record.get("isPremium", defaults.is_premium)),
        currency=record.get("currency", defaults.currency),
        free_box_limit=int(record.get("freeBoxLimit", defaults.free_box_limit)),
    )
