"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class QuotaExceededError(DomainError):
    """Box creation blocked by the free-tier limit."""


class StorageUnavailableError(DomainError):
    """Underlying persistence cannot be read or written."""


def box_not_found(reference: str) -> str:
    """Return message for a box reference that matches nothing."""
    return f"Box '{reference}' not found"


def box_quota_exceeded(limit: int) -> str:
    """Return message when a free-tier user hits the box limit."""
    return (
        f"Free plan allows at most {limit} box{'es' if limit != 1 else ''}. "
        "Upgrade to premium to create more."
    )


def insufficient_box_balance(name: str, balance: Decimal, amount: Decimal) -> str:
    """Return message for a withdrawal larger than the box balance."""
    return f"Cannot withdraw {amount:.2f} from box '{name}': balance is {balance:.2f}"


def non_positive_amount(field: str = "Amount") -> str:
    """Return message for a zero or negative money amount."""
    return f"{field} must be greater than zero"


def storage_unavailable(operation: str, reason: object) -> str:
    """Return message for a failed storage read or write."""
    return f"Storage unavailable while trying to {operation}: {reason}"
