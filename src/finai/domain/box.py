"""Box lifecycle domain service."""

from decimal import Decimal, InvalidOperation
from typing import Optional

import structlog

from finai.database.base import Database
from finai.domain.entities import DEFAULT_BOX_EMOJI, Box
from finai.domain.errors import (
    QuotaExceededError,
    StorageUnavailableError,
    ValidationError,
    box_quota_exceeded,
    non_positive_amount,
)
from finai.domain.profile import ProfileService
from finai.utils.amount_parser import quantize_amount

logger = structlog.get_logger(__name__)


def _validated_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValidationError("Box name cannot be empty")
    return name.strip()


def _validated_goal(goal_amount: Decimal) -> Decimal:
    try:
        goal = quantize_amount(Decimal(goal_amount))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid goal amount '{goal_amount}'")
    if goal <= 0:
        raise ValidationError(non_positive_amount("Goal amount"))
    return goal


class BoxService:
    """Service for managing savings boxes.

    Balances are never set here; they move only through ledger transactions.
    """

    def __init__(self, db: Database):
        """Initialize box service.

        Args:
            db: Database instance
        """
        self.db = db
        self.profiles = ProfileService(db)

    def list_boxes(self) -> list[Box]:
        """List boxes in creation order.

        Returns an empty list if storage is unreadable.
        """
        try:
            return self.db.list_boxes()
        except StorageUnavailableError as e:
            logger.warning("boxes_unreadable", error=str(e))
            return []

    def get_box(self, box_id: str) -> Optional[Box]:
        """Get box by ID."""
        return self.db.get_box(box_id)

    def find_box_by_name(self, name: Optional[str]) -> Optional[Box]:
        """Find a box by case-insensitive exact name match."""
        if not name or not name.strip():
            return None
        wanted = name.strip().casefold()
        for box in self.list_boxes():
            if box.name.strip().casefold() == wanted:
                return box
        return None

    def create_box(
        self,
        name: str,
        goal_amount: Decimal,
        emoji: Optional[str] = None,
        bank: Optional[str] = None,
    ) -> Box:
        """Create a new box with a zero balance.

        Args:
            name: Display name
            goal_amount: Savings target, must be positive
            emoji: Display glyph (defaults to a money bag)
            bank: Optional bank label

        Returns:
            Created box

        Raises:
            ValidationError: If name is blank or goal is not positive
            QuotaExceededError: If a free-tier user already has the maximum boxes
        """
        name = _validated_name(name)
        goal = _validated_goal(goal_amount)

        profile = self.profiles.get_profile()
        existing = self.db.count_boxes()
        if not profile.can_create_box(existing):
            logger.info("box_quota_exceeded", limit=profile.free_box_limit, existing=existing)
            raise QuotaExceededError(box_quota_exceeded(profile.free_box_limit))

        box = self.db.create_box(
            name=name,
            goal_amount=goal,
            emoji=emoji or DEFAULT_BOX_EMOJI,
            bank=bank.strip() if bank and bank.strip() else None,
        )
        logger.info("box_created", box_id=box.id, name=box.name, goal=str(box.goal_amount))
        return box

    def update_box(
        self,
        box_id: str,
        name: Optional[str] = None,
        goal_amount: Optional[Decimal] = None,
        emoji: Optional[str] = None,
        bank: Optional[str] = None,
    ) -> None:
        """Merge provided fields into a box. Unknown IDs are ignored.

        Raises:
            ValidationError: If a provided name is blank or goal is not positive
        """
        if name is not None:
            name = _validated_name(name)
        if goal_amount is not None:
            goal_amount = _validated_goal(goal_amount)

        found = self.db.update_box(
            box_id, name=name, goal_amount=goal_amount, emoji=emoji, bank=bank
        )
        if found:
            logger.info("box_updated", box_id=box_id)
        else:
            logger.debug("box_update_skipped", box_id=box_id)

    def delete_box(self, box_id: str) -> None:
        """Delete a box. Transactions referencing it stay in the log."""
        if self.db.delete_box(box_id):
            logger.info("box_deleted", box_id=box_id)
        else:
            logger.debug("box_delete_skipped", box_id=box_id)
