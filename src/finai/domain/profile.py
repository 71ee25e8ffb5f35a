"""User profile domain service."""

from dataclasses import replace
from typing import Optional

import structlog

from finai.database.base import Database
from finai.domain.entities import UserProfile
from finai.domain.errors import StorageUnavailableError, ValidationError

logger = structlog.get_logger(__name__)


class ProfileService:
    """Service for reading and updating the single user profile."""

    def __init__(self, db: Database):
        """Initialize profile service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_profile(self) -> UserProfile:
        """Get the profile, falling back to defaults when absent or unreadable."""
        try:
            profile = self.db.get_profile()
        except StorageUnavailableError as e:
            logger.warning("profile_unreadable", error=str(e))
            return UserProfile()
        return profile if profile is not None else UserProfile()

    def update_profile(
        self,
        name: Optional[str] = None,
        is_premium: Optional[bool] = None,
        currency: Optional[str] = None,
        free_box_limit: Optional[int] = None,
    ) -> UserProfile:
        """Merge the provided fields into the profile and persist it.

        Raises:
            ValidationError: If name or currency is blank, or the limit is negative
        """
        changes = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Profile name cannot be empty")
            changes["name"] = name.strip()
        if currency is not None:
            if not currency.strip():
                raise ValidationError("Currency cannot be empty")
            changes["currency"] = currency.strip().upper()
        if free_box_limit is not None:
            if free_box_limit < 0:
                raise ValidationError("Free box limit cannot be negative")
            changes["free_box_limit"] = free_box_limit
        if is_premium is not None:
            changes["is_premium"] = is_premium

        profile = replace(self.get_profile(), **changes)
        self.db.save_profile(profile)
        logger.info("profile_updated", fields=sorted(changes))
        return profile

    def upgrade_to_premium(self) -> UserProfile:
        """Lift the box quota."""
        return self.update_profile(is_premium=True)
