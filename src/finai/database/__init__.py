"""Database layer for finai application."""

from finai.database.base import Database
from finai.database.factories import (
    create_database,
    create_json_database,
    create_sqlite_database,
)

__all__ = ["Database", "create_database", "create_json_database", "create_sqlite_database"]
