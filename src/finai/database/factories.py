"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from finai.database.base import Database
from finai.database.json_db import JSONCollectionDatabase
from finai.database.sqlalchemy_db import SQLAlchemyDatabase

BACKENDS = ("sqlite", "json")


def _default_dir() -> Path:
    db_dir = Path.home() / ".finai"
    db_dir.mkdir(exist_ok=True)
    return db_dir


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FINAI_DB_PATH
            environment variable, then defaults to ~/.finai/finai.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("FINAI_DB_PATH")

    if database_path is None:
        database_path = str(_default_dir() / "finai.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_json_database(data_dir: Optional[str] = None) -> JSONCollectionDatabase:
    """Create a JSON collection database instance.

    Args:
        data_dir: Directory for the collection files. If None, checks FINAI_DB_PATH
            environment variable, then defaults to ~/.finai/data
    """
    if data_dir is None:
        data_dir = os.environ.get("FINAI_DB_PATH")

    if data_dir is None:
        data_dir = str(_default_dir() / "data")

    return JSONCollectionDatabase(data_dir)


def create_database(backend: str = "sqlite", path: Optional[str] = None) -> Database:
    """Create a database for the named backend ('sqlite' or 'json')."""
    if backend == "sqlite":
        return create_sqlite_database(database_path=path)
    if backend == "json":
        return create_json_database(data_dir=path)
    raise ValueError(f"Unknown backend '{backend}'. Supported backends: {', '.join(BACKENDS)}")
