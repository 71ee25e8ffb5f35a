"""SQLAlchemy models for the finai database.

Money columns hold integer minor units (cents).
"""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Transaction(Base):
    """Transaction log model."""

    __tablename__ = "transactions"

    # Insertion sequence; newest-first ordering uses it
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False)
    kind = Column(String, nullable=False)
    amount_minor = Column(Integer, nullable=False)
    category = Column(String, nullable=False, default="")
    occurred_on = Column(Date, nullable=False)
    due_on = Column(Date, nullable=True)
    description = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    # Not a foreign key: box deletion leaves transactions orphaned
    box_id = Column(String(32), nullable=True, index=True)


class Box(Base):
    """Savings box model."""

    __tablename__ = "boxes"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, nullable=False)
    name = Column(String, nullable=False)
    goal_minor = Column(Integer, nullable=False)
    balance_minor = Column(Integer, nullable=False, default=0)
    emoji = Column(String, nullable=False, default="")
    bank = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class UserProfile(Base):
    """Singleton user profile row."""

    __tablename__ = "user_profile"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False)
    currency = Column(String, nullable=False)
    free_box_limit = Column(Integer, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
