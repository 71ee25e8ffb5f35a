"""Shared pytest fixtures for finai tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from finai.database.factories import create_json_database, create_sqlite_database
from finai.domain.box import BoxService
from finai.domain.entities import TransactionDraft, TransactionKind
from finai.domain.intent import IntentApplier
from finai.domain.ledger import LedgerService
from finai.domain.profile import ProfileService
from finai.domain.projection import ProjectionService


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def json_db(tmp_path):
    """Create a JSON collection database in a temporary directory."""
    data_dir = tmp_path / "data"
    db = create_json_database(data_dir=str(data_dir))
    db.database_path = str(data_dir)
    db.connect()
    db.initialize_schema()
    yield db
    db.disconnect()


@pytest.fixture(params=["sqlite", "json"])
def db(request):
    """Run a test once against each storage backend."""
    return request.getfixturevalue("temp_db" if request.param == "sqlite" else "json_db")


@pytest.fixture
def ledger(db):
    """Create a LedgerService over the parametrized backend."""
    return LedgerService(db)


@pytest.fixture
def box_service(db):
    """Create a BoxService over the parametrized backend."""
    return BoxService(db)


@pytest.fixture
def profile_service(db):
    """Create a ProfileService over the parametrized backend."""
    return ProfileService(db)


@pytest.fixture
def projection_service(db):
    """Create a ProjectionService over the parametrized backend."""
    return ProjectionService(db)


@pytest.fixture
def intent_applier(db):
    """Create an IntentApplier over the parametrized backend."""
    return IntentApplier(db)


@pytest.fixture
def trip_box(box_service):
    """Create a 'Trip' box with a 1000.00 goal."""
    return box_service.create_box(name="Trip", goal_amount=Decimal("1000"), emoji="✈️")


@pytest.fixture
def salary(ledger):
    """Record a 3000.00 salary income."""
    return ledger.add_transaction(
        TransactionDraft(
            kind=TransactionKind.INCOME,
            amount=Decimal("3000"),
            category="Salary",
            occurred_on=date(2024, 5, 5),
        )
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
