"""Shared pytest fixtures for finagenda tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from finagenda.database.factories import create_sqlite_database
from finagenda.domain.entities import CreditCard, EntryKind, LedgerEntry
from finagenda.domain.ids import SequentialIds
from finagenda.domain.ledger import LedgerService

# Fixed reference date for the forecast window: January 2026.
TODAY = date(2026, 1, 15)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def today():
    """Reference date used by engine and service tests."""
    return TODAY


@pytest.fixture
def ids():
    """Deterministic id factory."""
    return SequentialIds("id-")


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database and a fixed today."""
    return LedgerService(temp_db, id_factory=SequentialIds("s-"), today=TODAY)


@pytest.fixture
def make_entry():
    """Factory for plain ledger entries."""

    def _make_entry(entry_id="e1", year=2026, month=0, day=10, **overrides):
        values = dict(
            id=entry_id,
            day=day,
            month=month,
            year=year,
            kind=EntryKind.EXPENSE,
            category="Home",
            description="Rent",
            amount=Decimal("100"),
        )
        values.update(overrides)
        return LedgerEntry(**values)

    return _make_entry


@pytest.fixture
def card():
    """A card closing on the 10th and due on the 5th."""
    return CreditCard(id="card-1", name="Visa", closing_day=10, due_day=5)


@pytest.fixture
def sample_card(ledger_service):
    """Create a sample card in the database."""
    return ledger_service.add_card("Visa", closing_day=10, due_day=5)


@pytest.fixture
def sample_subscription(ledger_service):
    """Create a sample subscription in the database."""
    return ledger_service.add_subscription("Netflix", Decimal("55.90"), billing_day=12)


@pytest.fixture
def sample_debt(ledger_service):
    """Create a sample debt account with a balance of 1000."""
    debt = ledger_service.add_debt("Store Credit")
    return ledger_service.record_debt_purchase(
        debt.id, Decimal("1000"), "Sofa", on_date=date(2026, 1, 2)
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
