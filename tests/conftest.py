"""Shared pytest fixtures for bankledger tests."""

import tempfile
import os
from datetime import date
from pathlib import Path
import pytest

from bankledger.database.factories import create_sqlite_database
from bankledger.domain.account import AccountService
from bankledger.domain.entities import ParsingContext
from bankledger.domain.fiscal_period import FiscalPeriodService
from bankledger.domain.transaction import TransactionService

COMPANY_ID = 1


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
def company_id():
    """Company the test data belongs to."""
    return COMPANY_ID


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def fiscal_period_service(temp_db):
    """Create a FiscalPeriodService with a temporary database."""
    return FiscalPeriodService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def fiscal_year(fiscal_period_service):
    """March-to-February fiscal year ending in 2025."""
    period_id = fiscal_period_service.create_period(
        COMPANY_ID, "FY2024-2025", date(2024, 3, 1), date(2025, 2, 28)
    )
    return fiscal_period_service.get_period(period_id)


@pytest.fixture
def quarter(fiscal_period_service):
    """Calendar quarter covering the whole sample statement."""
    period_id = fiscal_period_service.create_period(
        COMPANY_ID, "Q1 2025", date(2025, 1, 1), date(2025, 3, 31)
    )
    return fiscal_period_service.get_period(period_id)


@pytest.fixture
def chart_of_accounts(account_service):
    """Small chart of accounts keyed by code."""
    accounts = [
        ("1000", "Bank"),
        ("3000", "Trade payables"),
        ("5000", "Share capital"),
        ("6000", "Sales"),
        ("8100", "Bank charges"),
        ("8200", "Insurance"),
    ]
    for code, name in accounts:
        account_service.create_account(code=code, name=name)
    return {account.code: account for account in account_service.list_accounts()}


@pytest.fixture
def context():
    """Parsing context of the sample statement."""
    return ParsingContext(
        statement_date=date(2025, 3, 12),
        account_number="20 316 375 3",
        statement_period="15 February 2025 to 15 March 2025",
        source_file="xxxxx3753 (14).pdf",
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def statement_text(fixtures_dir):
    """Text of the sample bank statement."""
    return (fixtures_dir / "statement.txt").read_text(encoding="utf-8")
