"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from bankledger.domain.entities import (
    BankTransaction,
    FiscalPeriod,
    LedgerAccount,
)


class Database(ABC):
    """Abstract database interface for bankledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction_scope(self) -> AbstractContextManager[None]:
        """Group writes into one unit of work.

        Writes made inside the scope are committed together when it exits
        normally and rolled back together when it exits with an exception.
        Scopes may nest; only the outermost one commits.
        """
        pass

    # Bank transaction operations
    @abstractmethod
    def save_transaction(self, transaction: BankTransaction) -> BankTransaction:
        """Persist a bank transaction. Returns it with its assigned ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[BankTransaction]:
        """Get bank transaction by ID."""
        pass

    @abstractmethod
    def find_transactions(
        self, company_id: int, fiscal_period_id: Optional[int] = None
    ) -> list[BankTransaction]:
        """List a company's transactions ordered by date, optionally for one period."""
        pass

    @abstractmethod
    def update_transaction_classification(
        self, transaction_id: int, account_id: Optional[int]
    ) -> None:
        """Set (or clear) the ledger account a transaction is classified into."""
        pass

    @abstractmethod
    def delete_transactions(self, company_id: int, fiscal_period_id: int) -> int:
        """Delete a company's transactions for one period. Returns rows deleted."""
        pass

    # Fiscal period operations
    @abstractmethod
    def create_fiscal_period(
        self, company_id: int, name: str, start_date: date, end_date: date
    ) -> int:
        """Create a new fiscal period. Returns fiscal period ID."""
        pass

    @abstractmethod
    def get_fiscal_period(self, fiscal_period_id: int) -> Optional[FiscalPeriod]:
        """Get fiscal period by ID."""
        pass

    @abstractmethod
    def list_fiscal_periods(self, company_id: int) -> list[FiscalPeriod]:
        """List a company's fiscal periods ordered by start date."""
        pass

    # Ledger account operations
    @abstractmethod
    def create_account(self, code: str, name: str) -> int:
        """Create a new ledger account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[LedgerAccount]:
        """Get ledger account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str) -> Optional[LedgerAccount]:
        """Get ledger account by code."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[LedgerAccount]:
        """List all ledger accounts ordered by code."""
        pass
