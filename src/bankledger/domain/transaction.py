"""Bank transaction domain service."""

from typing import Optional

import structlog

from bankledger.database.base import Database
from bankledger.domain.entities import BankTransaction
from bankledger.domain.errors import (
    NotFoundError,
    account_not_found,
    transaction_not_found,
)
from bankledger.domain.fiscal_period import FiscalPeriodService

logger = structlog.get_logger(__name__)


class TransactionService:
    """Service for reading, classifying and resetting bank transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: int) -> Optional[BankTransaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            BankTransaction or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self, company_id: int, fiscal_period_id: Optional[int] = None
    ) -> list[BankTransaction]:
        """List a company's transactions ordered by date."""
        return self.db.find_transactions(company_id, fiscal_period_id)

    def classify_transaction(self, transaction_id: int, account_code: Optional[str]) -> BankTransaction:
        """Assign a transaction to a ledger account.

        Args:
            transaction_id: Transaction ID
            account_code: Account code, or None to mark it unclassified

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction or account does not exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        account_id = None
        if account_code is not None:
            account = self.db.get_account_by_code(account_code.strip())
            if account is None:
                raise NotFoundError(account_not_found(account_code))
            account_id = account.id

        self.db.update_transaction_classification(transaction_id, account_id)
        logger.debug("transaction_classified", transaction_id=transaction_id, account=account_code)
        return self.db.get_transaction(transaction_id)

    def reset_transactions(self, company_id: int, fiscal_period_id: int) -> int:
        """Delete every stored transaction of a company's fiscal period.

        Returns:
            Number of transactions deleted

        Raises:
            NotFoundError: If the fiscal period is not one of the company's periods
        """
        FiscalPeriodService(self.db).get_company_period(company_id, fiscal_period_id)
        with self.db.transaction_scope():
            deleted = self.db.delete_transactions(company_id, fiscal_period_id)
        logger.info(
            "transactions_reset",
            company_id=company_id,
            fiscal_period_id=fiscal_period_id,
            deleted=deleted,
        )
        return deleted
