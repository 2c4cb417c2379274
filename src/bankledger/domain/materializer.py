"""Transaction materialization domain service."""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

import structlog

from bankledger.database.base import Database
from bankledger.domain.entities import (
    BankTransaction,
    ParsedTransaction,
    TransactionKind,
    validate_bank_transaction,
)
from bankledger.domain.errors import (
    MaterializationError,
    ValidationError,
    batch_rolled_back,
)

logger = structlog.get_logger(__name__)


class TransactionMaterializer:
    """Convert parsed statement records into persisted bank transactions.

    A document's transactions are written as one batch: either every row
    is stored or none is.
    """

    def __init__(self, db: Database):
        """Initialize transaction materializer.

        Args:
            db: Database instance
        """
        self.db = db

    def build(
        self,
        parsed: Iterable[ParsedTransaction],
        company_id: int,
        fiscal_period_id: int,
        opening_balance: Optional[Decimal] = None,
    ) -> list[BankTransaction]:
        """Convert parsed transactions to unsaved bank transaction rows.

        CREDIT amounts land in ``credit_amount``; DEBIT and FEE amounts land in
        ``debit_amount``. The balance column carries the running balance
        starting from ``opening_balance`` (zero when the statement has none).

        Raises:
            ValidationError: If the input is missing
        """
        if parsed is None:
            raise ValidationError("Cannot materialize a missing transaction list")

        balance = opening_balance if opening_balance is not None else Decimal("0")
        rows = []
        for txn in parsed:
            if txn is None:
                raise ValidationError("Cannot materialize a missing transaction")
            balance += txn.signed_amount
            is_credit = txn.kind is TransactionKind.CREDIT
            context = txn.context
            rows.append(
                BankTransaction(
                    id=None,
                    company_id=company_id,
                    fiscal_period_id=fiscal_period_id,
                    transaction_date=txn.date,
                    details=txn.description,
                    debit_amount=None if is_credit else txn.amount,
                    credit_amount=txn.amount if is_credit else None,
                    balance=balance,
                    service_fee=txn.is_service_fee,
                    account_number=context.account_number,
                    statement_period=context.statement_period,
                    source_file=context.source_file,
                )
            )
        return rows

    def materialize(
        self,
        parsed: Sequence[ParsedTransaction],
        company_id: int,
        fiscal_period_id: int,
        opening_balance: Optional[Decimal] = None,
    ) -> list[BankTransaction]:
        """Convert and persist one document's transactions atomically.

        Returns:
            Saved bank transactions with their assigned IDs

        Raises:
            ValidationError: If the input is missing
            MaterializationError: If any row is invalid or fails to save;
                nothing is persisted in that case
        """
        rows = self.build(parsed, company_id, fiscal_period_id, opening_balance)
        source = rows[0].source_file if rows else None
        return self.persist(rows, source=source)

    def persist(
        self, rows: Sequence[BankTransaction], source: Optional[str] = None
    ) -> list[BankTransaction]:
        """Validate and save a batch of rows inside one transaction scope.

        Raises:
            MaterializationError: If any row is invalid or fails to save
        """
        for index, row in enumerate(rows, start=1):
            problems = validate_bank_transaction(row)
            if problems:
                reason = f"row {index}: {'; '.join(problems)}"
                logger.error("batch_rejected", source=source, reason=reason)
                raise MaterializationError(batch_rolled_back(source, reason))

        try:
            with self.db.transaction_scope():
                saved = [self.db.save_transaction(row) for row in rows]
        except Exception as e:
            logger.error("batch_rolled_back", source=source, rows=len(rows), error=str(e))
            raise MaterializationError(batch_rolled_back(source, str(e))) from e

        logger.info("batch_persisted", source=source, rows=len(saved))
        return saved
