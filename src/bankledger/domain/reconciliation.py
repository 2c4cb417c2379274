"""Reconciliation of statement-derived and stored transactions."""

import re
from collections import defaultdict, deque
from decimal import Decimal
from typing import Optional, Sequence

import structlog

from bankledger.database.base import Database
from bankledger.domain.entities import BankTransaction, DiscrepancyReport
from bankledger.domain.errors import ValidationError
from bankledger.domain.fiscal_period import FiscalPeriodService
from bankledger.domain.materializer import TransactionMaterializer
from bankledger.domain.statement_import import StatementImportService
from bankledger.domain.text_extractor import Document

logger = structlog.get_logger(__name__)

DEFAULT_TOLERANCE = Decimal("0.01")

_CENTS = Decimal("0.01")


def normalize_description(text: Optional[str]) -> str:
    """Uppercase, drop punctuation and collapse whitespace."""
    cleaned = re.sub(r"[^A-Z0-9]+", " ", (text or "").upper())
    return cleaned.strip()


def _cents(value: Optional[Decimal]) -> Optional[Decimal]:
    return None if value is None else Decimal(value).quantize(_CENTS)


def match_key(transaction: BankTransaction) -> tuple:
    """Key two transactions must share to count as the same posting."""
    return (
        transaction.transaction_date,
        _cents(transaction.debit_amount),
        _cents(transaction.credit_amount),
        normalize_description(transaction.details),
    )


def _totals(transactions: Sequence[BankTransaction]) -> tuple[Decimal, Decimal]:
    debits = sum((t.debit_amount for t in transactions if t.debit_amount is not None), Decimal("0"))
    credits = sum((t.credit_amount for t in transactions if t.credit_amount is not None), Decimal("0"))
    return debits, credits


def verify(
    statement: Sequence[BankTransaction],
    stored: Sequence[BankTransaction],
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> DiscrepancyReport:
    """Compare statement-derived transactions with stored ones.

    Rows are matched one-to-one on date, amounts and normalized
    description, so duplicates on one side must be matched by duplicates on
    the other. Mismatches never raise; they are reported.

    Args:
        statement: Transactions derived from the bank statement
        stored: Transactions previously stored for the same company and period
        tolerance: Largest total difference still treated as equal

    Returns:
        DiscrepancyReport

    Raises:
        ValidationError: If either transaction set is missing
    """
    if statement is None or stored is None:
        raise ValidationError("Reconciliation requires both transaction sets")

    statement = list(statement)
    stored = list(stored)

    unmatched_stored = defaultdict(deque)
    for index, txn in enumerate(stored):
        unmatched_stored[match_key(txn)].append(index)

    missing = []
    for txn in statement:
        bucket = unmatched_stored.get(match_key(txn))
        if bucket:
            bucket.popleft()
        else:
            missing.append(txn)

    remaining = sorted(index for bucket in unmatched_stored.values() for index in bucket)
    extra = [stored[index] for index in remaining]

    statement_debits, statement_credits = _totals(statement)
    stored_debits, stored_credits = _totals(stored)
    debit_difference = statement_debits - stored_debits
    credit_difference = statement_credits - stored_credits

    discrepancies = []
    if abs(debit_difference) > tolerance:
        discrepancies.append(f"Debit totals differ by {abs(debit_difference):.2f}")
    if abs(credit_difference) > tolerance:
        discrepancies.append(f"Credit totals differ by {abs(credit_difference):.2f}")

    final_balance = Decimal("0")
    if statement:
        last = sorted(statement, key=lambda t: t.transaction_date)[-1]
        if last.balance is not None:
            final_balance = last.balance

    is_valid = not discrepancies and not missing and not extra
    if not is_valid:
        logger.info(
            "reconciliation_mismatch",
            missing=len(missing),
            extra=len(extra),
            discrepancies=len(discrepancies),
        )

    return DiscrepancyReport(
        is_valid=is_valid,
        total_debits=statement_debits,
        total_credits=statement_credits,
        final_balance=final_balance,
        discrepancies=tuple(discrepancies),
        missing_transactions=tuple(missing),
        extra_transactions=tuple(extra),
        differences={"debits": debit_difference, "credits": credit_difference},
    )


class ReconciliationService:
    """Service for reconciling statements against stored transactions."""

    def __init__(self, db: Database, tolerance: Decimal = DEFAULT_TOLERANCE):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            tolerance: Largest total difference still treated as equal
        """
        self.db = db
        self.tolerance = tolerance
        self.statement_service = StatementImportService(db)
        self.materializer = TransactionMaterializer(db)
        self.periods = FiscalPeriodService(db)

    def verify_period(
        self, statement: Sequence[BankTransaction], company_id: int, fiscal_period_id: int
    ) -> DiscrepancyReport:
        """Compare statement rows with what is stored for a company and period.

        Raises:
            NotFoundError: If the fiscal period is not one of the company's periods
        """
        self.periods.get_company_period(company_id, fiscal_period_id)
        stored = self.db.find_transactions(company_id, fiscal_period_id)
        return verify(statement, stored, self.tolerance)

    def verify_document(
        self,
        document: Document,
        company_id: int,
        fiscal_period_id: int,
        source_file: Optional[str] = None,
    ) -> DiscrepancyReport:
        """Parse a statement and compare it with the stored period.

        Statement rows outside the period are left out, mirroring what the
        import stores.

        Raises:
            NotFoundError: If the fiscal period is not one of the company's periods
        """
        period = self.periods.get_company_period(company_id, fiscal_period_id)

        result = self.statement_service.parse_document(
            document, source_file=source_file, default_date=period.end_date
        )
        in_period = [txn for txn in result.transactions if period.contains(txn.date)]
        statement = self.materializer.build(
            in_period, company_id, period.id, opening_balance=result.opening_balance
        )
        return self.verify_period(statement, company_id, period.id)
