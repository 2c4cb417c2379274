"""CSV import domain service."""

import csv
import re
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import structlog

from bankledger.database.base import Database
from bankledger.domain.entities import BankTransaction, FiscalPeriod
from bankledger.domain.errors import ValidationError
from bankledger.domain.fiscal_period import FiscalPeriodMatcher, FiscalPeriodService
from bankledger.domain.materializer import TransactionMaterializer
from bankledger.domain.text_extractor import TextExtractor
from bankledger.utils.amount_parser import parse_amount
from bankledger.utils.date_parser import (
    has_year,
    parse_date,
    parse_day_month,
    parse_statement_date,
    shift_into_range,
)

logger = structlog.get_logger(__name__)

# Normalized header name -> field
COLUMN_FIELDS = {
    "date": "date",
    "transactiondate": "date",
    "details": "details",
    "description": "details",
    "debit": "debit",
    "debitamount": "debit",
    "credit": "credit",
    "creditamount": "credit",
    "balance": "balance",
    "servicefee": "service_fee",
    "accountnumber": "account_number",
    "statementperiod": "statement_period",
    "sourcefile": "source_file",
    "fiscalperiod": "fiscal_period",
}

TRUE_VALUES = {"y", "yes", "true", "1"}


def _normalize_header(name: str) -> str:
    return re.sub(r"[\s_\-]+", "", name or "").lower()


class CSVImportService:
    """Service for importing transaction CSV exports."""

    def __init__(self, db: Database):
        """Initialize CSV import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.matcher = FiscalPeriodMatcher()
        self.periods = FiscalPeriodService(db)
        self.materializer = TransactionMaterializer(db)
        self.extractor = TextExtractor()

    def import_csv(
        self,
        csv_file_path: str,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Import transactions from a CSV file.

        Each row's fiscal period is resolved from its Fiscal Period column and
        date against the company's calendar. Accepted rows are stored as one
        batch.

        Args:
            csv_file_path: Path to CSV file
            company_id: Owning company ID
            fiscal_period_id: Only import rows resolving to this period

        Returns:
            Dict with import statistics:
            - imported: number of transactions imported
            - skipped: number of rows skipped (no or other fiscal period)
            - skipped_details: list of reasons for skipped rows
            - errors: list of error messages for malformed rows

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            NotFoundError: If fiscal_period_id is given but is not one of the company's periods
            ValidationError: If required columns are missing
            MaterializationError: If the accepted rows could not be stored
        """
        target = None
        if fiscal_period_id is not None:
            target = self.periods.get_company_period(company_id, fiscal_period_id)

        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        periods = self.db.list_fiscal_periods(company_id)
        rows = []
        skipped_details = []
        errors = []

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            # Try to detect delimiter
            sample = f.read(2048)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                raise ValidationError("CSV file has no columns")

            column_map = {}
            for column in reader.fieldnames:
                field = COLUMN_FIELDS.get(_normalize_header(column))
                if field and field not in column_map.values():
                    column_map[column] = field

            present = set(column_map.values())
            missing = {"date", "details"} - present
            if missing:
                raise ValidationError(f"CSV file missing required columns: {', '.join(sorted(missing))}")
            if not {"debit", "credit"} & present:
                raise ValidationError("CSV file needs a Debit or Credit column")

            for row_num, row in enumerate(reader, start=2):  # Start at 2 (header is row 1)
                values = {
                    field: (row.get(column) or "").strip() or None
                    for column, field in column_map.items()
                }
                if not any(values.values()):
                    continue

                try:
                    transaction, skip_reason = self._build_row(values, company_id, periods, target)
                except ValueError as e:
                    errors.append(f"Row {row_num}: {e}")
                    continue

                if skip_reason:
                    skipped_details.append(f"Row {row_num}: {skip_reason}")
                    continue
                rows.append(transaction)

        saved = self.materializer.persist(rows, source=csv_path.name)
        logger.info(
            "csv_imported",
            source=csv_path.name,
            imported=len(saved),
            skipped=len(skipped_details),
            errors=len(errors),
        )
        return {
            "imported": len(saved),
            "skipped": len(skipped_details),
            "skipped_details": skipped_details,
            "errors": errors,
        }

    def _build_row(
        self,
        values: dict[str, Optional[str]],
        company_id: int,
        periods: list[FiscalPeriod],
        target: Optional[FiscalPeriod],
    ) -> tuple[Optional[BankTransaction], Optional[str]]:
        """Turn one CSV row into a transaction, or a reason to skip it.

        Raises:
            ValueError: If the row is malformed
        """
        date_str = values.get("date")
        if not date_str:
            raise ValueError("Missing date")
        details = values.get("details")
        if not details:
            raise ValueError("Missing details")

        debit = self._amount(values.get("debit"))
        credit = self._amount(values.get("credit"))
        if debit is None and credit is None:
            raise ValueError("Either debit or credit amount must be specified")
        if debit is not None and credit is not None:
            raise ValueError("Transaction cannot have both debit and credit amounts")
        balance = parse_amount(values["balance"]) if values.get("balance") else None

        label = values.get("fiscal_period")
        if has_year(date_str):
            txn_date = parse_date(date_str, dayfirst=True)
        else:
            # The label only supplies the year of a "dd/mm" date here
            hint = self.matcher.match(label, periods) if label else None
            txn_date = self._resolve_date(date_str, hint.period if hint else target, values)

        match = self.matcher.match(label, periods, txn_date)
        if match is None:
            return None, f"No fiscal period matches '{label or txn_date.isoformat()}'"
        period = match.period
        if target is not None and period.id != target.id:
            return None, f"Belongs to fiscal period '{period.name}'"

        return (
            BankTransaction(
                id=None,
                company_id=company_id,
                fiscal_period_id=period.id,
                transaction_date=txn_date,
                details=details,
                debit_amount=debit,
                credit_amount=credit,
                balance=balance,
                service_fee=(values.get("service_fee") or "").lower() in TRUE_VALUES,
                account_number=values.get("account_number"),
                statement_period=values.get("statement_period"),
                source_file=values.get("source_file"),
            ),
            None,
        )

    def _resolve_date(
        self,
        date_str: str,
        period: Optional[FiscalPeriod],
        values: dict[str, Optional[str]],
    ) -> date:
        """Infer the year of a year-less "dd/mm" row date.

        The year comes from the fiscal period named by the row (or the import
        target), else from the row's statement period.
        """
        if period is not None:
            day = parse_day_month(date_str, period.end_date.year)
            return shift_into_range(day, period.start_date, period.end_date)

        bounds = self.extractor.parse_statement_period(values.get("statement_period"))
        if bounds is not None:
            return parse_statement_date(date_str, bounds[1])

        raise ValueError(f"Cannot infer the year of date '{date_str}'")

    @staticmethod
    def _amount(amount_str: Optional[str]) -> Optional[Decimal]:
        if not amount_str:
            return None
        amount = abs(parse_amount(amount_str))
        return amount if amount else None
