"""Bank statement import domain service."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import structlog

from bankledger.database.base import Database
from bankledger.domain.entities import ParsedTransaction, ParsingContext, RawLine
from bankledger.domain.fiscal_period import FiscalPeriodService
from bankledger.domain.materializer import TransactionMaterializer
from bankledger.domain.parsers import StatementParser
from bankledger.domain.text_extractor import Document, TextExtractor

logger = structlog.get_logger(__name__)


@dataclass
class StatementParseResult:
    """Everything learned from one statement document, before persistence."""

    context: ParsingContext
    transactions: list[ParsedTransaction] = field(default_factory=list)
    opening_balance: Optional[Decimal] = None
    transaction_lines: int = 0
    unmatched_lines: list[RawLine] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class StatementImportService:
    """Service for importing bank statements.

    Runs a document through extraction, parsing and materialization.
    """

    def __init__(
        self,
        db: Database,
        extractor: Optional[TextExtractor] = None,
        parser: Optional[StatementParser] = None,
    ):
        """Initialize statement import service.

        Args:
            db: Database instance
            extractor: Text extractor (defaults to TextExtractor())
            parser: Statement parser (defaults to the standard strategy order)
        """
        self.db = db
        self.extractor = extractor or TextExtractor()
        self.parser = parser or StatementParser(extractor=self.extractor)
        self.materializer = TransactionMaterializer(db)
        self.periods = FiscalPeriodService(db)

    def parse_document(
        self,
        document: Document,
        source_file: Optional[str] = None,
        default_date: Optional[date] = None,
    ) -> StatementParseResult:
        """Extract and parse a statement without persisting anything.

        Args:
            document: PDF bytes, text, or a path
            source_file: Source label stored on every transaction
                (defaults to the file name when ``document`` is a path)
            default_date: Statement date to use when the document prints no
                readable statement period

        Returns:
            StatementParseResult with the parsed transactions and diagnostics

        Raises:
            ValidationError: If no statement date can be established
        """
        if source_file is None and isinstance(document, Path):
            source_file = document.name

        lines = list(self.extractor.extract_lines(document))
        context = self.extractor.build_context(lines, source_file=source_file, default_date=default_date)
        outcome = self.parser.parse_lines(lines, context)

        return StatementParseResult(
            context=context,
            transactions=outcome.transactions,
            opening_balance=self.extractor.extract_opening_balance(lines),
            transaction_lines=outcome.transaction_lines,
            unmatched_lines=outcome.unmatched_lines,
            errors=outcome.errors,
        )

    def import_statement(
        self,
        document: Document,
        company_id: int,
        fiscal_period_id: int,
        source_file: Optional[str] = None,
    ) -> dict[str, Any]:
        """Import a statement's transactions into a fiscal period.

        Transactions dated outside the period are reported, not imported.
        The batch is persisted all-or-nothing.

        Args:
            document: PDF bytes, text, or a path
            company_id: Owning company ID
            fiscal_period_id: Target fiscal period ID
            source_file: Optional source label

        Returns:
            Dict with import statistics:
            - imported: number of transactions stored
            - unmatched: number of transaction lines no parser claimed
            - out_of_period: number of parsed transactions outside the period
            - errors: list of line-level error messages
            - transactions: the saved BankTransaction entities

        Raises:
            NotFoundError: If the fiscal period is not one of the company's periods
            MaterializationError: If the batch could not be persisted
        """
        period = self.periods.get_company_period(company_id, fiscal_period_id)

        result = self.parse_document(document, source_file=source_file, default_date=period.end_date)

        in_period = [txn for txn in result.transactions if period.contains(txn.date)]
        out_of_period = len(result.transactions) - len(in_period)
        if out_of_period:
            logger.info(
                "transactions_outside_period",
                period=period.name,
                count=out_of_period,
            )

        saved = self.materializer.materialize(
            in_period, company_id, period.id, opening_balance=result.opening_balance
        )

        logger.info(
            "statement_imported",
            source=result.context.source_file,
            imported=len(saved),
            unmatched=len(result.unmatched_lines),
            errors=len(result.errors),
        )
        return {
            "imported": len(saved),
            "unmatched": len(result.unmatched_lines),
            "out_of_period": out_of_period,
            "errors": result.errors,
            "transactions": saved,
        }
