"""Fiscal period domain service and period matching."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

import structlog

from bankledger.database.base import Database
from bankledger.domain.entities import FiscalPeriod
from bankledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_fiscal_period,
    fiscal_period_not_found,
    fiscal_period_of_other_company,
)

logger = structlog.get_logger(__name__)

# FY2025, FY 2025, FY25, FY2024-2025, FY2024/25, FY24-25
FY_LABEL_PATTERN = re.compile(
    r"^FY\s*(?P<first>\d{4}|\d{2})(?:\s*[-/]\s*(?P<second>\d{4}|\d{2}))?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class PeriodMatch:
    """Resolved fiscal period and the tier that resolved it."""

    period: FiscalPeriod
    strategy: str


def _normalize_name(name: Optional[str]) -> str:
    return re.sub(r"\s+", " ", name or "").strip().lower()


def _expand_year(token: str, century: int = 2000) -> int:
    if len(token) == 4:
        return int(token)
    return century + int(token)


def parse_fy_label(label: Optional[str]) -> Optional[tuple[Optional[int], int]]:
    """Normalize a fiscal-year label to (start_year, end_year).

    Single-year labels such as "FY2025" name the year the period ends in and
    return ``(None, 2025)``. Two-year labels return both years. Anything else
    returns None.
    """
    if not label:
        return None
    match = FY_LABEL_PATTERN.match(label.strip())
    if not match:
        return None

    first = _expand_year(match.group("first"))
    second = match.group("second")
    if second is None:
        return None, first

    end = _expand_year(second, century=first // 100 * 100)
    if end < first:
        return None
    return first, end


class FiscalPeriodMatcher:
    """Resolve a period label against a company's fiscal period calendar.

    Tiers are tried in order: exact name, date-range containment, then the
    fiscal-year label heuristic. No match is a normal outcome, returned as
    None; callers decide whether to skip or reject the row.
    """

    def match(
        self,
        label: Optional[str],
        periods: Iterable[FiscalPeriod],
        transaction_date: Optional[date] = None,
    ) -> Optional[PeriodMatch]:
        periods = list(periods)

        wanted = _normalize_name(label)
        if wanted:
            for period in periods:
                if _normalize_name(period.name) == wanted:
                    return PeriodMatch(period, "exact")

        if transaction_date is not None:
            for period in periods:
                if period.contains(transaction_date):
                    return PeriodMatch(period, "date_range")

        years = parse_fy_label(label)
        if years is not None:
            start_year, end_year = years
            for period in periods:
                if period.end_date.year != end_year:
                    continue
                if start_year is not None and period.start_date.year != start_year:
                    continue
                return PeriodMatch(period, "label")

        logger.debug("fiscal_period_unresolved", label=label, transaction_date=transaction_date)
        return None

    def match_period(
        self,
        label: Optional[str],
        periods: Iterable[FiscalPeriod],
        transaction_date: Optional[date] = None,
    ) -> Optional[FiscalPeriod]:
        """Return only the matched period (or None)."""
        result = self.match(label, periods, transaction_date)
        return result.period if result else None


class FiscalPeriodService:
    """Service for managing fiscal periods."""

    def __init__(self, db: Database):
        """Initialize fiscal period service.

        Args:
            db: Database instance
        """
        self.db = db
        self.matcher = FiscalPeriodMatcher()

    def create_period(self, company_id: int, name: str, start_date: date, end_date: date) -> int:
        """Create a new fiscal period.

        Args:
            company_id: Owning company ID
            name: Period name (e.g. "FY2024-2025")
            start_date: First day of the period
            end_date: Last day of the period

        Returns:
            Fiscal period ID

        Raises:
            ValidationError: If the name is blank or end date is not after start date
            ConflictError: If the company already has a period with this name
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Fiscal period name is required")
        if end_date <= start_date:
            raise ValidationError("Fiscal period end date must be after its start date")

        for period in self.db.list_fiscal_periods(company_id):
            if _normalize_name(period.name) == _normalize_name(name):
                raise ConflictError(duplicate_fiscal_period(name, company_id))

        return self.db.create_fiscal_period(company_id, name, start_date, end_date)

    def get_period(self, fiscal_period_id: int) -> FiscalPeriod:
        """Get fiscal period by ID.

        Raises:
            NotFoundError: If the period does not exist
        """
        period = self.db.get_fiscal_period(fiscal_period_id)
        if period is None:
            raise NotFoundError(fiscal_period_not_found(fiscal_period_id))
        return period

    def get_company_period(self, company_id: int, fiscal_period_id: int) -> FiscalPeriod:
        """Get a fiscal period that belongs to the given company.

        Raises:
            NotFoundError: If the period does not exist or belongs to another company
        """
        period = self.get_period(fiscal_period_id)
        if period.company_id != company_id:
            raise NotFoundError(fiscal_period_of_other_company(fiscal_period_id, company_id))
        return period

    def list_periods(self, company_id: int) -> list[FiscalPeriod]:
        """List a company's fiscal periods ordered by start date."""
        return self.db.list_fiscal_periods(company_id)

    def resolve(
        self, company_id: int, label: Optional[str], transaction_date: Optional[date] = None
    ) -> Optional[PeriodMatch]:
        """Match a label (and optional date) against the company's calendar."""
        return self.matcher.match(label, self.db.list_fiscal_periods(company_id), transaction_date)
