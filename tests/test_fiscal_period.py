"""Tests for fiscal period matching and management."""

import pytest
from datetime import date

from bankledger.domain.entities import FiscalPeriod
from bankledger.domain.errors import ConflictError, NotFoundError, ValidationError
from bankledger.domain.fiscal_period import FiscalPeriodMatcher, parse_fy_label


FY_2024_2025 = FiscalPeriod(
    id=1, company_id=1, name="FY2024-2025", start_date=date(2024, 3, 1), end_date=date(2025, 2, 28)
)
FY_2025_2026 = FiscalPeriod(
    id=2, company_id=1, name="FY2025-2026", start_date=date(2025, 3, 1), end_date=date(2026, 2, 28)
)


@pytest.fixture
def matcher():
    return FiscalPeriodMatcher()


def test_fy_label_resolves_by_date_range(matcher):
    """'FY2025' with a November 2024 date resolves through date containment."""
    result = matcher.match("FY2025", [FY_2024_2025], transaction_date=date(2024, 11, 1))

    assert result.period == FY_2024_2025
    assert result.strategy == "date_range"


def test_exact_name_wins(matcher):
    """Exact names are tried first, ignoring case and spacing."""
    result = matcher.match(" fy2025-2026 ", [FY_2024_2025, FY_2025_2026], date(2024, 11, 1))

    assert result.period == FY_2025_2026
    assert result.strategy == "exact"


@pytest.mark.parametrize(
    "label, expected",
    [
        ("FY2025", FY_2024_2025),
        ("FY 2025", FY_2024_2025),
        ("fy2026", FY_2025_2026),
        ("FY2024/25", FY_2024_2025),
        ("FY24-25", FY_2024_2025),
        ("FY2025/2026", FY_2025_2026),
    ],
)
def test_label_heuristic(matcher, label, expected):
    """Fiscal-year labels match the period ending in that year."""
    result = matcher.match(label, [FY_2024_2025, FY_2025_2026])

    assert result.period == expected
    assert result.strategy == "label"


@pytest.mark.parametrize("label", ["2025", "Year end 2025", "FY2030", "FY2025-2024", "", None])
def test_unresolved_labels_return_none(matcher, label):
    """Anything the three tiers cannot resolve is no match, not an error."""
    assert matcher.match(label, [FY_2024_2025, FY_2025_2026]) is None


def test_date_outside_all_periods(matcher):
    """A date outside every period with no usable label is unresolved."""
    assert matcher.match(None, [FY_2024_2025], transaction_date=date(2030, 1, 1)) is None


def test_match_period_returns_period(matcher):
    assert matcher.match_period("FY2024-2025", [FY_2024_2025]) == FY_2024_2025
    assert matcher.match_period("unknown", [FY_2024_2025]) is None


def test_parse_fy_label():
    assert parse_fy_label("FY2025") == (None, 2025)
    assert parse_fy_label("FY2024-2025") == (2024, 2025)
    assert parse_fy_label("FY24-25") == (2024, 2025)
    assert parse_fy_label("FY2024/25") == (2024, 2025)
    assert parse_fy_label("March 2025") is None


class TestFiscalPeriodService:
    """Fiscal period persistence rules."""

    def test_create_and_list(self, fiscal_period_service, company_id):
        period_id = fiscal_period_service.create_period(
            company_id, "FY2024-2025", date(2024, 3, 1), date(2025, 2, 28)
        )

        period = fiscal_period_service.get_period(period_id)
        assert period.name == "FY2024-2025"
        assert period.start_date == date(2024, 3, 1)
        assert period.end_date == date(2025, 2, 28)
        assert period.is_closed is False
        assert fiscal_period_service.list_periods(company_id) == [period]
        assert fiscal_period_service.list_periods(company_id + 1) == []

    def test_end_must_follow_start(self, fiscal_period_service, company_id):
        with pytest.raises(ValidationError):
            fiscal_period_service.create_period(company_id, "Bad", date(2025, 2, 28), date(2024, 3, 1))

    def test_duplicate_name_rejected(self, fiscal_period_service, fiscal_year, company_id):
        with pytest.raises(ConflictError):
            fiscal_period_service.create_period(
                company_id, "fy2024-2025", date(2024, 3, 1), date(2025, 2, 28)
            )

    def test_same_name_for_other_company(self, fiscal_period_service, fiscal_year, company_id):
        period_id = fiscal_period_service.create_period(
            company_id + 1, "FY2024-2025", date(2024, 3, 1), date(2025, 2, 28)
        )
        assert period_id != fiscal_year.id

    def test_get_missing_period(self, fiscal_period_service):
        with pytest.raises(NotFoundError):
            fiscal_period_service.get_period(999)

    def test_get_company_period(self, fiscal_period_service, fiscal_year, company_id):
        """Periods are only visible to the company that owns them."""
        assert fiscal_period_service.get_company_period(company_id, fiscal_year.id) == fiscal_year

        with pytest.raises(NotFoundError, match=f"not found for company {company_id + 1}"):
            fiscal_period_service.get_company_period(company_id + 1, fiscal_year.id)

    def test_resolve_against_stored_calendar(self, fiscal_period_service, fiscal_year, company_id):
        result = fiscal_period_service.resolve(company_id, "FY2025", date(2024, 11, 1))
        assert result.period == fiscal_year
        assert result.strategy == "date_range"
