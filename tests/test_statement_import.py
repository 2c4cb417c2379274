"""Tests for the statement import pipeline."""

import pytest
from datetime import date
from decimal import Decimal

from bankledger.domain.errors import MaterializationError, NotFoundError
from bankledger.domain.statement_import import StatementImportService


def test_parse_document(temp_db, statement_text):
    """Parsing alone persists nothing and reports diagnostics."""
    service = StatementImportService(temp_db)

    result = service.parse_document(statement_text, source_file="xxxxx3753 (14).pdf")

    assert len(result.transactions) == 6
    assert result.opening_balance == Decimal("10000.00")
    assert result.transaction_lines == 5
    assert result.unmatched_lines == []
    assert result.errors == []
    assert result.context.statement_date == date(2025, 3, 15)
    assert result.context.account_number == "20 316 375 3"
    assert temp_db.find_transactions(1) == []


def test_parse_document_path_sets_source(temp_db, fixtures_dir):
    """A path document labels its transactions with the file name."""
    result = StatementImportService(temp_db).parse_document(fixtures_dir / "statement.txt")
    assert result.context.source_file == "statement.txt"


def test_import_statement(temp_db, quarter, company_id, statement_text):
    """Every transaction of the statement is stored with a running balance."""
    service = StatementImportService(temp_db)

    result = service.import_statement(statement_text, company_id, quarter.id, source_file="stmt.pdf")

    assert result["imported"] == 6
    assert result["unmatched"] == 0
    assert result["out_of_period"] == 0
    assert result["errors"] == []

    stored = temp_db.find_transactions(company_id, quarter.id)
    assert len(stored) == 6
    assert stored[-1].balance == Decimal("10865.60")
    assert sum(t.debit_amount for t in stored if t.debit_amount) == Decimal("1134.40")
    assert sum(t.credit_amount for t in stored if t.credit_amount) == Decimal("2000.00")
    assert [t.service_fee for t in stored] == [False, False, True, True, False, False]
    assert {t.source_file for t in stored} == {"stmt.pdf"}
    assert {t.statement_period for t in stored} == {"15 February 2025 to 15 March 2025"}


def test_import_skips_rows_outside_period(temp_db, fiscal_year, company_id, statement_text):
    """March rows fall outside a fiscal year ending in February."""
    result = StatementImportService(temp_db).import_statement(statement_text, company_id, fiscal_year.id)

    assert result["imported"] == 4
    assert result["out_of_period"] == 2
    stored = temp_db.find_transactions(company_id, fiscal_year.id)
    assert max(t.transaction_date for t in stored) == date(2025, 2, 25)


def test_import_statement_without_period_text_uses_period_end(temp_db, quarter, company_id):
    """Undated lines take the fiscal period end when the statement has no period."""
    result = StatementImportService(temp_db).import_statement(
        "CASH DEPOSIT BRANCH 250.00\nMONTHLY FEE 5.00-\n", company_id, quarter.id
    )

    assert result["imported"] == 2
    stored = temp_db.find_transactions(company_id, quarter.id)
    assert {t.transaction_date for t in stored} == {quarter.end_date}
    assert stored[1].service_fee is True


def test_import_unknown_period(temp_db, company_id, statement_text):
    with pytest.raises(NotFoundError):
        StatementImportService(temp_db).import_statement(statement_text, company_id, 999)


def test_import_failure_rolls_back_document(temp_db, quarter, company_id, statement_text, monkeypatch):
    """A failed save leaves no rows of the document behind."""
    original_save = temp_db.save_transaction
    saved = []

    def flaky_save(transaction):
        if len(saved) == 4:
            raise RuntimeError("connection lost")
        saved.append(transaction)
        return original_save(transaction)

    monkeypatch.setattr(temp_db, "save_transaction", flaky_save)

    with pytest.raises(MaterializationError):
        StatementImportService(temp_db).import_statement(statement_text, company_id, quarter.id)

    assert temp_db.find_transactions(company_id, quarter.id) == []


def test_import_into_other_company_period(temp_db, quarter, statement_text):
    """A company cannot import into another company's fiscal period."""
    with pytest.raises(NotFoundError, match="not found for company 2"):
        StatementImportService(temp_db).import_statement(statement_text, 2, quarter.id)

    assert temp_db.find_transactions(2) == []
