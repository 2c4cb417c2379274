"""Tests for CLI commands."""

from bankledger.cli.main import cli


def invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def test_cli_help(cli_runner):
    """Help works without touching a database."""
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "import-statement" in result.output
    assert "trial-balance" in result.output


class TestPeriodCommands:
    def test_create_and_list(self, cli_runner, temp_db):
        result = invoke(
            cli_runner, temp_db,
            "period", "create", "FY2024-2025", "--company", "1",
            "--start", "2024-03-01", "--end", "2025-02-28",
        )
        assert result.exit_code == 0
        assert "Created fiscal period 'FY2024-2025' (ID: 1)" in result.output

        result = invoke(cli_runner, temp_db, "period", "list", "--company", "1")
        assert result.exit_code == 0
        assert "FY2024-2025" in result.output
        assert "2024-03-01 to 2025-02-28" in result.output

    def test_create_rejects_inverted_range(self, cli_runner, temp_db):
        result = invoke(
            cli_runner, temp_db,
            "period", "create", "Bad", "--company", "1",
            "--start", "2025-02-28", "--end", "2024-03-01",
        )
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_list_empty(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "period", "list", "--company", "1")
        assert result.exit_code == 0
        assert "No fiscal periods found." in result.output


class TestAccountCommands:
    def test_create_and_list(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "account", "create", "8100", "Bank charges")
        assert result.exit_code == 0
        assert "Created account 8100 'Bank charges' (ID: 1)" in result.output

        result = invoke(cli_runner, temp_db, "account", "list")
        assert "8100" in result.output
        assert "expense" in result.output

    def test_duplicate_code(self, cli_runner, temp_db):
        invoke(cli_runner, temp_db, "account", "create", "8100", "Bank charges")
        result = invoke(cli_runner, temp_db, "account", "create", "8100", "Other")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_code_out_of_range(self, cli_runner, temp_db):
        result = invoke(cli_runner, temp_db, "account", "create", "0500", "Nowhere")
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestImportCommands:
    def test_import_statement(self, cli_runner, temp_db, quarter, fixtures_dir):
        result = invoke(
            cli_runner, temp_db,
            "import-statement", str(fixtures_dir / "statement.txt"),
            "--company", "1", "--period", str(quarter.id),
        )
        assert result.exit_code == 0
        assert "Imported: 6 transactions" in result.output
        assert "Unmatched lines: 0" in result.output

        result = invoke(cli_runner, temp_db, "transactions", "--company", "1")
        assert "MONTHLY ACCOUNT FEE" in result.output
        assert "##" in result.output

    def test_import_statement_unknown_period(self, cli_runner, temp_db, fixtures_dir):
        result = invoke(
            cli_runner, temp_db,
            "import-statement", str(fixtures_dir / "statement.txt"),
            "--company", "1", "--period", "9",
        )
        assert result.exit_code == 1
        assert "Fiscal period 9 not found" in result.output

    def test_import_statement_other_company_period(self, cli_runner, temp_db, quarter, fixtures_dir):
        result = invoke(
            cli_runner, temp_db,
            "import-statement", str(fixtures_dir / "statement.txt"),
            "--company", "2", "--period", str(quarter.id),
        )
        assert result.exit_code == 1
        assert f"Fiscal period {quarter.id} not found for company 2" in result.output

    def test_import_csv(self, cli_runner, temp_db, quarter, fixtures_dir):
        result = invoke(cli_runner, temp_db, "import-csv", str(fixtures_dir / "transactions.csv"), "--company", "1")
        assert result.exit_code == 0
        assert "Imported: 6 transactions" in result.output
        assert "Skipped: 0 rows" in result.output


class TestVerifyCommand:
    def test_verify_passes_after_csv_import(self, cli_runner, temp_db, quarter, fixtures_dir):
        invoke(cli_runner, temp_db, "import-csv", str(fixtures_dir / "transactions.csv"), "--company", "1")

        result = invoke(
            cli_runner, temp_db,
            "verify", str(fixtures_dir / "statement.txt"),
            "--company", "1", "--period", str(quarter.id),
        )
        assert result.exit_code == 0
        assert "Verification passed" in result.output
        assert "10865.60" in result.output

    def test_verify_fails_on_empty_store(self, cli_runner, temp_db, quarter, fixtures_dir):
        result = invoke(
            cli_runner, temp_db,
            "verify", str(fixtures_dir / "statement.txt"),
            "--company", "1", "--period", str(quarter.id),
        )
        assert result.exit_code == 2
        assert "Verification failed" in result.output
        assert "Missing from store (6)" in result.output

    def test_invalid_tolerance(self, cli_runner, temp_db, quarter, fixtures_dir):
        result = invoke(
            cli_runner, temp_db,
            "verify", str(fixtures_dir / "statement.txt"),
            "--company", "1", "--period", str(quarter.id), "--tolerance", "abc",
        )
        assert result.exit_code == 1
        assert "Invalid tolerance" in result.output


class TestLedgerCommands:
    def test_classify_and_report(self, cli_runner, temp_db, quarter, chart_of_accounts, fixtures_dir):
        invoke(cli_runner, temp_db, "import-csv", str(fixtures_dir / "transactions.csv"), "--company", "1")

        result = invoke(cli_runner, temp_db, "classify", "1", "6000")
        assert result.exit_code == 0
        assert "Classified transaction 1 as 6000" in result.output

        result = invoke(cli_runner, temp_db, "trial-balance", "--company", "1", "--period", str(quarter.id))
        assert result.exit_code == 0
        assert "6000" in result.output
        assert "UNCLASSIFIED" in result.output
        assert "Warning: Trial balance is out of balance by 865.60" in result.output

        result = invoke(cli_runner, temp_db, "balance-sheet", "--company", "1", "--period", str(quarter.id))
        assert result.exit_code == 0
        assert "Net profit:" in result.output
        assert "1500.00" in result.output

    def test_classify_unknown_account(self, cli_runner, temp_db, quarter, fixtures_dir):
        invoke(cli_runner, temp_db, "import-csv", str(fixtures_dir / "transactions.csv"), "--company", "1")

        result = invoke(cli_runner, temp_db, "classify", "1", "7777")
        assert result.exit_code == 1
        assert "Account '7777' not found" in result.output

    def test_trial_balance_empty_period_is_balanced(self, cli_runner, temp_db, quarter):
        result = invoke(cli_runner, temp_db, "trial-balance", "--company", "1", "--period", str(quarter.id))
        assert result.exit_code == 0
        assert "Trial balance is balanced" in result.output


class TestResetCommand:
    def test_reset_requires_confirmation(self, cli_runner, temp_db, quarter, fixtures_dir):
        invoke(cli_runner, temp_db, "import-csv", str(fixtures_dir / "transactions.csv"), "--company", "1")

        result = invoke(
            cli_runner, temp_db,
            "reset-transactions", "--company", "1", "--period", str(quarter.id),
            input="n\n",
        )
        assert result.exit_code == 1
        assert len(temp_db.find_transactions(1, quarter.id)) == 6

    def test_reset_with_yes(self, cli_runner, temp_db, quarter, fixtures_dir):
        invoke(cli_runner, temp_db, "import-csv", str(fixtures_dir / "transactions.csv"), "--company", "1")

        result = invoke(
            cli_runner, temp_db,
            "reset-transactions", "--company", "1", "--period", str(quarter.id), "--yes",
        )
        assert result.exit_code == 0
        assert "Deleted 6 transactions" in result.output
        assert temp_db.find_transactions(1, quarter.id) == []
