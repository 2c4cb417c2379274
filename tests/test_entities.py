"""Tests for domain entities."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

from bankledger.domain.entities import (
    AccountTotals,
    AccountType,
    BankTransaction,
    FiscalPeriod,
    ParsedTransaction,
    ParsingContext,
    TransactionKind,
    validate_bank_transaction,
)
from bankledger.domain.errors import ValidationError


class TestParsingContext:
    def test_requires_statement_date(self):
        with pytest.raises(ValidationError):
            ParsingContext(statement_date=None)


class TestParsedTransaction:
    """Tests for ParsedTransaction entity."""

    def test_create_derives_service_fee(self, context):
        """Only FEE transactions are service fees."""
        fee = ParsedTransaction.create(
            date=date(2025, 2, 20),
            description=" MONTHLY FEE ",
            amount=Decimal("55.00"),
            kind=TransactionKind.FEE,
            source_line="20 Feb MONTHLY FEE 55.00-",
            context=context,
        )
        credit = ParsedTransaction.create(
            date=date(2025, 2, 20),
            description="DEPOSIT",
            amount=Decimal("10.00"),
            kind=TransactionKind.CREDIT,
            source_line="20 Feb DEPOSIT 10.00",
            context=context,
        )

        assert fee.is_service_fee is True
        assert fee.description == "MONTHLY FEE"
        assert fee.signed_amount == Decimal("-55.00")
        assert credit.is_service_fee is False
        assert credit.signed_amount == Decimal("10.00")

    def test_immutability(self, context):
        txn = ParsedTransaction.create(
            date=date(2025, 2, 20),
            description="DEPOSIT",
            amount=Decimal("10.00"),
            kind=TransactionKind.CREDIT,
            source_line="DEPOSIT 10.00",
            context=context,
        )
        with pytest.raises(FrozenInstanceError):
            txn.amount = Decimal("1.00")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"amount": Decimal("0")},
            {"amount": Decimal("-5.00")},
            {"amount": 5.0},
            {"description": "   "},
            {"date": None},
            {"kind": "credit"},
            {"is_service_fee": True},
            {"context": None},
        ],
    )
    def test_invalid_values_rejected(self, context, overrides):
        values = dict(
            date=date(2025, 2, 20),
            description="DEPOSIT",
            amount=Decimal("10.00"),
            kind=TransactionKind.CREDIT,
            is_service_fee=False,
            source_line="DEPOSIT 10.00",
            context=context,
        )
        values.update(overrides)
        with pytest.raises(ValidationError):
            ParsedTransaction(**values)


class TestBankTransaction:
    """Tests for BankTransaction validation."""

    def make(self, **overrides):
        values = dict(
            id=None,
            company_id=1,
            fiscal_period_id=1,
            transaction_date=date(2025, 1, 5),
            details="RENT",
            debit_amount=Decimal("500.00"),
        )
        values.update(overrides)
        return BankTransaction(**values)

    def test_valid_row(self):
        txn = self.make()
        assert validate_bank_transaction(txn) == []
        assert txn.signed_amount == Decimal("-500.00")

    def test_credit_signed_amount(self):
        txn = self.make(debit_amount=None, credit_amount=Decimal("20.00"))
        assert txn.signed_amount == Decimal("20.00")

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"credit_amount": Decimal("1.00")}, "Transaction cannot have both debit and credit amounts"),
            ({"debit_amount": None}, "Either debit or credit amount must be specified"),
            ({"debit_amount": Decimal("-1.00")}, "Debit amount must be positive"),
            ({"details": " "}, "Transaction details are required"),
            ({"fiscal_period_id": None}, "Fiscal period ID is required"),
        ],
    )
    def test_rule_violations(self, overrides, message):
        assert message in validate_bank_transaction(self.make(**overrides))


class TestFiscalPeriod:
    def test_contains_is_inclusive(self):
        period = FiscalPeriod(id=1, company_id=1, name="Q1", start_date=date(2025, 1, 1), end_date=date(2025, 3, 31))
        assert period.contains(date(2025, 1, 1))
        assert period.contains(date(2025, 3, 31))
        assert not period.contains(date(2025, 4, 1))


class TestAccountTotals:
    def test_closing_balance_follows_normal_side(self):
        expense = AccountTotals("8100", "Bank charges", AccountType.EXPENSE, Decimal("60"), Decimal("10"))
        revenue = AccountTotals("6000", "Sales", AccountType.REVENUE, Decimal("10"), Decimal("60"))

        assert expense.closing_balance == Decimal("50")
        assert revenue.closing_balance == Decimal("50")
        assert revenue.net == Decimal("-50")
