"""Mapper functions to convert between domain models and SQLAlchemy models.

Numeric columns come back from SQLite as Decimal; the mappers normalize
them to two places so domain comparisons do not depend on the backend.
"""

from decimal import Decimal
from typing import Optional

from bankledger.domain import entities as domain
from bankledger.database.models import (
    Account as ORMAccount,
    BankTransaction as ORMBankTransaction,
    FiscalPeriod as ORMFiscalPeriod,
)

_CENTS = Decimal("0.01")


def _money(value) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(_CENTS)


def bank_transaction_to_domain(orm_transaction: ORMBankTransaction) -> domain.BankTransaction:
    """Convert SQLAlchemy BankTransaction model to domain BankTransaction entity."""
    return domain.BankTransaction(
        id=orm_transaction.id,
        company_id=orm_transaction.company_id,
        fiscal_period_id=orm_transaction.fiscal_period_id,
        transaction_date=orm_transaction.transaction_date,
        details=orm_transaction.details,
        debit_amount=_money(orm_transaction.debit_amount),
        credit_amount=_money(orm_transaction.credit_amount),
        balance=_money(orm_transaction.balance),
        service_fee=orm_transaction.service_fee,
        account_number=orm_transaction.account_number,
        statement_period=orm_transaction.statement_period,
        source_file=orm_transaction.source_file,
        classification_account_id=orm_transaction.classification_account_id,
    )


def bank_transaction_to_orm(transaction: domain.BankTransaction) -> ORMBankTransaction:
    """Build an unsaved SQLAlchemy row from a domain BankTransaction."""
    return ORMBankTransaction(
        company_id=transaction.company_id,
        fiscal_period_id=transaction.fiscal_period_id,
        transaction_date=transaction.transaction_date,
        details=transaction.details,
        debit_amount=transaction.debit_amount,
        credit_amount=transaction.credit_amount,
        balance=transaction.balance,
        service_fee=transaction.service_fee,
        account_number=transaction.account_number,
        statement_period=transaction.statement_period,
        source_file=transaction.source_file,
        classification_account_id=transaction.classification_account_id,
    )


def fiscal_period_to_domain(orm_period: ORMFiscalPeriod) -> domain.FiscalPeriod:
    """Convert SQLAlchemy FiscalPeriod model to domain FiscalPeriod entity."""
    return domain.FiscalPeriod(
        id=orm_period.id,
        company_id=orm_period.company_id,
        name=orm_period.name,
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
        is_closed=orm_period.is_closed,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.LedgerAccount:
    """Convert SQLAlchemy Account model to domain LedgerAccount entity."""
    return domain.LedgerAccount(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
    )
