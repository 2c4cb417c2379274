"""Ledger aggregation and double-entry checks."""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from bankledger.database.base import Database
from bankledger.domain.entities import (
    UNCLASSIFIED_KEY,
    AccountTotals,
    AccountType,
    BalanceSheetCheck,
    BankTransaction,
    LedgerAccount,
    LedgerTotals,
    TrialBalance,
)
from bankledger.domain.fiscal_period import FiscalPeriodService

logger = structlog.get_logger(__name__)

DEFAULT_PRECISION = Decimal("0.01")


class LedgerAggregator:
    """Fold classified transactions into per-account totals.

    Transactions without a classification, or classified into an account
    missing from the chart, are collected under ``UNCLASSIFIED``.
    """

    def __init__(self, accounts: Iterable[LedgerAccount], precision: Decimal = DEFAULT_PRECISION):
        self.accounts = {account.id: account for account in accounts}
        self.precision = precision

    def _round(self, value: Decimal) -> Decimal:
        return value.quantize(self.precision)

    def aggregate(
        self,
        transactions: Iterable[BankTransaction],
        account_type: Optional[AccountType] = None,
    ) -> LedgerTotals:
        """Group debit and credit amounts by classification account.

        Args:
            transactions: Bank transactions to fold
            account_type: Keep only accounts of this type (drops UNCLASSIFIED)

        Returns:
            Mapping of account code (or UNCLASSIFIED) to AccountTotals, sorted by key
        """
        sums: dict[str, list] = {}
        labels: dict[str, tuple] = {}

        for txn in transactions:
            account = self.accounts.get(txn.classification_account_id)
            if account is None:
                key, name, kind = UNCLASSIFIED_KEY, "Unclassified", None
            else:
                key, name, kind = account.code, account.name, account.account_type

            if account_type is not None and kind is not account_type:
                continue

            labels.setdefault(key, (name, kind))
            totals = sums.setdefault(key, [Decimal("0"), Decimal("0")])
            if txn.debit_amount is not None:
                totals[0] += txn.debit_amount
            if txn.credit_amount is not None:
                totals[1] += txn.credit_amount

        return {
            key: AccountTotals(
                account_key=key,
                account_name=labels[key][0],
                account_type=labels[key][1],
                debit_total=self._round(sums[key][0]),
                credit_total=self._round(sums[key][1]),
            )
            for key in sorted(sums)
        }

    def trial_balance(self, transactions: Iterable[BankTransaction]) -> TrialBalance:
        """Total every account's debits and credits.

        An imbalance is reported through ``balanced`` and ``warning``; the
        totals are returned either way so the discrepancy stays visible.
        """
        totals = self.aggregate(transactions)
        total_debits = self._round(sum((t.debit_total for t in totals.values()), Decimal("0")))
        total_credits = self._round(sum((t.credit_total for t in totals.values()), Decimal("0")))
        difference = abs(total_debits - total_credits)

        warning = None
        if difference:
            warning = f"Trial balance is out of balance by {difference}"
            logger.warning(
                "trial_balance_unbalanced",
                total_debits=str(total_debits),
                total_credits=str(total_credits),
                difference=str(difference),
            )

        return TrialBalance(
            total_debits=total_debits,
            total_credits=total_credits,
            balanced=not difference,
            difference=difference,
            warning=warning,
            accounts=tuple(totals.values()),
        )

    def balance_sheet(self, transactions: Iterable[BankTransaction]) -> BalanceSheetCheck:
        """Check assets = liabilities + equity + net profit.

        Net profit is revenue less expenses for the same transactions.
        Unclassified amounts are left out of every section.
        """
        section = {account_type: Decimal("0") for account_type in AccountType}
        for totals in self.aggregate(transactions).values():
            if totals.account_type is not None:
                section[totals.account_type] += totals.closing_balance

        assets = self._round(section[AccountType.ASSET])
        liabilities = self._round(section[AccountType.LIABILITY])
        equity = self._round(section[AccountType.EQUITY])
        net_profit = self._round(section[AccountType.REVENUE] - section[AccountType.EXPENSE])
        difference = self._round(assets - (liabilities + equity + net_profit))

        warning = None
        if difference:
            warning = (
                f"Balance sheet does not balance: assets {assets} vs "
                f"liabilities + equity {liabilities + equity + net_profit} "
                f"(difference {abs(difference)})"
            )
            logger.warning("balance_sheet_unbalanced", difference=str(difference))

        return BalanceSheetCheck(
            total_assets=assets,
            total_liabilities=liabilities,
            total_equity=equity,
            net_profit=net_profit,
            balanced=not difference,
            difference=abs(difference),
            warning=warning,
        )


class LedgerService:
    """Service for ledger reports over a company's fiscal period.

    Totals are recomputed from stored transactions on every call.
    """

    def __init__(self, db: Database, precision: Decimal = DEFAULT_PRECISION):
        """Initialize ledger service.

        Args:
            db: Database instance
            precision: Monetary rounding precision
        """
        self.db = db
        self.precision = precision
        self.periods = FiscalPeriodService(db)

    def _load(self, company_id: int, fiscal_period_id: int) -> tuple[LedgerAggregator, list[BankTransaction]]:
        self.periods.get_company_period(company_id, fiscal_period_id)
        aggregator = LedgerAggregator(self.db.list_accounts(), self.precision)
        return aggregator, self.db.find_transactions(company_id, fiscal_period_id)

    def ledger_totals(
        self,
        company_id: int,
        fiscal_period_id: int,
        account_type: Optional[AccountType] = None,
    ) -> LedgerTotals:
        """Return per-account totals for a period."""
        aggregator, transactions = self._load(company_id, fiscal_period_id)
        return aggregator.aggregate(transactions, account_type)

    def trial_balance(self, company_id: int, fiscal_period_id: int) -> TrialBalance:
        """Return the trial balance for a period.

        Raises:
            NotFoundError: If the fiscal period is not one of the company's periods
        """
        aggregator, transactions = self._load(company_id, fiscal_period_id)
        return aggregator.trial_balance(transactions)

    def balance_sheet(self, company_id: int, fiscal_period_id: int) -> BalanceSheetCheck:
        """Return the balance sheet equation check for a period.

        Raises:
            NotFoundError: If the fiscal period is not one of the company's periods
        """
        aggregator, transactions = self._load(company_id, fiscal_period_id)
        return aggregator.balance_sheet(transactions)
