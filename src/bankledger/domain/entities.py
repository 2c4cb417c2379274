"""Domain model entities for bankledger.

These are pure data classes representing business concepts, independent of
database schema. Parsed statement records, persisted bank transactions and
the result objects of reconciliation and ledger aggregation all live here so
that services and the repository layer share one vocabulary.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from bankledger.domain.errors import ValidationError

UNCLASSIFIED_KEY = "UNCLASSIFIED"


@dataclass(frozen=True)
class RawLine:
    """Single normalized line of extracted statement text."""

    text: str
    page_number: int
    line_number: int
    is_header_footer: bool = False


@dataclass(frozen=True)
class ParsingContext:
    """Per-document metadata shared by every parse call for that document."""

    statement_date: date
    account_number: Optional[str] = None
    statement_period: Optional[str] = None
    source_file: Optional[str] = None

    def __post_init__(self):
        if self.statement_date is None:
            raise ValidationError("Parsing context requires a statement date")


class TransactionKind(Enum):
    """Direction of a parsed statement transaction."""

    CREDIT = "credit"
    DEBIT = "debit"
    FEE = "fee"

    @property
    def is_outflow(self) -> bool:
        return self is not TransactionKind.CREDIT


@dataclass(frozen=True)
class ParsedTransaction:
    """Immutable transaction record produced by a line parser.

    ``amount`` is the unsigned magnitude; the direction is carried by
    ``kind``. Use ``signed_amount`` for arithmetic on account movement.
    """

    date: date
    description: str
    amount: Decimal
    kind: TransactionKind
    is_service_fee: bool
    source_line: str
    context: ParsingContext

    def __post_init__(self):
        if self.date is None:
            raise ValidationError("Parsed transaction requires a date")
        if not isinstance(self.kind, TransactionKind):
            raise ValidationError(f"Invalid transaction kind: {self.kind!r}")
        if not isinstance(self.amount, Decimal):
            raise ValidationError("Parsed transaction amount must be a Decimal")
        if self.amount <= 0:
            raise ValidationError(
                f"Parsed transaction amount must be positive, got {self.amount}"
            )
        if not self.description or not self.description.strip():
            raise ValidationError("Parsed transaction requires a description")
        if self.source_line is None:
            raise ValidationError("Parsed transaction requires its source line")
        if self.context is None:
            raise ValidationError("Parsed transaction requires a parsing context")
        if self.is_service_fee != (self.kind is TransactionKind.FEE):
            raise ValidationError(
                "Only FEE transactions may be flagged as service fees"
            )

    @classmethod
    def create(
        cls,
        *,
        date: date,
        description: str,
        amount: Decimal,
        kind: TransactionKind,
        source_line: str,
        context: ParsingContext,
    ) -> "ParsedTransaction":
        """Build a parsed transaction, deriving the service-fee flag from kind."""
        return cls(
            date=date,
            description=description.strip() if description else description,
            amount=amount,
            kind=kind,
            is_service_fee=kind is TransactionKind.FEE,
            source_line=source_line,
            context=context,
        )

    @property
    def signed_amount(self) -> Decimal:
        return -self.amount if self.kind.is_outflow else self.amount


@dataclass(frozen=True)
class BankTransaction:
    """Persisted bank transaction entity.

    Exactly one of ``debit_amount`` and ``credit_amount`` is populated.
    ``id`` is None until the row has been saved.
    """

    id: Optional[int]
    company_id: int
    fiscal_period_id: Optional[int]
    transaction_date: date
    details: str
    debit_amount: Optional[Decimal] = None
    credit_amount: Optional[Decimal] = None
    balance: Optional[Decimal] = None
    service_fee: bool = False
    account_number: Optional[str] = None
    statement_period: Optional[str] = None
    source_file: Optional[str] = None
    classification_account_id: Optional[int] = None

    @property
    def signed_amount(self) -> Decimal:
        if self.credit_amount is not None:
            return self.credit_amount
        return -(self.debit_amount or Decimal("0"))


def validate_bank_transaction(transaction: BankTransaction) -> list[str]:
    """Return the list of rule violations for a bank transaction row."""
    errors = []
    if transaction.company_id is None:
        errors.append("Company ID is required")
    if transaction.fiscal_period_id is None:
        errors.append("Fiscal period ID is required")
    if transaction.transaction_date is None:
        errors.append("Transaction date is required")
    if not transaction.details or not transaction.details.strip():
        errors.append("Transaction details are required")

    debit = transaction.debit_amount
    credit = transaction.credit_amount
    if debit is None and credit is None:
        errors.append("Either debit or credit amount must be specified")
    elif debit is not None and credit is not None:
        errors.append("Transaction cannot have both debit and credit amounts")
    if debit is not None and debit <= 0:
        errors.append("Debit amount must be positive")
    if credit is not None and credit <= 0:
        errors.append("Credit amount must be positive")
    return errors


@dataclass(frozen=True)
class FiscalPeriod:
    """Company-defined accounting interval."""

    id: int
    company_id: int
    name: str
    start_date: date
    end_date: date
    is_closed: bool = False

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class AccountType(Enum):
    """Chart-of-accounts section derived from the account code range."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        return self in (AccountType.ASSET, AccountType.EXPENSE)


ACCOUNT_CODE_RANGES = (
    (1000, 2999, AccountType.ASSET),
    (3000, 4999, AccountType.LIABILITY),
    (5000, 5999, AccountType.EQUITY),
    (6000, 7999, AccountType.REVENUE),
    (8000, 9999, AccountType.EXPENSE),
)


def account_type_for_code(code: Optional[str]) -> Optional[AccountType]:
    """Map an account code such as '8100' or '6100-001' to its type."""
    if not code or len(code) < 4:
        return None
    try:
        number = int(code.split("-")[0])
    except ValueError:
        return None
    for low, high, account_type in ACCOUNT_CODE_RANGES:
        if low <= number <= high:
            return account_type
    return None


@dataclass(frozen=True)
class LedgerAccount:
    """Chart-of-accounts entry that transactions are classified into."""

    id: int
    code: str
    name: str

    @property
    def account_type(self) -> Optional[AccountType]:
        return account_type_for_code(self.code)


@dataclass(frozen=True)
class DiscrepancyReport:
    """Outcome of reconciling statement-derived and stored transactions."""

    is_valid: bool
    total_debits: Decimal
    total_credits: Decimal
    final_balance: Decimal
    discrepancies: tuple[str, ...] = ()
    missing_transactions: tuple[BankTransaction, ...] = ()
    extra_transactions: tuple[BankTransaction, ...] = ()
    differences: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class AccountTotals:
    """Debit and credit totals posted to one ledger account."""

    account_key: str
    account_name: str
    account_type: Optional[AccountType]
    debit_total: Decimal = Decimal("0")
    credit_total: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.debit_total - self.credit_total

    @property
    def closing_balance(self) -> Decimal:
        """Balance expressed on the account's normal side."""
        if self.account_type is None or self.account_type.is_debit_normal:
            return self.net
        return -self.net


LedgerTotals = dict[str, AccountTotals]


@dataclass(frozen=True)
class TrialBalance:
    """Trial balance totals with an imbalance warning instead of an error."""

    total_debits: Decimal
    total_credits: Decimal
    balanced: bool
    difference: Decimal
    warning: Optional[str] = None
    accounts: tuple[AccountTotals, ...] = ()


@dataclass(frozen=True)
class BalanceSheetCheck:
    """Accounting equation check: assets = liabilities + equity + profit."""

    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    net_profit: Decimal
    balanced: bool
    difference: Decimal
    warning: Optional[str] = None
