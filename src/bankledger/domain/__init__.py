"""Domain layer for bankledger.

Services are imported from their modules (``bankledger.domain.ledger``,
``bankledger.domain.statement_import``, ...) so that the database layer can
import entities from here without a cycle.
"""

from bankledger.domain.entities import (
    UNCLASSIFIED_KEY,
    AccountType,
    BankTransaction,
    DiscrepancyReport,
    FiscalPeriod,
    LedgerAccount,
    ParsedTransaction,
    ParsingContext,
    RawLine,
    TransactionKind,
)
from bankledger.domain.errors import (
    ConflictError,
    DomainError,
    MaterializationError,
    NotFoundError,
    ParseError,
    ValidationError,
)

__all__ = [
    "UNCLASSIFIED_KEY",
    "AccountType",
    "BankTransaction",
    "DiscrepancyReport",
    "FiscalPeriod",
    "LedgerAccount",
    "ParsedTransaction",
    "ParsingContext",
    "RawLine",
    "TransactionKind",
    "ConflictError",
    "DomainError",
    "MaterializationError",
    "NotFoundError",
    "ParseError",
    "ValidationError",
]
