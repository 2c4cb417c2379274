"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or a broken calling contract."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ParseError(DomainError):
    """A claimed statement line could not be turned into transactions."""

    def __init__(self, message: str, line: str | None = None):
        super().__init__(message)
        self.line = line


class MaterializationError(DomainError):
    """A document's transactions could not be persisted as a whole."""


def fiscal_period_not_found(fiscal_period_id: int) -> str:
    """Return message for missing fiscal period."""
    return f"Fiscal period {fiscal_period_id} not found"


def fiscal_period_of_other_company(fiscal_period_id: int, company_id: int) -> str:
    """Return message for a fiscal period owned by a different company."""
    return f"Fiscal period {fiscal_period_id} not found for company {company_id}"


def account_not_found(account: int | str) -> str:
    """Return message for missing ledger account by ID or code."""
    if isinstance(account, int):
        return f"Account {account} not found"
    return f"Account '{account}' not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing bank transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_fiscal_period(name: str, company_id: int) -> str:
    """Return message for duplicate fiscal period names within a company."""
    return f"Fiscal period '{name}' already exists for company {company_id}"


def unparseable_line(line: str, reason: str) -> str:
    """Return message for a statement line that failed to parse."""
    return f"Could not parse line '{line}': {reason}"


def batch_rolled_back(source: str | None, reason: str) -> str:
    """Return message when a document's batch was rolled back."""
    label = source or "document"
    return f"Import of {label} rolled back: {reason}"
