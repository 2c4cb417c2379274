"""Chart-of-accounts domain service."""

from typing import Optional

from bankledger.database.base import Database
from bankledger.domain.entities import LedgerAccount, account_type_for_code
from bankledger.domain.errors import ConflictError, ValidationError


class AccountService:
    """Service for managing ledger accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, code: str, name: str) -> int:
        """Create a new ledger account.

        Args:
            code: Account code; its leading number decides the account type
                (e.g. "1000" asset, "8100" expense, "6100-001" revenue)
            name: Account name

        Returns:
            Account ID

        Raises:
            ValidationError: If the code maps to no account type or the name is blank
            ConflictError: If an account with this code already exists
        """
        code = (code or "").strip()
        name = (name or "").strip()
        if account_type_for_code(code) is None:
            raise ValidationError(
                f"Account code '{code}' is not in a known range (1000-9999)"
            )
        if not name:
            raise ValidationError("Account name is required")

        if self.db.get_account_by_code(code) is not None:
            raise ConflictError(f"Account with code '{code}' already exists")

        return self.db.create_account(code=code, name=name)

    def get_account(self, account_id: int) -> Optional[LedgerAccount]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            LedgerAccount or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_code(self, code: str) -> Optional[LedgerAccount]:
        """Get account by code."""
        return self.db.get_account_by_code(code.strip())

    def list_accounts(self) -> list[LedgerAccount]:
        """List all accounts.

        Returns:
            List of ledger accounts ordered by code
        """
        return self.db.list_accounts()
