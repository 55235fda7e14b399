"""
Account Management Module

Manages customer accounts held at a branch. An account is identified by a
random 10-digit account number and carries a single Decimal balance that
only the transaction processor and loan payments change after opening.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional
from enum import Enum
import random

from .money import ZERO, to_amount, format_amount
from .storage import StorageInterface, StorageRecord
from .customers import CustomerManager
from .branches import BranchManager
from .ledger import TransactionLedger, TransactionType, TransactionDirection
from .config import get_config
from .errors import LimitExceededError, NotFoundError, ValidationError
from .logging_config import get_logger, log_action


ACCOUNT_NUMBER_LENGTH = 10


class AccountType(Enum):
    """Account products"""
    SAVINGS = "SAVINGS"
    CHECKING = "CHECKING"
    BUSINESS = "BUSINESS"


class AccountStatus(Enum):
    """Account lifecycle states"""
    ACTIVE = "ACTIVE"      # Normal operation
    INACTIVE = "INACTIVE"  # Dormant, no movements allowed
    FROZEN = "FROZEN"      # Temporarily suspended
    CLOSED = "CLOSED"      # Permanently closed


@dataclass
class Account(StorageRecord):
    """Customer account; `id` is the account number"""
    account_number: str
    account_type: AccountType
    customer_id: str
    branch_name: Optional[str]
    balance: Decimal = ZERO
    currency_code: str = "ETB"
    status: AccountStatus = AccountStatus.ACTIVE

    def can_transact(self) -> bool:
        """Check if account can process deposits, withdrawals and transfers"""
        return self.status == AccountStatus.ACTIVE


class AccountManager:
    """
    Manages account lifecycle and balance persistence
    """

    def __init__(
        self,
        storage: StorageInterface,
        customer_manager: CustomerManager,
        branch_manager: BranchManager,
        ledger: TransactionLedger
    ):
        self.storage = storage
        self.customer_manager = customer_manager
        self.branch_manager = branch_manager
        self.ledger = ledger
        self.table_name = "accounts"
        self.logger = get_logger("bank_portal.accounts")

    def open_account(
        self,
        customer_id: str,
        account_type: AccountType,
        branch_name: str,
        initial_balance: Decimal = ZERO,
        currency_code: Optional[str] = None
    ) -> Account:
        """
        Open an account for a customer at a branch

        The opening balance counts toward the branch's total deposits and is
        written to the ledger as a deposit.

        Args:
            customer_id: Account owner
            account_type: Account product
            branch_name: Branch holding the account
            initial_balance: Opening deposit
            currency_code: Currency label (defaults to configured currency)

        Returns:
            Created Account

        Raises:
            NotFoundError: Customer or branch does not exist
            ValidationError: Negative opening balance
            LimitExceededError: Opening balance above the maximum balance
        """
        config = get_config()
        initial_balance = to_amount(initial_balance)
        if initial_balance < ZERO:
            raise ValidationError("Initial balance cannot be negative")
        if initial_balance > to_amount(config.max_account_balance):
            raise LimitExceededError("Initial balance exceeds maximum balance limit")

        self.customer_manager.require_customer(customer_id)
        self.branch_manager.require_branch(branch_name)

        now = datetime.now(timezone.utc)
        account_number = self._generate_account_number()
        account = Account(
            id=account_number,
            created_at=now,
            updated_at=now,
            account_number=account_number,
            account_type=account_type,
            customer_id=customer_id,
            branch_name=branch_name,
            balance=initial_balance,
            currency_code=(currency_code or config.default_currency).upper()
        )

        with self.storage.atomic():
            self.save_account(account)
            if initial_balance > ZERO:
                self.branch_manager.adjust_totals(branch_name, deposits=initial_balance)
                self.ledger.record(
                    account_number=account_number,
                    amount=initial_balance,
                    transaction_type=TransactionType.DEPOSIT,
                    direction=TransactionDirection.CREDIT,
                    notes=f"Opening deposit of {format_amount(initial_balance)} to account {account_number}"
                )

        log_action(
            self.logger, "info", "Account opened",
            action="open_account", resource=f"account:{account_number}",
            extra={
                "customer_id": customer_id,
                "branch": branch_name,
                "account_type": account_type.value,
                "initial_balance": str(initial_balance)
            }
        )
        return account

    def get_account(self, account_number: str) -> Optional[Account]:
        """Get account by number"""
        data = self.storage.load(self.table_name, account_number)
        if data:
            return Account.from_dict(data)
        return None

    def require_account(self, account_number: str, message: str = "Account not found") -> Account:
        """Get account by number or raise NotFoundError with the given message"""
        account = self.get_account(account_number)
        if not account:
            raise NotFoundError(message)
        return account

    def list_accounts(self) -> List[Account]:
        """List all accounts"""
        return [Account.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def get_customer_accounts(self, customer_id: str) -> List[Account]:
        """List the accounts a customer owns"""
        return [
            Account.from_dict(data)
            for data in self.storage.find(self.table_name, {"customer_id": customer_id})
        ]

    def get_customer_account(self, customer_id: str, account_number: str) -> Account:
        """
        Get an account that must belong to the given customer

        Raises:
            NotFoundError: Customer missing or account not owned by the customer
        """
        self.customer_manager.require_customer(customer_id)
        account = self.get_account(account_number)
        if not account or account.customer_id != customer_id:
            raise NotFoundError("Account not found for this customer")
        return account

    def update_account(
        self,
        account_number: str,
        account_type: Optional[AccountType] = None,
        status: Optional[AccountStatus] = None,
        currency_code: Optional[str] = None
    ) -> Account:
        """Update account attributes; the balance is never set directly"""
        account = self.require_account(account_number)
        if account_type is not None:
            account.account_type = account_type
        if status is not None:
            account.status = status
        if currency_code is not None:
            account.currency_code = currency_code.upper()
        account.updated_at = datetime.now(timezone.utc)
        self.save_account(account)

        log_action(
            self.logger, "info", "Account updated",
            action="update_account", resource=f"account:{account_number}",
            extra={"status": account.status.value, "account_type": account.account_type.value}
        )
        return account

    def delete_account(self, account_number: str) -> None:
        """Delete an account"""
        if not self.storage.delete(self.table_name, account_number):
            raise NotFoundError("Account not found")
        log_action(
            self.logger, "info", "Account deleted",
            action="delete_account", resource=f"account:{account_number}"
        )

    def delete_customer_accounts(self, customer_id: str) -> int:
        """Delete every account of a customer; returns how many were removed"""
        removed = 0
        for account in self.get_customer_accounts(customer_id):
            self.storage.delete(self.table_name, account.account_number)
            removed += 1
        return removed

    def detach_branch(self, branch_name: str) -> int:
        """Clear the branch of every account held at it"""
        detached = 0
        for data in self.storage.find(self.table_name, {"branch_name": branch_name}):
            account = Account.from_dict(data)
            account.branch_name = None
            account.updated_at = datetime.now(timezone.utc)
            self.save_account(account)
            detached += 1
        return detached

    def save_account(self, account: Account) -> None:
        """Persist an account"""
        self.storage.save(self.table_name, account.account_number, account.to_dict())

    def count(self) -> int:
        return self.storage.count(self.table_name)

    def _generate_account_number(self) -> str:
        """Generate an unused random 10-digit account number"""
        while True:
            number = "".join(str(random.randint(0, 9)) for _ in range(ACCOUNT_NUMBER_LENGTH))
            if not self.storage.exists(self.table_name, number):
                return number
