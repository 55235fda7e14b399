"""
Transaction Processing Module

Handles the balance-affecting operations: deposits, withdrawals and
transfers. Each operation checks the amount and the account balance, updates
the account(s) and the branch aggregates, appends ledger entries and
notifies the customer(s), all inside one storage transaction.
"""

from decimal import Decimal
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from .money import to_amount, require_positive, format_amount
from .storage import StorageInterface
from .accounts import AccountManager, Account
from .branches import BranchManager
from .customers import CustomerManager
from .ledger import (
    TransactionLedger, Transaction, TransactionType, TransactionDirection, generate_group_id
)
from .notifications import NotificationManager, NotificationType
from .config import get_config
from .errors import (
    InsufficientFundsError, LimitExceededError, NotFoundError, ValidationError
)
from .logging_config import get_logger, log_action


@dataclass
class PostingResult:
    """Outcome of a single-account deposit or withdrawal"""
    account: Account
    transaction: Transaction


@dataclass
class TransferResult:
    """Outcome of a transfer between two accounts"""
    from_account: Account
    to_account: Account
    debit: Transaction
    credit: Transaction
    amount: Decimal

    @property
    def transaction_group_id(self) -> Optional[str]:
        return self.debit.transaction_group_id


@dataclass
class TransactionView:
    """Ledger entry joined with its account, branch and customer"""
    transaction: Transaction
    currency_code: Optional[str]
    branch_name: Optional[str]
    customer_name: Optional[str]


class TransactionProcessor:
    """
    Processes deposits, withdrawals and transfers
    """

    def __init__(
        self,
        storage: StorageInterface,
        account_manager: AccountManager,
        branch_manager: BranchManager,
        customer_manager: CustomerManager,
        ledger: TransactionLedger,
        notification_manager: NotificationManager
    ):
        self.storage = storage
        self.account_manager = account_manager
        self.branch_manager = branch_manager
        self.customer_manager = customer_manager
        self.ledger = ledger
        self.notification_manager = notification_manager
        self.logger = get_logger("bank_portal.transactions")

    def deposit(self, account_number: str, amount: Decimal, description: Optional[str] = None) -> PostingResult:
        """
        Deposit money into an account

        Args:
            account_number: Account to credit
            amount: Amount to deposit (must be positive)
            description: Ledger notes; a default note is written when omitted

        Returns:
            PostingResult with the updated account and the credit entry

        Raises:
            ValidationError: Non-positive amount or inactive account
            NotFoundError: Account or its branch does not exist
            LimitExceededError: Resulting balance above the maximum balance
        """
        if not account_number:
            raise ValidationError("Invalid deposit details")
        amount = require_positive(amount, "Deposit amount")

        account = self.account_manager.require_account(account_number)
        self._require_active(account)

        max_balance = to_amount(get_config().max_account_balance)
        if account.balance + amount > max_balance:
            raise LimitExceededError("Deposit exceeds maximum balance limit")

        if not account.branch_name or not self.branch_manager.get_branch(account.branch_name):
            raise NotFoundError("Branch not found")

        with self.storage.atomic():
            account.balance = to_amount(account.balance + amount)
            account.updated_at = datetime.now(timezone.utc)
            self.account_manager.save_account(account)

            self.branch_manager.adjust_totals(account.branch_name, deposits=amount)

            transaction = self.ledger.record(
                account_number=account.account_number,
                amount=amount,
                transaction_type=TransactionType.DEPOSIT,
                direction=TransactionDirection.CREDIT,
                notes=description or f"Deposit of {format_amount(amount)} to account {account_number}"
            )

            self.notification_manager.notify(
                customer_id=account.customer_id,
                notification_type=NotificationType.TRANSACTION,
                message=f"Deposit of {format_amount(amount)} to your account {account_number} was successful.",
                related_account_id=account_number,
                related_transaction_id=transaction.id
            )

        log_action(
            self.logger, "info", "Deposit posted",
            action="deposit", resource=f"account:{account_number}",
            extra={"amount": str(amount), "new_balance": str(account.balance),
                   "transaction_id": transaction.id}
        )
        return PostingResult(account=account, transaction=transaction)

    def withdraw(self, account_number: str, amount: Decimal) -> PostingResult:
        """
        Withdraw money from an account

        Raises:
            ValidationError: Non-positive amount or inactive account
            NotFoundError: Account does not exist
            InsufficientFundsError: Balance lower than the amount
        """
        amount = require_positive(amount, "Withdrawal amount")

        account = self.account_manager.require_account(account_number)
        self._require_active(account)

        if account.balance < amount:
            raise InsufficientFundsError("Insufficient balance for withdrawal")

        with self.storage.atomic():
            account.balance = to_amount(account.balance - amount)
            account.updated_at = datetime.now(timezone.utc)
            self.account_manager.save_account(account)

            if account.branch_name and self.branch_manager.get_branch(account.branch_name):
                self.branch_manager.adjust_totals(account.branch_name, withdrawals=amount)

            transaction = self.ledger.record(
                account_number=account.account_number,
                amount=amount,
                transaction_type=TransactionType.WITHDRAWAL,
                direction=TransactionDirection.DEBIT,
                notes=f"withdrawal of {format_amount(amount)} from account {account_number}"
            )

            self.notification_manager.notify(
                customer_id=account.customer_id,
                notification_type=NotificationType.TRANSACTION,
                message=f"Withdrawal of {format_amount(amount)} from your account {account_number} was successful.",
                related_account_id=account_number,
                related_transaction_id=transaction.id
            )

        log_action(
            self.logger, "info", "Withdrawal posted",
            action="withdraw", resource=f"account:{account_number}",
            extra={"amount": str(amount), "new_balance": str(account.balance),
                   "transaction_id": transaction.id}
        )
        return PostingResult(account=account, transaction=transaction)

    def transfer(
        self,
        from_account_number: str,
        to_account_number: str,
        amount: Decimal,
        notes: Optional[str] = None
    ) -> TransferResult:
        """
        Move money between two accounts

        Branch aggregates only change when the accounts are held at different
        branches: the source branch books a withdrawal and the destination
        branch a deposit.

        Raises:
            ValidationError: Non-positive amount, same account, inactive account
            NotFoundError: Source or destination account does not exist
            InsufficientFundsError: Source balance lower than the amount
        """
        amount = require_positive(amount, "Transfer amount")
        if from_account_number == to_account_number:
            raise ValidationError("Cannot transfer to the same account")

        from_account = self.account_manager.require_account(from_account_number, "Source account not found")
        if from_account.balance < amount:
            raise InsufficientFundsError("Insufficient balance for transfer")

        to_account = self.account_manager.require_account(to_account_number, "Destination account not found")
        self._require_active(from_account)
        self._require_active(to_account)

        max_balance = to_amount(get_config().max_account_balance)
        if to_account.balance + amount > max_balance:
            raise LimitExceededError("Transfer exceeds destination maximum balance limit")

        group_id = generate_group_id()
        now = datetime.now(timezone.utc)

        with self.storage.atomic():
            from_account.balance = to_amount(from_account.balance - amount)
            from_account.updated_at = now
            to_account.balance = to_amount(to_account.balance + amount)
            to_account.updated_at = now
            self.account_manager.save_account(from_account)
            self.account_manager.save_account(to_account)

            if from_account.branch_name != to_account.branch_name:
                if from_account.branch_name and self.branch_manager.get_branch(from_account.branch_name):
                    self.branch_manager.adjust_totals(from_account.branch_name, withdrawals=amount)
                if to_account.branch_name and self.branch_manager.get_branch(to_account.branch_name):
                    self.branch_manager.adjust_totals(to_account.branch_name, deposits=amount)

            debit = self.ledger.record(
                account_number=from_account_number,
                amount=amount,
                transaction_type=TransactionType.TRANSFER,
                direction=TransactionDirection.DEBIT,
                notes=notes,
                transaction_group_id=group_id
            )
            credit = self.ledger.record(
                account_number=to_account_number,
                amount=amount,
                transaction_type=TransactionType.TRANSFER,
                direction=TransactionDirection.CREDIT,
                notes=notes,
                transaction_group_id=group_id
            )

            self.notification_manager.notify(
                customer_id=from_account.customer_id,
                notification_type=NotificationType.TRANSACTION,
                message=(f"Transfer of {format_amount(amount)} from your account {from_account_number} "
                         f"to account {to_account_number} was successful."),
                related_account_id=from_account_number,
                related_transaction_id=debit.id
            )
            self.notification_manager.notify(
                customer_id=to_account.customer_id,
                notification_type=NotificationType.TRANSACTION,
                message=(f"You received {format_amount(amount)} in your account {to_account_number} "
                         f"from account {from_account_number}."),
                related_account_id=to_account_number,
                related_transaction_id=credit.id
            )

        log_action(
            self.logger, "info", "Transfer posted",
            action="transfer", resource=f"account:{from_account_number}",
            extra={"to_account": to_account_number, "amount": str(amount),
                   "transaction_group_id": group_id}
        )
        return TransferResult(
            from_account=from_account,
            to_account=to_account,
            debit=debit,
            credit=credit,
            amount=amount
        )

    def list_transactions(self) -> List[TransactionView]:
        """All ledger entries, newest first, with account, branch and customer details"""
        accounts = {}
        customers = {}
        views = []
        for transaction in self.ledger.list_transactions():
            number = transaction.account_number
            if number not in accounts:
                accounts[number] = self.account_manager.get_account(number)
            account = accounts[number]

            customer_name = None
            if account:
                if account.customer_id not in customers:
                    customers[account.customer_id] = self.customer_manager.get_customer(account.customer_id)
                customer = customers[account.customer_id]
                customer_name = customer.full_name if customer else None

            views.append(TransactionView(
                transaction=transaction,
                currency_code=account.currency_code if account else None,
                branch_name=account.branch_name if account else None,
                customer_name=customer_name
            ))
        return views

    def get_account_transactions(self, customer_id: str, account_number: str) -> List[Transaction]:
        """
        Ledger entries of a customer's account, newest first

        Raises:
            NotFoundError: Customer missing, account not owned by the customer,
                or no entries yet
        """
        account = self.account_manager.get_customer_account(customer_id, account_number)
        transactions = self.ledger.get_account_transactions(account.account_number)
        if not transactions:
            raise NotFoundError("No transactions found for this account")
        return transactions

    def _require_active(self, account: Account) -> None:
        if not account.can_transact():
            raise ValidationError(f"Account {account.account_number} is {account.status.value.lower()}")
