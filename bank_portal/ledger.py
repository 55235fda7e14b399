"""
Transaction Ledger Module

Append-only record of every balance-affecting operation. Each entry belongs
to one account and is either a credit or a debit; the two legs of a transfer
share a transaction group id.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional
from enum import Enum
import random
import time
import uuid

from .money import to_amount
from .storage import StorageInterface, StorageRecord
from .logging_config import get_logger


class TransactionType(Enum):
    """Kinds of ledger entries"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"
    LOAN_PAYMENT = "loan payment"


class TransactionDirection(Enum):
    """Whether the entry adds to or takes from the account balance"""
    CREDIT = "credit"
    DEBIT = "debit"


@dataclass
class Transaction(StorageRecord):
    """Ledger entry for one account"""
    account_number: str
    amount: Decimal
    transaction_type: TransactionType
    direction: TransactionDirection
    transaction_group_id: Optional[str] = None
    notes: Optional[str] = None


def generate_group_id() -> str:
    """Group id shared by related entries, e.g. TX-1718000000000-4821"""
    return f"TX-{int(time.time() * 1000)}-{random.randint(0, 99999)}"


class TransactionLedger:
    """
    Writes and queries ledger entries
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "transactions"
        self.logger = get_logger("bank_portal.ledger")

    def record(
        self,
        account_number: str,
        amount: Decimal,
        transaction_type: TransactionType,
        direction: TransactionDirection,
        notes: Optional[str] = None,
        transaction_group_id: Optional[str] = None
    ) -> Transaction:
        """
        Append an entry to the ledger

        Returns:
            Stored Transaction
        """
        now = datetime.now(timezone.utc)
        transaction = Transaction(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            account_number=account_number,
            amount=to_amount(amount),
            transaction_type=transaction_type,
            direction=direction,
            transaction_group_id=transaction_group_id,
            notes=notes
        )
        self.storage.save(self.table_name, transaction.id, transaction.to_dict())
        self.logger.debug(
            f"Ledger entry {transaction.id}: {direction.value} {transaction.amount} "
            f"{transaction_type.value} on {account_number}"
        )
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        data = self.storage.load(self.table_name, transaction_id)
        if data:
            return Transaction.from_dict(data)
        return None

    def list_transactions(self) -> List[Transaction]:
        """All entries, newest first"""
        return self._newest_first(self.storage.load_all(self.table_name))

    def get_account_transactions(self, account_number: str) -> List[Transaction]:
        """Entries of one account, newest first"""
        return self._newest_first(
            self.storage.find(self.table_name, {"account_number": account_number})
        )

    def get_group(self, transaction_group_id: str) -> List[Transaction]:
        """Entries sharing a group id, in the order they were written"""
        return [
            Transaction.from_dict(data)
            for data in self.storage.find(self.table_name, {"transaction_group_id": transaction_group_id})
        ]

    def count(self) -> int:
        return self.storage.count(self.table_name)

    def _newest_first(self, records) -> List[Transaction]:
        transactions = [Transaction.from_dict(data) for data in records]
        # Stable sort keeps write order for entries with equal timestamps
        transactions.reverse()
        transactions.sort(key=lambda t: t.created_at, reverse=True)
        return transactions
