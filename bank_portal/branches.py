"""
Branch Management Module

Branches are keyed by their unique name and keep running aggregates of the
money that moves through their accounts: deposits, withdrawals, loans issued
and loan repayments received.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional

from .money import ZERO, to_amount
from .storage import StorageInterface, StorageRecord
from .errors import ConflictError, NotFoundError, ValidationError
from .logging_config import get_logger, log_action


@dataclass
class Branch(StorageRecord):
    """Bank branch; `id` is the branch name"""
    branch_name: str
    city: Optional[str] = None
    total_deposits: Decimal = ZERO
    total_withdrawals: Decimal = ZERO
    total_loans: Decimal = ZERO
    total_loan_repayments: Decimal = ZERO


class BranchManager:
    """
    Manages branches and their aggregate counters
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "branches"
        self.logger = get_logger("bank_portal.branches")

    def create_branch(self, branch_name: str, city: Optional[str] = None) -> Branch:
        """
        Create a branch with zeroed aggregates

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the branch already exists
        """
        if not branch_name or not branch_name.strip():
            raise ValidationError("Invalid branch data")
        branch_name = branch_name.strip()

        if self.storage.exists(self.table_name, branch_name):
            raise ConflictError("Branch already exists")

        now = datetime.now(timezone.utc)
        branch = Branch(
            id=branch_name,
            created_at=now,
            updated_at=now,
            branch_name=branch_name,
            city=city
        )
        self._save_branch(branch)

        log_action(
            self.logger, "info", "Branch created",
            action="create_branch", resource=f"branch:{branch_name}"
        )
        return branch

    def get_branch(self, branch_name: str) -> Optional[Branch]:
        """Get branch by name"""
        data = self.storage.load(self.table_name, branch_name)
        if data:
            return Branch.from_dict(data)
        return None

    def require_branch(self, branch_name: str) -> Branch:
        """Get branch by name or raise NotFoundError"""
        branch = self.get_branch(branch_name)
        if not branch:
            raise NotFoundError("Branch not found")
        return branch

    def list_branches(self) -> List[Branch]:
        """List all branches"""
        return [Branch.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def update_branch(self, branch_name: str, city: Optional[str] = None) -> Branch:
        """Update branch details; aggregates only change through money movements"""
        branch = self.require_branch(branch_name)
        if city is not None:
            branch.city = city
        branch.updated_at = datetime.now(timezone.utc)
        self._save_branch(branch)
        return branch

    def delete_branch(self, branch_name: str) -> None:
        """Delete a branch"""
        if not self.storage.delete(self.table_name, branch_name):
            raise NotFoundError("Branch not found")
        log_action(
            self.logger, "info", "Branch deleted",
            action="delete_branch", resource=f"branch:{branch_name}"
        )

    def adjust_totals(
        self,
        branch_name: str,
        deposits: Decimal = ZERO,
        withdrawals: Decimal = ZERO,
        loans: Decimal = ZERO,
        loan_repayments: Decimal = ZERO
    ) -> Branch:
        """
        Add amounts to a branch's aggregate counters

        Returns:
            Updated Branch
        """
        branch = self.require_branch(branch_name)
        branch.total_deposits = to_amount(branch.total_deposits + deposits)
        branch.total_withdrawals = to_amount(branch.total_withdrawals + withdrawals)
        branch.total_loans = to_amount(branch.total_loans + loans)
        branch.total_loan_repayments = to_amount(branch.total_loan_repayments + loan_repayments)
        branch.updated_at = datetime.now(timezone.utc)
        self._save_branch(branch)

        self.logger.debug(
            f"Branch {branch_name} totals: deposits={branch.total_deposits} "
            f"withdrawals={branch.total_withdrawals} loans={branch.total_loans}"
        )
        return branch

    def count(self) -> int:
        return self.storage.count(self.table_name)

    def _save_branch(self, branch: Branch) -> None:
        self.storage.save(self.table_name, branch.id, branch.to_dict())
