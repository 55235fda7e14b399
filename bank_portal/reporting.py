"""
Reporting Module

Back-office dashboard figures: record counts across the portal and the
deposit, withdrawal and loan totals aggregated over all branches.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict

from .money import ZERO
from .storage import StorageInterface
from .customers import CustomerManager
from .branches import BranchManager
from .employees import EmployeeManager
from .accounts import AccountManager
from .ledger import TransactionLedger
from .loans import LoanManager, LoanRequestStatus
from .logging_config import get_logger


@dataclass
class DashboardSummary:
    """Snapshot of portal-wide figures"""
    total_customers: int
    total_accounts: int
    total_transactions: int
    total_branches: int
    total_employees: int
    total_loans: int
    pending_loan_requests: int
    total_deposits: Decimal = ZERO
    total_withdrawals: Decimal = ZERO
    total_loan_amount: Decimal = ZERO
    total_loan_repayments: Decimal = ZERO
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_customers": self.total_customers,
            "total_accounts": self.total_accounts,
            "total_transactions": self.total_transactions,
            "total_branches": self.total_branches,
            "total_employees": self.total_employees,
            "total_loans": self.total_loans,
            "pending_loan_requests": self.pending_loan_requests,
            "total_deposits": str(self.total_deposits),
            "total_withdrawals": str(self.total_withdrawals),
            "total_loan_amount": str(self.total_loan_amount),
            "total_loan_repayments": str(self.total_loan_repayments),
            "generated_at": self.generated_at.isoformat()
        }


class ReportingEngine:
    """
    Builds dashboard figures from the managers
    """

    def __init__(
        self,
        storage: StorageInterface,
        customer_manager: CustomerManager,
        branch_manager: BranchManager,
        employee_manager: EmployeeManager,
        account_manager: AccountManager,
        ledger: TransactionLedger,
        loan_manager: LoanManager
    ):
        self.storage = storage
        self.customer_manager = customer_manager
        self.branch_manager = branch_manager
        self.employee_manager = employee_manager
        self.account_manager = account_manager
        self.ledger = ledger
        self.loan_manager = loan_manager
        self.logger = get_logger("bank_portal.reporting")

    def get_dashboard_summary(self) -> DashboardSummary:
        """Counts of every record kind plus branch aggregate sums"""
        branches = self.branch_manager.list_branches()

        summary = DashboardSummary(
            total_customers=self.customer_manager.count(),
            total_accounts=self.account_manager.count(),
            total_transactions=self.ledger.count(),
            total_branches=len(branches),
            total_employees=self.employee_manager.count(),
            total_loans=self.loan_manager.count_loans(),
            pending_loan_requests=len(
                self.loan_manager.list_loan_requests(LoanRequestStatus.PENDING)
            ),
            total_deposits=sum((b.total_deposits for b in branches), ZERO),
            total_withdrawals=sum((b.total_withdrawals for b in branches), ZERO),
            total_loan_amount=sum((b.total_loans for b in branches), ZERO),
            total_loan_repayments=sum((b.total_loan_repayments for b in branches), ZERO)
        )

        self.logger.debug(
            f"Dashboard summary: {summary.total_accounts} accounts, "
            f"{summary.total_transactions} transactions"
        )
        return summary
