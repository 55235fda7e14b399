"""
Banking system container and FastAPI dependency
"""

from typing import Optional

from ..storage import StorageInterface, create_storage
from ..customers import CustomerManager
from ..branches import BranchManager
from ..departments import DepartmentManager
from ..employees import EmployeeManager
from ..ledger import TransactionLedger
from ..accounts import AccountManager
from ..notifications import NotificationManager
from ..transactions import TransactionProcessor
from ..loans import LoanManager
from ..reporting import ReportingEngine
from ..scheduler import LoanJobScheduler
from ..config import get_config
from ..logging_config import get_logger, log_action


class BankingSystem:
    """Portal components wired over one storage backend"""

    def __init__(self, storage: Optional[StorageInterface] = None):
        self.storage = storage or create_storage(get_config().database_url)
        self.logger = get_logger("bank_portal.system")

        self.customer_manager = CustomerManager(self.storage)
        self.branch_manager = BranchManager(self.storage)
        self.department_manager = DepartmentManager(self.storage)
        self.employee_manager = EmployeeManager(
            self.storage, self.branch_manager, self.department_manager
        )
        self.ledger = TransactionLedger(self.storage)
        self.notification_manager = NotificationManager(self.storage)
        self.account_manager = AccountManager(
            self.storage, self.customer_manager, self.branch_manager, self.ledger
        )
        self.transaction_processor = TransactionProcessor(
            self.storage, self.account_manager, self.branch_manager,
            self.customer_manager, self.ledger, self.notification_manager
        )
        self.loan_manager = LoanManager(
            self.storage, self.customer_manager, self.account_manager,
            self.branch_manager, self.ledger, self.notification_manager
        )
        self.reporting_engine = ReportingEngine(
            self.storage, self.customer_manager, self.branch_manager,
            self.employee_manager, self.account_manager, self.ledger, self.loan_manager
        )
        self.scheduler = LoanJobScheduler(self.loan_manager)

    def delete_customer(self, customer_id: str) -> int:
        """Delete a customer with their accounts and notifications"""
        self.customer_manager.require_customer(customer_id)
        with self.storage.atomic():
            removed = self.account_manager.delete_customer_accounts(customer_id)
            self.notification_manager.delete_customer_notifications(customer_id)
            self.customer_manager.delete_customer(customer_id)

        log_action(
            self.logger, "info", "Customer removed with accounts",
            action="delete_customer", resource=f"customer:{customer_id}",
            extra={"accounts_removed": removed}
        )
        return removed

    def delete_branch(self, branch_name: str) -> None:
        """Delete a branch; its accounts and employees keep no branch"""
        self.branch_manager.require_branch(branch_name)
        with self.storage.atomic():
            accounts = self.account_manager.detach_branch(branch_name)
            employees = self.employee_manager.detach_branch(branch_name)
            self.branch_manager.delete_branch(branch_name)

        log_action(
            self.logger, "info", "Branch removed",
            action="delete_branch", resource=f"branch:{branch_name}",
            extra={"accounts_detached": accounts, "employees_detached": employees}
        )


# Global banking system instance, created on first use
banking_system: Optional[BankingSystem] = None


def get_banking_system() -> BankingSystem:
    global banking_system
    if banking_system is None:
        banking_system = BankingSystem()
    return banking_system
