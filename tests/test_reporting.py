"""
Tests for the dashboard summary
"""

from decimal import Decimal

from bank_portal.storage import InMemoryStorage
from bank_portal.api.system import BankingSystem
from bank_portal.accounts import AccountType


class TestDashboardSummary:

    def setup_method(self):
        self.system = BankingSystem(InMemoryStorage())
        self.system.branch_manager.create_branch("Bole")
        self.system.branch_manager.create_branch("Piassa")
        self.system.department_manager.create_department("Loans", "1", "A")
        self.system.employee_manager.create_employee(
            "Sara Tesfaye", "sara@example.com", "Bole", "Loans"
        )
        self.customer = self.system.customer_manager.create_customer(
            full_name="Hana Worku", email="hana@example.com", phone="0911",
            city="Addis Ababa", sub_city="Bole", woreda="05", house_number="7", zone="2"
        )

    def test_empty_portal(self):
        summary = BankingSystem(InMemoryStorage()).reporting_engine.get_dashboard_summary()

        assert summary.total_customers == 0
        assert summary.total_accounts == 0
        assert summary.total_deposits == Decimal("0.00")

    def test_summary_counts_and_totals(self):
        first = self.system.account_manager.open_account(
            self.customer.id, AccountType.SAVINGS, "Bole", initial_balance=Decimal("5000")
        )
        second = self.system.account_manager.open_account(
            self.customer.id, AccountType.CHECKING, "Piassa", initial_balance=Decimal("1000")
        )
        self.system.transaction_processor.withdraw(first.account_number, Decimal("250"))
        self.system.transaction_processor.transfer(
            first.account_number, second.account_number, Decimal("100")
        )
        loan_request = self.system.loan_manager.request_loan(
            self.customer.id, first.account_number, Decimal("3000"), "Car repair",
            6, Decimal("9000")
        )
        self.system.loan_manager.request_loan(
            self.customer.id, first.account_number, Decimal("1000"), "School fees",
            3, Decimal("9000")
        )
        self.system.loan_manager.accept_loan_request(loan_request.id, 6)

        summary = self.system.reporting_engine.get_dashboard_summary()

        assert summary.total_customers == 1
        assert summary.total_accounts == 2
        assert summary.total_transactions == 5  # 2 opening deposits, 1 withdrawal, 2 transfer legs
        assert summary.total_branches == 2
        assert summary.total_employees == 1
        assert summary.total_loans == 1
        assert summary.pending_loan_requests == 1
        assert summary.total_deposits == Decimal("6100.00")
        assert summary.total_withdrawals == Decimal("350.00")
        assert summary.total_loan_amount == Decimal("3000.00")

        data = summary.to_dict()
        assert data["total_deposits"] == "6100.00"
        assert "generated_at" in data
