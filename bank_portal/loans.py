"""
Loan Module

Handles loan requests, approval into a loan with a monthly payment schedule,
payment confirmation against a customer account, and the periodic jobs that
flag overdue installments and remind customers of upcoming ones.
"""

from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime, timezone, timedelta
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from enum import Enum
import calendar
import uuid

from .money import ZERO, CENTS, to_amount, require_positive, format_amount
from .storage import StorageInterface, StorageRecord
from .customers import CustomerManager
from .accounts import AccountManager
from .branches import BranchManager
from .ledger import TransactionLedger, Transaction, TransactionType, TransactionDirection
from .notifications import NotificationManager, NotificationType
from .config import get_config
from .errors import (
    InsufficientFundsError, LimitExceededError, NotFoundError, ValidationError
)
from .logging_config import get_logger, log_action


class LoanType(Enum):
    """Loan products"""
    PERSONAL = "personal"
    BUSINESS = "business"
    MORTGAGE = "mortgage"
    CAR = "auto"
    STUDENT = "student"
    OTHER = "other"


class EmploymentStatus(Enum):
    """Applicant employment situation"""
    EMPLOYED = "employed"
    BUSINESS_OWNER = "business-owner"
    SELF_EMPLOYED = "self-employed"
    RETIRED = "retired"
    STUDENT = "student"
    OTHER = "other"


class LoanRequestStatus(Enum):
    """Loan request decision states"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LoanStatus(Enum):
    """Loan lifecycle states"""
    IN_PROGRESS = "IN_PROGRESS"  # Installments being paid on time
    COMPLETED = "COMPLETED"      # Every installment paid
    CANCELLED = "CANCELLED"
    OVERDUE = "OVERDUE"          # At least one unpaid installment past due


@dataclass
class LoanRequest(StorageRecord):
    """Customer application for a loan against one of their accounts"""
    account_number: str
    customer_id: str
    amount: Decimal
    purpose: str
    loan_duration: int  # Requested term in months
    monthly_income: Decimal
    loan_type: LoanType = LoanType.PERSONAL
    employment_status: EmploymentStatus = EmploymentStatus.EMPLOYED
    employer_name: Optional[str] = None
    employer_contact: Optional[str] = None
    employment_duration: Optional[str] = None
    status: LoanRequestStatus = LoanRequestStatus.PENDING
    rejection_reason: Optional[str] = None
    decided_at: Optional[datetime] = None

    @property
    def requested_at(self) -> datetime:
        return self.created_at


@dataclass
class Loan(StorageRecord):
    """Approved loan"""
    loan_request_id: str
    account_number: str
    customer_id: str
    branch_name: Optional[str]
    principal: Decimal
    loan_type: LoanType
    loan_duration_in_months: int
    interest_rate: Decimal
    monthly_payment: Decimal
    total_payable: Decimal
    issued_at: datetime
    due_date: datetime
    status: LoanStatus = LoanStatus.IN_PROGRESS
    approved_by: Optional[str] = None


@dataclass
class Payment(StorageRecord):
    """One scheduled monthly installment of a loan"""
    loan_id: str
    installment_number: int
    amount: Decimal
    due_date: datetime
    is_paid: bool = False
    is_overdue: bool = False
    paid_at: Optional[datetime] = None
    paid_from_account: Optional[str] = None
    reminded_at: Optional[datetime] = None
    remarks: Optional[str] = None


def calculate_monthly_payment(principal: Decimal, annual_rate: Decimal, months: int) -> Decimal:
    """
    Equal monthly installment for an amortizing loan

    Uses P * r * (1 + r)^n / ((1 + r)^n - 1) with r = annual_rate / 12;
    a zero rate splits the principal evenly.

    Args:
        principal: Amount borrowed
        annual_rate: Annual interest rate as a fraction, e.g. 0.07
        months: Number of monthly installments

    Returns:
        Installment rounded to cents
    """
    principal = Decimal(principal)
    annual_rate = Decimal(annual_rate)
    if principal <= ZERO or annual_rate < ZERO or months <= 0:
        raise ValidationError("Invalid loan calculation parameters.")

    monthly_rate = annual_rate / Decimal('12')
    if monthly_rate == ZERO:
        return (principal / Decimal(months)).quantize(CENTS, rounding=ROUND_HALF_UP)

    growth = (Decimal('1') + monthly_rate) ** months
    payment = principal * monthly_rate * growth / (growth - Decimal('1'))
    return payment.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_total_payable(monthly_payment: Decimal, months: int) -> Decimal:
    """Sum of all installments"""
    return to_amount(Decimal(monthly_payment) * months)


def add_months(start: datetime, months: int) -> datetime:
    """Add months to a datetime, clamping to the end of shorter months"""
    month = start.month - 1 + months
    year = start.year + month // 12
    month = month % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


class LoanManager:
    """
    Manages loan requests, loans and their payment schedules
    """

    def __init__(
        self,
        storage: StorageInterface,
        customer_manager: CustomerManager,
        account_manager: AccountManager,
        branch_manager: BranchManager,
        ledger: TransactionLedger,
        notification_manager: NotificationManager
    ):
        self.storage = storage
        self.customer_manager = customer_manager
        self.account_manager = account_manager
        self.branch_manager = branch_manager
        self.ledger = ledger
        self.notification_manager = notification_manager
        self.requests_table = "loan_requests"
        self.loans_table = "loans"
        self.payments_table = "loan_payments"
        self.logger = get_logger("bank_portal.loans")

    # Loan requests

    def request_loan(
        self,
        customer_id: str,
        account_number: str,
        amount: Decimal,
        purpose: str,
        loan_duration: int,
        monthly_income: Decimal,
        loan_type: LoanType = LoanType.PERSONAL,
        employment_status: EmploymentStatus = EmploymentStatus.EMPLOYED,
        employer_name: Optional[str] = None,
        employer_contact: Optional[str] = None,
        employment_duration: Optional[str] = None
    ) -> LoanRequest:
        """
        Submit a loan request against one of the customer's accounts

        The account balance must cover the configured share of the requested
        amount (10% by default).

        Raises:
            ValidationError: Bad amount, duration, income or purpose
            NotFoundError: Customer missing or account not owned by the customer
            LimitExceededError: Balance too low for the requested amount
        """
        amount = require_positive(amount, "Loan amount")
        if loan_duration is None or loan_duration <= 0:
            raise ValidationError("Loan duration must be at least one month")
        monthly_income = to_amount(monthly_income)
        if monthly_income < ZERO:
            raise ValidationError("Monthly income cannot be negative")
        if not purpose or len(purpose) > 100:
            raise ValidationError("Purpose is required and must be at most 100 characters")

        account = self.account_manager.get_customer_account(customer_id, account_number)

        ratio = Decimal(get_config().loan_eligibility_ratio)
        if account.balance < amount * ratio:
            raise LimitExceededError("Insufficient balance to request a loan")

        now = datetime.now(timezone.utc)
        loan_request = LoanRequest(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            account_number=account.account_number,
            customer_id=customer_id,
            amount=amount,
            purpose=purpose,
            loan_duration=loan_duration,
            monthly_income=monthly_income,
            loan_type=loan_type,
            employment_status=employment_status,
            employer_name=employer_name,
            employer_contact=employer_contact,
            employment_duration=employment_duration
        )
        self._save_request(loan_request)

        log_action(
            self.logger, "info", "Loan requested",
            action="request_loan", resource=f"loan_request:{loan_request.id}",
            extra={"account_number": account_number, "amount": str(amount),
                   "loan_type": loan_type.value}
        )
        return loan_request

    def get_loan_request(self, loan_request_id: str) -> Optional[LoanRequest]:
        data = self.storage.load(self.requests_table, loan_request_id)
        if data:
            return LoanRequest.from_dict(data)
        return None

    def list_loan_requests(self, status: Optional[LoanRequestStatus] = None) -> List[LoanRequest]:
        """All loan requests, optionally filtered by status"""
        if status:
            records = self.storage.find(self.requests_table, {"status": status})
        else:
            records = self.storage.load_all(self.requests_table)
        return [LoanRequest.from_dict(data) for data in records]

    def get_customer_loan_requests(self, customer_id: str, account_number: str) -> List[LoanRequest]:
        """
        Loan requests made on a customer's account, newest first

        Raises:
            NotFoundError: Customer or account missing, or no requests
        """
        account = self.account_manager.get_customer_account(customer_id, account_number)
        requests = [
            LoanRequest.from_dict(data)
            for data in self.storage.find(self.requests_table, {"account_number": account.account_number})
        ]
        if not requests:
            raise NotFoundError("No loan requests found for this customer")
        requests.sort(key=lambda r: r.created_at, reverse=True)
        return requests

    def accept_loan_request(
        self,
        loan_request_id: str,
        loan_duration_in_months: Optional[int] = None,
        approved_by: Optional[str] = None
    ) -> Tuple[Loan, List[Payment]]:
        """
        Approve a pending request and issue the loan

        Creates the loan at the configured interest rate, a schedule of
        monthly installments due one month apart starting a month after
        issue, and adds the principal to the branch's total loans.

        Args:
            loan_request_id: Request to approve
            loan_duration_in_months: Approved term; defaults to the requested one
            approved_by: Name or id of the approving employee

        Returns:
            Tuple of (Loan, list of Payment)

        Raises:
            NotFoundError: Request does not exist
            ValidationError: Request not pending or invalid duration
        """
        loan_request = self.get_loan_request(loan_request_id)
        if not loan_request:
            raise NotFoundError("Loan request not found")
        if loan_request.status != LoanRequestStatus.PENDING:
            raise ValidationError(
                "Loan request is not in pending status. it is either accepted or rejected"
            )

        if loan_duration_in_months is None:
            months = loan_request.loan_duration
        else:
            months = loan_duration_in_months
        if months <= 0:
            raise ValidationError("Loan duration must be at least one month")

        account = self.account_manager.require_account(loan_request.account_number)

        interest_rate = Decimal(get_config().loan_interest_rate)
        monthly_payment = calculate_monthly_payment(loan_request.amount, interest_rate, months)
        total_payable = calculate_total_payable(monthly_payment, months)

        now = datetime.now(timezone.utc)
        loan = Loan(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            loan_request_id=loan_request.id,
            account_number=account.account_number,
            customer_id=account.customer_id,
            branch_name=account.branch_name,
            principal=loan_request.amount,
            loan_type=loan_request.loan_type,
            loan_duration_in_months=months,
            interest_rate=interest_rate,
            monthly_payment=monthly_payment,
            total_payable=total_payable,
            issued_at=now,
            due_date=add_months(now, months),
            approved_by=approved_by
        )

        payments = []
        for number in range(1, months + 1):
            payments.append(Payment(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                loan_id=loan.id,
                installment_number=number,
                amount=monthly_payment,
                due_date=add_months(now, number)
            ))

        with self.storage.atomic():
            loan_request.status = LoanRequestStatus.APPROVED
            loan_request.decided_at = now
            loan_request.updated_at = now
            self._save_request(loan_request)

            self._save_loan(loan)
            for payment in payments:
                self._save_payment(payment)

            if loan.branch_name and self.branch_manager.get_branch(loan.branch_name):
                self.branch_manager.adjust_totals(loan.branch_name, loans=loan.principal)

        log_action(
            self.logger, "info", "Loan request accepted",
            action="accept_loan_request", resource=f"loan:{loan.id}",
            extra={
                "loan_request_id": loan_request.id,
                "principal": str(loan.principal),
                "months": months,
                "monthly_payment": str(monthly_payment),
                "total_payable": str(total_payable)
            }
        )
        return loan, payments

    def reject_loan_request(self, loan_request_id: str, reason: Optional[str] = None) -> LoanRequest:
        """
        Reject a pending request

        Raises:
            NotFoundError: Request does not exist
            ValidationError: Request not pending
        """
        loan_request = self.get_loan_request(loan_request_id)
        if not loan_request:
            raise NotFoundError("Loan request not found")
        if loan_request.status != LoanRequestStatus.PENDING:
            raise ValidationError(
                "Loan request is not in pending status. it is either accepted or rejected"
            )

        now = datetime.now(timezone.utc)
        loan_request.status = LoanRequestStatus.REJECTED
        loan_request.rejection_reason = reason
        loan_request.decided_at = now
        loan_request.updated_at = now
        self._save_request(loan_request)

        log_action(
            self.logger, "info", "Loan request rejected",
            action="reject_loan_request", resource=f"loan_request:{loan_request_id}",
            extra={"reason": reason}
        )
        return loan_request

    # Loans

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        data = self.storage.load(self.loans_table, loan_id)
        if data:
            return Loan.from_dict(data)
        return None

    def require_loan(self, loan_id: str) -> Loan:
        loan = self.get_loan(loan_id)
        if not loan:
            raise NotFoundError("Loan not found")
        return loan

    def list_loans(self) -> List[Loan]:
        return [Loan.from_dict(data) for data in self.storage.load_all(self.loans_table)]

    def get_customer_loans(self, customer_id: str) -> List[Loan]:
        self.customer_manager.require_customer(customer_id)
        return [
            Loan.from_dict(data)
            for data in self.storage.find(self.loans_table, {"customer_id": customer_id})
        ]

    # Payments

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        data = self.storage.load(self.payments_table, payment_id)
        if data:
            return Payment.from_dict(data)
        return None

    def get_loan_payments(self, loan_id: str) -> List[Payment]:
        """
        Installments of a loan ordered by due date

        Raises:
            NotFoundError: The loan has no installments
        """
        payments = self._payments_for(loan_id)
        if not payments:
            raise NotFoundError("No payments found for this loan")
        return payments

    def confirm_payment(self, payment_id: str, account_number: str) -> Tuple[Payment, Transaction]:
        """
        Pay an installment from an account

        Debits the account, marks the installment paid, writes a
        `loan payment` ledger entry, books the repayment on the loan's branch,
        notifies the customer and refreshes the loan status.

        Returns:
            Tuple of (paid Payment, debit Transaction)

        Raises:
            NotFoundError: Payment or account does not exist
            ValidationError: Installment already paid or loan cancelled
            InsufficientFundsError: Balance lower than the installment
        """
        payment = self.get_payment(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        if payment.is_paid:
            raise ValidationError("Payment already made")

        loan = self.require_loan(payment.loan_id)
        if loan.status == LoanStatus.CANCELLED:
            raise ValidationError("Loan has been cancelled")

        account = self.account_manager.require_account(account_number)
        if not account.can_transact():
            raise ValidationError(f"Account {account_number} is {account.status.value.lower()}")
        if account.balance < payment.amount:
            raise InsufficientFundsError("Insufficient account balance")

        now = datetime.now(timezone.utc)
        with self.storage.atomic():
            account.balance = to_amount(account.balance - payment.amount)
            account.updated_at = now
            self.account_manager.save_account(account)

            payment.is_paid = True
            payment.paid_at = now
            payment.paid_from_account = account.account_number
            payment.updated_at = now
            self._save_payment(payment)

            transaction = self.ledger.record(
                account_number=account.account_number,
                amount=payment.amount,
                transaction_type=TransactionType.LOAN_PAYMENT,
                direction=TransactionDirection.DEBIT,
                notes=f"Loan payment for loan {loan.id}"
            )

            if loan.branch_name and self.branch_manager.get_branch(loan.branch_name):
                self.branch_manager.adjust_totals(loan.branch_name, loan_repayments=payment.amount)

            self.notification_manager.notify(
                customer_id=account.customer_id,
                notification_type=NotificationType.TRANSACTION,
                message=(f"Loan payment of {format_amount(payment.amount)} from your account "
                         f"{account.account_number} was received."),
                related_account_id=account.account_number,
                related_loan_id=loan.id,
                related_transaction_id=transaction.id
            )

            self._refresh_loan_status(loan)

        log_action(
            self.logger, "info", "Loan payment confirmed",
            action="confirm_payment", resource=f"payment:{payment.id}",
            extra={"loan_id": loan.id, "account_number": account.account_number,
                   "amount": str(payment.amount), "loan_status": loan.status.value}
        )
        return payment, transaction

    # Scheduled jobs

    def mark_overdue_payments(self, now: Optional[datetime] = None) -> int:
        """
        Flag unpaid installments whose due date has passed

        Each newly overdue installment puts its loan in OVERDUE status and
        sends one overdue notice to the borrower.

        Returns:
            Number of installments newly flagged
        """
        now = now or datetime.now(timezone.utc)
        flagged = 0
        loans: Dict[str, Loan] = {}

        for payment in self._unpaid_payments():
            if payment.is_overdue or payment.due_date >= now:
                continue

            loan = loans.get(payment.loan_id) or self.get_loan(payment.loan_id)
            if not loan or loan.status == LoanStatus.CANCELLED:
                continue
            loans[loan.id] = loan

            with self.storage.atomic():
                payment.is_overdue = True
                payment.updated_at = now
                self._save_payment(payment)

                if loan.status != LoanStatus.OVERDUE:
                    loan.status = LoanStatus.OVERDUE
                    loan.updated_at = now
                    self._save_loan(loan)

                self.notification_manager.notify(
                    customer_id=loan.customer_id,
                    notification_type=NotificationType.LOAN_OVERDUE,
                    message=(f"Your loan payment of {format_amount(payment.amount)} due on "
                             f"{payment.due_date.strftime('%a %b %d %Y')} is overdue!"),
                    related_account_id=loan.account_number,
                    related_loan_id=loan.id
                )
            flagged += 1

        log_action(
            self.logger, "info", f"Overdue check flagged {flagged} payments",
            action="mark_overdue_payments", extra={"flagged": flagged}
        )
        return flagged

    def remind_upcoming_payments(self, now: Optional[datetime] = None) -> int:
        """
        Remind borrowers of installments due within the reminder window

        Each installment is reminded at most once.

        Returns:
            Number of reminders sent
        """
        now = now or datetime.now(timezone.utc)
        window_end = now + timedelta(days=get_config().reminder_window_days)
        reminded = 0
        loans: Dict[str, Optional[Loan]] = {}

        for payment in self._unpaid_payments():
            if payment.reminded_at or payment.is_overdue:
                continue
            if not (now <= payment.due_date <= window_end):
                continue

            if payment.loan_id not in loans:
                loans[payment.loan_id] = self.get_loan(payment.loan_id)
            loan = loans[payment.loan_id]
            if not loan or loan.status == LoanStatus.CANCELLED:
                continue

            with self.storage.atomic():
                self.notification_manager.notify(
                    customer_id=loan.customer_id,
                    notification_type=NotificationType.LOAN_REMINDER,
                    message=(f"Reminder: You have a loan payment of {format_amount(payment.amount)} "
                             f"due on {payment.due_date.strftime('%a %b %d %Y')}."),
                    related_account_id=loan.account_number,
                    related_loan_id=loan.id
                )
                payment.reminded_at = now
                payment.updated_at = now
                self._save_payment(payment)
            reminded += 1

        log_action(
            self.logger, "info", f"Reminder run sent {reminded} reminders",
            action="remind_upcoming_payments", extra={"reminded": reminded}
        )
        return reminded

    def count_loans(self) -> int:
        return self.storage.count(self.loans_table)

    def _refresh_loan_status(self, loan: Loan) -> None:
        """Recompute loan status from its installments"""
        payments = self._payments_for(loan.id)
        if all(p.is_paid for p in payments):
            status = LoanStatus.COMPLETED
        elif any(p.is_overdue and not p.is_paid for p in payments):
            status = LoanStatus.OVERDUE
        else:
            status = LoanStatus.IN_PROGRESS

        if status != loan.status:
            loan.status = status
            loan.updated_at = datetime.now(timezone.utc)
            self._save_loan(loan)

    def _payments_for(self, loan_id: str) -> List[Payment]:
        payments = [
            Payment.from_dict(data)
            for data in self.storage.find(self.payments_table, {"loan_id": loan_id})
        ]
        payments.sort(key=lambda p: (p.due_date, p.installment_number))
        return payments

    def _unpaid_payments(self) -> List[Payment]:
        payments = [
            Payment.from_dict(data)
            for data in self.storage.find(self.payments_table, {"is_paid": False})
        ]
        payments.sort(key=lambda p: p.due_date)
        return payments

    def _save_request(self, loan_request: LoanRequest) -> None:
        self.storage.save(self.requests_table, loan_request.id, loan_request.to_dict())

    def _save_loan(self, loan: Loan) -> None:
        self.storage.save(self.loans_table, loan.id, loan.to_dict())

    def _save_payment(self, payment: Payment) -> None:
        self.storage.save(self.payments_table, payment.id, payment.to_dict())
