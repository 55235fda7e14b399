"""
Pydantic schemas for API requests
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from ..accounts import AccountType, AccountStatus
from ..loans import LoanType, EmploymentStatus


# Customer schemas
class CreateCustomerRequest(BaseModel):
    full_name: str
    email: str
    phone: str
    city: str
    sub_city: str
    woreda: str
    house_number: str
    zone: str


class UpdateCustomerRequest(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    sub_city: Optional[str] = None
    woreda: Optional[str] = None
    house_number: Optional[str] = None
    zone: Optional[str] = None


# Branch and department schemas
class CreateBranchRequest(BaseModel):
    branch_name: str
    city: Optional[str] = None


class UpdateBranchRequest(BaseModel):
    city: Optional[str] = None


class CreateDepartmentRequest(BaseModel):
    name: str
    floor_number: str
    building_number: str
    description: Optional[str] = None


# Employee schemas
class CreateEmployeeRequest(BaseModel):
    full_name: str
    email: str
    branch_name: str
    department_name: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    salary: Decimal = Decimal('0')
    supervisor_id: Optional[str] = None


class UpdateEmployeeRequest(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[Decimal] = None
    branch_name: Optional[str] = None
    department_name: Optional[str] = None
    supervisor_id: Optional[str] = None


# Account schemas
class CreateAccountRequest(BaseModel):
    customer_id: str
    account_type: AccountType = Field(..., description="SAVINGS, CHECKING or BUSINESS")
    branch_name: str
    initial_balance: Decimal = Decimal('0')
    currency_code: Optional[str] = None


class UpdateAccountRequest(BaseModel):
    account_type: Optional[AccountType] = None
    status: Optional[AccountStatus] = None
    currency_code: Optional[str] = None


# Money movement schemas
class DepositRequest(BaseModel):
    account_number: str
    amount: Decimal = Field(..., description="Decimal amount")
    description: Optional[str] = None


class WithdrawRequest(BaseModel):
    account_number: str
    amount: Decimal


class TransferRequest(BaseModel):
    from_account_number: str
    to_account_number: str
    amount: Decimal
    notes: Optional[str] = None


# Loan schemas
class LoanRequestCreate(BaseModel):
    customer_id: str
    account_number: str
    amount: Decimal
    purpose: str
    loan_duration: int = Field(..., description="Requested term in months")
    monthly_income: Decimal
    loan_type: LoanType = LoanType.PERSONAL
    employment_status: EmploymentStatus = EmploymentStatus.EMPLOYED
    employer_name: Optional[str] = None
    employer_contact: Optional[str] = None
    employment_duration: Optional[str] = None


class AcceptLoanRequest(BaseModel):
    loan_request_id: str
    loan_duration_in_months: Optional[int] = None
    approved_by: Optional[str] = None


class RejectLoanRequest(BaseModel):
    loan_request_id: str
    reason: Optional[str] = None


class ConfirmPaymentRequest(BaseModel):
    payment_id: str
    account_number: str
