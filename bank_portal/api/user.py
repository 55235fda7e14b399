"""
Customer-facing endpoints: profile, accounts, statements, money movements,
loans and notifications
"""

from fastapi import APIRouter, Depends, status

from .system import BankingSystem, get_banking_system
from .schemas import (
    WithdrawRequest, TransferRequest, LoanRequestCreate, ConfirmPaymentRequest
)
from .responses import success, record_dict, loan_request_dict
from .loans import loan_dict
from ..errors import NotFoundError


router = APIRouter()


@router.get("/{customer_id}/details")
async def get_customer_details(
    customer_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    """Basic profile of a customer"""
    customer = system.customer_manager.require_customer(customer_id)
    return success({
        "id": customer.id,
        "email": customer.email,
        "full_name": customer.full_name
    })


@router.get("/{customer_id}/accounts")
async def get_customer_accounts(
    customer_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    """Accounts owned by a customer"""
    system.customer_manager.require_customer(customer_id)
    accounts = system.account_manager.get_customer_accounts(customer_id)
    if not accounts:
        raise NotFoundError("No accounts found for this customer")
    return success([record_dict(a) for a in accounts])


@router.get("/{customer_id}/transactions/{account_number}")
async def get_account_transactions(
    customer_id: str,
    account_number: str,
    system: BankingSystem = Depends(get_banking_system)
):
    """Statement of one of the customer's accounts, newest first"""
    transactions = system.transaction_processor.get_account_transactions(customer_id, account_number)
    return success([record_dict(t) for t in transactions])


@router.get("/{customer_id}/loans")
async def get_customer_loans(
    customer_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    loans = system.loan_manager.get_customer_loans(customer_id)
    return success([loan_dict(system, loan) for loan in loans])


@router.get("/{customer_id}/loanRequests/{account_number}")
async def get_customer_loan_requests(
    customer_id: str,
    account_number: str,
    system: BankingSystem = Depends(get_banking_system)
):
    requests = system.loan_manager.get_customer_loan_requests(customer_id, account_number)
    return success([loan_request_dict(r) for r in requests])


@router.post("/withdraw")
async def withdraw(
    request: WithdrawRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Withdraw money from an account"""
    result = system.transaction_processor.withdraw(request.account_number, request.amount)
    return success({
        "transaction_id": result.transaction.id,
        "account_number": result.account.account_number,
        "amount": str(result.transaction.amount),
        "balance": str(result.account.balance),
        "date": result.transaction.created_at.isoformat()
    }, "Withdrawal successful")


@router.post("/transfer")
async def transfer(
    request: TransferRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Transfer money between two accounts"""
    result = system.transaction_processor.transfer(
        from_account_number=request.from_account_number,
        to_account_number=request.to_account_number,
        amount=request.amount,
        notes=request.notes
    )
    return success({
        "transaction_group_id": result.transaction_group_id,
        "from_account_number": result.from_account.account_number,
        "to_account_number": result.to_account.account_number,
        "amount": str(result.amount),
        "from_balance": str(result.from_account.balance),
        "date": result.debit.created_at.isoformat()
    }, "Transfer successful")


@router.post("/loanRequest", status_code=status.HTTP_201_CREATED)
async def request_loan(
    request: LoanRequestCreate,
    system: BankingSystem = Depends(get_banking_system)
):
    """Apply for a loan against one of the customer's accounts"""
    loan_request = system.loan_manager.request_loan(
        customer_id=request.customer_id,
        account_number=request.account_number,
        amount=request.amount,
        purpose=request.purpose,
        loan_duration=request.loan_duration,
        monthly_income=request.monthly_income,
        loan_type=request.loan_type,
        employment_status=request.employment_status,
        employer_name=request.employer_name,
        employer_contact=request.employer_contact,
        employment_duration=request.employment_duration
    )
    return success(loan_request_dict(loan_request), "Loan request submitted successfully")


@router.post("/payment")
async def confirm_payment(
    request: ConfirmPaymentRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Pay a loan installment from an account"""
    payment, transaction = system.loan_manager.confirm_payment(
        request.payment_id, request.account_number
    )
    loan = system.loan_manager.require_loan(payment.loan_id)
    return success({
        "payment": record_dict(payment),
        "transaction_id": transaction.id,
        "loan_status": loan.status.value
    }, "Payment confirmed successfully")


@router.get("/payments/{loan_id}")
async def get_loan_payments(
    loan_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    """Payment schedule of a loan"""
    payments = system.loan_manager.get_loan_payments(loan_id)
    loan = system.loan_manager.get_loan(loan_id)
    customer = system.customer_manager.get_customer(loan.customer_id) if loan else None
    return success([
        record_dict(
            p,
            account_number=loan.account_number if loan else None,
            customer_name=customer.full_name if customer else None
        )
        for p in payments
    ])
