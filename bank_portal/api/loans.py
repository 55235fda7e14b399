"""
Loan administration endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends

from .system import BankingSystem, get_banking_system
from .schemas import AcceptLoanRequest, RejectLoanRequest
from .responses import success, record_dict, loan_request_dict
from ..loans import LoanRequestStatus


router = APIRouter()


def loan_dict(system: BankingSystem, loan):
    """Loan with the borrower's name"""
    customer = system.customer_manager.get_customer(loan.customer_id)
    return record_dict(loan, customer_name=customer.full_name if customer else None)


@router.get("")
async def list_loans(system: BankingSystem = Depends(get_banking_system)):
    """List all loans"""
    return success([loan_dict(system, loan) for loan in system.loan_manager.list_loans()])


@router.get("/loanRequests")
async def list_loan_requests(
    status: Optional[LoanRequestStatus] = None,
    system: BankingSystem = Depends(get_banking_system)
):
    """List loan requests, optionally by status"""
    requests = system.loan_manager.list_loan_requests(status)
    return success([loan_request_dict(r) for r in requests])


@router.put("/loanRequests/accept")
async def accept_loan_request(
    request: AcceptLoanRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Approve a pending loan request and issue the loan"""
    loan, payments = system.loan_manager.accept_loan_request(
        request.loan_request_id,
        loan_duration_in_months=request.loan_duration_in_months,
        approved_by=request.approved_by
    )
    return success({
        "loan": loan_dict(system, loan),
        "payments": [record_dict(p) for p in payments]
    }, "Loan request accepted successfully")


@router.put("/loanRequests/reject")
async def reject_loan_request(
    request: RejectLoanRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    loan_request = system.loan_manager.reject_loan_request(
        request.loan_request_id, reason=request.reason
    )
    return success(loan_request_dict(loan_request), "Loan request rejected successfully")


@router.get("/{loan_id}")
async def get_loan(
    loan_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    loan = system.loan_manager.require_loan(loan_id)
    return success(loan_dict(system, loan))
