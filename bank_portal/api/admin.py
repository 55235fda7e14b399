"""
Back-office endpoints: deposits, the transaction journal, the dashboard and
manual runs of the loan jobs
"""

from fastapi import APIRouter, Depends

from .system import BankingSystem, get_banking_system
from .schemas import DepositRequest
from .responses import success, record_dict


router = APIRouter()


@router.post("/deposit")
async def deposit(
    request: DepositRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Deposit money into an account"""
    result = system.transaction_processor.deposit(
        account_number=request.account_number,
        amount=request.amount,
        description=request.description
    )
    return success({
        "transaction_id": result.transaction.id,
        "account_number": result.account.account_number,
        "account_type": result.account.account_type.value,
        "amount": str(result.transaction.amount),
        "balance": str(result.account.balance),
        "branch_name": result.account.branch_name,
        "date": result.transaction.created_at.isoformat()
    }, "Deposit successful")


@router.get("/transactions")
async def list_transactions(system: BankingSystem = Depends(get_banking_system)):
    """All ledger entries, newest first"""
    views = system.transaction_processor.list_transactions()
    return success([
        record_dict(
            view.transaction,
            currency_code=view.currency_code,
            branch_name=view.branch_name,
            customer_name=view.customer_name
        )
        for view in views
    ])


@router.get("/dashboard")
async def get_dashboard(system: BankingSystem = Depends(get_banking_system)):
    """Portal-wide counts and branch totals"""
    summary = system.reporting_engine.get_dashboard_summary()
    return success(summary.to_dict())


@router.post("/jobs/overdue")
async def run_overdue_check(system: BankingSystem = Depends(get_banking_system)):
    """Flag overdue loan payments now"""
    flagged = system.loan_manager.mark_overdue_payments()
    return success({"flagged": flagged}, f"{flagged} payments marked overdue")


@router.post("/jobs/reminders")
async def run_reminders(system: BankingSystem = Depends(get_banking_system)):
    """Send payment reminders now"""
    reminded = system.loan_manager.remind_upcoming_payments()
    return success({"reminded": reminded}, f"{reminded} reminders sent")
