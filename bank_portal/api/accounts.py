"""
Account administration endpoints
"""

from fastapi import APIRouter, Depends, status

from .system import BankingSystem, get_banking_system
from .schemas import CreateAccountRequest, UpdateAccountRequest
from .responses import success, record_dict


router = APIRouter()


def account_dict(system: BankingSystem, account):
    """Account with its holder's name and phone"""
    customer = system.customer_manager.get_customer(account.customer_id)
    return record_dict(
        account,
        customer_name=customer.full_name if customer else None,
        customer_phone=customer.phone if customer else None
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    request: CreateAccountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Open an account for a customer"""
    account = system.account_manager.open_account(
        customer_id=request.customer_id,
        account_type=request.account_type,
        branch_name=request.branch_name,
        initial_balance=request.initial_balance,
        currency_code=request.currency_code
    )
    return success(account_dict(system, account), "Account created successfully")


@router.get("")
async def list_accounts(system: BankingSystem = Depends(get_banking_system)):
    """List all accounts with holder details"""
    accounts = system.account_manager.list_accounts()
    return success([account_dict(system, a) for a in accounts])


@router.get("/{account_number}")
async def get_account(
    account_number: str,
    system: BankingSystem = Depends(get_banking_system)
):
    account = system.account_manager.require_account(account_number)
    return success(account_dict(system, account))


@router.put("/{account_number}")
async def update_account(
    account_number: str,
    request: UpdateAccountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Update account type, status or currency"""
    account = system.account_manager.update_account(
        account_number,
        account_type=request.account_type,
        status=request.status,
        currency_code=request.currency_code
    )
    return success(account_dict(system, account), "Account updated successfully")


@router.delete("/{account_number}")
async def delete_account(
    account_number: str,
    system: BankingSystem = Depends(get_banking_system)
):
    system.account_manager.delete_account(account_number)
    return success({"account_number": account_number}, "Account deleted successfully")
