"""
Customer administration endpoints
"""

from fastapi import APIRouter, Depends, status

from .system import BankingSystem, get_banking_system
from .schemas import CreateCustomerRequest, UpdateCustomerRequest
from .responses import success, record_dict


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    request: CreateCustomerRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a new customer"""
    customer = system.customer_manager.create_customer(
        full_name=request.full_name,
        email=request.email,
        phone=request.phone,
        city=request.city,
        sub_city=request.sub_city,
        woreda=request.woreda,
        house_number=request.house_number,
        zone=request.zone
    )
    return success(record_dict(customer), "Customer created successfully")


@router.get("")
async def list_customers(system: BankingSystem = Depends(get_banking_system)):
    """List all customers"""
    customers = system.customer_manager.list_customers()
    return success([record_dict(c) for c in customers])


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    """Get customer by ID"""
    customer = system.customer_manager.require_customer(customer_id)
    return success(record_dict(customer))


@router.put("/{customer_id}")
async def update_customer(
    customer_id: str,
    request: UpdateCustomerRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Update customer information"""
    customer = system.customer_manager.update_customer(customer_id, request.model_dump())
    return success(record_dict(customer), "Customer updated successfully")


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    """Delete a customer together with their accounts"""
    removed = system.delete_customer(customer_id)
    return success({"customer_id": customer_id, "accounts_removed": removed},
                   "Customer deleted successfully")
