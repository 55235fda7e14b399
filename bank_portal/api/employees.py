"""
Employee administration endpoints
"""

from fastapi import APIRouter, Depends, status

from .system import BankingSystem, get_banking_system
from .schemas import CreateEmployeeRequest, UpdateEmployeeRequest
from .responses import success, record_dict


router = APIRouter()


def _employee_dict(system: BankingSystem, employee):
    supervisor = None
    if employee.supervisor_id:
        found = system.employee_manager.get_employee(employee.supervisor_id)
        if found:
            supervisor = {"id": found.id, "full_name": found.full_name}
    return record_dict(employee, supervisor=supervisor)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_employee(
    request: CreateEmployeeRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Hire an employee"""
    employee = system.employee_manager.create_employee(
        full_name=request.full_name,
        email=request.email,
        branch_name=request.branch_name,
        department_name=request.department_name,
        phone_number=request.phone_number,
        address=request.address,
        position=request.position,
        salary=request.salary,
        supervisor_id=request.supervisor_id
    )
    return success(_employee_dict(system, employee), "Employee created successfully")


@router.get("")
async def list_employees(system: BankingSystem = Depends(get_banking_system)):
    employees = system.employee_manager.list_employees()
    return success([_employee_dict(system, e) for e in employees])


@router.get("/{employee_id}")
async def get_employee(
    employee_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    employee = system.employee_manager.require_employee(employee_id)
    return success(_employee_dict(system, employee))


@router.put("/{employee_id}")
async def update_employee(
    employee_id: str,
    request: UpdateEmployeeRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Update an employee"""
    employee = system.employee_manager.update_employee(employee_id, request.model_dump())
    return success(_employee_dict(system, employee), "Employee updated successfully")


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    system.employee_manager.delete_employee(employee_id)
    return success({"employee_id": employee_id}, "Employee deleted successfully")
