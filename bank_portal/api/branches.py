"""
Branch and department administration endpoints
"""

from fastapi import APIRouter, Depends, status

from .system import BankingSystem, get_banking_system
from .schemas import CreateBranchRequest, UpdateBranchRequest, CreateDepartmentRequest
from .responses import success, record_dict


router = APIRouter()
department_router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_branch(
    request: CreateBranchRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a branch"""
    branch = system.branch_manager.create_branch(request.branch_name, request.city)
    return success(record_dict(branch), "Branch created successfully")


@router.get("")
async def list_branches(system: BankingSystem = Depends(get_banking_system)):
    """List all branches with their totals"""
    return success([record_dict(b) for b in system.branch_manager.list_branches()])


@router.get("/{branch_name}")
async def get_branch(
    branch_name: str,
    system: BankingSystem = Depends(get_banking_system)
):
    branch = system.branch_manager.require_branch(branch_name)
    return success(record_dict(branch))


@router.put("/{branch_name}")
async def update_branch(
    branch_name: str,
    request: UpdateBranchRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    branch = system.branch_manager.update_branch(branch_name, city=request.city)
    return success(record_dict(branch), "Branch updated successfully")


@router.delete("/{branch_name}")
async def delete_branch(
    branch_name: str,
    system: BankingSystem = Depends(get_banking_system)
):
    system.delete_branch(branch_name)
    return success({"branch_name": branch_name}, "Branch deleted successfully")


@department_router.post("", status_code=status.HTTP_201_CREATED)
async def create_department(
    request: CreateDepartmentRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a department"""
    department = system.department_manager.create_department(
        name=request.name,
        floor_number=request.floor_number,
        building_number=request.building_number,
        description=request.description
    )
    return success(record_dict(department), "Department created successfully")


@department_router.get("")
async def list_departments(system: BankingSystem = Depends(get_banking_system)):
    return success([record_dict(d) for d in system.department_manager.list_departments()])


@department_router.get("/{name}")
async def get_department(
    name: str,
    system: BankingSystem = Depends(get_banking_system)
):
    department = system.department_manager.require_department(name)
    return success(record_dict(department))
