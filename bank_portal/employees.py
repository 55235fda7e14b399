"""
Employee Management Module

Employees work at a branch, belong to a department and may report to a
supervisor who is another employee.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import uuid
import re

from .money import ZERO, to_amount
from .storage import StorageInterface, StorageRecord
from .branches import BranchManager
from .departments import DepartmentManager
from .customers import EMAIL_PATTERN
from .errors import ConflictError, NotFoundError, ValidationError
from .logging_config import get_logger, log_action


@dataclass
class Employee(StorageRecord):
    """Bank employee"""
    full_name: str
    email: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None  # e.g. Manager, Teller, Customer Service
    salary: Decimal = ZERO  # Monthly salary
    branch_name: Optional[str] = None
    department_name: Optional[str] = None
    supervisor_id: Optional[str] = None


class EmployeeManager:
    """
    Manages employees and resolves their branch, department and supervisor
    """

    def __init__(
        self,
        storage: StorageInterface,
        branch_manager: BranchManager,
        department_manager: DepartmentManager
    ):
        self.storage = storage
        self.branch_manager = branch_manager
        self.department_manager = department_manager
        self.table_name = "employees"
        self.logger = get_logger("bank_portal.employees")

    def create_employee(
        self,
        full_name: str,
        email: str,
        branch_name: str,
        department_name: str,
        phone_number: Optional[str] = None,
        address: Optional[str] = None,
        position: Optional[str] = None,
        salary: Decimal = ZERO,
        supervisor_id: Optional[str] = None
    ) -> Employee:
        """
        Hire an employee

        Raises:
            ValidationError: Missing name/email or invalid salary
            ConflictError: Email already used by another employee
            NotFoundError: Branch, department or supervisor does not exist
        """
        if not full_name or not email:
            raise ValidationError("Invalid employee data")
        if not re.match(EMAIL_PATTERN, email):
            raise ValidationError("Invalid email format")
        if self.get_employee_by_email(email):
            raise ConflictError("Employee with this email already exists")

        salary = to_amount(salary)
        if salary < ZERO:
            raise ValidationError("Salary cannot be negative")

        self.branch_manager.require_branch(branch_name)
        self.department_manager.require_department(department_name)
        if supervisor_id:
            self._require_supervisor(supervisor_id)

        now = datetime.now(timezone.utc)
        employee = Employee(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            full_name=full_name,
            email=email,
            phone_number=phone_number,
            address=address,
            position=position,
            salary=salary,
            branch_name=branch_name,
            department_name=department_name,
            supervisor_id=supervisor_id
        )
        self._save_employee(employee)

        log_action(
            self.logger, "info", "Employee created",
            action="create_employee", resource=f"employee:{employee.id}",
            extra={"branch": branch_name, "department": department_name}
        )
        return employee

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        data = self.storage.load(self.table_name, employee_id)
        if data:
            return Employee.from_dict(data)
        return None

    def require_employee(self, employee_id: str) -> Employee:
        employee = self.get_employee(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get_employee_by_email(self, email: str) -> Optional[Employee]:
        wanted = email.strip().lower()
        for data in self.storage.load_all(self.table_name):
            if data.get("email", "").lower() == wanted:
                return Employee.from_dict(data)
        return None

    def list_employees(self) -> List[Employee]:
        return [Employee.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def update_employee(self, employee_id: str, changes: Dict[str, Any]) -> Employee:
        """
        Update an employee; branch, department and supervisor are re-resolved
        when supplied

        Args:
            employee_id: Employee to update
            changes: Field name to new value; None values are ignored
        """
        employee = self.require_employee(employee_id)
        changes = {k: v for k, v in changes.items() if v is not None}

        if "email" in changes and changes["email"].lower() != employee.email.lower():
            if not re.match(EMAIL_PATTERN, changes["email"]):
                raise ValidationError("Invalid email format")
            if self.get_employee_by_email(changes["email"]):
                raise ConflictError("Employee with this email already exists")
        if "branch_name" in changes:
            self.branch_manager.require_branch(changes["branch_name"])
        if "department_name" in changes:
            self.department_manager.require_department(changes["department_name"])
        if "supervisor_id" in changes:
            if changes["supervisor_id"] == employee_id:
                raise ValidationError("Employee cannot supervise themselves")
            self._require_supervisor(changes["supervisor_id"])
        if "salary" in changes:
            changes["salary"] = to_amount(changes["salary"])
            if changes["salary"] < ZERO:
                raise ValidationError("Salary cannot be negative")

        for name in ("full_name", "email", "phone_number", "address", "position",
                     "salary", "branch_name", "department_name", "supervisor_id"):
            if name in changes:
                setattr(employee, name, changes[name])

        employee.updated_at = datetime.now(timezone.utc)
        self._save_employee(employee)

        log_action(
            self.logger, "info", "Employee updated",
            action="update_employee", resource=f"employee:{employee_id}",
            extra={"fields": sorted(changes)}
        )
        return employee

    def delete_employee(self, employee_id: str) -> None:
        """Delete an employee; their reports lose the supervisor link"""
        self.require_employee(employee_id)
        with self.storage.atomic():
            for data in self.storage.find(self.table_name, {"supervisor_id": employee_id}):
                report = Employee.from_dict(data)
                report.supervisor_id = None
                report.updated_at = datetime.now(timezone.utc)
                self._save_employee(report)
            self.storage.delete(self.table_name, employee_id)

        log_action(
            self.logger, "info", "Employee deleted",
            action="delete_employee", resource=f"employee:{employee_id}"
        )

    def detach_branch(self, branch_name: str) -> int:
        """Clear the branch of every employee working at it"""
        detached = 0
        for data in self.storage.find(self.table_name, {"branch_name": branch_name}):
            employee = Employee.from_dict(data)
            employee.branch_name = None
            employee.updated_at = datetime.now(timezone.utc)
            self._save_employee(employee)
            detached += 1
        return detached

    def count(self) -> int:
        return self.storage.count(self.table_name)

    def _require_supervisor(self, supervisor_id: str) -> Employee:
        supervisor = self.get_employee(supervisor_id)
        if not supervisor:
            raise NotFoundError("Supervisor not found")
        return supervisor

    def _save_employee(self, employee: Employee) -> None:
        self.storage.save(self.table_name, employee.id, employee.to_dict())
