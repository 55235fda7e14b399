"""
Department Module

Departments (Finance, Cashier, HR, ...) group employees. A department is
keyed by its name.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional

from .storage import StorageInterface, StorageRecord
from .errors import ConflictError, NotFoundError, ValidationError


@dataclass
class Department(StorageRecord):
    """Department; `id` is the department name"""
    name: str
    floor_number: str
    building_number: str
    description: Optional[str] = None


class DepartmentManager:
    """Creates and looks up departments"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "departments"

    def create_department(
        self,
        name: str,
        floor_number: str,
        building_number: str,
        description: Optional[str] = None
    ) -> Department:
        if not name or not name.strip():
            raise ValidationError("Invalid department data")
        name = name.strip()
        if self.storage.exists(self.table_name, name):
            raise ConflictError("Department already exists")

        now = datetime.now(timezone.utc)
        department = Department(
            id=name,
            created_at=now,
            updated_at=now,
            name=name,
            floor_number=floor_number,
            building_number=building_number,
            description=description
        )
        self.storage.save(self.table_name, department.id, department.to_dict())
        return department

    def get_department(self, name: str) -> Optional[Department]:
        data = self.storage.load(self.table_name, name)
        if data:
            return Department.from_dict(data)
        return None

    def require_department(self, name: str) -> Department:
        department = self.get_department(name)
        if not department:
            raise NotFoundError("Department not found")
        return department

    def list_departments(self) -> List[Department]:
        return [Department.from_dict(data) for data in self.storage.load_all(self.table_name)]
