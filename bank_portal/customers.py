"""
Customer Management Module

Manages customer profiles: contact details and the address fields used by
branches (city, sub-city, woreda, house number, zone).
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import uuid
import re

from .storage import StorageInterface, StorageRecord
from .errors import ConflictError, NotFoundError, ValidationError
from .logging_config import get_logger, log_action


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

UPDATABLE_FIELDS = (
    "full_name", "email", "phone", "city", "sub_city", "woreda", "house_number", "zone"
)


@dataclass
class Customer(StorageRecord):
    """Customer profile"""
    full_name: str
    email: str
    phone: str
    city: str
    sub_city: str
    woreda: str
    house_number: str
    zone: str

    def __post_init__(self):
        if not re.match(EMAIL_PATTERN, self.email):
            raise ValidationError("Invalid email format")


class CustomerManager:
    """
    Manages customer profiles
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "customers"
        self.logger = get_logger("bank_portal.customers")

    def create_customer(
        self,
        full_name: str,
        email: str,
        phone: str,
        city: str,
        sub_city: str,
        woreda: str,
        house_number: str,
        zone: str
    ) -> Customer:
        """
        Register a new customer

        Raises:
            ValidationError: If required data is missing or the email is malformed
            ConflictError: If a customer with the same email already exists
        """
        if not email or not full_name:
            raise ValidationError("Invalid customer data")

        if self.get_customer_by_email(email):
            raise ConflictError("Customer already exists")

        now = datetime.now(timezone.utc)
        customer = Customer(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            full_name=full_name,
            email=email,
            phone=phone,
            city=city,
            sub_city=sub_city,
            woreda=woreda,
            house_number=house_number,
            zone=zone
        )
        self._save_customer(customer)

        log_action(
            self.logger, "info", "Customer created",
            action="create_customer", resource=f"customer:{customer.id}"
        )
        return customer

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Get customer by ID"""
        data = self.storage.load(self.table_name, customer_id)
        if data:
            return Customer.from_dict(data)
        return None

    def require_customer(self, customer_id: str) -> Customer:
        """Get customer by ID or raise NotFoundError"""
        customer = self.get_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    def get_customer_by_email(self, email: str) -> Optional[Customer]:
        """Find a customer by email (case-insensitive)"""
        wanted = email.strip().lower()
        for data in self.storage.load_all(self.table_name):
            if data.get("email", "").lower() == wanted:
                return Customer.from_dict(data)
        return None

    def list_customers(self) -> List[Customer]:
        """List all customers"""
        return [Customer.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def update_customer(self, customer_id: str, changes: Dict[str, Any]) -> Customer:
        """
        Update customer profile fields

        Args:
            customer_id: Customer to update
            changes: Field name to new value; None values are ignored

        Returns:
            Updated Customer
        """
        customer = self.require_customer(customer_id)

        new_email = changes.get("email")
        if new_email and new_email.lower() != customer.email.lower():
            existing = self.get_customer_by_email(new_email)
            if existing and existing.id != customer_id:
                raise ConflictError("Customer with this email already exists")

        for name in UPDATABLE_FIELDS:
            value = changes.get(name)
            if value is not None:
                setattr(customer, name, value)

        if not re.match(EMAIL_PATTERN, customer.email):
            raise ValidationError("Invalid email format")

        customer.updated_at = datetime.now(timezone.utc)
        self._save_customer(customer)

        log_action(
            self.logger, "info", "Customer updated",
            action="update_customer", resource=f"customer:{customer_id}",
            extra={"fields": sorted(k for k, v in changes.items() if v is not None)}
        )
        return customer

    def delete_customer(self, customer_id: str) -> None:
        """Delete a customer record"""
        if not self.storage.delete(self.table_name, customer_id):
            raise NotFoundError("Customer not found")
        log_action(
            self.logger, "info", "Customer deleted",
            action="delete_customer", resource=f"customer:{customer_id}"
        )

    def count(self) -> int:
        return self.storage.count(self.table_name)

    def _save_customer(self, customer: Customer) -> None:
        self.storage.save(self.table_name, customer.id, customer.to_dict())
