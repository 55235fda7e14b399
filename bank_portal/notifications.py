"""
Notification Feed Module

Stores user-facing messages for customers: transaction alerts, loan payment
reminders and overdue notices. Notifications are in-app records that the
portal lists, marks read and deletes.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional
from enum import Enum
import uuid

from .storage import StorageInterface, StorageRecord
from .errors import NotFoundError
from .logging_config import get_logger, log_action


class NotificationType(Enum):
    """Types of notifications"""
    LOAN_REMINDER = "LOAN_REMINDER"
    LOAN_OVERDUE = "LOAN_OVERDUE"
    TRANSACTION = "TRANSACTION"
    PROMOTION = "PROMOTION"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"
    GENERAL = "GENERAL"


@dataclass
class AppNotification(StorageRecord):
    """Message shown in a customer's notification feed"""
    customer_id: str
    notification_type: NotificationType
    message: str
    related_account_id: Optional[str] = None
    related_loan_id: Optional[str] = None
    related_transaction_id: Optional[str] = None
    is_read: bool = False
    read_at: Optional[datetime] = None


class NotificationManager:
    """
    Writes and queries the customer notification feed
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "notifications"
        self.logger = get_logger("bank_portal.notifications")

    def notify(
        self,
        customer_id: str,
        notification_type: NotificationType,
        message: str,
        related_account_id: Optional[str] = None,
        related_loan_id: Optional[str] = None,
        related_transaction_id: Optional[str] = None
    ) -> AppNotification:
        """
        Create an unread notification for a customer

        Args:
            customer_id: Recipient customer
            notification_type: Kind of notification
            message: Text shown to the customer
            related_account_id: Account the message is about
            related_loan_id: Loan the message is about
            related_transaction_id: Transaction the message is about

        Returns:
            Stored AppNotification
        """
        now = datetime.now(timezone.utc)
        notification = AppNotification(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            customer_id=customer_id,
            notification_type=notification_type,
            message=message,
            related_account_id=related_account_id,
            related_loan_id=related_loan_id,
            related_transaction_id=related_transaction_id
        )
        self._save(notification)

        log_action(
            self.logger, "info", f"Notification created: {notification_type.value}",
            action="notify", resource=f"customer:{customer_id}",
            extra={"notification_id": notification.id}
        )
        return notification

    def get_notification(self, notification_id: str) -> Optional[AppNotification]:
        """Get notification by ID"""
        data = self.storage.load(self.table_name, notification_id)
        if data:
            return AppNotification.from_dict(data)
        return None

    def list_notifications(self, customer_id: str, unread_only: bool = False) -> List[AppNotification]:
        """List a customer's notifications, newest first"""
        filters = {"customer_id": customer_id}
        if unread_only:
            filters["is_read"] = False
        notifications = [
            AppNotification.from_dict(data)
            for data in self.storage.find(self.table_name, filters)
        ]
        notifications.reverse()
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    def unread_count(self, customer_id: str) -> int:
        """Number of unread notifications for a customer"""
        return len(self.storage.find(self.table_name, {"customer_id": customer_id, "is_read": False}))

    def mark_read(self, notification_id: str) -> AppNotification:
        """Mark one notification as read"""
        notification = self.get_notification(notification_id)
        if not notification:
            raise NotFoundError("Notification not found")

        if not notification.is_read:
            now = datetime.now(timezone.utc)
            notification.is_read = True
            notification.read_at = now
            notification.updated_at = now
            self._save(notification)
        return notification

    def mark_all_read(self, customer_id: str) -> int:
        """Mark every unread notification of a customer as read; returns how many changed"""
        unread = self.list_notifications(customer_id, unread_only=True)
        now = datetime.now(timezone.utc)
        with self.storage.atomic():
            for notification in unread:
                notification.is_read = True
                notification.read_at = now
                notification.updated_at = now
                self._save(notification)
        return len(unread)

    def delete_notification(self, notification_id: str) -> None:
        """Delete a notification"""
        if not self.storage.delete(self.table_name, notification_id):
            raise NotFoundError("Notification not found")

    def delete_customer_notifications(self, customer_id: str) -> int:
        """Remove a customer's whole feed"""
        removed = 0
        for data in self.storage.find(self.table_name, {"customer_id": customer_id}):
            if self.storage.delete(self.table_name, data["id"]):
                removed += 1
        return removed

    def _save(self, notification: AppNotification) -> None:
        self.storage.save(self.table_name, notification.id, notification.to_dict())
