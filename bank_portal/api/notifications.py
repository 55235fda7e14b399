"""
Customer notification endpoints
"""

from fastapi import APIRouter, Depends

from .system import BankingSystem, get_banking_system
from .responses import success, record_dict


router = APIRouter()


@router.get("/{customer_id}/notifications")
async def list_notifications(
    customer_id: str,
    unread_only: bool = False,
    system: BankingSystem = Depends(get_banking_system)
):
    """Notifications of a customer, newest first"""
    system.customer_manager.require_customer(customer_id)
    notifications = system.notification_manager.list_notifications(customer_id, unread_only)
    return success({
        "unread_count": system.notification_manager.unread_count(customer_id),
        "notifications": [record_dict(n) for n in notifications]
    })


@router.put("/{customer_id}/notifications/read-all")
async def mark_all_read(
    customer_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    system.customer_manager.require_customer(customer_id)
    updated = system.notification_manager.mark_all_read(customer_id)
    return success({"updated": updated}, "All notifications marked as read")


@router.put("/notifications/{notification_id}/read")
async def mark_read(
    notification_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    notification = system.notification_manager.mark_read(notification_id)
    return success(record_dict(notification), "Notification marked as read")


@router.delete("/notifications/{notification_id}")
async def delete_notification(
    notification_id: str,
    system: BankingSystem = Depends(get_banking_system)
):
    system.notification_manager.delete_notification(notification_id)
    return success({"notification_id": notification_id}, "Notification deleted")
