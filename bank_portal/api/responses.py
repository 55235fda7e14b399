"""
Response envelope helpers
"""

from typing import Any, Dict, Optional

from ..storage import StorageRecord


def success(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Wrap a payload in the portal's success envelope"""
    body = {"status": "success", "data": data}
    if message:
        body["message"] = message
    return body


def record_dict(record: StorageRecord, **extra: Any) -> Dict[str, Any]:
    """JSON-ready dict of a stored record, with optional extra keys"""
    data = record.to_dict()
    data.update(extra)
    return data


def loan_request_dict(loan_request) -> Dict[str, Any]:
    """Loan request with its request time"""
    return record_dict(loan_request, requested_at=loan_request.requested_at.isoformat())
