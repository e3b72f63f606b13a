"""
Standardized API response envelopes
"""
from typing import Any, Dict, Optional


def success_response(message: Optional[str] = None, **payload: Any) -> Dict[str, Any]:
    """Create a success response: {success: true, message?, ...payload}"""
    body = {"success": True}
    if message is not None:
        body["message"] = message
    body.update(payload)
    return body


def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Optional[Any] = None
) -> Dict[str, Any]:
    """Create an error response"""
    body = {
        "success": False,
        "error": message,
        "error_code": error_code,
    }
    if details is not None:
        body["details"] = details
    return body
