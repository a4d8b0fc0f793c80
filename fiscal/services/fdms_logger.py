"""
FDMS API call logging.
Stores request/response payloads, status codes and errors for audit and debugging.
"""

import json
import logging

from fiscal.models import FDMSApiLog
from fiscal.utils import mask_sensitive_fields

logger = logging.getLogger("fiscal")


def _safe_json(value):
    """Convert a response or payload into something a JSONField accepts."""
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return value
    if hasattr(value, "text"):
        try:
            return json.loads(value.text) if value.text else {}
        except (json.JSONDecodeError, TypeError):
            return {"raw": str(value.text)[:10000]}
    return {"raw": str(value)[:10000]}


def log_fdms_call(
    endpoint: str,
    method: str,
    request_payload: dict | None = None,
    response=None,
    error: str | Exception | None = None,
) -> FDMSApiLog:
    """
    Log an FDMS API call to the database.

    Args:
        endpoint: API endpoint path (e.g. "/Device/v1/VFD_1/SubmitReceipt").
        method: HTTP method.
        request_payload: Request body as dict, or None.
        response: requests.Response, or None when the call never completed.
        error: Error message or exception to record.
    """
    request_json = _safe_json(request_payload) if request_payload is not None else {}
    if not isinstance(request_json, dict):
        request_json = {"payload": request_json}

    status_code = getattr(response, "status_code", None) if response is not None else None
    response_json = _safe_json(response) if response is not None else None
    if isinstance(response_json, dict):
        response_json = mask_sensitive_fields(response_json)

    log_entry = FDMSApiLog.objects.create(
        endpoint=endpoint,
        method=method.upper(),
        request_payload=mask_sensitive_fields(request_json),
        response_payload=response_json,
        status_code=status_code,
        error_message=str(error) if error is not None else None,
    )
    logger.info(
        "FDMS call logged: %s %s -> %s",
        method,
        endpoint,
        status_code or error or "unknown",
        extra={"endpoint": endpoint, "status_code": status_code},
    )
    return log_entry
