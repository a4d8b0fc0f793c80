"""FDMS JSON API: configuration, fiscal invoices, status and maintenance actions."""

import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from fiscal.serializers import (
    ValidationError,
    validate_config_payload,
    validate_invoice_payload,
    validate_status_action,
    validate_toggle_payload,
)
from fiscal.services.config_service import (
    get_current_configuration,
    serialize_configuration,
    set_fdms_enabled,
    upsert_configuration,
)
from fiscal.services.fdms_events import emit_status_updated
from fiscal.services.invoice_service import classify_submission_error, list_transactions, submit_invoice
from fiscal.services.status_service import MaintenanceError, get_fdms_status, run_action
from fiscal.services.zimra_client import FiscalError

logger = logging.getLogger("fiscal")


def _load_body(request):
    return json.loads(request.body or "{}")


@csrf_exempt
@require_http_methods(["GET", "POST", "PATCH"])
def api_fdms_config(request):
    """GET/POST/PATCH /api/v2/fdms/config - Read, upsert by TIN, toggle FDMS mode."""
    if request.method == "GET":
        config = get_current_configuration()
        if config is None:
            return JsonResponse({"success": False, "data": None, "message": "No ZIMRA configuration found"})
        return JsonResponse({"success": True, "data": serialize_configuration(config)})

    try:
        body = _load_body(request)
    except json.JSONDecodeError:
        return JsonResponse({"error": "Invalid JSON"}, status=400)

    try:
        if request.method == "POST":
            values = validate_config_payload(body)
            config, created = upsert_configuration(values)
            return JsonResponse({
                "success": True,
                "data": serialize_configuration(config),
                "message": "Configuration created successfully" if created else "Configuration updated successfully",
            })

        config = get_current_configuration()
        if config is None:
            return JsonResponse(
                {"error": "No ZIMRA configuration found. Please create configuration first."},
                status=404,
            )
        enabled = validate_toggle_payload(body)
        config = set_fdms_enabled(config, enabled)
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    emit_status_updated()
    return JsonResponse({
        "success": True,
        "data": serialize_configuration(config),
        "message": "FDMS mode enabled successfully" if enabled else "FDMS mode disabled successfully",
    })


@csrf_exempt
@require_http_methods(["GET", "POST"])
def api_fdms_invoice(request):
    """POST submits a fiscal invoice; GET lists recent fiscal transactions."""
    if request.method == "GET":
        try:
            limit = max(1, int(request.GET.get("limit") or 50))
        except ValueError:
            limit = 50
        data = list_transactions(limit=limit, status=request.GET.get("status") or None)
        return JsonResponse({"success": True, "data": data})

    try:
        body = _load_body(request)
    except json.JSONDecodeError:
        return JsonResponse({"error": "Invalid JSON"}, status=400)
    try:
        invoice = validate_invoice_payload(body)
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)

    logger.info(
        "FDMS fiscal invoice request: %s total=%s items=%d",
        invoice["invoice_no"], invoice["total"], len(invoice["items"]),
        extra={"invoice_no": invoice["invoice_no"]},
    )
    try:
        data = submit_invoice(invoice)
    except FiscalError as e:
        message = str(e)
        status_code, public_message = classify_submission_error(message)
        logger.error("FDMS invoice submission error: %s", message, extra={"invoice_no": invoice["invoice_no"]})
        payload = {"error": public_message}
        if getattr(settings, "FDMS_DEBUG_ERRORS", False):
            payload["details"] = message
        return JsonResponse(payload, status=status_code)
    return JsonResponse({"success": True, "data": data})


@csrf_exempt
@require_http_methods(["GET", "POST"])
def api_fdms_status(request):
    """GET aggregated FDMS health; POST {action} runs a maintenance action."""
    if request.method == "GET":
        return JsonResponse({"success": True, "data": get_fdms_status()})

    try:
        body = _load_body(request)
    except json.JSONDecodeError:
        return JsonResponse({"error": "Invalid JSON"}, status=400)
    try:
        action = validate_status_action(body)
        result = run_action(action)
    except (ValidationError, MaintenanceError) as e:
        return JsonResponse({"error": getattr(e, "message", str(e))}, status=400)
    logger.info("FDMS status action %s: %s", action, result["message"], extra={"action": action})
    emit_status_updated()
    return JsonResponse({"success": True, **result})
