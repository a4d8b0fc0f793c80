"""Offline queue API. Read-only listing plus a supervised sync trigger."""

import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from fiscal.services.config_service import get_current_configuration
from fiscal.services.status_service import MaintenanceError, sync_offline_queue
from offline.services.queue_manager import QueueManager

logger = logging.getLogger("fiscal")


@require_http_methods(["GET"])
def api_offline_queue(request):
    """GET /api/v2/fdms/offline/ - Pending offline entries."""
    config = get_current_configuration()
    if config is None:
        return JsonResponse({"entries": [], "size": 0})
    entries = [
        {
            "id": e.pk,
            "invoiceNo": e.invoice_no,
            "status": e.status,
            "failureReason": e.failure_reason,
            "receiptGlobalNo": str(e.transaction.receipt_global_no) if e.transaction else None,
            "createdAt": e.created_at.isoformat(),
        }
        for e in QueueManager.get_pending(configuration=config)
    ]
    return JsonResponse({"entries": entries, "size": len(entries)})


@csrf_exempt
@require_http_methods(["POST"])
def api_offline_sync(request):
    """POST /api/v2/fdms/offline/sync/ - Same as the sync_offline_queue status action."""
    try:
        result = sync_offline_queue()
    except MaintenanceError as e:
        return JsonResponse({"error": str(e)}, status=400)
    return JsonResponse({"success": True, **result})
