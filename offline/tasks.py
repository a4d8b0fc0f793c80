"""Celery tasks for the offline queue."""

import logging

from celery import shared_task

from fiscal.services.fdms_events import emit_status_updated
from fiscal.services.status_service import MaintenanceError, sync_offline_queue

logger = logging.getLogger("fiscal")


@shared_task(bind=True, name="offline.sync_offline_queue")
def sync_offline_queue_task(self) -> dict:
    """Periodic offline sync. No-op while FDMS is disabled."""
    try:
        result = sync_offline_queue()
    except MaintenanceError as e:
        return {"success": False, "error": str(e)}
    if result["synchronized"]:
        emit_status_updated()
    return {"success": True, **result}
