"""Emit FDMS events to WebSocket groups."""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger("fiscal")

FDMS_STATUS_GROUP = "fdms_status"


def _group_send(group: str, payload: dict) -> None:
    layer = get_channel_layer()
    if not layer:
        return
    async_to_sync(layer.group_send)(group, {"type": "fdms_event", "data": payload})


def emit_fdms_event(event_type: str, data: dict) -> None:
    """Broadcast an FDMS event (receipt.confirmed, receipt.queued, ...) to status listeners."""
    try:
        _group_send(FDMS_STATUS_GROUP, {"type": event_type, **data})
    except Exception as e:
        logger.warning("Emit %s failed: %s", event_type, e)


def emit_status_updated() -> None:
    """Broadcast the current aggregated FDMS status."""
    try:
        from fiscal.services.status_service import get_fdms_status

        _group_send(FDMS_STATUS_GROUP, {"type": "status.updated", "status": get_fdms_status()})
    except Exception as e:
        logger.warning("Emit status.updated failed: %s", e)
