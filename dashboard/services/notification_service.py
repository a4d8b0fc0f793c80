"""Durable notifications: low-stock alerts, sale notices, and their push to WebSocket listeners."""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import transaction

from dashboard.models import Notification
from pos.services.stock_service import low_stock_products

logger = logging.getLogger("pos")

NOTIFICATIONS_GROUP = "notifications"


def serialize_notification(notification: Notification) -> dict:
    return {
        "id": notification.key or str(notification.pk),
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "priority": notification.priority,
        "read": notification.read,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
        "data": notification.data,
    }


def broadcast(notification: Notification) -> None:
    """Push one notification to the notifications group. Failures are logged, never raised."""
    try:
        layer = get_channel_layer()
        if not layer:
            return
        async_to_sync(layer.group_send)(
            NOTIFICATIONS_GROUP,
            {"type": "notification_event", "data": serialize_notification(notification)},
        )
    except Exception as e:
        logger.warning("Notification broadcast failed: %s", e)


def notify(*, title: str, message: str, type: str = "system", priority: str = "info", data=None, key=None):
    """
    Create a notification and broadcast it once the surrounding transaction
    commits. With a key, an existing notification with that key is returned
    unchanged and nothing is broadcast.
    """
    defaults = {"type": type, "title": title, "message": message, "priority": priority, "data": data or {}}
    if key:
        notification, created = Notification.objects.get_or_create(key=key, defaults=defaults)
    else:
        notification, created = Notification.objects.create(**defaults), True
    if created:
        transaction.on_commit(lambda: broadcast(notification))
    return notification


def sync_low_stock_alerts(threshold: int | None = None) -> int:
    """Raise one low_stock notification per active product at or below threshold. Returns how many were new."""
    if threshold is None:
        threshold = getattr(settings, "POS_LOW_STOCK_THRESHOLD", 10)
    existing = set(Notification.objects.filter(key__startswith="low-stock-").values_list("key", flat=True))
    created = 0
    for product in low_stock_products(threshold):
        key = f"low-stock-{product.pk}"
        if key in existing:
            continue
        notify(
            key=key,
            type="low_stock",
            priority="high",
            title="Low Stock Alert",
            message=f"{product.name} is running low ({product.stock} remaining)",
            data={
                "product_id": product.pk,
                "product_name": product.name,
                "current_stock": product.stock,
                "min_stock": product.alert_quantity or threshold,
            },
        )
        created += 1
    if created:
        logger.info("Raised %d low stock alert(s)", created)
    return created


def list_notifications(limit: int = 20, unread_only: bool = False) -> dict:
    sync_low_stock_alerts()
    qs = Notification.objects.all()
    if unread_only:
        qs = qs.filter(read=False)
    return {
        "notifications": [serialize_notification(n) for n in qs[:limit]],
        "total": qs.count(),
        "unread_count": Notification.objects.filter(read=False).count(),
    }


def find_notification(notification_id):
    """Lookup by key ("low-stock-12") or by numeric id."""
    notification_id = str(notification_id)
    notification = Notification.objects.filter(key=notification_id).first()
    if notification is None and notification_id.isdigit():
        notification = Notification.objects.filter(pk=int(notification_id)).first()
    return notification


def mark_all_read() -> int:
    return Notification.objects.filter(read=False).update(read=True)


def delete_all() -> int:
    deleted, _ = Notification.objects.all().delete()
    return deleted
