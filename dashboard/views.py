"""Dashboard statistics, profit & loss report and notifications API."""

import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from pos.api_utils import positive_int, parse_body

from .services.metrics_service import (
    get_dashboard_stats,
    get_low_stock,
    get_profit_loss,
    get_recent_transactions,
    get_sales_chart,
    get_top_products,
)
from .services.notification_service import delete_all, find_notification, list_notifications, mark_all_read

logger = logging.getLogger("pos")

EPOCH = "1970-01-01"


@require_GET
def api_dashboard(request):
    return JsonResponse(get_dashboard_stats())


@require_GET
def api_profit_loss(request):
    """GET ?from=YYYY-MM-DD&to=YYYY-MM-DD. Defaults: from the epoch to today."""
    date_from = parse_date(request.GET.get("from") or EPOCH)
    raw_to = request.GET.get("to")
    date_to = parse_date(raw_to) if raw_to else timezone.localdate()
    if date_from is None or date_to is None:
        return JsonResponse({"error": "Invalid date range"}, status=400)
    return JsonResponse(get_profit_loss(date_from, date_to))


@require_GET
def api_sales_chart(request):
    """GET ?days=30 -> [{date, sales, purchases}] oldest first."""
    days = min(positive_int(request.GET.get("days"), 30), 366)
    return JsonResponse(get_sales_chart(days), safe=False)


@require_GET
def api_top_products(request):
    days = positive_int(request.GET.get("period"), 30)
    limit = positive_int(request.GET.get("limit"), 10)
    return JsonResponse(get_top_products(days, limit), safe=False)


@require_GET
def api_recent_transactions(request):
    return JsonResponse(get_recent_transactions(positive_int(request.GET.get("limit"), 10)), safe=False)


@require_GET
def api_low_stock(request):
    threshold = getattr(settings, "POS_LOW_STOCK_THRESHOLD", 10)
    return JsonResponse(get_low_stock(threshold, positive_int(request.GET.get("limit"), 10)), safe=False)


@csrf_exempt
@require_http_methods(["GET", "POST", "DELETE"])
def api_notifications(request):
    """
    GET ?limit=&unread_only=true lists notifications after raising any new
    low-stock alerts. POST {action: mark_read|mark_all_read, notification_id}.
    DELETE {action: delete|delete_all, notification_id}.
    """
    if request.method == "GET":
        try:
            limit = max(int(request.GET.get("limit", 20)), 1)
        except ValueError:
            limit = 20
        unread_only = request.GET.get("unread_only") == "true"
        return JsonResponse(list_notifications(limit=limit, unread_only=unread_only))

    body, err = parse_body(request)
    if err:
        return err
    action = body.get("action")
    notification_id = body.get("notification_id")

    if request.method == "POST":
        if action == "mark_read" and notification_id:
            notification = find_notification(notification_id)
            if notification is None:
                return JsonResponse({"error": "Notification not found"}, status=404)
            notification.read = True
            notification.save(update_fields=["read"])
            return JsonResponse({"success": True, "message": "Notification marked as read"})
        if action == "mark_all_read":
            count = mark_all_read()
            logger.info("Marked %d notifications as read", count)
            return JsonResponse({"success": True, "message": "All notifications marked as read"})
        return JsonResponse({"error": "Invalid action"}, status=400)

    if action == "delete" and notification_id:
        notification = find_notification(notification_id)
        if notification is None:
            return JsonResponse({"error": "Notification not found"}, status=404)
        notification.delete()
        return JsonResponse({"success": True, "message": "Notification deleted"})
    if action == "delete_all":
        count = delete_all()
        logger.info("Deleted all %d notifications", count)
        return JsonResponse({"success": True, "message": "All notifications deleted"})
    return JsonResponse({"error": "Invalid action"}, status=400)
