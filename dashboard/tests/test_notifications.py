"""Notification store, low-stock alerts and the notifications API."""

import json
from decimal import Decimal
from unittest.mock import patch

from django.test import Client, TestCase, override_settings

from dashboard.models import Notification
from dashboard.services.notification_service import notify, sync_low_stock_alerts
from pos.models import Category, Product, Sale

URL = "/api/v2/notifications"


def _make_product(code, stock, status="active"):
    category, _ = Category.objects.get_or_create(code="GEN", name="General")
    return Product.objects.create(code=code, name=f"Product {code}", category=category, stock=stock, status=status)


@override_settings(POS_LOW_STOCK_THRESHOLD=10)
class LowStockAlertTests(TestCase):
    def test_alerts_are_deduplicated_by_product(self):
        low = _make_product("A", 3)
        _make_product("B", 50)
        _make_product("C", 1, status="inactive")
        self.assertEqual(sync_low_stock_alerts(), 1)
        self.assertEqual(sync_low_stock_alerts(), 0)
        notification = Notification.objects.get(type="low_stock")
        self.assertEqual(notification.key, f"low-stock-{low.pk}")
        self.assertEqual(notification.message, "Product A is running low (3 remaining)")
        self.assertEqual(notification.priority, "high")

    def test_list_merges_alerts(self):
        _make_product("A", 3)
        notify(title="Backup Reminder", message="Weekly backup is due", priority="medium")
        data = Client().get(URL).json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["unread_count"], 2)
        self.assertEqual({n["type"] for n in data["notifications"]}, {"low_stock", "system"})


class NotificationApiTests(TestCase):
    def setUp(self):
        self.client = Client()
        self.first = notify(title="One", message="1", key="sys-1")
        self.second = notify(title="Two", message="2")

    def _send(self, method, body):
        return getattr(self.client, method)(URL, data=json.dumps(body), content_type="application/json")

    def test_mark_read_by_key_and_id(self):
        self.assertEqual(self._send("post", {"action": "mark_read", "notification_id": "sys-1"}).status_code, 200)
        self.assertEqual(self._send("post", {"action": "mark_read", "notification_id": self.second.pk}).status_code, 200)
        self.assertFalse(Notification.objects.filter(read=False).exists())

    def test_unread_only_and_limit(self):
        self._send("post", {"action": "mark_read", "notification_id": "sys-1"})
        data = self.client.get(URL, {"unread_only": "true"}).json()
        self.assertEqual([n["title"] for n in data["notifications"]], ["Two"])
        self.assertEqual(len(self.client.get(URL, {"limit": 1}).json()["notifications"]), 1)

    def test_mark_all_read(self):
        response = self._send("post", {"action": "mark_all_read"})
        self.assertEqual(response.json()["message"], "All notifications marked as read")
        self.assertEqual(self.client.get(URL).json()["unread_count"], 0)

    def test_unknown_notification(self):
        response = self._send("post", {"action": "mark_read", "notification_id": "nope"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Notification not found")

    def test_invalid_action(self):
        self.assertEqual(self._send("post", {"action": "explode"}).status_code, 400)
        self.assertEqual(self._send("delete", {"action": "explode"}).status_code, 400)

    def test_delete_and_delete_all(self):
        response = self._send("delete", {"action": "delete", "notification_id": "sys-1"})
        self.assertEqual(response.json()["message"], "Notification deleted")
        self.assertEqual(Notification.objects.count(), 1)
        self._send("delete", {"action": "delete_all"})
        self.assertFalse(Notification.objects.exists())


class BroadcastTests(TestCase):
    @patch("dashboard.services.notification_service.broadcast")
    def test_broadcast_after_commit(self, mock_broadcast):
        with self.captureOnCommitCallbacks(execute=True):
            notification = notify(title="Hello", message="world")
        mock_broadcast.assert_called_once_with(notification)

    @patch("dashboard.services.notification_service.broadcast")
    def test_existing_key_is_not_rebroadcast(self, mock_broadcast):
        with self.captureOnCommitCallbacks(execute=True):
            notify(title="A", message="a", key="k")
            notify(title="A", message="a", key="k")
        self.assertEqual(mock_broadcast.call_count, 1)

    def test_completed_sale_raises_notification(self):
        Sale.objects.create(reference="SL-9", total=Decimal("12.5"))
        Sale.objects.create(reference="SL-10", total=Decimal("3"), status="pending")
        notification = Notification.objects.get(type="new_sale")
        self.assertEqual(notification.message, "Sale SL-9 completed - $12.50")
        self.assertEqual(notification.data["amount"], 12.5)
