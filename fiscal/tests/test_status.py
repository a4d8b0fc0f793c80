"""FDMS status aggregation and maintenance actions."""

import json
from decimal import Decimal

from django.test import Client, TestCase
from django.utils import timezone

from fiscal.models import FiscalConfiguration, FiscalDevice, FiscalTransaction
from fiscal.services.status_service import derive_status, reset_daily_counter, retry_failed, MaintenanceError
from offline.models import OfflineQueueEntry

STATUS_URL = "/api/v2/fdms/status"


def _make_config(enabled=True, device_status="Active"):
    config = FiscalConfiguration.objects.create(
        taxpayer_tin="1234567890",
        business_name="Acme",
        business_type="retail",
        branch_name="Main",
        branch_address="1 Rd",
        is_fdms_enabled=enabled,
    )
    if device_status:
        FiscalDevice.objects.create(
            configuration=config,
            device_id="VFD_1234567890_1",
            device_serial_no="SN5678900001",
            status=device_status,
            global_receipt_counter=100,
            daily_receipt_counter=7,
        )
    return config


def _make_txn(config, status="failed", retry_count=0, invoice_no="INV-1"):
    return FiscalTransaction.objects.create(
        configuration=config,
        device=config.devices.first(),
        receipt_global_no=FiscalTransaction.objects.count() + 1,
        invoice_no=invoice_no,
        receipt_date=timezone.now(),
        receipt_total=Decimal("10.00"),
        zimra_status=status,
        retry_count=retry_count,
        error_message="rejected" if status == "failed" else None,
    )


class DeriveStatusTests(TestCase):
    def _facts(self, **kw):
        facts = {"enabled": True, "has_active_device": True, "failed": 0, "queued": 0}
        facts.update(kw)
        return facts

    def test_rule_precedence(self):
        self.assertEqual(derive_status(self._facts())[0], "active")
        self.assertEqual(derive_status(self._facts(has_active_device=False))[0], "error")
        self.assertEqual(derive_status(self._facts(enabled=False))[0], "configured")
        self.assertEqual(derive_status(self._facts(failed=2))[0], "warning")
        self.assertEqual(derive_status(self._facts(failed=2, has_active_device=False))[0], "warning")
        self.assertEqual(derive_status(self._facts(failed=2, queued=1))[0], "offline")
        self.assertEqual(derive_status(self._facts(enabled=False, queued=1))[0], "offline")

    def test_messages(self):
        self.assertEqual(derive_status(self._facts())[1], "FDMS active and ready")
        self.assertEqual(derive_status(self._facts(enabled=False))[1], "FDMS configured but not enabled")
        self.assertEqual(
            derive_status(self._facts(has_active_device=False))[1],
            "FDMS enabled but no active fiscal device",
        )
        self.assertEqual(derive_status(self._facts(failed=3))[1], "3 failed transaction(s) need attention")
        self.assertEqual(derive_status(self._facts(queued=2))[1], "2 transaction(s) queued for submission")


class StatusApiTests(TestCase):
    def setUp(self):
        self.client = Client()

    def _action(self, action):
        return self.client.post(STATUS_URL, data=json.dumps({"action": action}), content_type="application/json")

    def test_not_configured(self):
        data = self.client.get(STATUS_URL).json()["data"]
        self.assertEqual(data, {
            "configured": False,
            "fdmsEnabled": False,
            "status": "not_configured",
            "message": "ZIMRA FDMS not configured",
        })

    def test_active_with_statistics(self):
        config = _make_config()
        _make_txn(config, status="confirmed")
        data = self.client.get(STATUS_URL).json()["data"]
        self.assertEqual(data["status"], "active")
        self.assertEqual(data["statistics"]["totalTransactions"], 1)
        self.assertEqual(data["statistics"]["todayTransactions"], 1)
        self.assertEqual(data["device"]["globalReceiptCounter"], "100")

    def test_offline_outranks_failed(self):
        config = _make_config()
        _make_txn(config, status="failed")
        pending = _make_txn(config, status="pending", invoice_no="INV-2")
        OfflineQueueEntry.objects.create(configuration=config, transaction=pending, invoice_no="INV-2")
        data = self.client.get(STATUS_URL).json()["data"]
        self.assertEqual(data["status"], "offline")
        self.assertEqual(data["statistics"]["offlineQueueSize"], 1)

    def test_invalid_action(self):
        resp = self._action("explode")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json()["error"],
            "Invalid action. Supported actions: sync_offline_queue, retry_failed, reset_daily_counter",
        )

    def test_actions_need_enabled_configuration(self):
        _make_config(enabled=False)
        for action in ("sync_offline_queue", "retry_failed"):
            resp = self._action(action)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.json()["error"], "FDMS not configured or not enabled")

    def test_reset_needs_configuration(self):
        resp = self._action("reset_daily_counter")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "FDMS not configured")

    def test_empty_queue_sync(self):
        _make_config()
        resp = self._action("sync_offline_queue")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "No transactions in offline queue")

    def test_retry_failed_action(self):
        config = _make_config()
        _make_txn(config)
        resp = self._action("retry_failed")
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Queued 1 failed transactions for retry")


class RetryFailedTests(TestCase):
    def test_selects_below_cap_and_increments_once(self):
        config = _make_config()
        capped = _make_txn(config, retry_count=3, invoice_no="CAPPED")
        eligible = [_make_txn(config, retry_count=i % 3, invoice_no=f"INV-{i}") for i in range(7)]
        before = {t.pk: t.retry_count for t in eligible}

        result = retry_failed()

        self.assertEqual(result["retried"], 5)
        for pk in result["transactionIds"]:
            txn = FiscalTransaction.objects.get(pk=pk)
            self.assertEqual(txn.zimra_status, "pending")
            self.assertEqual(txn.retry_count, before[pk] + 1)
            self.assertIsNone(txn.error_message)
        capped.refresh_from_db()
        self.assertEqual(capped.zimra_status, "failed")
        self.assertEqual(capped.retry_count, 3)
        self.assertEqual(FiscalTransaction.objects.filter(zimra_status="failed").count(), 3)

    def test_nothing_to_retry(self):
        config = _make_config()
        _make_txn(config, retry_count=3)
        result = retry_failed()
        self.assertEqual(result["message"], "No failed transactions to retry")
        self.assertEqual(result["retried"], 0)


class ResetDailyCounterTests(TestCase):
    def test_resets_daily_only(self):
        config = _make_config()
        FiscalDevice.objects.create(
            configuration=config,
            device_id="VFD_1234567890_2",
            device_serial_no="SN5678900002",
            status="Blocked",
            global_receipt_counter=5,
            daily_receipt_counter=2,
        )
        result = reset_daily_counter()
        self.assertEqual(result["message"], "Daily receipt counter reset successfully")
        self.assertEqual(result["devices"], 2)
        counters = dict(FiscalDevice.objects.values_list("device_id", "global_receipt_counter"))
        self.assertEqual(counters, {"VFD_1234567890_1": 100, "VFD_1234567890_2": 5})
        self.assertFalse(FiscalDevice.objects.exclude(daily_receipt_counter=0).exists())

    def test_works_while_disabled(self):
        _make_config(enabled=False)
        reset_daily_counter()
        self.assertEqual(FiscalDevice.objects.get().daily_receipt_counter, 0)

    def test_without_configuration(self):
        with self.assertRaises(MaintenanceError):
            reset_daily_counter()
