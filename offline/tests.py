"""Tests for offline mode."""

import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import requests
from django.test import Client, TestCase

from fiscal.models import FiscalConfiguration, FiscalDevice, FiscalTransaction
from fiscal.services.zimra_client import FiscalError, ZimraClient
from offline.models import OfflineQueueEntry
from offline.services.batch_submitter import BatchSubmitter
from offline.services.offline_detector import OfflineDetector
from offline.services.queue_manager import QueueManager

ITEMS = [{"description": "Milk", "quantity": 1, "price": "2.50"}]


def _make_config():
    config = FiscalConfiguration.objects.create(
        taxpayer_tin="1234567890",
        business_name="Acme",
        business_type="retail",
        branch_name="Main",
        branch_address="1 Rd",
        is_fdms_enabled=True,
    )
    FiscalDevice.objects.create(
        configuration=config,
        device_id="VFD_1234567890_1",
        device_serial_no="SN5678900001",
        status="Active",
    )
    return config


def _ok():
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"receiptID": 1}
    resp.text = '{"receiptID": 1}'
    return resp


def _queue_invoices(config, count):
    """Submit `count` invoices while ZIMRA is unreachable so they land in the queue."""
    client = ZimraClient.for_configuration(config)
    with patch("fiscal.services.zimra_client.fdms_request", side_effect=requests.ConnectionError("ECONNREFUSED")):
        for i in range(count):
            try:
                client.submit_invoice(invoice_no=f"INV-{i}", total=Decimal("2.50"), items=ITEMS)
            except FiscalError:
                pass


class QueueManagerTests(TestCase):
    def test_enqueue_and_size(self):
        config = _make_config()
        _queue_invoices(config, 2)
        self.assertEqual(QueueManager.queue_size(configuration=config), 2)
        entries = list(QueueManager.get_pending(configuration=config))
        self.assertEqual([e.invoice_no for e in entries], ["INV-0", "INV-1"])
        self.assertEqual(entries[0].payload["receipt"]["receiptGlobalNo"], 1)

    def test_enqueue_twice_keeps_one_entry(self):
        config = _make_config()
        _queue_invoices(config, 1)
        txn = FiscalTransaction.objects.get()
        QueueManager.enqueue(txn, reason="again")
        self.assertEqual(OfflineQueueEntry.objects.count(), 1)

    def test_confirmed_transaction_cannot_be_queued(self):
        config = _make_config()
        _queue_invoices(config, 1)
        txn = FiscalTransaction.objects.get()
        txn.zimra_status = "confirmed"
        with self.assertRaises(ValueError):
            QueueManager.enqueue(txn)


class BatchSubmitterTests(TestCase):
    @patch("fiscal.services.zimra_client.fdms_request")
    def test_sync_resubmits_in_order(self, mock_request):
        config = _make_config()
        _queue_invoices(config, 3)
        mock_request.return_value = _ok()

        result = BatchSubmitter.process_queue(config, limit=10)

        self.assertEqual(result["synchronized"], 3)
        self.assertIsNone(result["halted_reason"])
        sent = [call.kwargs["json"]["receipt"]["invoiceNo"] for call in mock_request.call_args_list]
        self.assertEqual(sent, ["INV-0", "INV-1", "INV-2"])
        self.assertFalse(OfflineQueueEntry.objects.filter(status="pending").exists())
        self.assertFalse(OfflineQueueEntry.objects.filter(processed_at__isnull=True).exists())
        self.assertEqual(FiscalTransaction.objects.filter(zimra_status="confirmed").count(), 3)

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_second_run_is_noop(self, mock_request):
        config = _make_config()
        _queue_invoices(config, 2)
        mock_request.return_value = _ok()
        BatchSubmitter.process_queue(config)
        calls = mock_request.call_count

        result = BatchSubmitter.process_queue(config)

        self.assertEqual(result["synchronized"], 0)
        self.assertEqual(mock_request.call_count, calls)

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_stops_on_first_error(self, mock_request):
        config = _make_config()
        _queue_invoices(config, 3)
        mock_request.side_effect = [_ok(), requests.Timeout("timed out"), _ok()]

        result = BatchSubmitter.process_queue(config)

        self.assertEqual(result["synchronized"], 1)
        self.assertEqual(result["failed"], 1)
        self.assertEqual(result["halted_reason"], "Still offline - retry later")
        self.assertEqual(mock_request.call_count, 2)
        pending = list(QueueManager.get_pending(configuration=config))
        self.assertEqual([e.invoice_no for e in pending], ["INV-1", "INV-2"])
        self.assertIn("timed out", pending[0].failure_reason)

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_rejection_halts_for_review(self, mock_request):
        config = _make_config()
        _queue_invoices(config, 1)
        rejected = MagicMock()
        rejected.status_code = 400
        rejected.json.return_value = {"title": "Bad receipt"}
        rejected.text = '{"title": "Bad receipt"}'
        mock_request.return_value = rejected

        result = BatchSubmitter.process_queue(config)

        self.assertEqual(result["halted_reason"], "Submission rejected - manual review required")
        self.assertEqual(FiscalTransaction.objects.get().zimra_status, "failed")
        self.assertEqual(QueueManager.queue_size(configuration=config), 1)


class OfflineApiTests(TestCase):
    def setUp(self):
        self.client = Client()

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_status_action_syncs_queue(self, mock_request):
        config = _make_config()
        _queue_invoices(config, 2)
        mock_request.return_value = _ok()
        resp = self.client.post(
            "/api/v2/fdms/status",
            data=json.dumps({"action": "sync_offline_queue"}),
            content_type="application/json",
        )
        body = resp.json()
        self.assertEqual(body["message"], "Synchronized 2 transactions from offline queue")
        self.assertEqual(body["synchronized"], 2)

    def test_queue_listing(self):
        config = _make_config()
        _queue_invoices(config, 1)
        data = self.client.get("/api/v2/fdms/offline/").json()
        self.assertEqual(data["size"], 1)
        self.assertEqual(data["entries"][0]["invoiceNo"], "INV-0")
        self.assertEqual(data["entries"][0]["receiptGlobalNo"], "1")

    def test_sync_endpoint_requires_enabled_configuration(self):
        resp = self.client.post("/api/v2/fdms/offline/sync/")
        self.assertEqual(resp.status_code, 400)


class OfflineDetectorTests(TestCase):
    def test_detects_network_failures(self):
        self.assertTrue(OfflineDetector.is_offline_error("ZIMRA network error: ECONNREFUSED"))
        self.assertTrue(OfflineDetector.is_offline_error(requests.Timeout("Read timed out")))
        self.assertFalse(OfflineDetector.is_offline_error("Validation failed: Bad receipt"))
        self.assertFalse(OfflineDetector.is_offline_error(None))
