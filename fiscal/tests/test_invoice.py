"""Fiscal invoice submission: non-FDMS receipts, ZIMRA client outcomes, sale annotation."""

import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import requests
from django.test import Client, TestCase, override_settings

from fiscal.models import FDMSApiLog, FiscalConfiguration, FiscalDevice, FiscalTransaction
from fiscal.services.invoice_service import annotate_sale, classify_submission_error
from fiscal.services.zimra_client import FiscalError, ZimraClient, build_receipt_hash
from offline.models import OfflineQueueEntry
from pos.models import Sale

INVOICE_URL = "/api/v2/fdms/invoice"
ITEMS = [{"description": "Bread", "quantity": 2, "price": "50.00", "taxPercent": "15"}]


def _make_config(enabled=True, device_status="Active"):
    config = FiscalConfiguration.objects.create(
        taxpayer_tin="1234567890",
        business_name="Acme",
        business_type="retail",
        branch_name="Main",
        branch_address="1 Rd",
        is_fdms_enabled=enabled,
    )
    device = None
    if device_status:
        device = FiscalDevice.objects.create(
            configuration=config,
            device_id="VFD_1234567890_1700000000000",
            device_serial_no="SN5678900000",
            status=device_status,
            global_receipt_counter=41,
            daily_receipt_counter=3,
        )
    return config, device


def _response(status_code=200, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body if body is not None else {}
    resp.text = json.dumps(body if body is not None else {})
    return resp


class InvoiceApiTests(TestCase):
    def setUp(self):
        self.client = Client()

    def _post(self, body):
        return self.client.post(INVOICE_URL, data=json.dumps(body), content_type="application/json")

    def test_missing_fields(self):
        resp = self._post({"invoiceNo": "INV-1", "items": ITEMS})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Missing required fields: invoiceNo, total, items")

    def test_empty_items(self):
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": []})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invoice must contain at least one item")

    def test_non_fdms_receipt_leaves_counters(self):
        _, device = _make_config(enabled=False)
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": [{"name": "anything"}]})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        data = body["data"]
        self.assertFalse(data["fdmsMode"])
        self.assertEqual(data["status"], "non_fdms_mode")
        self.assertEqual(data["message"], "Receipt generated in non-FDMS mode")
        self.assertTrue(data["receiptGlobalNo"].isdigit())
        self.assertGreater(int(data["receiptGlobalNo"]), 1_600_000_000_000)
        self.assertEqual(data["qrCode"]["data"]["deviceId"], "NON-FDMS")
        self.assertEqual(data["qrCode"]["data"]["verification"], "NON-FDMS-MODE")
        self.assertEqual(data["qrCode"]["qrCodeUrl"], "")

        device.refresh_from_db()
        self.assertEqual(device.global_receipt_counter, 41)
        self.assertEqual(device.daily_receipt_counter, 3)
        self.assertFalse(FiscalTransaction.objects.exists())

    def test_non_fdms_without_any_configuration(self):
        resp = self._post({"invoiceNo": "INV-1", "total": 10, "items": ITEMS})
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["data"]["fdmsMode"])

    def test_enabled_without_device_is_unavailable(self):
        _make_config(enabled=True, device_status=None)
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": ITEMS})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["error"], "ZIMRA client not available. Please configure FDMS first.")

    @override_settings(FDMS_DEBUG_ERRORS=False)
    def test_pending_device_not_initialized(self):
        _make_config(enabled=True, device_status="Pending")
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": ITEMS})
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json(), {"error": "FDMS service not properly configured"})

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_fdms_success(self, mock_request):
        mock_request.return_value = _response(200, {"receiptID": 9001, "serverDate": "2026-01-01T10:00:00"})
        _, device = _make_config()
        resp = self._post({"invoiceNo": "INV-1", "total": "100.00", "items": ITEMS})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertTrue(data["fdmsMode"])
        self.assertEqual(data["status"], "confirmed")
        self.assertEqual(data["receiptGlobalNo"], "42")
        self.assertTrue(data["verificationUrl"].startswith("https://invoice.zimra.co.zw/"))
        self.assertTrue(data["qrCode"]["qrImage"])

        device.refresh_from_db()
        self.assertEqual(device.global_receipt_counter, 42)
        self.assertEqual(device.daily_receipt_counter, 4)
        self.assertEqual(device.operating_mode, "Online")
        txn = FiscalTransaction.objects.get()
        self.assertEqual(txn.zimra_status, "confirmed")
        self.assertEqual(len(txn.verification_code), 16)
        self.assertEqual(device.last_receipt_hash, txn.receipt_hash)

        url = mock_request.call_args[0][1]
        self.assertEqual(url, f"https://fdmsapitest.zimra.co.zw/Device/v1/{device.device_id}/SubmitReceipt")
        self.assertEqual(FDMSApiLog.objects.filter(status_code=200).count(), 1)

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_network_error_queues_offline(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("ECONNREFUSED")
        _, device = _make_config()
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": ITEMS})
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["error"], "ZIMRA service temporarily unavailable")

        txn = FiscalTransaction.objects.get()
        self.assertEqual(txn.zimra_status, "pending")
        self.assertIn("ECONNREFUSED", txn.error_message)
        entry = OfflineQueueEntry.objects.get()
        self.assertEqual(entry.status, "pending")
        self.assertEqual(entry.transaction, txn)
        device.refresh_from_db()
        self.assertEqual(device.operating_mode, "Offline")

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_validation_rejection(self, mock_request):
        mock_request.return_value = _response(422, {"title": "Invalid receipt total"})
        _make_config()
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": ITEMS})
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["error"], "Invoice data validation failed")
        txn = FiscalTransaction.objects.get()
        self.assertEqual(txn.zimra_status, "failed")
        self.assertEqual(txn.error_message, "Invalid receipt total")

    @patch("fiscal.services.zimra_client.fdms_request")
    @override_settings(FDMS_DEBUG_ERRORS=True)
    def test_server_error_includes_details_in_debug(self, mock_request):
        mock_request.return_value = _response(500, {"detail": "Internal"})
        _make_config()
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": ITEMS})
        self.assertEqual(resp.status_code, 500)
        body = resp.json()
        self.assertIn("FDMS server error (HTTP 500)", body["error"])
        self.assertIn("FDMS server error (HTTP 500)", body["details"])
        self.assertEqual(FiscalTransaction.objects.get().zimra_status, "failed")

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_corrected_invoice_resent_with_new_content(self, mock_request):
        mock_request.side_effect = [
            _response(422, {"title": "Invalid receipt total"}),
            _response(200, {"receiptID": 1}),
        ]
        _, device = _make_config()
        resp = self._post({"invoiceNo": "INV-9", "total": 100, "items": [{"description": "A", "price": "100.00"}]})
        self.assertEqual(resp.status_code, 422)
        first_hash = FiscalTransaction.objects.get().receipt_hash

        resp = self._post({"invoiceNo": "INV-9", "total": 120, "items": [{"description": "B", "price": "120.00"}]})
        self.assertEqual(resp.status_code, 200)
        sent = mock_request.call_args.kwargs["json"]["receipt"]
        self.assertEqual(sent["receiptTotal"], "120")
        self.assertEqual([line["receiptLineName"] for line in sent["receiptLines"]], ["B"])
        self.assertEqual(sent["receiptGlobalNo"], 42)

        txn = FiscalTransaction.objects.get()
        self.assertEqual((txn.zimra_status, txn.receipt_total), ("confirmed", Decimal("120")))
        self.assertNotEqual(txn.receipt_hash, first_hash)
        self.assertEqual(sent["receiptDeviceSignature"]["hash"], txn.receipt_hash)
        device.refresh_from_db()
        self.assertEqual(device.global_receipt_counter, 42)
        self.assertEqual(device.last_receipt_hash, txn.receipt_hash)

    def test_zero_total_is_missing(self):
        resp = self._post({"invoiceNo": "INV-1", "total": 0, "items": ITEMS})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Missing required fields: invoiceNo, total, items")
        resp = self._post({"invoiceNo": "INV-1", "total": "0.00", "items": ITEMS})
        self.assertEqual(resp.status_code, 400)

    def test_invalid_line_item_rejected_in_fdms_mode(self):
        _make_config()
        resp = self._post({"invoiceNo": "INV-1", "total": 100, "items": [{"description": "x", "quantity": 0}]})
        self.assertEqual(resp.status_code, 422)
        self.assertFalse(FiscalTransaction.objects.exists())

    def test_list_transactions(self):
        config, device = _make_config()
        FiscalTransaction.objects.create(
            configuration=config, device=device, receipt_global_no=1, invoice_no="INV-A",
            receipt_date="2026-01-01T10:00:00Z", receipt_total=Decimal("10"), zimra_status="confirmed",
        )
        FiscalTransaction.objects.create(
            configuration=config, device=device, receipt_global_no=2, invoice_no="INV-B",
            receipt_date="2026-01-02T10:00:00Z", receipt_total=Decimal("20"), zimra_status="failed",
        )
        resp = self.client.get(INVOICE_URL)
        data = resp.json()["data"]
        self.assertEqual([t["invoice_no"] for t in data["transactions"]], ["INV-B", "INV-A"])
        self.assertEqual(data["summary"]["totalTransactions"], 2)
        self.assertTrue(data["summary"]["fdmsEnabled"])

        resp = self.client.get(INVOICE_URL, {"status": "failed", "limit": 10})
        self.assertEqual(len(resp.json()["data"]["transactions"]), 1)

    def test_list_without_configuration(self):
        resp = self.client.get(INVOICE_URL)
        self.assertEqual(resp.json()["data"]["summary"]["configStatus"], "not_configured")


class ZimraClientTests(TestCase):
    @patch("fiscal.services.zimra_client.fdms_request")
    def test_idempotent_per_invoice_number(self, mock_request):
        mock_request.return_value = _response(200, {"receiptID": 1})
        config, device = _make_config()
        client = ZimraClient.for_configuration(config)
        first = client.submit_invoice(invoice_no="INV-1", total=Decimal("100"), items=ITEMS)
        second = client.submit_invoice(invoice_no="INV-1", total=Decimal("100"), items=ITEMS)
        self.assertEqual(first["receiptGlobalNo"], second["receiptGlobalNo"])
        self.assertEqual(mock_request.call_count, 1)
        device.refresh_from_db()
        self.assertEqual(device.global_receipt_counter, 42)

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_resubmission_reuses_receipt_number(self, mock_request):
        mock_request.side_effect = [requests.Timeout("timed out"), _response(200, {"receiptID": 1})]
        config, device = _make_config()
        client = ZimraClient.for_configuration(config)
        with self.assertRaises(FiscalError) as ctx:
            client.submit_invoice(invoice_no="INV-1", total=Decimal("100"), items=ITEMS)
        self.assertEqual(ctx.exception.status_code, 503)
        result = client.submit_invoice(invoice_no="INV-1", total=Decimal("100"), items=ITEMS)
        self.assertEqual(result["receiptGlobalNo"], "42")
        self.assertEqual(FiscalTransaction.objects.count(), 1)
        self.assertEqual(OfflineQueueEntry.objects.get().status, "synchronized")
        device.refresh_from_db()
        self.assertEqual(device.global_receipt_counter, 42)

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_counters_increase_by_one_per_invoice(self, mock_request):
        mock_request.return_value = _response(200, {})
        config, device = _make_config()
        client = ZimraClient.for_configuration(config)
        numbers = [
            client.submit_invoice(invoice_no=f"INV-{i}", total=Decimal("1"), items=ITEMS)["receiptGlobalNo"]
            for i in range(3)
        ]
        self.assertEqual(numbers, ["42", "43", "44"])

    @patch("fiscal.services.zimra_client.fdms_request")
    def test_unchanged_failed_invoice_keeps_payload(self, mock_request):
        mock_request.side_effect = [_response(500, {"detail": "Internal"}), _response(200, {})]
        config, _ = _make_config()
        client = ZimraClient.for_configuration(config)
        with self.assertRaises(FiscalError):
            client.submit_invoice(invoice_no="INV-1", total=Decimal("100"), items=ITEMS)
        payload = FiscalTransaction.objects.get().request_payload
        client.submit_invoice(invoice_no="INV-1", total=Decimal("100.00"), items=ITEMS)
        self.assertEqual(mock_request.call_args.kwargs["json"], payload)

    def test_disabled_configuration_not_initialized(self):
        config, _ = _make_config(enabled=False)
        client = ZimraClient.for_configuration(config)
        with self.assertRaisesMessage(FiscalError, "not initialized"):
            client.submit_invoice(invoice_no="INV-1", total=Decimal("1"), items=ITEMS)

    def test_receipt_hash_chains_previous(self):
        first = build_receipt_hash("VFD_1", "FiscalInvoice", "USD", 1, "2026-01-01T10:00:00", Decimal("10"), None)
        chained = build_receipt_hash("VFD_1", "FiscalInvoice", "USD", 1, "2026-01-01T10:00:00", Decimal("10"), first)
        self.assertEqual(len(first), 64)
        self.assertNotEqual(first, chained)


class ErrorClassificationTests(TestCase):
    def test_rules(self):
        self.assertEqual(
            classify_submission_error("FDMS client not initialized: no active fiscal device"),
            (503, "FDMS service not properly configured"),
        )
        self.assertEqual(
            classify_submission_error("Validation failed: item quantity must be > 0"),
            (422, "Invoice data validation failed"),
        )
        self.assertEqual(
            classify_submission_error("ZIMRA network error: timed out"),
            (503, "ZIMRA service temporarily unavailable"),
        )
        self.assertEqual(
            classify_submission_error("connect ECONNREFUSED 127.0.0.1:443"),
            (503, "ZIMRA service temporarily unavailable"),
        )
        self.assertEqual(classify_submission_error(""), (500, "Failed to process fiscal invoice"))
        self.assertEqual(classify_submission_error("boom"), (500, "boom"))


class SaleAnnotationTests(TestCase):
    def setUp(self):
        self.client = Client()

    def test_non_fdms_submission_stamps_sale(self):
        sale = Sale.objects.create(reference="SL-1", total=Decimal("100"))
        resp = self.client.post(
            INVOICE_URL,
            data=json.dumps({"invoiceNo": "INV-1", "total": 100, "items": ITEMS, "saleId": sale.pk}),
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 200)
        sale.refresh_from_db()
        self.assertTrue(sale.is_fiscalized)
        self.assertEqual(sale.fiscal_transaction_id, resp.json()["data"]["receiptGlobalNo"])
        self.assertEqual(json.loads(sale.zimra_qr_code)["data"]["deviceId"], "NON-FDMS")

    def test_unknown_sale_does_not_fail_submission(self):
        resp = self.client.post(
            INVOICE_URL,
            data=json.dumps({"invoiceNo": "INV-1", "total": 100, "items": ITEMS, "saleId": 999}),
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["success"])

    def test_annotation_errors_are_swallowed(self):
        sale = Sale.objects.create(reference="SL-1", total=Decimal("100"))
        with patch("django.db.models.query.QuerySet.update", side_effect=RuntimeError("db down")):
            self.assertFalse(annotate_sale(sale.pk, "42", {"qrString": "x"}))
        sale.refresh_from_db()
        self.assertFalse(sale.is_fiscalized)

    def test_non_numeric_sale_id(self):
        self.assertFalse(annotate_sale("abc", "42", {}))
