"""Celery task behaviour: pending resubmission, daily reset, sale reconciliation."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.test import TestCase
from django.utils import timezone

from fiscal.models import FiscalConfiguration, FiscalDevice, FiscalTransaction
from fiscal.services.zimra_client import build_receipt_hash
from fiscal.tasks import process_pending_transactions, reconcile_fiscalized_sales, reset_daily_counters
from offline.models import OfflineQueueEntry
from pos.models import Sale


def _make_device(enabled=True):
    config = FiscalConfiguration.objects.create(
        taxpayer_tin="1234567890",
        business_name="Acme",
        business_type="retail",
        branch_name="Main",
        branch_address="1 Rd",
        is_fdms_enabled=enabled,
    )
    return FiscalDevice.objects.create(
        configuration=config,
        device_id="VFD_1234567890_1",
        device_serial_no="SN5678900001",
        status="Active",
        global_receipt_counter=10,
        daily_receipt_counter=4,
    )


def _make_txn(device, global_no, status="pending", sale_id=None):
    receipt_date = timezone.now()
    receipt_hash = build_receipt_hash(
        device.device_id, "FiscalInvoice", "USD", global_no,
        receipt_date.strftime("%Y-%m-%dT%H:%M:%S"), Decimal("5.00"), None,
    )
    return FiscalTransaction.objects.create(
        configuration=device.configuration,
        device=device,
        receipt_global_no=global_no,
        receipt_counter=1,
        invoice_no=f"INV-{global_no}",
        sale_id=sale_id,
        receipt_date=receipt_date,
        receipt_total=Decimal("5.00"),
        request_payload={"receipt": {"receiptGlobalNo": global_no}},
        receipt_hash=receipt_hash,
        zimra_status=status,
    )


class ProcessPendingTransactionsTests(TestCase):
    @patch("fiscal.services.zimra_client.fdms_request")
    def test_resubmits_pending_outside_offline_queue(self, mock_request):
        mock_request.return_value = MagicMock(status_code=200, text="{}", json=MagicMock(return_value={}))
        device = _make_device()
        retried = _make_txn(device, 5)
        queued = _make_txn(device, 6)
        OfflineQueueEntry.objects.create(configuration=device.configuration, transaction=queued, invoice_no="INV-6")

        result = process_pending_transactions()

        self.assertEqual(result, {"confirmed": 1, "failed": 0})
        retried.refresh_from_db()
        queued.refresh_from_db()
        self.assertEqual(retried.zimra_status, "confirmed")
        self.assertEqual(retried.receipt_global_no, 5)
        self.assertEqual(queued.zimra_status, "pending")
        device.refresh_from_db()
        self.assertEqual(device.global_receipt_counter, 10)

    def test_skips_disabled_configuration(self):
        device = _make_device(enabled=False)
        _make_txn(device, 5)
        self.assertEqual(process_pending_transactions(), {"confirmed": 0, "failed": 0})


class ResetDailyCountersTaskTests(TestCase):
    def test_resets_every_configuration(self):
        device = _make_device()
        result = reset_daily_counters()
        device.refresh_from_db()
        self.assertEqual(device.daily_receipt_counter, 0)
        self.assertEqual(device.global_receipt_counter, 10)
        self.assertEqual(result["devices"], 1)


class ReconcileFiscalizedSalesTests(TestCase):
    def test_stamps_sale_missed_by_best_effort_update(self):
        device = _make_device()
        sale = Sale.objects.create(reference="SL-1", total=Decimal("5.00"))
        stamped = Sale.objects.create(reference="SL-2", total=Decimal("5.00"), is_fiscalized=True)
        _make_txn(device, 7, status="confirmed", sale_id=str(sale.pk))
        _make_txn(device, 8, status="confirmed", sale_id=str(stamped.pk))
        _make_txn(device, 9, status="failed", sale_id=str(sale.pk))

        result = reconcile_fiscalized_sales()

        self.assertEqual(result, {"repaired": 1})
        sale.refresh_from_db()
        self.assertTrue(sale.is_fiscalized)
        self.assertEqual(sale.fiscal_transaction_id, "7")
        self.assertIn("deviceId", sale.zimra_qr_code)

    def test_ignores_unknown_sales(self):
        device = _make_device()
        _make_txn(device, 7, status="confirmed", sale_id="12345")
        _make_txn(device, 8, status="confirmed", sale_id="not-a-pk")
        self.assertEqual(reconcile_fiscalized_sales(), {"repaired": 0})
