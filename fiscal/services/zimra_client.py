"""
ZIMRA FDMS client: receipt number allocation, SubmitReceipt and result mapping.

Lifecycle of a FiscalTransaction:
    pending (counters allocated) -> submitted -> confirmed
                                             -> failed (FDMS rejected)
                                             -> pending + offline queue (unreachable)

Global receipt numbers are allocated once per transaction under a row lock and
reused on every resubmission of that transaction.
"""

import hashlib
import logging
from decimal import Decimal

import requests
from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from fiscal.models import FiscalConfiguration, FiscalDevice, FiscalTransaction
from fiscal.serializers import ValidationError, validate_invoice_item
from fiscal.services.fdms_base import FDMSBaseService
from fiscal.services.fdms_events import emit_fdms_event
from fiscal.services.fdms_logger import log_fdms_call
from fiscal.services.http_client import fdms_request
from fiscal.services.qr_generator import generate_qr_base64, generate_receipt_qr_string, receipt_qr_data
from fiscal.utils import to_cents
from offline.services.queue_manager import QueueManager

logger = logging.getLogger("fiscal")


class FiscalError(Exception):
    """Controlled exception for fiscal submission errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def build_receipt_hash(
    device_id: str,
    receipt_type: str,
    currency: str,
    receipt_global_no: int,
    receipt_date: str,
    receipt_total: Decimal,
    previous_receipt_hash: str | None,
) -> str:
    """sha256 over the canonical receipt string, chained to the previous receipt."""
    canonical = (
        str(device_id)
        + receipt_type.upper()
        + currency.upper()
        + str(receipt_global_no)
        + receipt_date
        + str(to_cents(receipt_total))
        + (previous_receipt_hash or "")
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _error_detail(response) -> str:
    try:
        body = response.json()
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("title") or body.get("message") or body)
        return str(body)
    except ValueError:
        return response.text or f"HTTP {response.status_code}"


def _receipt_changed(txn: FiscalTransaction, content: dict) -> bool:
    return any(getattr(txn, field) != value for field, value in content.items())


def _sign(txn: FiscalTransaction, previous_receipt_hash: str | None) -> None:
    """Set receipt_hash and the SubmitReceipt body from the transaction's fields."""
    receipt_date = txn.receipt_date.strftime("%Y-%m-%dT%H:%M:%S")
    total = txn.receipt_total
    txn.receipt_hash = build_receipt_hash(
        txn.device.device_id,
        txn.receipt_type,
        txn.currency,
        txn.receipt_global_no,
        receipt_date,
        total,
        previous_receipt_hash,
    )
    txn.request_payload = {
        "receipt": {
            "receiptType": txn.receipt_type,
            "receiptCurrency": txn.currency,
            "receiptCounter": txn.receipt_counter,
            "receiptGlobalNo": txn.receipt_global_no,
            "invoiceNo": txn.invoice_no,
            "buyerData": txn.buyer_data,
            "receiptDate": receipt_date,
            "receiptLinesTaxInclusive": True,
            "receiptLines": [
                {
                    "receiptLineType": "Sale",
                    "receiptLineNo": i,
                    "receiptLineName": line["description"],
                    "receiptLinePrice": line["price"],
                    "receiptLineQuantity": line["quantity"],
                    "receiptLineTotal": line["total"],
                    "taxPercent": line["taxPercent"],
                }
                for i, line in enumerate(txn.items, start=1)
            ],
            "receiptTaxes": [
                {"taxAmount": str(txn.tax_amount), "salesAmountWithTax": str(total)},
            ],
            "receiptPayments": [{"moneyTypeCode": "Cash", "paymentAmount": str(total)}],
            "receiptTotal": str(total),
            "receiptDeviceSignature": {"hash": txn.receipt_hash},
        }
    }


class ZimraClient(FDMSBaseService):
    """Submits fiscal invoices for one configuration through its active device."""

    def __init__(self, configuration: FiscalConfiguration):
        self.configuration = configuration

    @classmethod
    def for_configuration(cls, configuration: FiscalConfiguration | None) -> "ZimraClient | None":
        """None when there is no configuration or no device was ever provisioned for it."""
        if configuration is None or not configuration.devices.exists():
            return None
        return cls(configuration)

    def active_device(self) -> FiscalDevice:
        """Raise FiscalError('... not initialized ...') unless FDMS is enabled with an active device."""
        if not self.configuration.is_fdms_enabled:
            raise FiscalError("FDMS client not initialized: FDMS mode is disabled", 503)
        device = self.configuration.active_device
        if device is None:
            raise FiscalError("FDMS client not initialized: no active fiscal device", 503)
        return device

    def submit_invoice(
        self,
        *,
        invoice_no: str,
        total: Decimal,
        items: list,
        tax_amount: Decimal = Decimal("0"),
        currency: str | None = None,
        receipt_type: str = "FiscalInvoice",
        buyer_data: dict | None = None,
        sale_id: str | None = None,
    ) -> dict:
        """
        Fiscalise an invoice. Idempotent per invoice number: a confirmed
        transaction is returned as-is, an unconfirmed one is resubmitted with
        its original receipt number. When the total, lines, tax, currency or
        buyer of an unconfirmed invoice changed, its payload and hash are
        rebuilt before sending.
        """
        device = self.active_device()
        try:
            lines = [validate_invoice_item(item) for item in items]
        except ValidationError as e:
            raise FiscalError(e.message, 422) from e

        txn = self._allocate(
            device,
            invoice_no=invoice_no,
            content={
                "receipt_total": Decimal(total),
                "tax_amount": Decimal(tax_amount or 0),
                "currency": currency or getattr(settings, "FDMS_DEFAULT_CURRENCY", "USD"),
                "receipt_type": receipt_type,
                "buyer_data": buyer_data,
                "items": lines,
            },
            sale_id=sale_id,
        )
        if txn.zimra_status == "confirmed":
            logger.info("Invoice %s already fiscalised, returning existing receipt", invoice_no)
            return self.result_for(txn)
        return self._transmit(txn)

    def resubmit(self, txn: FiscalTransaction) -> dict:
        """Send an allocated transaction again. Confirmed transactions are not resent."""
        if txn.zimra_status == "confirmed":
            return self.result_for(txn)
        self.active_device()
        return self._transmit(txn)

    def _allocate(self, device, *, invoice_no, content, sale_id):
        """
        Under the device row lock, return the invoice's allocated transaction
        or increment counters and create a pending one.
        """
        with transaction.atomic():
            device = FiscalDevice.objects.select_for_update().get(pk=device.pk)
            existing = (
                FiscalTransaction.objects.filter(configuration=self.configuration, invoice_no=invoice_no)
                .exclude(receipt_global_no__isnull=True)
                .select_related("device")
                .order_by("-created_at")
                .first()
            )
            if existing is not None:
                if existing.zimra_status != "confirmed" and _receipt_changed(existing, content):
                    self._rebuild(existing, content, sale_id)
                return existing

            FiscalDevice.objects.filter(pk=device.pk).update(
                global_receipt_counter=F("global_receipt_counter") + 1,
                daily_receipt_counter=F("daily_receipt_counter") + 1,
            )
            device.refresh_from_db(fields=["global_receipt_counter", "daily_receipt_counter"])
            txn = FiscalTransaction(
                configuration=self.configuration,
                device=device,
                receipt_global_no=device.global_receipt_counter,
                receipt_counter=device.daily_receipt_counter,
                invoice_no=invoice_no,
                sale_id=sale_id,
                receipt_date=timezone.now(),
                zimra_status="pending",
                **content,
            )
            _sign(txn, device.last_receipt_hash)
            txn.save()
            update_fields = ["last_receipt_hash", "updated_at"]
            device.last_receipt_hash = txn.receipt_hash
            if device.fiscal_day_opened is None:
                device.fiscal_day_opened = txn.receipt_date
                update_fields.append("fiscal_day_opened")
            device.save(update_fields=update_fields)
        logger.info(
            "Allocated receipt #%s for invoice %s", txn.receipt_global_no, invoice_no,
            extra={"device_id": device.device_id, "invoice_no": invoice_no},
        )
        return txn

    def _rebuild(self, txn: FiscalTransaction, content: dict, sale_id) -> None:
        """Re-sign a changed, unconfirmed receipt under its original numbers and date."""
        previous_hash = (
            FiscalTransaction.objects.filter(device=txn.device, receipt_global_no__lt=txn.receipt_global_no)
            .order_by("-receipt_global_no")
            .values_list("receipt_hash", flat=True)
            .first()
        )
        old_hash = txn.receipt_hash
        for field, value in content.items():
            setattr(txn, field, value)
        if sale_id is not None:
            txn.sale_id = sale_id
        _sign(txn, previous_hash)
        txn.error_message = None
        txn.save(update_fields=[*content, "sale_id", "receipt_hash", "request_payload", "error_message", "updated_at"])
        FiscalDevice.objects.filter(pk=txn.device_id, last_receipt_hash=old_hash).update(
            last_receipt_hash=txn.receipt_hash
        )
        logger.warning(
            "Invoice %s changed since receipt #%s was allocated, payload rebuilt",
            txn.invoice_no, txn.receipt_global_no,
            extra={"device_id": txn.device.device_id, "invoice_no": txn.invoice_no},
        )

    def _transmit(self, txn: FiscalTransaction) -> dict:
        device = txn.device
        path = f"/Device/v1/{device.device_id}/SubmitReceipt"
        url = f"{self.base_url(self.configuration)}{path}"

        txn.zimra_status = "submitted"
        txn.submitted_at = timezone.now()
        txn.save(update_fields=["zimra_status", "submitted_at", "updated_at"])

        try:
            response = fdms_request("POST", url, json=txn.request_payload, headers=self.headers())
        except (requests.ConnectionError, requests.Timeout) as e:
            log_fdms_call(path, "POST", txn.request_payload, error=e)
            self._go_offline(txn, device, str(e))
            raise FiscalError(f"ZIMRA network error: {e}", 503) from e

        log_fdms_call(path, "POST", txn.request_payload, response=response)

        if response.status_code >= 400:
            detail = _error_detail(response)
            txn.zimra_status = "failed"
            txn.error_message = detail
            txn.response_payload = {"status_code": response.status_code, "detail": detail}
            txn.save(update_fields=["zimra_status", "error_message", "response_payload", "updated_at"])
            logger.error(
                "SubmitReceipt rejected for invoice %s: %s", txn.invoice_no, detail,
                extra={"device_id": device.device_id, "status_code": response.status_code},
            )
            emit_fdms_event("receipt.failed", {"invoiceNo": txn.invoice_no, "error": detail})
            if response.status_code in (400, 422):
                raise FiscalError(f"Validation failed: {detail}", 422)
            raise FiscalError(f"FDMS server error (HTTP {response.status_code}): {detail}", response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = {}
        txn.response_payload = data if isinstance(data, dict) else {"body": data}
        txn.zimra_status = "confirmed"
        txn.confirmed_at = timezone.now()
        txn.error_message = None
        txn.verification_code = receipt_qr_data(txn.receipt_hash)
        txn.qr_code_url = generate_receipt_qr_string(txn)
        txn.save(update_fields=[
            "response_payload", "zimra_status", "confirmed_at", "error_message",
            "verification_code", "qr_code_url", "updated_at",
        ])
        if device.operating_mode != "Online":
            FiscalDevice.objects.filter(pk=device.pk).update(operating_mode="Online")
        QueueManager.resolve_transaction(txn)
        emit_fdms_event(
            "receipt.confirmed",
            {"invoiceNo": txn.invoice_no, "receiptGlobalNo": txn.receipt_global_no},
        )
        return self.result_for(txn)

    def _go_offline(self, txn: FiscalTransaction, device: FiscalDevice, reason: str) -> None:
        """Keep the transaction pending and park it in the offline queue."""
        txn.zimra_status = "pending"
        txn.error_message = reason
        txn.save(update_fields=["zimra_status", "error_message", "updated_at"])
        FiscalDevice.objects.filter(pk=device.pk).update(operating_mode="Offline")
        QueueManager.enqueue(txn, reason=reason)
        logger.warning(
            "ZIMRA unreachable, invoice %s queued offline: %s", txn.invoice_no, reason,
            extra={"device_id": device.device_id, "invoice_no": txn.invoice_no},
        )
        emit_fdms_event("receipt.queued", {"invoiceNo": txn.invoice_no})

    @staticmethod
    def result_for(txn: FiscalTransaction) -> dict:
        """Fiscal result returned to callers and stored on the sale."""
        receipt_date = timezone.localtime(txn.receipt_date) if txn.receipt_date else None
        return {
            "receiptGlobalNo": str(txn.receipt_global_no),
            "qrCode": {
                "data": {
                    "deviceId": txn.device.device_id if txn.device else None,
                    "receiptNo": str(txn.receipt_global_no),
                    "total": float(txn.receipt_total),
                    "date": receipt_date.isoformat() if receipt_date else None,
                    "verification": txn.verification_code,
                },
                "qrString": txn.qr_code_url,
                "qrCodeUrl": txn.qr_code_url,
                "qrImage": generate_qr_base64(txn.qr_code_url),
            },
            "verificationUrl": txn.qr_code_url,
            "signature": txn.receipt_hash,
            "status": txn.zimra_status,
            "transactionId": txn.pk,
        }
