"""
Invoice submission coordinator.
Chooses FDMS or non-FDMS handling, then best-effort stamps the originating sale.
"""

import json
import logging

from django.apps import apps
from django.utils import timezone

from fiscal.models import FiscalTransaction
from fiscal.services.config_service import get_current_configuration
from fiscal.services.zimra_client import FiscalError, ZimraClient
from fiscal.utils import now_ms

logger = logging.getLogger("fiscal")

# (substrings, http status, public message); first match wins.
SUBMISSION_ERROR_RULES = (
    (("not initialized",), 503, "FDMS service not properly configured"),
    (("Validation",), 422, "Invoice data validation failed"),
    (("network", "ECONNREFUSED"), 503, "ZIMRA service temporarily unavailable"),
)


def classify_submission_error(message: str) -> tuple[int, str]:
    """Map a submission error message to (status_code, public_message)."""
    for needles, status_code, public_message in SUBMISSION_ERROR_RULES:
        if any(needle in message for needle in needles):
            return status_code, public_message
    return 500, message or "Failed to process fiscal invoice"


def build_non_fdms_receipt(total) -> dict:
    """
    Local receipt used while FDMS is disabled. The receipt number is the
    current millisecond timestamp; device counters are not touched.
    """
    receipt_no = now_ms()
    date = timezone.now().isoformat()
    return {
        "receiptGlobalNo": str(receipt_no),
        "qrCode": {
            "data": {
                "deviceId": "NON-FDMS",
                "receiptNo": str(receipt_no),
                "total": float(total),
                "date": date,
                "verification": "NON-FDMS-MODE",
            },
            "qrString": json.dumps({"mode": "NON-FDMS", "receiptNo": receipt_no, "total": float(total), "date": date}),
            "qrCodeUrl": "",
        },
        "verificationUrl": None,
        "status": "non_fdms_mode",
        "message": "Receipt generated in non-FDMS mode",
    }


def annotate_sale(sale_id, receipt_global_no: str, qr_code: dict) -> bool:
    """
    Stamp the sale with fiscal metadata. Never raises: the fiscal result stands
    even when the sale cannot be updated; reconcile_fiscalized_sales repairs it.
    """
    Sale = apps.get_model("pos", "Sale")
    try:
        updated = Sale.objects.filter(pk=sale_id).update(
            is_fiscalized=True,
            fiscal_transaction_id=receipt_global_no,
            zimra_qr_code=json.dumps(qr_code),
        )
    except Exception:
        logger.exception("Failed to update sale %s with fiscal data", sale_id)
        return False
    if not updated:
        logger.warning("Sale %s not found for fiscal annotation", sale_id)
        return False
    logger.info("Updated sale %s with fiscal data", sale_id)
    return True


def submit_invoice(invoice: dict) -> dict:
    """
    Submit a validated invoice (see validate_invoice_payload).
    Returns the response `data` dict. Raises FiscalError on failure.
    """
    config = get_current_configuration()
    fdms_mode = bool(config and config.is_fdms_enabled)

    if fdms_mode:
        client = ZimraClient.for_configuration(config)
        if client is None:
            raise FiscalError("ZIMRA client not available. Please configure FDMS first.", 500)
        result = client.submit_invoice(
            invoice_no=invoice["invoice_no"],
            total=invoice["total"],
            items=invoice["items"],
            tax_amount=invoice["tax_amount"],
            currency=invoice["currency"],
            receipt_type=invoice["receipt_type"],
            buyer_data=invoice["buyer_data"],
            sale_id=invoice["sale_id"],
        )
    else:
        result = build_non_fdms_receipt(invoice["total"])
        logger.info("Invoice %s receipted in non-FDMS mode", invoice["invoice_no"])

    if invoice["sale_id"]:
        annotate_sale(invoice["sale_id"], result["receiptGlobalNo"], result["qrCode"])

    return {
        "receiptGlobalNo": result.get("receiptGlobalNo"),
        "qrCode": result.get("qrCode"),
        "verificationUrl": result.get("verificationUrl"),
        "status": result.get("status") or "confirmed",
        "fdmsMode": fdms_mode,
        "message": result.get("message"),
    }


def serialize_transaction(txn: FiscalTransaction) -> dict:
    buyer = txn.buyer_data or {}
    return {
        "id": txn.pk,
        "receipt_global_no": str(txn.receipt_global_no) if txn.receipt_global_no is not None else None,
        "receipt_type": txn.receipt_type,
        "invoice_no": txn.invoice_no,
        "receipt_total": float(txn.receipt_total),
        "tax_amount": float(txn.tax_amount),
        "receipt_date": txn.receipt_date.isoformat() if txn.receipt_date else None,
        "zimra_status": txn.zimra_status,
        "buyer_name": buyer.get("buyerRegisterName") or buyer.get("name"),
        "device_id": txn.device.device_id if txn.device else None,
        "error_message": txn.error_message,
        "retry_count": txn.retry_count,
        "sale_id": txn.sale_id,
    }


def list_transactions(limit: int = 50, status: str | None = None) -> dict:
    qs = FiscalTransaction.objects.select_related("device").order_by("-receipt_date")
    if status:
        qs = qs.filter(zimra_status=status)
    transactions = [serialize_transaction(t) for t in qs[:limit]]
    config = get_current_configuration()
    return {
        "transactions": transactions,
        "summary": {
            "totalTransactions": len(transactions),
            "fdmsEnabled": bool(config and config.is_fdms_enabled),
            "configStatus": config.status if config else "not_configured",
        },
    }
