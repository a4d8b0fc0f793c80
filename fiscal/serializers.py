"""Request validation for FDMS endpoints. Validation runs before any write."""

import re
from decimal import Decimal, InvalidOperation

CONFIG_REQUIRED_FIELDS = ("taxpayerTIN", "businessName", "businessType", "branchName", "branchAddress")
TIN_RE = re.compile(r"^[0-9]{10}$")

STATUS_ACTIONS = ("sync_offline_queue", "retry_failed", "reset_daily_counter")


class ValidationError(Exception):
    def __init__(self, message, field=None):
        self.message = message
        self.field = field
        super().__init__(message)


def _to_decimal(value, default=None):
    try:
        return Decimal(str(value)) if value is not None and value != "" else default
    except (InvalidOperation, TypeError, ValueError):
        return default


def _to_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def validate_config_payload(data):
    """
    Validate POST /fdms/config body. Returns normalized model kwargs.
    taxpayerTIN must be exactly 10 ASCII digits.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    values = {k: str(data.get(k) or "").strip() for k in CONFIG_REQUIRED_FIELDS}
    if not all(values.values()):
        raise ValidationError("Missing required fields: " + ", ".join(CONFIG_REQUIRED_FIELDS))
    if not TIN_RE.match(values["taxpayerTIN"]):
        raise ValidationError("TIN must be exactly 10 digits", "taxpayerTIN")
    return {
        "taxpayer_tin": values["taxpayerTIN"],
        "vat_registration_no": (str(data.get("vatRegistrationNo") or "").strip() or None),
        "business_name": values["businessName"],
        "business_type": values["businessType"],
        "branch_name": values["branchName"],
        "branch_address": values["branchAddress"],
        "test_environment": _to_bool(data.get("testEnvironment"), True),
        "is_fdms_enabled": _to_bool(data.get("isFDMSEnabled"), False),
    }


def validate_toggle_payload(data):
    if not isinstance(data, dict) or "isFDMSEnabled" not in data:
        raise ValidationError("isFDMSEnabled is required", "isFDMSEnabled")
    return _to_bool(data.get("isFDMSEnabled"), False)


def validate_invoice_item(item):
    """Line item as submitted to FDMS. description, quantity > 0, price >= 0."""
    if not isinstance(item, dict):
        raise ValidationError("Validation failed: item must be an object", "items")
    description = str(item.get("description") or item.get("name") or item.get("item_name") or "").strip()
    if not description:
        raise ValidationError("Validation failed: item description is required", "items")
    quantity = _to_decimal(item.get("quantity", 1))
    if quantity is None or quantity <= 0:
        raise ValidationError("Validation failed: item quantity must be > 0", "items")
    price = _to_decimal(item.get("price", item.get("unitPrice", item.get("unit_price", 0))))
    if price is None or price < 0:
        raise ValidationError("Validation failed: item price must be >= 0", "items")
    tax_percent = _to_decimal(item.get("taxPercent", item.get("tax_percent")), Decimal("0"))
    return {
        "description": description[:200],
        "quantity": str(quantity),
        "price": str(price.quantize(Decimal("0.01"))),
        "taxPercent": str(tax_percent.quantize(Decimal("0.01"))),
        "total": str((quantity * price).quantize(Decimal("0.01"))),
    }


def validate_invoice_payload(data):
    """
    Validate POST /fdms/invoice body. Presence checks only: line-level checks
    belong to the ZIMRA client so non-FDMS receipts accept free-form items.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    invoice_no = data.get("invoiceNo")
    total = data.get("total")
    items = data.get("items")
    if not invoice_no or total is None or total == "" or items is None:
        raise ValidationError("Missing required fields: invoiceNo, total, items")
    if not isinstance(items, list) or len(items) == 0:
        raise ValidationError("Invoice must contain at least one item", "items")
    total_dec = _to_decimal(total)
    if total_dec is None:
        raise ValidationError("Validation failed: total must be a number", "total")
    if total_dec == 0:
        raise ValidationError("Missing required fields: invoiceNo, total, items")
    sale_id = data.get("saleId")
    return {
        "invoice_no": str(invoice_no).strip(),
        "total": total_dec,
        "items": items,
        "tax_amount": _to_decimal(data.get("taxAmount"), Decimal("0")),
        "currency": str(data.get("currency") or "").strip().upper() or None,
        "receipt_type": str(data.get("receiptType") or "FiscalInvoice"),
        "buyer_data": data.get("buyerData") if isinstance(data.get("buyerData"), dict) else None,
        "sale_id": str(sale_id) if sale_id not in (None, "") else None,
    }


def validate_status_action(data):
    action = data.get("action") if isinstance(data, dict) else None
    if action not in STATUS_ACTIONS:
        raise ValidationError(
            "Invalid action. Supported actions: " + ", ".join(STATUS_ACTIONS), "action"
        )
    return action
