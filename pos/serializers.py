"""Request validation for retail endpoints. Pure functions: no database access."""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from pos.models import (
    ADJUSTMENT_TYPES,
    INVOICE_STATUSES,
    PAYMENT_STATUSES,
    PURCHASE_STATUSES,
    QUOTATION_STATUSES,
    RETURN_STATUSES,
    SALE_STATUSES,
    STATUS_CHOICES,
    UNIT_OPERATORS,
)

ZERO = Decimal("0")


class ValidationError(Exception):
    def __init__(self, message, field=None):
        self.message = message
        self.field = field
        super().__init__(message)


def _choices(choices):
    return {key for key, _ in choices}


def _to_decimal(value, default=ZERO):
    try:
        return Decimal(str(value)) if value is not None and value != "" else default
    except (InvalidOperation, TypeError, ValueError):
        return default


def _text(data, key, default=""):
    value = data.get(key)
    return str(value).strip() if value is not None else default


def _optional_id(value, field):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field)


def _datetime(value):
    """ISO date or datetime string to an aware datetime; now() when absent."""
    if isinstance(value, datetime):
        parsed = value
    elif value:
        parsed = parse_datetime(str(value))
        if parsed is None:
            day = parse_date(str(value))
            if day is None:
                raise ValidationError("Invalid date", "date")
            parsed = datetime(day.year, day.month, day.day)
    else:
        return timezone.now()
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _date(value, field="date"):
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    text = str(value)
    parsed = parse_date(text[:10])
    if parsed is None:
        raise ValidationError(f"Invalid {field}", field)
    return parsed


def _choice(value, choices, default):
    return value if value in _choices(choices) else default


def validate_party(data, partial=False):
    """Customer or supplier fields. Name is required on create and full update."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    for key in ("name", "email", "phone", "address", "city", "country", "tax_number"):
        if key in data or not partial:
            fields[key] = _text(data, key)
    if not partial and not fields["name"]:
        raise ValidationError("Name is required", "name")
    if partial and "name" in fields and not fields["name"]:
        raise ValidationError("Name cannot be empty", "name")
    if "status" in data:
        if data["status"] not in _choices(STATUS_CHOICES):
            raise ValidationError("Invalid status", "status")
        fields["status"] = data["status"]
    return fields


ORGANIZATION_FIELDS = (
    "name", "email", "phone", "address", "city", "country", "tax_number", "registration_number",
    "website", "currency", "currency_symbol", "invoice_prefix", "quotation_prefix",
    "invoice_footer", "terms_conditions", "bank_name", "bank_account",
)


def validate_organization(data, partial=False):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {key: _text(data, key) for key in ORGANIZATION_FIELDS if key in data}
    if not partial and not fields.get("name"):
        raise ValidationError("Organization name is required", "name")
    if partial and "name" in fields and not fields["name"]:
        raise ValidationError("Organization name cannot be empty", "name")
    if "currency" in fields:
        fields["currency"] = fields["currency"].upper()[:3] or "USD"
    return fields


def validate_brand(data, partial=False):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    if "name" in data or not partial:
        fields["name"] = _text(data, "name")
        if not fields["name"]:
            raise ValidationError("Missing required fields", "name")
    if "description" in data:
        fields["description"] = _text(data, "description")
    if "status" in data:
        fields["status"] = _choice(data["status"], STATUS_CHOICES, "active")
    return fields


def validate_category(data, partial=False):
    """Code and name trimmed. Uniqueness is checked against the database by the caller."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    for key, label in (("code", "Category code"), ("name", "Category name")):
        if partial and key not in data:
            continue
        value = _text(data, key)
        if not value:
            message = f"{label} cannot be empty" if partial else f"{label} is required"
            raise ValidationError(message, key)
        fields[key] = value
    if "description" in data or not partial:
        fields["description"] = _text(data, "description")
    if "status" in data:
        if data["status"] not in _choices(STATUS_CHOICES):
            raise ValidationError("Invalid status", "status")
        fields["status"] = data["status"]
    return fields


def validate_product(data, partial=False):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    for key in ("code", "name", "description"):
        if key in data:
            fields[key] = _text(data, key)
    if "category_id" in data:
        fields["category_id"] = _optional_id(data.get("category_id"), "category_id")
    if "brand_id" in data:
        fields["brand_id"] = _optional_id(data.get("brand_id"), "brand_id")
    for key in ("unit_id", "warehouse_id"):
        if key in data:
            fields[key] = _optional_id(data.get(key), key)
    if not partial and not (fields.get("code") and fields.get("name") and fields.get("category_id")):
        raise ValidationError("Missing required fields: code, name, category_id")
    if partial and any(key in fields and not fields[key] for key in ("code", "name", "category_id")):
        raise ValidationError("code, name and category_id cannot be empty")
    for key in ("cost", "price", "tax_percent"):
        if key in data:
            amount = _to_decimal(data.get(key), None)
            if amount is None or amount < 0:
                raise ValidationError(f"{key} must be a number >= 0", key)
            fields[key] = amount
    for key in ("stock", "alert_quantity"):
        if key in data:
            try:
                fields[key] = int(data.get(key) or 0)
            except (TypeError, ValueError):
                raise ValidationError(f"{key} must be an integer", key)
    if "status" in data:
        fields["status"] = _choice(data["status"], STATUS_CHOICES, "active")
    return fields


def validate_line_items(items, price_key="unit_price", with_adjustments=True):
    """
    Product lines. subtotal = price * quantity - discount + tax.
    Returns dicts with product_id, quantity, <price_key>, subtotal (+ discount, tax).
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("At least one item is required", "items")
    lines = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Item must be an object", "items")
        product_id = _optional_id(item.get("product_id"), "product_id")
        if product_id is None:
            raise ValidationError("product_id is required", "items")
        try:
            quantity = int(item.get("quantity", 1))
        except (TypeError, ValueError):
            raise ValidationError("Quantity must be an integer", "items")
        if quantity <= 0:
            raise ValidationError("Quantity must be > 0", "items")
        price = _to_decimal(item.get(price_key), None)
        if price is None or price < 0:
            raise ValidationError(f"{price_key} must be >= 0", "items")
        line = {"product_id": product_id, "quantity": quantity, price_key: price}
        subtotal = price * quantity
        if with_adjustments:
            line["discount"] = _to_decimal(item.get("discount"))
            line["tax"] = _to_decimal(item.get("tax"))
            subtotal = subtotal - line["discount"] + line["tax"]
        line["subtotal"] = subtotal
        lines.append(line)
    return lines


def _document_totals(data, keys=("subtotal", "tax_amount", "discount", "shipping", "total", "paid", "due")):
    return {key: _to_decimal(data.get(key)) for key in keys if key in data}


def validate_sale(data):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    if data.get("total") in (None, "") or data.get("items") is None:
        raise ValidationError("Missing required fields: total, items")
    fields = _document_totals(data)
    fields.update({
        "reference": _text(data, "reference") or None,
        "customer_id": _optional_id(data.get("customer_id"), "customer_id"),
        "warehouse_id": _optional_id(data.get("warehouse_id"), "warehouse_id"),
        "date": _datetime(data.get("date")),
        "tax_rate": _to_decimal(data.get("tax_rate")),
        "status": _choice(data.get("status"), SALE_STATUSES, "completed"),
        "payment_status": _choice(data.get("payment_status"), PAYMENT_STATUSES, "paid"),
        "notes": _text(data, "notes"),
        "items": validate_line_items(data.get("items")),
    })
    return fields


def validate_sale_update(data):
    """PUT /pos/sales: header fields only, keyed by reference."""
    if not isinstance(data, dict) or not _text(data, "reference"):
        raise ValidationError("Missing reference", "reference")
    fields = _document_totals(data)
    if "customer_id" in data:
        fields["customer_id"] = _optional_id(data.get("customer_id"), "customer_id")
    if "date" in data:
        fields["date"] = _datetime(data.get("date"))
    if "status" in data:
        if data["status"] not in _choices(SALE_STATUSES):
            raise ValidationError("Invalid status", "status")
        fields["status"] = data["status"]
    if "payment_status" in data:
        fields["payment_status"] = _choice(data["payment_status"], PAYMENT_STATUSES, "paid")
    if "notes" in data:
        fields["notes"] = _text(data, "notes")
    return _text(data, "reference"), fields


def validate_purchase(data):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    supplier_id = _optional_id(data.get("supplier_id"), "supplier_id")
    if supplier_id is None:
        raise ValidationError("Supplier is required", "supplier_id")
    fields = _document_totals(data)
    fields.update({
        "reference": _text(data, "reference") or None,
        "supplier_id": supplier_id,
        "warehouse_id": _optional_id(data.get("warehouse_id"), "warehouse_id"),
        "date": _datetime(data.get("date")),
        "status": _choice(data.get("status"), PURCHASE_STATUSES, "received"),
        "payment_status": _choice(data.get("payment_status"), PAYMENT_STATUSES, "unpaid"),
        "notes": _text(data, "notes"),
        "items": validate_line_items(data.get("items"), price_key="unit_cost"),
    })
    return fields


def validate_purchase_status(data):
    status = data.get("status") if isinstance(data, dict) else None
    if status not in _choices(PURCHASE_STATUSES):
        raise ValidationError("Invalid status", "status")
    return status


def validate_return(data, party_field, price_key):
    """Sales return (customer_id, unit_price) or purchase return (supplier_id, unit_cost)."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    party_id = _optional_id(data.get(party_field), party_field)
    source_field = "sale_id" if party_field == "customer_id" else "purchase_id"
    if party_field == "supplier_id" and party_id is None:
        raise ValidationError("Supplier is required", party_field)
    lines = validate_line_items(data.get("items"), price_key=price_key, with_adjustments=False)
    total = _to_decimal(data.get("total"), None)
    if total is None:
        total = sum((line["subtotal"] for line in lines), ZERO)
    return {
        "reference": _text(data, "reference") or None,
        party_field: party_id,
        source_field: _optional_id(data.get(source_field), source_field),
        "date": _datetime(data.get("date")),
        "status": _choice(data.get("status"), RETURN_STATUSES, "completed"),
        "reason": _text(data, "reason"),
        "total": total,
        "items": lines,
    }


def validate_adjustment(data):
    if not isinstance(data, dict) or not isinstance(data.get("items"), list) or not data.get("items"):
        raise ValidationError("Missing required fields")
    adjustment_type = _choice(data.get("type"), ADJUSTMENT_TYPES, "addition")
    items = []
    for item in data["items"]:
        if not isinstance(item, dict):
            raise ValidationError("Item must be an object", "items")
        product_id = _optional_id(item.get("product_id"), "product_id")
        try:
            quantity = int(item.get("quantity", 0))
        except (TypeError, ValueError):
            quantity = 0
        if product_id is None or quantity <= 0:
            raise ValidationError("Missing required fields")
        items.append({
            "product_id": product_id,
            "quantity": quantity,
            "type": _choice(item.get("type"), ADJUSTMENT_TYPES, adjustment_type),
        })
    return {
        "date": _datetime(data.get("date")),
        "type": adjustment_type,
        "notes": _text(data, "notes"),
        "items": items,
    }


def validate_quotation_items(items):
    lines = []
    for item in items or []:
        if not isinstance(item, dict):
            raise ValidationError("Item must be an object", "items")
        quantity = _to_decimal(item.get("quantity"), Decimal("1"))
        unit_price = _to_decimal(item.get("unit_price", item.get("unitPrice")))
        total = item.get("total")
        lines.append({
            "product_id": _optional_id(item.get("product_id", item.get("productId")), "product_id"),
            "description": _text(item, "description")[:255],
            "quantity": int(quantity) if quantity > 0 else 1,
            "unit_price": unit_price,
            "total": _to_decimal(total) if total not in (None, "") else unit_price * quantity,
        })
    return lines


def validate_quotation(data, partial=False):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = _document_totals(data, keys=("subtotal", "tax_amount", "discount", "total"))
    if "reference" in data or not partial:
        fields["reference"] = _text(data, "reference")
    if "customer_id" in data or "customerId" in data or not partial:
        fields["customer_id"] = _optional_id(data.get("customer_id", data.get("customerId")), "customer_id")
    if not partial and not (fields["reference"] and fields["customer_id"]):
        raise ValidationError("Reference and customer ID are required")
    if partial and ("reference" in fields and not fields["reference"]):
        raise ValidationError("Reference cannot be empty", "reference")
    if "valid_until" in data:
        fields["valid_until"] = _date(data.get("valid_until"), "valid_until")
    if "notes" in data:
        fields["notes"] = _text(data, "notes")
    if "status" in data:
        if data["status"] not in _choices(QUOTATION_STATUSES):
            raise ValidationError("Invalid status", "status")
        fields["status"] = data["status"]
    if "items" in data or not partial:
        fields["items"] = validate_quotation_items(data.get("items"))
    return fields


def validate_invoice(data):
    """Unknown status falls back to pending, unknown payment status to unpaid."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = _document_totals(data)
    fields.update({
        "reference": _text(data, "reference") or None,
        "customer_id": _optional_id(data.get("customer_id"), "customer_id"),
        "sale_id": _optional_id(data.get("sale_id"), "sale_id"),
        "quotation_id": _optional_id(data.get("quotation_id"), "quotation_id"),
        "date": _date(data.get("date")) or timezone.localdate(),
        "due_date": _date(data.get("due_date"), "due_date"),
        "tax_rate": _to_decimal(data.get("tax_rate")),
        "status": _choice(data.get("status"), INVOICE_STATUSES, "pending"),
        "payment_status": _choice(data.get("payment_status"), PAYMENT_STATUSES, "unpaid"),
        "notes": _text(data, "notes"),
        "items": validate_line_items(data.get("items")) if data.get("items") else [],
    })
    return fields


def _labelled_text(data, key, label, partial):
    """Trimmed required text; "<label> is required" on create, "<label> cannot be empty" on partial update."""
    value = _text(data, key)
    if not value:
        raise ValidationError(f"{label} cannot be empty" if partial else f"{label} is required", key)
    return value


def _positive_decimal(data, key, label, partial):
    value = data.get(key)
    if value is None:
        if partial:
            raise ValidationError(f"{label} must be a positive number", key)
        raise ValidationError(f"{label} is required", key)
    amount = _to_decimal(value, None)
    if amount is None or amount <= 0:
        raise ValidationError(f"{label} must be a positive number", key)
    return amount


def _status(data, fields):
    if "status" in data:
        if data["status"] not in _choices(STATUS_CHOICES):
            raise ValidationError("Invalid status", "status")
        fields["status"] = data["status"]


def validate_unit(data, partial=False):
    """
    Unit fields. base_unit is an id, or "-"/empty for none. Existence of the
    base unit and name uniqueness are checked by the caller.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    for key, label in (("name", "Unit name"), ("short_name", "Unit short name"), ("operator", "Unit operator")):
        if key in data or not partial:
            fields[key] = _labelled_text(data, key, label, partial)
    if "operator" in fields and fields["operator"] not in _choices(UNIT_OPERATORS):
        raise ValidationError("Unit operator must be one of: *, /, +, -", "operator")
    if "operation_value" in data or not partial:
        fields["operation_value"] = _positive_decimal(data, "operation_value", "Operation value", partial)
    if "base_unit" in data or not partial:
        base_unit = data.get("base_unit")
        fields["base_unit_id"] = None if base_unit in (None, "", "-") else _optional_id(base_unit, "base_unit")
    _status(data, fields)
    return fields


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

WAREHOUSE_REQUIRED = (
    ("name", "Warehouse name"),
    ("phone", "Warehouse phone"),
    ("email", "Warehouse email"),
    ("city", "City"),
    ("country", "Country"),
)


def validate_warehouse(data, partial=False):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    for key, label in WAREHOUSE_REQUIRED:
        if key in data or not partial:
            fields[key] = _labelled_text(data, key, label, partial)
    if "email" in fields and not EMAIL_RE.match(fields["email"]):
        raise ValidationError("Invalid email format", "email")
    for key in ("address", "zip_code"):
        if key in data:
            fields[key] = _text(data, key)
    _status(data, fields)
    return fields


def validate_currency(data, partial=False):
    """Code is upper-cased. Exchange rate must be > 0."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    for key, label in (("code", "Currency code"), ("name", "Currency name"), ("symbol", "Currency symbol")):
        if key in data or not partial:
            fields[key] = _labelled_text(data, key, label, partial)
    if "code" in fields:
        fields["code"] = fields["code"].upper()
    if "exchange_rate" in data or not partial:
        fields["exchange_rate"] = _positive_decimal(data, "exchange_rate", "Exchange rate", partial)
    _status(data, fields)
    return fields
