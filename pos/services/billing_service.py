"""Quotations and invoices. Neither moves stock."""

import logging

from django.db import transaction

from pos.api_utils import iso, money
from pos.models import Invoice, InvoiceItem, Quotation, QuotationItem, Sale
from pos.serializers import ValidationError
from pos.services.document_utils import line_fields, next_reference, require_customer, require_products

logger = logging.getLogger("pos")

INVOICE_ITEM_KEYS = ("product_id", "quantity", "unit_price", "discount", "tax", "subtotal")


def _quotation_items(quotation, lines):
    QuotationItem.objects.bulk_create([QuotationItem(quotation=quotation, **line) for line in lines])


def create_quotation(values: dict) -> Quotation:
    items = values.pop("items", [])
    if Quotation.objects.filter(reference=values["reference"]).exists():
        raise ValidationError("Quotation reference already exists", "reference")
    require_customer(values["customer_id"], required=True)
    require_products(items)
    with transaction.atomic():
        quotation = Quotation.objects.create(**values)
        _quotation_items(quotation, items)
    logger.info("Quotation %s created", quotation.reference)
    return quotation


def update_quotation(quotation: Quotation, values: dict, replace_items: bool) -> Quotation:
    """PUT replaces the item list; PATCH (replace_items=False) leaves items alone unless given."""
    items = values.pop("items", None)
    reference = values.get("reference")
    if reference and reference != quotation.reference and Quotation.objects.filter(reference=reference).exists():
        raise ValidationError("Quotation reference already exists", "reference")
    if values.get("customer_id") is not None:
        require_customer(values["customer_id"])
    elif "customer_id" in values:
        values.pop("customer_id")
    if items is not None:
        require_products(items)
    with transaction.atomic():
        for field, value in values.items():
            setattr(quotation, field, value)
        quotation.save()
        if items is not None or replace_items:
            quotation.items.all().delete()
            _quotation_items(quotation, items or [])
    return quotation


def serialize_quotation(quotation: Quotation) -> dict:
    return {
        "id": quotation.pk,
        "reference": quotation.reference,
        "customer_id": quotation.customer_id,
        "customer": {"name": quotation.customer.name},
        "date": iso(quotation.date),
        "valid_until": iso(quotation.valid_until),
        "status": quotation.status,
        "subtotal": money(quotation.subtotal),
        "tax_amount": money(quotation.tax_amount),
        "discount": money(quotation.discount),
        "total": money(quotation.total),
        "notes": quotation.notes,
        "items": [
            {
                "id": i.pk,
                "product_id": i.product_id,
                "description": i.description,
                "quantity": i.quantity,
                "unit_price": money(i.unit_price),
                "total": money(i.total),
            }
            for i in quotation.items.all()
        ],
        "created_at": iso(quotation.created_at),
    }


def _check_invoice_links(values):
    require_customer(values.get("customer_id"))
    if values.get("sale_id") is not None and not Sale.objects.filter(pk=values["sale_id"]).exists():
        raise ValidationError("Sale not found", "sale_id")
    if values.get("quotation_id") is not None and not Quotation.objects.filter(pk=values["quotation_id"]).exists():
        raise ValidationError("Quotation not found", "quotation_id")


def create_invoice(values: dict, user=None) -> Invoice:
    """Reference defaults to INV-<ms>."""
    items = values.pop("items")
    _check_invoice_links(values)
    require_products(items)
    reference = values.pop("reference", None)
    if reference and Invoice.objects.filter(reference=reference).exists():
        raise ValidationError("Invoice reference already exists", "reference")
    with transaction.atomic():
        invoice = Invoice.objects.create(
            reference=reference or next_reference(Invoice, "INV"),
            created_by=user if user is not None and user.is_authenticated else None,
            **values,
        )
        InvoiceItem.objects.bulk_create(
            [InvoiceItem(invoice=invoice, **line_fields(line, *INVOICE_ITEM_KEYS)) for line in items]
        )
    logger.info("Invoice %s created", invoice.reference)
    return invoice


def replace_invoice(invoice: Invoice, values: dict) -> Invoice:
    """Full update: header fields replaced, items replaced."""
    items = values.pop("items")
    _check_invoice_links(values)
    require_products(items)
    reference = values.pop("reference", None)
    if reference and reference != invoice.reference:
        if Invoice.objects.filter(reference=reference).exists():
            raise ValidationError("Invoice reference already exists", "reference")
        invoice.reference = reference
    with transaction.atomic():
        for field, value in values.items():
            setattr(invoice, field, value)
        invoice.save()
        invoice.items.all().delete()
        InvoiceItem.objects.bulk_create(
            [InvoiceItem(invoice=invoice, **line_fields(line, *INVOICE_ITEM_KEYS)) for line in items]
        )
    return invoice


def serialize_invoice(invoice: Invoice, with_items=False) -> dict:
    data = {
        "id": invoice.pk,
        "reference": invoice.reference,
        "customer_id": invoice.customer_id,
        "customer_name": invoice.customer.name if invoice.customer_id else None,
        "sale_id": invoice.sale_id,
        "quotation_id": invoice.quotation_id,
        "date": iso(invoice.date),
        "due_date": iso(invoice.due_date),
        "subtotal": money(invoice.subtotal),
        "tax_rate": money(invoice.tax_rate),
        "tax_amount": money(invoice.tax_amount),
        "discount": money(invoice.discount),
        "shipping": money(invoice.shipping),
        "total": money(invoice.total),
        "paid": money(invoice.paid),
        "due": money(invoice.due),
        "status": invoice.status,
        "payment_status": invoice.payment_status,
        "notes": invoice.notes,
        "created_at": iso(invoice.created_at),
    }
    if with_items:
        data["items"] = [
            {
                "id": i.pk,
                "product_id": i.product_id,
                "product_name": i.product.name,
                "product_code": i.product.code,
                "quantity": i.quantity,
                "unit_price": money(i.unit_price),
                "discount": money(i.discount),
                "tax": money(i.tax),
                "subtotal": money(i.subtotal),
            }
            for i in invoice.items.select_related("product")
        ]
    return data


def serialize_invoice_line(item) -> dict:
    """Flat invoice line for the items endpoint."""
    return {
        "id": item.pk,
        "invoice_id": item.invoice_id,
        "product_id": item.product_id,
        "name": item.product.name,
        "code": item.product.code,
        "quantity": item.quantity,
        "unit_price": money(item.unit_price),
        "discount": money(item.discount),
        "tax": money(item.tax),
        "subtotal": money(item.subtotal),
    }


def serialize_quotation_line(item) -> dict:
    product = item.product
    return {
        "id": item.pk,
        "quotation_id": item.quotation_id,
        "product_id": item.product_id,
        "description": item.description,
        "quantity": item.quantity,
        "unit_price": money(item.unit_price),
        "total": money(item.total),
        "products": (
            {"id": product.pk, "name": product.name, "code": product.code, "price": money(product.price)}
            if product is not None else None
        ),
    }
