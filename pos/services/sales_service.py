"""POS sales and sales returns. Completed sales take stock out; completed returns put it back."""

import logging

from django.db import transaction

from pos.api_utils import iso, money
from pos.models import Sale, SaleItem, SalesReturn, SalesReturnItem
from pos.serializers import ValidationError
from pos.services import stock_service
from pos.services.document_utils import (
    line_fields,
    next_reference,
    require_customer,
    require_products,
    require_warehouse,
)

logger = logging.getLogger("pos")

ITEM_KEYS = ("product_id", "quantity", "unit_price", "discount", "tax", "subtotal")


def create_sale(values: dict, user=None) -> Sale:
    """Create a sale and its items. Reference defaults to SL-<ms>."""
    items = values.pop("items")
    require_customer(values.get("customer_id"))
    require_products(items)
    require_warehouse(values.get("warehouse_id"))
    reference = values.pop("reference", None)
    if reference and Sale.objects.filter(reference=reference).exists():
        raise ValidationError("Sale reference already exists", "reference")
    with transaction.atomic():
        sale = Sale.objects.create(
            reference=reference or next_reference(Sale, "SL"),
            created_by=user if user is not None and user.is_authenticated else None,
            **values,
        )
        SaleItem.objects.bulk_create([SaleItem(sale=sale, **line_fields(line, *ITEM_KEYS)) for line in items])
        if sale.status == "completed":
            stock_service.apply_items(items, sign=-1)
    logger.info("Sale %s created (%d items, total=%s)", sale.reference, len(items), sale.total)
    return sale


def update_sale(sale: Sale, values: dict) -> Sale:
    """Header update. Status changes into or out of completed move stock."""
    with transaction.atomic():
        sale = Sale.objects.select_for_update().get(pk=sale.pk)
        was_completed = sale.status == "completed"
        if "customer_id" in values:
            require_customer(values["customer_id"])
        for field, value in values.items():
            setattr(sale, field, value)
        sale.save()
        is_completed = sale.status == "completed"
        if was_completed != is_completed:
            stock_service.apply_items(sale.items.all(), sign=-1 if is_completed else 1)
    return sale


def delete_sale(sale: Sale) -> None:
    """Delete a sale and restore the stock it took."""
    if sale.returns.exists():
        raise ValidationError("Cannot delete sale with existing returns")
    with transaction.atomic():
        if sale.status == "completed":
            stock_service.apply_items(sale.items.all(), sign=1)
        sale.delete()
    logger.info("Sale %s deleted", sale.reference)


def serialize_sale_item(item: SaleItem) -> dict:
    return {
        "id": item.pk,
        "product_id": item.product_id,
        "product": {"name": item.product.name, "code": item.product.code},
        "quantity": item.quantity,
        "unit_price": money(item.unit_price),
        "discount": money(item.discount),
        "tax": money(item.tax),
        "subtotal": money(item.subtotal),
    }


def serialize_sale(sale: Sale, with_items=False) -> dict:
    data = {
        "id": sale.pk,
        "reference": sale.reference,
        "customer_id": sale.customer_id,
        "customer": {"name": sale.customer.name} if sale.customer_id else None,
        "warehouse_id": sale.warehouse_id,
        "date": iso(sale.date),
        "subtotal": money(sale.subtotal),
        "tax_rate": money(sale.tax_rate),
        "tax_amount": money(sale.tax_amount),
        "discount": money(sale.discount),
        "shipping": money(sale.shipping),
        "total": money(sale.total),
        "paid": money(sale.paid),
        "due": money(sale.due),
        "status": sale.status,
        "payment_status": sale.payment_status,
        "notes": sale.notes,
        "is_fiscalized": sale.is_fiscalized,
        "fiscal_transaction_id": sale.fiscal_transaction_id or None,
        "zimra_qr_code": sale.zimra_qr_code or None,
        "created_at": iso(sale.created_at),
    }
    if with_items:
        data["items"] = [serialize_sale_item(i) for i in sale.items.select_related("product")]
    return data


def create_sales_return(values: dict) -> SalesReturn:
    items = values.pop("items")
    require_products(items)
    sale_id = values.get("sale_id")
    if sale_id is not None:
        sale = Sale.objects.filter(pk=sale_id).first()
        if sale is None:
            raise ValidationError("Sale not found", "sale_id")
        if values.get("customer_id") is None:
            values["customer_id"] = sale.customer_id
    require_customer(values.get("customer_id"))
    reference = values.pop("reference", None) or next_reference(SalesReturn, "SR")
    with transaction.atomic():
        sales_return = SalesReturn.objects.create(reference=reference, **values)
        SalesReturnItem.objects.bulk_create([
            SalesReturnItem(sales_return=sales_return, **line_fields(line, "product_id", "quantity", "unit_price", "subtotal"))
            for line in items
        ])
        if sales_return.status == "completed":
            stock_service.apply_items(items, sign=1)
    logger.info("Sales return %s recorded", sales_return.reference)
    return sales_return


def serialize_sales_return(sales_return: SalesReturn) -> dict:
    return {
        "id": sales_return.pk,
        "reference": sales_return.reference,
        "sale_id": sales_return.sale_id,
        "customer_id": sales_return.customer_id,
        "customer": {"name": sales_return.customer.name} if sales_return.customer_id else None,
        "date": iso(sales_return.date),
        "total": money(sales_return.total),
        "status": sales_return.status,
        "reason": sales_return.reason,
        "items": [
            {"product_id": i.product_id, "quantity": i.quantity, "unit_price": money(i.unit_price), "subtotal": money(i.subtotal)}
            for i in sales_return.items.all()
        ],
    }
