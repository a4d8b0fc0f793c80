"""Purchases and purchase returns. Stock is received only while a purchase is in status received."""

import logging

from django.db import transaction

from pos.api_utils import iso, money
from pos.models import Purchase, PurchaseItem, PurchaseReturn, PurchaseReturnItem
from pos.serializers import ValidationError
from pos.services import stock_service
from pos.services.document_utils import (
    line_fields,
    next_reference,
    require_products,
    require_supplier,
    require_warehouse,
)

logger = logging.getLogger("pos")

ITEM_KEYS = ("product_id", "quantity", "unit_cost", "discount", "tax", "subtotal")


def create_purchase(values: dict, user=None) -> Purchase:
    items = values.pop("items")
    require_supplier(values["supplier_id"])
    require_products(items)
    require_warehouse(values.get("warehouse_id"))
    reference = values.pop("reference", None)
    if reference and Purchase.objects.filter(reference=reference).exists():
        raise ValidationError("Purchase reference already exists", "reference")
    with transaction.atomic():
        purchase = Purchase.objects.create(
            reference=reference or next_reference(Purchase, "PR"),
            created_by=user if user is not None and user.is_authenticated else None,
            **values,
        )
        PurchaseItem.objects.bulk_create(
            [PurchaseItem(purchase=purchase, **line_fields(line, *ITEM_KEYS)) for line in items]
        )
        if purchase.status == "received":
            stock_service.apply_items(items, sign=1)
    logger.info("Purchase %s created (status=%s)", purchase.reference, purchase.status)
    return purchase


def set_purchase_status(purchase: Purchase, status: str) -> Purchase:
    with transaction.atomic():
        purchase = Purchase.objects.select_for_update().get(pk=purchase.pk)
        was_received = purchase.status == "received"
        purchase.status = status
        purchase.save(update_fields=["status", "updated_at"])
        if was_received != (status == "received"):
            stock_service.apply_items(purchase.items.all(), sign=1 if status == "received" else -1)
    return purchase


def delete_purchase(purchase: Purchase) -> None:
    if purchase.returns.exists():
        raise ValidationError("Cannot delete purchase with existing returns")
    with transaction.atomic():
        if purchase.status == "received":
            stock_service.apply_items(purchase.items.all(), sign=-1)
        purchase.delete()


def serialize_purchase(purchase: Purchase, with_items=False) -> dict:
    data = {
        "id": purchase.pk,
        "reference": purchase.reference,
        "supplier_id": purchase.supplier_id,
        "supplier": {"name": purchase.supplier.name},
        "warehouse_id": purchase.warehouse_id,
        "date": iso(purchase.date),
        "subtotal": money(purchase.subtotal),
        "tax_amount": money(purchase.tax_amount),
        "discount": money(purchase.discount),
        "shipping": money(purchase.shipping),
        "total": money(purchase.total),
        "paid": money(purchase.paid),
        "due": money(purchase.due),
        "status": purchase.status,
        "payment_status": purchase.payment_status,
        "notes": purchase.notes,
        "created_at": iso(purchase.created_at),
    }
    if with_items:
        data["items"] = [
            {
                "id": i.pk,
                "product_id": i.product_id,
                "product": {"name": i.product.name, "code": i.product.code},
                "quantity": i.quantity,
                "unit_cost": money(i.unit_cost),
                "discount": money(i.discount),
                "tax": money(i.tax),
                "subtotal": money(i.subtotal),
            }
            for i in purchase.items.select_related("product")
        ]
    return data


def create_purchase_return(values: dict) -> PurchaseReturn:
    items = values.pop("items")
    require_supplier(values["supplier_id"])
    require_products(items)
    purchase_id = values.get("purchase_id")
    if purchase_id is not None and not Purchase.objects.filter(pk=purchase_id).exists():
        raise ValidationError("Purchase not found", "purchase_id")
    reference = values.pop("reference", None) or next_reference(PurchaseReturn, "PRT")
    with transaction.atomic():
        purchase_return = PurchaseReturn.objects.create(reference=reference, **values)
        PurchaseReturnItem.objects.bulk_create([
            PurchaseReturnItem(
                purchase_return=purchase_return,
                **line_fields(line, "product_id", "quantity", "unit_cost", "subtotal"),
            )
            for line in items
        ])
        if purchase_return.status == "completed":
            stock_service.apply_items(items, sign=-1)
    logger.info("Purchase return %s recorded", purchase_return.reference)
    return purchase_return


def serialize_purchase_return(purchase_return: PurchaseReturn) -> dict:
    return {
        "id": purchase_return.pk,
        "reference": purchase_return.reference,
        "purchase_id": purchase_return.purchase_id,
        "supplier_id": purchase_return.supplier_id,
        "supplier": {"name": purchase_return.supplier.name},
        "date": iso(purchase_return.date),
        "total": money(purchase_return.total),
        "status": purchase_return.status,
        "reason": purchase_return.reason,
        "items": [
            {"product_id": i.product_id, "quantity": i.quantity, "unit_cost": money(i.unit_cost), "subtotal": money(i.subtotal)}
            for i in purchase_return.items.all()
        ],
    }
