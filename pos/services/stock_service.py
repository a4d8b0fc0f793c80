"""
Product stock movements. Every change is an F() increment so concurrent
requests never lose an update; callers wrap multi-item changes in a transaction.
"""

import logging

from django.db import transaction
from django.db.models import F

from pos.models import Adjustment, AdjustmentItem, Product
from pos.services.document_utils import next_reference, require_products

logger = logging.getLogger("pos")


def change_stock(product_id, delta: int) -> None:
    if not delta:
        return
    Product.objects.filter(pk=product_id).update(stock=F("stock") + delta)


def apply_items(items, sign: int, quantity_attr: str = "quantity") -> None:
    """Move stock by sign * quantity for each item (model instances or dicts with product_id)."""
    for item in items:
        if isinstance(item, dict):
            product_id, quantity = item["product_id"], item[quantity_attr]
        else:
            product_id, quantity = item.product_id, getattr(item, quantity_attr)
        change_stock(product_id, sign * int(quantity))


def apply_adjustment_items(items, revert: bool = False) -> None:
    for item in items:
        delta = item.stock_delta
        change_stock(item.product_id, -delta if revert else delta)


def low_stock_products(threshold: int):
    """Active products at or below `threshold` units."""
    return Product.objects.filter(status="active", stock__lte=threshold).order_by("stock", "name")


def create_adjustment(values: dict, user=None):
    items = values.pop("items")
    require_products(items)
    with transaction.atomic():
        adjustment = Adjustment.objects.create(
            reference=next_reference(Adjustment, "ADJ"),
            created_by=user if user is not None and user.is_authenticated else None,
            **values,
        )
        created = AdjustmentItem.objects.bulk_create([AdjustmentItem(adjustment=adjustment, **item) for item in items])
        apply_adjustment_items(created)
    logger.info("Stock adjustment %s applied (%d items)", adjustment.reference, len(items))
    return adjustment


def replace_adjustment(adjustment, values: dict):
    """
    Revert the old items' stock, drop them, update the header and apply the
    new items. All or nothing.
    """
    items = values.pop("items")
    require_products(items)
    with transaction.atomic():
        apply_adjustment_items(adjustment.items.all(), revert=True)
        adjustment.items.all().delete()
        for field, value in values.items():
            setattr(adjustment, field, value)
        adjustment.save()
        created = AdjustmentItem.objects.bulk_create([AdjustmentItem(adjustment=adjustment, **item) for item in items])
        apply_adjustment_items(created)
    return adjustment


def delete_adjustment(adjustment) -> None:
    with transaction.atomic():
        apply_adjustment_items(adjustment.items.all(), revert=True)
        adjustment.delete()


def serialize_adjustment(adjustment, with_items=False) -> dict:
    items = list(adjustment.items.select_related("product"))
    data = {
        "id": adjustment.pk,
        "reference": adjustment.reference,
        "date": adjustment.date.isoformat() if adjustment.date else None,
        "type": adjustment.type,
        "notes": adjustment.notes,
        "item_count": len(items),
        "created_at": adjustment.created_at.isoformat() if adjustment.created_at else None,
    }
    if with_items:
        data["items"] = [
            {
                "id": i.pk,
                "product_id": i.product_id,
                "product_code": i.product.code,
                "product_name": i.product.name,
                "quantity": i.quantity,
                "type": i.type,
            }
            for i in items
        ]
    return data
