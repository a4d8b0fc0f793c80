"""Helpers shared by sales, purchase and billing documents."""

from fiscal.utils import now_ms
from pos.models import Customer, Product, Supplier, Warehouse
from pos.serializers import ValidationError


def next_reference(model, prefix: str) -> str:
    """<prefix>-<ms>, bumped past any reference already taken."""
    ms = now_ms()
    while model.objects.filter(reference=f"{prefix}-{ms}").exists():
        ms += 1
    return f"{prefix}-{ms}"


def require_products(lines) -> None:
    """Raise ValidationError naming the first product id that does not exist."""
    ids = {line["product_id"] for line in lines if line.get("product_id") is not None}
    found = set(Product.objects.filter(pk__in=ids).values_list("pk", flat=True))
    for line in lines:
        product_id = line.get("product_id")
        if product_id is not None and product_id not in found:
            raise ValidationError(f"Product {product_id} not found", "items")


def require_customer(customer_id, required=False):
    if customer_id is None:
        if required:
            raise ValidationError("Customer is required", "customer_id")
        return
    if not Customer.objects.filter(pk=customer_id).exists():
        raise ValidationError("Customer not found", "customer_id")


def require_supplier(supplier_id):
    if not Supplier.objects.filter(pk=supplier_id).exists():
        raise ValidationError("Supplier not found", "supplier_id")


def require_warehouse(warehouse_id):
    if warehouse_id is not None and not Warehouse.objects.filter(pk=warehouse_id).exists():
        raise ValidationError("Warehouse not found", "warehouse_id")


def line_fields(line: dict, *keys) -> dict:
    return {key: line[key] for key in keys if key in line}
