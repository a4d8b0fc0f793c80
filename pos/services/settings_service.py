"""Units, warehouses and currencies: output shapes, uniqueness and delete guards."""

from pos.api_utils import iso, money
from pos.models import Currency, Unit, Warehouse

# Unique fields per model, compared ignoring case: (field, message).
UNIQUE_FIELDS = {
    Unit: (
        ("name", "Unit with this name already exists"),
        ("short_name", "Unit with this short name already exists"),
    ),
    Warehouse: (
        ("name", "Warehouse with this name already exists"),
        ("email", "Warehouse with this email already exists"),
    ),
    Currency: (
        ("code", "Currency with this code already exists"),
        ("name", "Currency with this name already exists"),
    ),
}

WAREHOUSE_RELATIONS = ("products", "sales", "purchases")


def unique_conflict(model, fields: dict, exclude_pk=None) -> str | None:
    qs = model.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    for field, message in UNIQUE_FIELDS[model]:
        value = fields.get(field)
        if value and qs.filter(**{f"{field}__iexact": value}).exists():
            return message
    return None


def base_unit_problem(base_unit_id, unit_pk=None) -> str | None:
    if base_unit_id is None:
        return None
    if not Unit.objects.filter(pk=base_unit_id).exists():
        return "Base unit not found"
    if unit_pk is not None and base_unit_id == unit_pk:
        return "Unit cannot be its own base unit"
    return None


def warehouse_blocker(warehouse: Warehouse) -> str | None:
    """Names every kind of record still pointing at the warehouse."""
    associations = [name for name in WAREHOUSE_RELATIONS if getattr(warehouse, name).exists()]
    if not associations:
        return None
    return (
        f"Cannot delete warehouse with associated {', '.join(associations)}. "
        "Please reassign or delete them first."
    )


def serialize_unit(unit: Unit, detail=False) -> dict:
    data = {
        "id": unit.pk,
        "name": unit.name,
        "short_name": unit.short_name,
        "base_unit": unit.base_unit_id,
        "base_unit_relation": (
            {"id": unit.base_unit_id, "name": unit.base_unit.name, "short_name": unit.base_unit.short_name}
            if unit.base_unit_id else None
        ),
        "operator": unit.operator,
        "operation_value": float(unit.operation_value),
        "status": unit.status,
        "created_at": iso(unit.created_at),
        "updated_at": iso(unit.updated_at),
    }
    if detail:
        data["products"] = [
            {"id": p.pk, "name": p.name, "code": p.code, "status": p.status}
            for p in unit.products.order_by("name")[:10]
        ]
        data["sub_units"] = [
            {
                "id": sub.pk,
                "name": sub.name,
                "short_name": sub.short_name,
                "operator": sub.operator,
                "operation_value": float(sub.operation_value),
            }
            for sub in unit.sub_units.all()
        ]
    else:
        data["_count"] = {
            "products": getattr(unit, "product_count", 0),
            "sub_units": getattr(unit, "sub_unit_count", 0),
        }
    return data


def serialize_warehouse(warehouse: Warehouse) -> dict:
    data = {
        "id": warehouse.pk,
        "name": warehouse.name,
        "phone": warehouse.phone,
        "email": warehouse.email,
        "address": warehouse.address,
        "city": warehouse.city,
        "country": warehouse.country,
        "zip_code": warehouse.zip_code,
        "status": warehouse.status,
        "created_at": iso(warehouse.created_at),
        "updated_at": iso(warehouse.updated_at),
    }
    if hasattr(warehouse, "product_count"):
        data["_count"] = {
            "products": warehouse.product_count,
            "sales": warehouse.sale_count,
            "purchases": warehouse.purchase_count,
        }
    return data


def serialize_currency(currency: Currency) -> dict:
    return {
        "id": currency.pk,
        "code": currency.code,
        "name": currency.name,
        "symbol": currency.symbol,
        "exchange_rate": money(currency.exchange_rate),
        "status": currency.status,
        "created_at": iso(currency.created_at),
        "updated_at": iso(currency.updated_at),
    }
