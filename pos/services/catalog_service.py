"""Parties, catalog and organization: output shapes, uniqueness and delete guards."""

import logging

from pos.api_utils import iso, money
from pos.models import Brand, Category, Customer, Organization, Product, Supplier, Unit

logger = logging.getLogger("pos")

DEFAULT_ORGANIZATION_NAME = "Your Company Name"

# model -> ((related manager, message), ...). Checked in order before delete.
DELETE_GUARDS = {
    Customer: (
        ("sales", "Cannot delete customer with existing sales"),
        ("quotations", "Cannot delete customer with existing quotations"),
        ("invoices", "Cannot delete customer with existing invoices"),
        ("returns", "Cannot delete customer with existing returns"),
    ),
    Supplier: (
        ("purchases", "Cannot delete supplier with existing purchases"),
        ("returns", "Cannot delete supplier with existing returns"),
    ),
    Brand: (
        ("products", "Cannot delete brand with associated products"),
    ),
    Category: (
        ("products", "Cannot delete category with associated products. Please reassign or delete the products first."),
    ),
    Unit: (
        ("products", "Cannot delete unit with associated products. Please reassign or delete the products first."),
        ("sub_units", "Cannot delete unit with sub-units. Please reassign or delete the sub-units first."),
    ),
    Product: (
        ("sale_items", "Cannot delete product with existing sales"),
        ("purchase_items", "Cannot delete product with existing purchases"),
        ("invoice_items", "Cannot delete product with existing invoices"),
        ("quotation_items", "Cannot delete product with existing quotations"),
        ("adjustment_items", "Cannot delete product with stock adjustments"),
        ("sales_return_items", "Cannot delete product with existing returns"),
        ("purchase_return_items", "Cannot delete product with existing returns"),
    ),
}


def delete_blocker(obj) -> str | None:
    """Message explaining why `obj` cannot be deleted, or None when it has no dependents."""
    for relation, message in DELETE_GUARDS.get(type(obj), ()):
        if getattr(obj, relation).exists():
            return message
    return None


def category_conflict(code: str | None, name: str | None, exclude_pk=None) -> str | None:
    """Case-insensitive duplicate check for category code and name."""
    qs = Category.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if code and qs.filter(code__iexact=code).exists():
        return "Category with this code already exists"
    if name and qs.filter(name__iexact=name).exists():
        return "Category with this name already exists"
    return None


def get_or_create_organization() -> Organization:
    org = Organization.objects.order_by("pk").first()
    if org is None:
        org = Organization.objects.create(name=DEFAULT_ORGANIZATION_NAME)
        logger.info("Created default organization record")
    return org


def serialize_party(party) -> dict:
    return {
        "id": party.pk,
        "name": party.name,
        "email": party.email,
        "phone": party.phone,
        "address": party.address,
        "city": party.city,
        "country": party.country,
        "tax_number": party.tax_number,
        "status": party.status,
        "created_at": iso(party.created_at),
    }


def serialize_organization(org: Organization) -> dict:
    return {
        "id": org.pk,
        "name": org.name,
        "email": org.email,
        "phone": org.phone,
        "address": org.address,
        "city": org.city,
        "country": org.country,
        "tax_number": org.tax_number,
        "registration_number": org.registration_number,
        "website": org.website,
        "currency": org.currency,
        "currency_symbol": org.currency_symbol,
        "invoice_prefix": org.invoice_prefix,
        "quotation_prefix": org.quotation_prefix,
        "invoice_footer": org.invoice_footer,
        "terms_conditions": org.terms_conditions,
        "bank_name": org.bank_name,
        "bank_account": org.bank_account,
        "updated_at": iso(org.updated_at),
    }


def serialize_brand(brand: Brand) -> dict:
    return {
        "id": brand.pk,
        "name": brand.name,
        "description": brand.description,
        "status": brand.status,
        "created_at": iso(brand.created_at),
    }


def serialize_category(category: Category, with_products=False) -> dict:
    data = {
        "id": category.pk,
        "code": category.code,
        "name": category.name,
        "description": category.description,
        "status": category.status,
        "created_at": iso(category.created_at),
        "updated_at": iso(category.updated_at),
    }
    if with_products:
        data["products"] = [
            {"id": p.pk, "name": p.name, "code": p.code, "status": p.status}
            for p in category.products.order_by("name")[:10]
        ]
    else:
        data["product_count"] = getattr(category, "product_count", None)
    return data


def serialize_product(product: Product) -> dict:
    return {
        "id": product.pk,
        "code": product.code,
        "name": product.name,
        "description": product.description,
        "category_id": product.category_id,
        "category": {"name": product.category.name} if product.category_id else None,
        "brand_id": product.brand_id,
        "brand": {"name": product.brand.name} if product.brand_id else None,
        "unit_id": product.unit_id,
        "unit": {"name": product.unit.name, "short_name": product.unit.short_name} if product.unit_id else None,
        "warehouse_id": product.warehouse_id,
        "warehouse": {"name": product.warehouse.name} if product.warehouse_id else None,
        "cost": money(product.cost),
        "price": money(product.price),
        "tax_percent": money(product.tax_percent),
        "stock": product.stock,
        "alert_quantity": product.alert_quantity,
        "status": product.status,
        "created_at": iso(product.created_at),
    }
