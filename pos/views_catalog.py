"""Brand, category and product JSON API."""

import logging

from django.db.models import Count
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from pos.api_utils import object_id, paginate, parse_body
from pos.models import Brand, Category, Product, Unit, Warehouse
from pos.serializers import ValidationError, validate_brand, validate_category, validate_product
from pos.services.catalog_service import (
    category_conflict,
    delete_blocker,
    serialize_brand,
    serialize_category,
    serialize_product,
)

logger = logging.getLogger("pos")


def _delete(obj, message):
    blocker = delete_blocker(obj)
    if blocker:
        return JsonResponse({"error": blocker}, status=400)
    obj.delete()
    return JsonResponse({"message": message, "success": True})


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "DELETE"])
def api_brands(request):
    if request.method == "GET":
        if request.GET.get("id"):
            brand = Brand.objects.filter(pk=object_id(request)).first()
            if brand is None:
                return JsonResponse({"error": "Brand not found"}, status=404)
            return JsonResponse(serialize_brand(brand))
        return JsonResponse(paginate(request, Brand.objects.all(), serialize_brand, ("name", "description")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Missing id"}, status=400)
        brand = Brand.objects.filter(pk=pk).first()
        if brand is None:
            return JsonResponse({"error": "Brand not found"}, status=404)
        return _delete(brand, "Brand deleted successfully")

    body, err = parse_body(request)
    if err:
        return err
    try:
        if request.method == "POST":
            brand = Brand.objects.create(**validate_brand(body))
            return JsonResponse(serialize_brand(brand), status=201)

        pk = object_id(request, body)
        if pk is None:
            return JsonResponse({"error": "Missing id"}, status=400)
        brand = Brand.objects.filter(pk=pk).first()
        if brand is None:
            return JsonResponse({"error": "Brand not found"}, status=404)
        for field, value in validate_brand(body, partial=True).items():
            setattr(brand, field, value)
        brand.save()
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_brand(brand))


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_categories(request):
    """
    Categories. Code and name are unique ignoring case; a category that still
    has products cannot be deleted.
    """
    if request.method == "GET":
        if request.GET.get("id"):
            category = Category.objects.filter(pk=object_id(request)).first()
            if category is None:
                return JsonResponse({"error": "Category not found"}, status=404)
            return JsonResponse(serialize_category(category, with_products=True))
        qs = Category.objects.annotate(product_count=Count("products"))
        return JsonResponse(paginate(request, qs, serialize_category, ("code", "name", "description")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Category ID is required"}, status=400)
        category = Category.objects.filter(pk=pk).first()
        if category is None:
            return JsonResponse({"error": "Category not found"}, status=404)
        response = _delete(category, "Category deleted successfully")
        if response.status_code == 200:
            logger.info("Category %s deleted", pk)
        return response

    body, err = parse_body(request)
    if err:
        return err

    if request.method == "POST":
        try:
            fields = validate_category(body)
        except ValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        conflict = category_conflict(fields["code"], fields["name"])
        if conflict:
            return JsonResponse({"error": conflict}, status=400)
        category = Category.objects.create(**fields)
        return JsonResponse(serialize_category(category), status=201)

    pk = object_id(request, body)
    if pk is None:
        return JsonResponse({"error": "Category ID is required"}, status=400)
    category = Category.objects.filter(pk=pk).first()
    if category is None:
        return JsonResponse({"error": "Category not found"}, status=404)
    try:
        fields = validate_category(body, partial=request.method == "PATCH")
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    conflict = category_conflict(fields.get("code"), fields.get("name"), exclude_pk=category.pk)
    if conflict:
        return JsonResponse({"error": conflict}, status=400)
    for field, value in fields.items():
        setattr(category, field, value)
    category.save()
    return JsonResponse(serialize_category(category))


def _check_product_links(fields, exclude_pk=None):
    """Error message for a duplicate code or a missing category/brand, else None."""
    code = fields.get("code")
    if code:
        qs = Product.objects.filter(code=code)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        if qs.exists():
            return "Product code already exists"
    if fields.get("category_id") and not Category.objects.filter(pk=fields["category_id"]).exists():
        return "Category not found"
    if fields.get("brand_id") and not Brand.objects.filter(pk=fields["brand_id"]).exists():
        return "Brand not found"
    if fields.get("unit_id") and not Unit.objects.filter(pk=fields["unit_id"]).exists():
        return "Unit not found"
    if fields.get("warehouse_id") and not Warehouse.objects.filter(pk=fields["warehouse_id"]).exists():
        return "Warehouse not found"
    return None


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_products(request):
    if request.method == "GET":
        qs = Product.objects.select_related("category", "brand", "unit", "warehouse")
        if request.GET.get("id"):
            product = qs.filter(pk=object_id(request)).first()
            if product is None:
                return JsonResponse({"error": "Product not found"}, status=404)
            return JsonResponse(serialize_product(product))
        category_id = request.GET.get("category_id")
        if category_id and category_id.isdigit():
            qs = qs.filter(category_id=int(category_id))
        return JsonResponse(paginate(request, qs, serialize_product, ("code", "name", "description")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Product ID is required"}, status=400)
        product = Product.objects.filter(pk=pk).first()
        if product is None:
            return JsonResponse({"error": "Product not found"}, status=404)
        return _delete(product, "Product deleted successfully")

    body, err = parse_body(request)
    if err:
        return err

    product = None
    if request.method != "POST":
        pk = object_id(request, body)
        if pk is None:
            return JsonResponse({"error": "Product ID is required"}, status=400)
        product = Product.objects.filter(pk=pk).first()
        if product is None:
            return JsonResponse({"error": "Product not found"}, status=404)
    try:
        fields = validate_product(body, partial=request.method == "PATCH")
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    problem = _check_product_links(fields, exclude_pk=product.pk if product else None)
    if problem:
        return JsonResponse({"error": problem}, status=400)

    if product is None:
        product = Product.objects.create(**fields)
        logger.info("Product %s created", product.code)
        return JsonResponse(serialize_product(product), status=201)
    for field, value in fields.items():
        setattr(product, field, value)
    product.save()
    return JsonResponse(serialize_product(product))
