"""Units, warehouses and currencies JSON API (settings screens)."""

import logging

from django.db.models import Count
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from pos.api_utils import object_id, paginate, parse_body
from pos.models import Currency, Unit, Warehouse
from pos.serializers import ValidationError, validate_currency, validate_unit, validate_warehouse
from pos.services.catalog_service import delete_blocker
from pos.services.settings_service import (
    base_unit_problem,
    serialize_currency,
    serialize_unit,
    serialize_warehouse,
    unique_conflict,
    warehouse_blocker,
)

logger = logging.getLogger("pos")


def _settings_api(request, model, label, validate, serialize, list_qs, search_fields, check=None, blocker=None):
    """
    Shared GET/POST/PUT/PATCH/DELETE handling keyed by ?id=. `check(fields, pk)`
    returns an extra validation message; `blocker(obj)` explains why a delete is refused.
    """
    if request.method == "GET":
        if request.GET.get("id"):
            obj = model.objects.filter(pk=object_id(request)).first()
            if obj is None:
                return JsonResponse({"error": f"{label} not found"}, status=404)
            return JsonResponse(serialize(obj, True))
        return JsonResponse(paginate(request, list_qs, serialize, search_fields))

    pk = object_id(request)
    if request.method != "POST" and pk is None:
        return JsonResponse({"error": f"{label} ID is required"}, status=400)

    if request.method == "DELETE":
        obj = model.objects.filter(pk=pk).first()
        if obj is None:
            return JsonResponse({"error": f"{label} not found"}, status=404)
        problem = (blocker or delete_blocker)(obj)
        if problem:
            return JsonResponse({"error": problem}, status=400)
        obj.delete()
        logger.info("%s %s deleted", label, pk)
        return JsonResponse({"message": f"{label} deleted successfully", "success": True})

    body, err = parse_body(request)
    if err:
        return err
    try:
        fields = validate(body, partial=request.method == "PATCH")
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)

    obj = None
    if request.method != "POST":
        obj = model.objects.filter(pk=pk).first()
        if obj is None:
            return JsonResponse({"error": f"{label} not found"}, status=404)
    problem = unique_conflict(model, fields, exclude_pk=pk) or (check(fields, pk) if check else None)
    if problem:
        return JsonResponse({"error": problem}, status=400)

    if obj is None:
        obj = model.objects.create(**fields)
        logger.info("%s %s created", label, obj.pk)
        return JsonResponse(serialize(obj, False), status=201)
    for field, value in fields.items():
        setattr(obj, field, value)
    obj.save()
    return JsonResponse(serialize(obj, False))


def _unit_check(fields, pk):
    if "base_unit_id" not in fields:
        return None
    return base_unit_problem(fields["base_unit_id"], unit_pk=pk)


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_units(request):
    """A unit with products or sub-units cannot be deleted."""
    qs = Unit.objects.select_related("base_unit").annotate(
        product_count=Count("products", distinct=True),
        sub_unit_count=Count("sub_units", distinct=True),
    )
    return _settings_api(
        request,
        Unit,
        "Unit",
        validate_unit,
        lambda unit, detail=False: serialize_unit(unit, detail=detail),
        qs,
        ("name", "short_name"),
        check=_unit_check,
    )


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_warehouses(request):
    qs = Warehouse.objects.annotate(
        product_count=Count("products", distinct=True),
        sale_count=Count("sales", distinct=True),
        purchase_count=Count("purchases", distinct=True),
    )
    for field in ("city", "country"):
        if request.GET.get(field):
            qs = qs.filter(**{f"{field}__icontains": request.GET[field]})
    return _settings_api(
        request,
        Warehouse,
        "Warehouse",
        validate_warehouse,
        lambda warehouse, detail=False: serialize_warehouse(warehouse),
        qs,
        ("name", "phone", "email", "address", "city", "country"),
        blocker=warehouse_blocker,
    )


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_currencies(request):
    # Documents carry amounts in the organization currency, so nothing references a currency row.
    return _settings_api(
        request,
        Currency,
        "Currency",
        validate_currency,
        lambda currency, detail=False: serialize_currency(currency),
        Currency.objects.all(),
        ("code", "name", "symbol"),
        blocker=lambda currency: None,
    )
