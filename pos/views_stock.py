"""Purchases, purchase returns and stock adjustments JSON API."""

import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from pos.api_utils import object_id, paginate, parse_body
from pos.models import Adjustment, Purchase, PurchaseReturn
from pos.serializers import ValidationError, validate_adjustment, validate_purchase, validate_purchase_status, validate_return
from pos.services.purchase_service import (
    create_purchase,
    create_purchase_return,
    delete_purchase,
    serialize_purchase,
    serialize_purchase_return,
    set_purchase_status,
)
from pos.services.stock_service import create_adjustment, delete_adjustment, replace_adjustment, serialize_adjustment

logger = logging.getLogger("pos")


@csrf_exempt
@require_http_methods(["GET", "POST", "PATCH", "DELETE"])
def api_purchases(request):
    """Purchases. PATCH ?id= {status} moves stock in or out as the purchase enters or leaves received."""
    if request.method == "GET":
        qs = Purchase.objects.select_related("supplier")
        if request.GET.get("id"):
            purchase = qs.filter(pk=object_id(request)).first()
            if purchase is None:
                return JsonResponse({"error": "Purchase not found"}, status=404)
            return JsonResponse(serialize_purchase(purchase, with_items=True))
        return JsonResponse(paginate(request, qs, serialize_purchase, ("reference", "supplier__name", "notes")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Missing id"}, status=400)
        purchase = Purchase.objects.filter(pk=pk).first()
        if purchase is None:
            return JsonResponse({"error": "Purchase not found"}, status=404)
        try:
            delete_purchase(purchase)
        except ValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        return JsonResponse({"success": True, "message": "Purchase deleted successfully"})

    body, err = parse_body(request)
    if err:
        return err

    if request.method == "POST":
        try:
            purchase = create_purchase(validate_purchase(body), user=request.user)
        except ValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        return JsonResponse(serialize_purchase(purchase, with_items=True), status=201)

    pk = object_id(request, body)
    if pk is None:
        return JsonResponse({"error": "Missing id"}, status=400)
    purchase = Purchase.objects.filter(pk=pk).first()
    if purchase is None:
        return JsonResponse({"error": "Purchase not found"}, status=404)
    try:
        purchase = set_purchase_status(purchase, validate_purchase_status(body))
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_purchase(purchase))


@csrf_exempt
@require_http_methods(["GET", "POST"])
def api_purchase_returns(request):
    if request.method == "GET":
        qs = PurchaseReturn.objects.select_related("supplier").prefetch_related("items")
        if request.GET.get("id"):
            purchase_return = qs.filter(pk=object_id(request)).first()
            if purchase_return is None:
                return JsonResponse({"error": "Purchase return not found"}, status=404)
            return JsonResponse(serialize_purchase_return(purchase_return))
        return JsonResponse(
            paginate(request, qs, serialize_purchase_return, ("reference", "supplier__name", "reason"))
        )

    body, err = parse_body(request)
    if err:
        return err
    try:
        purchase_return = create_purchase_return(validate_return(body, "supplier_id", "unit_cost"))
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_purchase_return(purchase_return), status=201)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def api_adjustments(request):
    if request.method == "GET":
        return JsonResponse(
            paginate(request, Adjustment.objects.all(), serialize_adjustment, ("reference", "notes"), status_field="type")
        )

    body, err = parse_body(request)
    if err:
        return err
    try:
        adjustment = create_adjustment(validate_adjustment(body), user=request.user)
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_adjustment(adjustment, with_items=True), status=201)


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
def api_adjustment_detail(request, pk=None):
    """GET/PUT/DELETE one adjustment. PUT reverts the old items before applying the new ones."""
    if pk is None:
        return JsonResponse({"error": "Missing adjustment id"}, status=400)
    adjustment = Adjustment.objects.filter(pk=pk).first()
    if adjustment is None:
        return JsonResponse({"error": "Adjustment not found"}, status=404)

    if request.method == "GET":
        return JsonResponse(serialize_adjustment(adjustment, with_items=True))

    if request.method == "DELETE":
        delete_adjustment(adjustment)
        logger.info("Adjustment %s deleted, stock reverted", adjustment.reference)
        return JsonResponse({"success": True, "message": "Adjustment deleted successfully"})

    body, err = parse_body(request)
    if err:
        return err
    try:
        adjustment = replace_adjustment(adjustment, validate_adjustment(body))
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_adjustment(adjustment, with_items=True))
