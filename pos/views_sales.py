"""POS sales and sales returns JSON API."""

import logging
from datetime import date

from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from pos.api_utils import object_id, paginate, parse_body
from pos.models import Sale, SalesReturn
from pos.serializers import ValidationError, validate_return, validate_sale, validate_sale_update
from pos.services.sales_service import (
    create_sale,
    create_sales_return,
    delete_sale,
    serialize_sale,
    serialize_sales_return,
    update_sale,
)

logger = logging.getLogger("pos")


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "DELETE"])
def api_pos_sales(request):
    """
    POST records a sale (reference SL-<ms> unless given) and takes stock out
    when completed. PUT updates the header of the sale named by body
    "reference". DELETE ?id= restores stock.
    """
    if request.method == "GET":
        qs = Sale.objects.select_related("customer")
        if request.GET.get("id"):
            sale = qs.filter(pk=object_id(request)).first()
            if sale is None:
                return JsonResponse({"error": "Sale not found"}, status=404)
            return JsonResponse(serialize_sale(sale, with_items=True))
        return JsonResponse(paginate(request, qs, serialize_sale, ("reference", "customer__name", "notes")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Missing id"}, status=400)
        sale = Sale.objects.filter(pk=pk).first()
        if sale is None:
            return JsonResponse({"error": "Sale not found"}, status=404)
        try:
            delete_sale(sale)
        except ValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        return JsonResponse({"success": True, "message": "Sale deleted successfully"})

    body, err = parse_body(request)
    if err:
        return err

    if request.method == "POST":
        try:
            sale = create_sale(validate_sale(body), user=request.user)
        except ValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        return JsonResponse({"success": True, "saleId": sale.pk, "reference": sale.reference}, status=201)

    try:
        reference, fields = validate_sale_update(body)
        sale = Sale.objects.filter(reference=reference).first()
        if sale is None:
            return JsonResponse({"error": "Sale not found"}, status=404)
        sale = update_sale(sale, fields)
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse({"success": True, "data": serialize_sale(sale)})


@csrf_exempt
@require_http_methods(["GET", "POST"])
def api_sales_returns(request):
    if request.method == "GET":
        qs = SalesReturn.objects.select_related("customer").prefetch_related("items")
        if request.GET.get("id"):
            sales_return = qs.filter(pk=object_id(request)).first()
            if sales_return is None:
                return JsonResponse({"error": "Sales return not found"}, status=404)
            return JsonResponse(serialize_sales_return(sales_return))
        return JsonResponse(paginate(request, qs, serialize_sales_return, ("reference", "customer__name", "reason")))

    body, err = parse_body(request)
    if err:
        return err
    try:
        sales_return = create_sales_return(validate_return(body, "customer_id", "unit_price"))
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_sales_return(sales_return), status=201)


def _sale_payment(sale):
    data = serialize_sale(sale)
    data["sale_reference"] = sale.reference
    data["reference"] = f"PAY-{sale.reference}"
    data["customer_name"] = sale.customer.name if sale.customer_id else None
    return data


@require_GET
def api_sale_payments(request):
    """
    Payments received against sales: every sale with paid > 0 dated within
    ?from=&to= (inclusive, defaulting to all time up to today).
    """
    raw_from, raw_to = request.GET.get("from"), request.GET.get("to")
    try:
        date_from = parse_date(raw_from) if raw_from else date(1970, 1, 1)
        date_to = parse_date(raw_to) if raw_to else timezone.localdate()
    except ValueError:
        date_from = date_to = None
    if date_from is None or date_to is None:
        return JsonResponse({"error": "Invalid date range"}, status=400)
    qs = (
        Sale.objects.select_related("customer")
        .filter(paid__gt=0, date__date__gte=date_from, date__date__lte=date_to)
        .order_by("-date", "-id")
    )
    return JsonResponse(
        paginate(request, qs, _sale_payment, ("reference", "customer__name"), status_field=None)
    )
