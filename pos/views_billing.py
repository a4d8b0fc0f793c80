"""Quotations and invoices JSON API."""

import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from pos.api_utils import object_id, paginate, parse_body
from pos.models import Invoice, InvoiceItem, Quotation, QuotationItem
from pos.serializers import ValidationError, validate_invoice, validate_quotation
from pos.services.billing_service import (
    create_invoice,
    create_quotation,
    replace_invoice,
    serialize_invoice,
    serialize_invoice_line,
    serialize_quotation,
    serialize_quotation_line,
    update_quotation,
)

logger = logging.getLogger("pos")


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_quotations(request):
    if request.method == "GET":
        qs = Quotation.objects.select_related("customer").prefetch_related("items")
        if request.GET.get("id"):
            quotation = qs.filter(pk=object_id(request)).first()
            if quotation is None:
                return JsonResponse({"error": "Quotation not found"}, status=404)
            return JsonResponse(serialize_quotation(quotation))
        return JsonResponse(paginate(request, qs, serialize_quotation, ("reference", "customer__name", "notes")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Quotation ID is required"}, status=400)
        quotation = Quotation.objects.filter(pk=pk).first()
        if quotation is None:
            return JsonResponse({"error": "Quotation not found"}, status=404)
        quotation.delete()
        return JsonResponse({"message": "Quotation deleted successfully"})

    body, err = parse_body(request)
    if err:
        return err

    if request.method == "POST":
        try:
            quotation = create_quotation(validate_quotation(body))
        except ValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        return JsonResponse(serialize_quotation(quotation), status=201)

    pk = object_id(request, body)
    if pk is None:
        return JsonResponse({"error": "Quotation ID is required"}, status=400)
    quotation = Quotation.objects.filter(pk=pk).first()
    if quotation is None:
        return JsonResponse({"error": "Quotation not found"}, status=404)
    partial = request.method == "PATCH"
    try:
        quotation = update_quotation(quotation, validate_quotation(body, partial=partial), replace_items=not partial)
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_quotation(quotation))


@csrf_exempt
@require_http_methods(["GET", "POST"])
def api_invoices(request):
    if request.method == "GET":
        qs = Invoice.objects.select_related("customer")
        payment_status = request.GET.get("payment_status")
        if payment_status:
            qs = qs.filter(payment_status=payment_status)
        return JsonResponse(paginate(request, qs, serialize_invoice, ("reference", "customer__name", "notes")))

    body, err = parse_body(request)
    if err:
        return err
    try:
        invoice = create_invoice(validate_invoice(body), user=request.user)
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse({"success": True, "id": invoice.pk, "reference": invoice.reference}, status=201)


@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
def api_invoice_detail(request, pk=None):
    if pk is None:
        return JsonResponse({"error": "Missing invoice ID"}, status=400)
    invoice = Invoice.objects.select_related("customer").filter(pk=pk).first()
    if invoice is None:
        return JsonResponse({"error": "Invoice not found"}, status=404)

    if request.method == "GET":
        return JsonResponse(serialize_invoice(invoice, with_items=True))

    if request.method == "DELETE":
        invoice.delete()
        logger.info("Invoice %s deleted", invoice.reference)
        return JsonResponse({"success": True, "message": "Invoice deleted successfully"})

    body, err = parse_body(request)
    if err:
        return err
    try:
        invoice = replace_invoice(invoice, validate_invoice(body))
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse({"success": True, "data": serialize_invoice(invoice, with_items=True)})


def _int_param(request, *names):
    for name in names:
        raw = request.GET.get(name)
        if raw not in (None, ""):
            try:
                return int(raw)
            except ValueError:
                return None
    return None


@require_GET
def api_invoice_items(request):
    """GET ?id= (or ?invoice_id=) -> the invoice's lines with product name and code."""
    invoice_id = _int_param(request, "id", "invoice_id")
    if invoice_id is None:
        return JsonResponse({"error": "Invoice ID is required"}, status=400)
    items = InvoiceItem.objects.filter(invoice_id=invoice_id).select_related("product").order_by("id")
    return JsonResponse([serialize_invoice_line(i) for i in items], safe=False)


@require_GET
def api_quotation_items(request):
    quotation_id = _int_param(request, "quotation_id")
    if quotation_id is None:
        return JsonResponse({"error": "quotation_id parameter is required"}, status=400)
    items = QuotationItem.objects.filter(quotation_id=quotation_id).select_related("product").order_by("id")
    return JsonResponse({"success": True, "data": [serialize_quotation_line(i) for i in items]})
