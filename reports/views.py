"""PDF and Excel download endpoints."""

import logging
import re

from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from pos.api_utils import parse_body

from .excel_export import render_sales_excel
from .pdf_renderer import quantity_alert_summary, render_document_pdf, render_table_report_pdf

logger = logging.getLogger("pos")

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _safe_name(value) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "-", str(value)).strip("-") or "document"


def _attachment(content: bytes, filename: str, content_type="application/pdf") -> HttpResponse:
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    response["Content-Length"] = str(len(content))
    return response


def _render_failed(e: Exception) -> JsonResponse:
    logger.exception("PDF generation failed")
    return JsonResponse({"error": "Failed to generate PDF", "details": str(e)}, status=500)


def _document_view(kind: str):
    number_field = f"{kind}Number"

    @csrf_exempt
    @require_POST
    def view(request):
        data, err = parse_body(request)
        if err:
            return err
        if not isinstance(data, dict) or not data.get("organization") or not data.get(number_field):
            return JsonResponse({"error": f"Missing required fields: organization and {number_field}"}, status=400)
        try:
            content = render_document_pdf(kind, data)
        except Exception as e:
            return _render_failed(e)
        return _attachment(content, f"{kind}-{_safe_name(data[number_field])}.pdf")

    view.__name__ = f"api_pdf_{kind}"
    view.__doc__ = f"POST a {kind} document, receive it as a PDF download."
    return view


api_pdf_receipt = _document_view("receipt")
api_pdf_invoice = _document_view("invoice")
api_pdf_quotation = _document_view("quotation")


@csrf_exempt
@require_POST
def api_pdf_sales_report(request):
    report, err = parse_body(request)
    if err:
        return err
    if not isinstance(report, dict) or not report.get("title") or report.get("data") is None:
        return JsonResponse({"error": "Missing required fields: title and data"}, status=400)
    try:
        content = render_table_report_pdf(report)
    except Exception as e:
        return _render_failed(e)
    return _attachment(content, f"sales-report-{timezone.localdate().isoformat()}.pdf")


@csrf_exempt
@require_POST
def api_report_pdf(request):
    """Generic report. `template` names the report kind; quantity-alerts-report gets a severity summary."""
    report, err = parse_body(request)
    if err:
        return err
    if not isinstance(report, dict) or not report.get("title") or not report.get("template"):
        return JsonResponse({"error": "Missing required fields: title and template"}, status=400)
    if report["template"] == "quantity-alerts-report" and report.get("data"):
        report["summary"] = quantity_alert_summary(report["data"])
    try:
        content = render_table_report_pdf(report)
    except Exception as e:
        return _render_failed(e)
    slug = re.sub(r"\s+", "-", str(report["title"])).lower()
    stamp = int(timezone.now().timestamp() * 1000)
    return _attachment(content, f"{_safe_name(slug)}-{stamp}.pdf")


@require_GET
def api_sales_excel(request):
    """GET ?from=&to=&status= -> xlsx download."""
    raw_from, raw_to = request.GET.get("from"), request.GET.get("to")
    date_from = parse_date(raw_from) if raw_from else None
    date_to = parse_date(raw_to) if raw_to else None
    if (raw_from and date_from is None) or (raw_to and date_to is None):
        return JsonResponse({"error": "Invalid date range"}, status=400)
    content = render_sales_excel(date_from, date_to, request.GET.get("status"))
    return _attachment(content, f"sales-{timezone.localdate().isoformat()}.xlsx", content_type=XLSX_CONTENT_TYPE)
