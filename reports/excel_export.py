"""Sales workbook export."""

from io import BytesIO

from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font

from pos.models import Sale, SaleItem


def _bold_header(ws, headers):
    ws.append(headers)
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)


def render_sales_excel(date_from=None, date_to=None, status=None) -> bytes:
    """Sales and Items sheets for sales dated within [date_from, date_to], plus a summary sheet."""
    sales = Sale.objects.select_related("customer").order_by("-date", "-id")
    if date_from:
        sales = sales.filter(date__date__gte=date_from)
    if date_to:
        sales = sales.filter(date__date__lte=date_to)
    if status:
        sales = sales.filter(status=status)

    wb = Workbook()
    ws = wb.active
    ws.title = "Sales"
    _bold_header(ws, [
        "Reference", "Date", "Customer", "Status", "Payment", "Subtotal", "Tax", "Discount", "Total", "Paid", "Due", "Fiscalised",
    ])
    count = 0
    totals = {"total": 0.0, "paid": 0.0, "due": 0.0}
    for sale in sales:
        count += 1
        for key in totals:
            totals[key] += float(getattr(sale, key) or 0)
        ws.append([
            sale.reference,
            timezone.localtime(sale.date).strftime("%Y-%m-%d %H:%M") if sale.date else "",
            sale.customer.name if sale.customer_id else "Walk-in",
            sale.status,
            sale.payment_status,
            float(sale.subtotal or 0),
            float(sale.tax_amount or 0),
            float(sale.discount or 0),
            float(sale.total or 0),
            float(sale.paid or 0),
            float(sale.due or 0),
            "yes" if sale.is_fiscalized else "no",
        ])

    ws2 = wb.create_sheet("Items")
    _bold_header(ws2, ["Sale", "Product Code", "Product", "Quantity", "Unit Price", "Discount", "Tax", "Subtotal"])
    items = SaleItem.objects.filter(sale__in=sales.values("pk")).select_related("sale", "product").order_by("sale_id", "id")
    for item in items:
        ws2.append([
            item.sale.reference,
            item.product.code,
            item.product.name,
            item.quantity,
            float(item.unit_price or 0),
            float(item.discount or 0),
            float(item.tax or 0),
            float(item.subtotal or 0),
        ])

    ws3 = wb.create_sheet("Summary")
    ws3.append(["Sales Export", timezone.localtime().isoformat()])
    ws3.append(["From", date_from.isoformat() if date_from else "all"])
    ws3.append(["To", date_to.isoformat() if date_to else "all"])
    ws3.append([])
    ws3.append(["Sales", count])
    for key, value in totals.items():
        ws3.append([key.title(), round(value, 2)])

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
