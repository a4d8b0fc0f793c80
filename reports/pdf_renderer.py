"""
PDF rendering for receipts, invoices, quotations and tabular reports.
Input is the JSON document posted by the client; nothing is read from the database.
"""

from io import BytesIO

import qrcode
from django.utils import timezone
from django.utils.html import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

HEADER_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
    ("FONTSIZE", (0, 0), (-1, -1), 9),
])

TOTALS_STYLE = TableStyle([
    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
    ("FONT", (0, -1), (-1, -1), "Helvetica-Bold", 10),
])

# Column sums shown under financial reports.
TOTAL_FIELDS = ("subtotal", "tax_amount", "discount", "total", "paid", "due")


def _num(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _money(value, symbol="$") -> str:
    return "%s%.2f" % (symbol, _num(value))


def _text(value) -> str:
    return escape("" if value is None else str(value))


def _date(value) -> str:
    if not value:
        return "N/A"
    return str(value)[:10]


def _qr_image(value: str, size_mm: int = 35):
    buf = BytesIO()
    qrcode.make(value).save(buf, format="PNG")
    buf.seek(0)
    size_pt = size_mm * 72 / 25.4
    return Image(buf, width=size_pt, height=size_pt)


def _party_block(story, styles, heading, party):
    if not isinstance(party, dict) or not party:
        return
    story.append(Paragraph(heading, styles["Heading3"]))
    story.append(Paragraph(_text(party.get("name")), styles["Normal"]))
    for key in ("address", "city", "country", "phone", "email"):
        if party.get(key):
            story.append(Paragraph(_text(party[key]), styles["Normal"]))
    tax_number = party.get("tax_number") or party.get("taxNumber")
    if tax_number:
        story.append(Paragraph(f"Tax No: {_text(tax_number)}", styles["Normal"]))


def _items_table(items, symbol):
    rows = [["Item", "Qty", "Price", "Total"]]
    for item in items or []:
        product = item.get("product") or {}
        name = product.get("name") if isinstance(product, dict) else None
        quantity = _num(item.get("quantity"))
        price = _num(item.get("price", item.get("unit_price")))
        total = item.get("total")
        rows.append([
            _text(name or item.get("description") or "")[:45],
            "%g" % quantity,
            _money(price, symbol),
            _money(total if total is not None else price * quantity, symbol),
        ])
    table = Table(rows, colWidths=[230, 50, 90, 90])
    table.setStyle(HEADER_STYLE)
    return table


def render_document_pdf(kind: str, data: dict) -> bytes:
    """
    kind is "receipt", "invoice" or "quotation". `data` carries organization,
    customer, items and totals plus the kind's own number/date fields.
    """
    organization = data.get("organization") or {}
    symbol = organization.get("currency_symbol") or "$"
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title=f"{kind.title()} {data.get(kind + 'Number', '')}")
    styles = getSampleStyleSheet()
    story = [Paragraph(_text(organization.get("name") or ""), styles["Title"])]
    for key in ("address", "phone", "email"):
        if organization.get(key):
            story.append(Paragraph(_text(organization[key]), styles["Normal"]))
    story.append(Spacer(1, 12))

    number = _text(data.get(f"{kind}Number"))
    story.append(Paragraph(f"{kind.upper()} #{number}", styles["Heading2"]))
    if kind == "invoice":
        story.append(Paragraph(f"Date: {_date(data.get('invoiceDate'))}", styles["Normal"]))
        if data.get("dueDate"):
            story.append(Paragraph(f"Due: {_date(data['dueDate'])}", styles["Normal"]))
    elif kind == "quotation":
        story.append(Paragraph(f"Date: {_date(data.get('quotationDate'))}", styles["Normal"]))
        if data.get("validUntil"):
            story.append(Paragraph(f"Valid until: {_date(data['validUntil'])}", styles["Normal"]))
    else:
        story.append(Paragraph(f"Date: {_date(data.get('saleDate'))}", styles["Normal"]))
        cashier = data.get("cashier") or {}
        if cashier.get("name"):
            story.append(Paragraph(f"Cashier: {_text(cashier['name'])}", styles["Normal"]))
    if data.get("status"):
        story.append(Paragraph(f"Status: {_text(data['status'])}", styles["Normal"]))
    story.append(Spacer(1, 8))

    _party_block(story, styles, "Bill To", data.get("customer"))
    story.append(Spacer(1, 8))
    story.append(_items_table(data.get("items"), symbol))
    story.append(Spacer(1, 8))

    totals = [["Subtotal", _money(data.get("subtotal"), symbol)]]
    if data.get("discountAmount"):
        totals.append(["Discount", "-" + _money(data["discountAmount"], symbol)])
    if data.get("taxAmount"):
        label = "Tax (%g%%)" % _num(data["taxPercentage"]) if data.get("taxPercentage") else "Tax"
        totals.append([label, _money(data["taxAmount"], symbol)])
    if data.get("shippingCost"):
        totals.append(["Shipping", _money(data["shippingCost"], symbol)])
    if kind != "quotation" and data.get("amountPaid") is not None:
        totals.append(["Paid", _money(data["amountPaid"], symbol)])
    if kind == "invoice" and data.get("balanceDue") is not None:
        totals.append(["Balance Due", _money(data["balanceDue"], symbol)])
    if kind == "receipt" and data.get("changeAmount") is not None:
        totals.append(["Change", _money(data["changeAmount"], symbol)])
    totals.append(["Total", _money(data.get("totalAmount"), symbol)])
    table = Table(totals, colWidths=[120, 150], hAlign="RIGHT")
    table.setStyle(TOTALS_STYLE)
    story.append(table)

    if data.get("notes"):
        story.append(Spacer(1, 8))
        story.append(Paragraph(f"Notes: {_text(data['notes'])}", styles["Normal"]))
    footer = organization.get("invoice_footer")
    if footer:
        story.append(Spacer(1, 8))
        story.append(Paragraph(_text(footer), styles["Italic"]))

    qr_value = data.get("qrCode") if kind == "receipt" else ""
    if isinstance(qr_value, dict):
        qr_value = qr_value.get("qrString") or qr_value.get("qrCodeUrl")
    qr_value = str(qr_value or "").strip()
    if qr_value:
        story.append(Spacer(1, 12))
        story.append(Paragraph("Fiscal Verification", styles["Heading3"]))
        story.append(_qr_image(qr_value))
        story.append(Paragraph(_text(qr_value), styles["Normal"]))

    doc.build(story)
    return buf.getvalue()


def compute_totals(rows) -> dict | None:
    """Column sums for rows that carry money fields; None when they do not."""
    if not rows or not isinstance(rows[0], dict):
        return None
    if "total" not in rows[0] and "subtotal" not in rows[0]:
        return None
    return {field: round(sum(_num(row.get(field)) for row in rows), 2) for field in TOTAL_FIELDS}


def _columns(rows, columns=None):
    if columns:
        return [c if isinstance(c, dict) else {"key": c, "label": str(c).replace("_", " ").title()} for c in columns]
    first = rows[0] if rows and isinstance(rows[0], dict) else {}
    return [
        {"key": key, "label": key.replace("_", " ").title()}
        for key, value in first.items()
        if not isinstance(value, (dict, list))
    ][:8]


def render_table_report_pdf(report: dict) -> bytes:
    """
    Tabular report: title, optional company, dateRange, filters, summary and
    data rows. Totals are summed from the rows unless given.
    """
    rows = report.get("data") or []
    columns = _columns(rows, report.get("columns"))
    buf = BytesIO()
    pagesize = landscape(A4) if len(columns) > 6 else A4
    doc = SimpleDocTemplate(buf, pagesize=pagesize, title=report.get("title", "Report"))
    styles = getSampleStyleSheet()
    story = []

    company = report.get("company") or {}
    if company.get("name"):
        story.append(Paragraph(_text(company["name"]), styles["Heading3"]))
    story.append(Paragraph(_text(report.get("title")), styles["Title"]))
    meta = f"Generated: {timezone.localtime().strftime('%Y-%m-%d %H:%M')} | Records: {len(rows)}"
    if report.get("dateRange"):
        meta = f"Period: {_text(report['dateRange'])} | " + meta
    story.append(Paragraph(meta, styles["Normal"]))
    for f in report.get("filters") or []:
        story.append(Paragraph(f"{_text(f.get('label'))}: {_text(f.get('value'))}", styles["Normal"]))
    story.append(Spacer(1, 12))

    summary = report.get("summary")
    if isinstance(summary, list) and summary:
        rows_summary = [
            [_text(s.get("label")), _money(s.get("value")) if s.get("isCurrency") else _text(s.get("value"))]
            for s in summary
        ]
        table = Table(rows_summary, colWidths=[160, 120], hAlign="LEFT")
        table.setStyle(TOTALS_STYLE)
        story.append(table)
        story.append(Spacer(1, 12))
    elif isinstance(summary, dict) and summary:
        for key, value in summary.items():
            story.append(Paragraph(f"{_text(key)}: {_text(value)}", styles["Normal"]))
        story.append(Spacer(1, 12))

    if rows and columns:
        table_rows = [[c["label"] for c in columns]]
        for row in rows:
            table_rows.append([_text(row.get(c["key"]))[:30] for c in columns])
        table = Table(table_rows, repeatRows=1)
        table.setStyle(HEADER_STYLE)
        story.append(table)
    else:
        story.append(Paragraph("No records found.", styles["Normal"]))

    totals = report.get("totals") or compute_totals(rows)
    if totals:
        story.append(Spacer(1, 12))
        story.append(Paragraph("Totals", styles["Heading2"]))
        table = Table([[key.replace("_", " ").title(), _money(value)] for key, value in totals.items()], colWidths=[120, 150])
        table.setStyle(TOTALS_STYLE)
        story.append(table)

    doc.build(story)
    return buf.getvalue()


def quantity_alert_summary(rows) -> dict:
    """Stock severity buckets relative to each product's alert quantity."""
    summary = {"critical": 0, "high": 0, "medium": 0}
    for row in rows:
        stock = _num(row.get("stock"))
        alert = _num(row.get("alert_quantity"))
        if stock <= alert * 0.5:
            summary["critical"] += 1
        elif stock <= alert * 0.8:
            summary["high"] += 1
        else:
            summary["medium"] += 1
    return summary
