"""Tests for PDF and Excel downloads."""

import json
from decimal import Decimal
from io import BytesIO
from unittest.mock import patch

from django.test import Client, TestCase
from openpyxl import load_workbook

from pos.models import Category, Customer, Product, Sale, SaleItem
from reports.pdf_renderer import compute_totals, quantity_alert_summary

ORGANIZATION = {"name": "Acme Retail", "address": "1 Samora Machel Ave", "currency_symbol": "$"}
ITEMS = [{"product": {"name": "Bread"}, "quantity": 2, "price": 1.5, "total": 3.0}]


class PdfEndpointTests(TestCase):
    def setUp(self):
        self.client = Client()

    def _post(self, url, body):
        return self.client.post(url, data=json.dumps(body), content_type="application/json")

    def _assert_pdf(self, response, filename):
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertEqual(response["Content-Disposition"], f'attachment; filename="{filename}"')
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_receipt_with_qr(self):
        response = self._post("/api/pdf/receipt", {
            "organization": ORGANIZATION,
            "receiptNumber": "SL-1700000000000",
            "saleDate": "2026-03-05T10:00:00Z",
            "items": ITEMS,
            "subtotal": 3.0,
            "totalAmount": 3.0,
            "amountPaid": 5.0,
            "changeAmount": 2.0,
            "qrCode": "https://invoice.zimra.co.zw/0000000001",
        })
        self._assert_pdf(response, "receipt-SL-1700000000000.pdf")

    def test_invoice_and_quotation(self):
        response = self._post("/api/pdf/invoice", {
            "organization": ORGANIZATION,
            "invoiceNumber": "INV-1",
            "customer": {"name": "Rudo"},
            "items": ITEMS,
            "totalAmount": 3.0,
            "balanceDue": 3.0,
        })
        self._assert_pdf(response, "invoice-INV-1.pdf")
        response = self._post("/api/pdf/quotation", {
            "organization": ORGANIZATION, "quotationNumber": "QT-7", "items": ITEMS, "totalAmount": 3.0,
        })
        self._assert_pdf(response, "quotation-QT-7.pdf")

    def test_missing_required_fields(self):
        response = self._post("/api/pdf/receipt", {"organization": ORGANIZATION})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Missing required fields: organization and receiptNumber")
        response = self._post("/api/pdf/invoice", {"invoiceNumber": "INV-1"})
        self.assertEqual(response.json()["error"], "Missing required fields: organization and invoiceNumber")

    def test_sales_report(self):
        response = self._post("/api/pdf/sales-report", {
            "title": "Sales",
            "data": [{"reference": "SL-1", "total": 10, "paid": 10}, {"reference": "SL-2", "total": 5, "paid": 0}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response["Content-Disposition"].startswith('attachment; filename="sales-report-'))
        response = self._post("/api/pdf/sales-report", {"title": "Sales"})
        self.assertEqual(response.json()["error"], "Missing required fields: title and data")

    def test_generic_report(self):
        response = self._post("/api/reports/pdf", {
            "title": "Quantity Alerts",
            "template": "quantity-alerts-report",
            "data": [{"name": "Bread", "stock": 1, "alert_quantity": 10}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertRegex(response["Content-Disposition"], r'filename="quantity-alerts-\d+\.pdf"')
        response = self._post("/api/reports/pdf", {"title": "X"})
        self.assertEqual(response.json()["error"], "Missing required fields: title and template")

    def test_invalid_json(self):
        response = self.client.post("/api/pdf/receipt", data="{", content_type="application/json")
        self.assertEqual(response.status_code, 400)


class ReportHelperTests(TestCase):
    def test_compute_totals(self):
        totals = compute_totals([{"total": "10.5", "paid": 4}, {"total": 2, "due": 1}])
        self.assertEqual(totals["total"], 12.5)
        self.assertEqual(totals["paid"], 4.0)
        self.assertIsNone(compute_totals([{"name": "x"}]))
        self.assertIsNone(compute_totals([]))

    def test_quantity_alert_summary(self):
        rows = [
            {"stock": 1, "alert_quantity": 10},
            {"stock": 7, "alert_quantity": 10},
            {"stock": 9, "alert_quantity": 10},
        ]
        self.assertEqual(quantity_alert_summary(rows), {"critical": 1, "high": 1, "medium": 1})


class SalesExcelTests(TestCase):
    def setUp(self):
        category = Category.objects.create(code="GEN", name="General")
        product = Product.objects.create(code="P-1", name="Bread", category=category, price="1.50")
        customer = Customer.objects.create(name="Rudo")
        sale = Sale.objects.create(reference="SL-1", customer=customer, total=Decimal("3.00"), paid=Decimal("3.00"))
        SaleItem.objects.create(sale=sale, product=product, quantity=2, unit_price=Decimal("1.50"), subtotal=Decimal("3.00"))
        Sale.objects.create(reference="SL-2", total=Decimal("1.00"), status="cancelled")

    def test_workbook(self):
        response = Client().get("/api/reports/sales/excel")
        self.assertEqual(response.status_code, 200)
        wb = load_workbook(BytesIO(response.content))
        self.assertEqual(wb.sheetnames, ["Sales", "Items", "Summary"])
        sales = list(wb["Sales"].iter_rows(min_row=2, values_only=True))
        self.assertEqual({row[0] for row in sales}, {"SL-1", "SL-2"})
        items = list(wb["Items"].iter_rows(min_row=2, values_only=True))
        self.assertEqual(items[0][:4], ("SL-1", "P-1", "Bread", 2))

    def test_status_filter(self):
        response = Client().get("/api/reports/sales/excel", {"status": "completed"})
        wb = load_workbook(BytesIO(response.content))
        self.assertEqual([row[0] for row in wb["Sales"].iter_rows(min_row=2, values_only=True)], ["SL-1"])

    def test_invalid_dates(self):
        response = Client().get("/api/reports/sales/excel", {"from": "soon"})
        self.assertEqual(response.status_code, 400)


class PdfFailureTests(TestCase):
    @patch("reports.views.render_document_pdf", side_effect=RuntimeError("font missing"))
    def test_render_failure_is_500(self, _render):
        response = Client().post(
            "/api/pdf/invoice",
            data=json.dumps({"organization": ORGANIZATION, "invoiceNumber": "INV-2"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to generate PDF", "details": "font missing"})
