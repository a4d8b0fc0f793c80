"""Quotations and invoices."""

import json

from django.test import Client, TestCase

from pos.models import Category, Customer, Invoice, Product, Quotation


class BillingTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.customer = Customer.objects.create(name="Rudo")
        category = Category.objects.create(code="GEN", name="General")
        self.product = Product.objects.create(code="P-1", name="Bread", category=category, price="1.00", stock=5)

    def _send(self, method, url, body):
        return getattr(self.client, method)(url, data=json.dumps(body), content_type="application/json")


class QuotationApiTests(BillingTestCase):
    URL = "/api/v2/quotations"

    def _create(self, reference="QT-1", **overrides):
        body = {
            "reference": reference,
            "customer_id": self.customer.pk,
            "total": "3.00",
            "items": [{"product_id": self.product.pk, "description": "Bread", "quantity": 3, "unit_price": "1.00"}],
        }
        body.update(overrides)
        return self._send("post", self.URL, body)

    def test_create(self):
        response = self._create()
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["items"][0]["total"], 3.0)

    def test_reference_and_customer_required(self):
        response = self._create(reference="")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Reference and customer ID are required")

    def test_duplicate_reference(self):
        self._create()
        response = self._create()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Quotation reference already exists")

    def test_patch_status_keeps_items(self):
        pk = self._create().json()["id"]
        response = self._send("patch", f"{self.URL}?id={pk}", {"status": "accepted"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "accepted")
        self.assertEqual(len(response.json()["items"]), 1)

    def test_patch_invalid_status(self):
        pk = self._create().json()["id"]
        response = self._send("patch", f"{self.URL}?id={pk}", {"status": "bogus"})
        self.assertEqual(response.json()["error"], "Invalid status")

    def test_put_replaces_items(self):
        pk = self._create().json()["id"]
        response = self._send("put", f"{self.URL}?id={pk}", {
            "reference": "QT-1",
            "customer_id": self.customer.pk,
            "items": [{"description": "Delivery", "quantity": 1, "unit_price": "2.00"}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual([i["description"] for i in response.json()["items"]], ["Delivery"])

    def test_delete(self):
        pk = self._create().json()["id"]
        response = self.client.delete(f"{self.URL}?id={pk}")
        self.assertEqual(response.json()["message"], "Quotation deleted successfully")
        self.assertFalse(Quotation.objects.exists())
        self.assertEqual(self.client.delete(self.URL).json()["error"], "Quotation ID is required")
        self.assertEqual(self.client.delete(f"{self.URL}?id={pk}").status_code, 404)


class InvoiceApiTests(BillingTestCase):
    URL = "/api/v2/invoices"

    def _create(self, **overrides):
        body = {
            "customer_id": self.customer.pk,
            "total": "2.00",
            "items": [{"product_id": self.product.pk, "quantity": 2, "unit_price": "1.00"}],
        }
        body.update(overrides)
        return self._send("post", self.URL, body)

    def test_create_with_defaults(self):
        response = self._create()
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertRegex(data["reference"], r"^INV-\d{13}$")
        invoice = Invoice.objects.get(pk=data["id"])
        self.assertEqual((invoice.status, invoice.payment_status), ("pending", "unpaid"))

    def test_unknown_status_falls_back(self):
        invoice_id = self._create(status="bogus", payment_status="whatever").json()["id"]
        invoice = Invoice.objects.get(pk=invoice_id)
        self.assertEqual((invoice.status, invoice.payment_status), ("pending", "unpaid"))

    def test_invoice_does_not_move_stock(self):
        self._create()
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)

    def test_put_replaces_items(self):
        invoice_id = self._create().json()["id"]
        response = self._send("put", f"{self.URL}/{invoice_id}", {
            "customer_id": self.customer.pk,
            "status": "paid",
            "payment_status": "paid",
            "items": [{"product_id": self.product.pk, "quantity": 1, "unit_price": "1.00"}],
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["status"], "paid")
        self.assertEqual([i["quantity"] for i in data["items"]], [1])

    def test_detail_not_found_and_delete(self):
        self.assertEqual(self.client.get(f"{self.URL}/999").json()["error"], "Invoice not found")
        invoice_id = self._create().json()["id"]
        self.assertEqual(self.client.delete(f"{self.URL}/{invoice_id}").status_code, 200)
        self.assertFalse(Invoice.objects.exists())

    def test_list_filters_payment_status(self):
        self._create(payment_status="paid")
        self._create()
        data = self.client.get(self.URL, {"payment_status": "paid"}).json()
        self.assertEqual(data["pagination"]["total"], 1)


class LineItemApiTests(BillingTestCase):
    def test_invoice_items(self):
        invoice_id = self._send("post", "/api/v2/invoices", {
            "customer_id": self.customer.pk,
            "total": "2.00",
            "items": [{"product_id": self.product.pk, "quantity": 2, "unit_price": "1.00"}],
        }).json()["id"]
        response = self.client.get("/api/v2/invoices/items", {"id": invoice_id})
        self.assertEqual(response.status_code, 200)
        lines = response.json()
        self.assertEqual(len(lines), 1)
        self.assertEqual((lines[0]["name"], lines[0]["code"]), ("Bread", "P-1"))
        self.assertEqual(lines[0]["subtotal"], 2.0)
        self.assertEqual(self.client.get("/api/v2/invoices/items", {"invoice_id": invoice_id}).json(), lines)

    def test_invoice_items_requires_id(self):
        response = self.client.get("/api/v2/invoices/items")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Invoice ID is required")

    def test_quotation_items(self):
        quotation_id = self._send("post", "/api/v2/quotations", {
            "reference": "QT-1",
            "customer_id": self.customer.pk,
            "total": "3.00",
            "items": [{"product_id": self.product.pk, "description": "Bread", "quantity": 3, "unit_price": "1.00"}],
        }).json()["id"]
        data = self.client.get("/api/v2/quotations/items", {"quotation_id": quotation_id}).json()
        self.assertTrue(data["success"])
        self.assertEqual(data["data"][0]["products"], {"id": self.product.pk, "name": "Bread", "code": "P-1", "price": 1.0})

        response = self.client.get("/api/v2/quotations/items")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "quotation_id parameter is required")
