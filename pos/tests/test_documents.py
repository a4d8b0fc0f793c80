"""Sales, purchases, returns and stock adjustments: stock movement through the API."""

import json
import re
from datetime import timedelta
from decimal import Decimal

from django.test import Client, TestCase
from django.utils import timezone

from pos.models import Adjustment, Category, Customer, Product, Purchase, Sale, Supplier


def _make_product(code="P-1", stock=10):
    category, _ = Category.objects.get_or_create(code="GEN", name="General")
    return Product.objects.create(code=code, name=f"Product {code}", category=category, price="5.00", stock=stock)


class DocumentTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.product = _make_product()

    def _send(self, method, url, body):
        return getattr(self.client, method)(url, data=json.dumps(body), content_type="application/json")

    def _stock(self, product=None):
        return Product.objects.get(pk=(product or self.product).pk).stock


class PosSaleApiTests(DocumentTestCase):
    URL = "/api/v2/pos/sales"

    def _sale_body(self, **overrides):
        body = {
            "total": "10.50",
            "items": [{"product_id": self.product.pk, "quantity": 2, "unit_price": "5.00", "discount": "0.50", "tax": "1.00"}],
        }
        body.update(overrides)
        return body

    def test_create_decrements_stock(self):
        response = self._send("post", self.URL, self._sale_body())
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertRegex(data["reference"], r"^SL-\d{13}$")

        sale = Sale.objects.get(pk=data["saleId"])
        self.assertEqual((sale.status, sale.payment_status), ("completed", "paid"))
        self.assertEqual(sale.items.get().subtotal, Decimal("10.50"))
        self.assertEqual(self._stock(), 8)

    def test_pending_sale_leaves_stock(self):
        self._send("post", self.URL, self._sale_body(status="pending"))
        self.assertEqual(self._stock(), 10)

    def test_missing_fields(self):
        response = self._send("post", self.URL, {"items": []})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Missing required fields: total, items")

    def test_unknown_product(self):
        body = self._sale_body(items=[{"product_id": 999, "quantity": 1, "unit_price": "1"}])
        response = self._send("post", self.URL, body)
        self.assertEqual(response.json()["error"], "Product 999 not found")
        self.assertFalse(Sale.objects.exists())

    def test_update_by_reference(self):
        reference = self._send("post", self.URL, self._sale_body()).json()["reference"]
        response = self._send("put", self.URL, {"reference": reference, "status": "cancelled", "notes": "void"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["status"], "cancelled")
        self.assertEqual(self._stock(), 10)

    def test_update_requires_reference(self):
        response = self._send("put", self.URL, {"status": "cancelled"})
        self.assertEqual(response.json()["error"], "Missing reference")

    def test_delete_restores_stock(self):
        sale_id = self._send("post", self.URL, self._sale_body()).json()["saleId"]
        response = self.client.delete(f"{self.URL}?id={sale_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self._stock(), 10)
        self.assertEqual(self.client.delete(self.URL).json()["error"], "Missing id")

    def test_get_single_with_items(self):
        sale_id = self._send("post", self.URL, self._sale_body()).json()["saleId"]
        data = self.client.get(self.URL, {"id": sale_id}).json()
        self.assertEqual(data["items"][0]["product"]["code"], "P-1")
        self.assertFalse(data["is_fiscalized"])


class PurchaseApiTests(DocumentTestCase):
    URL = "/api/v2/purchases"

    def setUp(self):
        super().setUp()
        self.supplier = Supplier.objects.create(name="Dairibord")

    def _purchase(self, **overrides):
        body = {
            "supplier_id": self.supplier.pk,
            "total": "20",
            "items": [{"product_id": self.product.pk, "quantity": 4, "unit_cost": "5.00"}],
        }
        body.update(overrides)
        return self._send("post", self.URL, body)

    def test_received_purchase_increments_stock(self):
        response = self._purchase()
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["reference"].startswith("PR-"))
        self.assertEqual(response.json()["payment_status"], "unpaid")
        self.assertEqual(self._stock(), 14)

    def test_pending_purchase_moves_stock_when_received(self):
        purchase_id = self._purchase(status="pending").json()["id"]
        self.assertEqual(self._stock(), 10)
        response = self._send("patch", f"{self.URL}?id={purchase_id}", {"status": "received"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self._stock(), 14)

    def test_supplier_required(self):
        response = self._purchase(supplier_id=None)
        self.assertEqual(response.json()["error"], "Supplier is required")

    def test_delete_reverts_stock(self):
        purchase_id = self._purchase().json()["id"]
        self.client.delete(f"{self.URL}?id={purchase_id}")
        self.assertFalse(Purchase.objects.exists())
        self.assertEqual(self._stock(), 10)


class ReturnApiTests(DocumentTestCase):
    def test_sales_return_puts_stock_back(self):
        customer = Customer.objects.create(name="Rudo")
        response = self._send("post", "/api/v2/sales-returns", {
            "customer_id": customer.pk,
            "items": [{"product_id": self.product.pk, "quantity": 3, "unit_price": "5.00"}],
        })
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["reference"].startswith("SR-"))
        self.assertEqual(response.json()["total"], 15.0)
        self.assertEqual(self._stock(), 13)

    def test_purchase_return_takes_stock_out(self):
        supplier = Supplier.objects.create(name="Dairibord")
        response = self._send("post", "/api/v2/purchase-returns", {
            "supplier_id": supplier.pk,
            "items": [{"product_id": self.product.pk, "quantity": 2, "unit_cost": "4.00"}],
        })
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["reference"].startswith("PRT-"))
        self.assertEqual(self._stock(), 8)

    def test_sale_with_returns_cannot_be_deleted(self):
        sale_id = self._send("post", "/api/v2/pos/sales", {
            "total": "5", "items": [{"product_id": self.product.pk, "quantity": 1, "unit_price": "5"}],
        }).json()["saleId"]
        self._send("post", "/api/v2/sales-returns", {
            "sale_id": sale_id, "items": [{"product_id": self.product.pk, "quantity": 1, "unit_price": "5"}],
        })
        response = self.client.delete(f"/api/v2/pos/sales?id={sale_id}")
        self.assertEqual(response.status_code, 400)
        self.assertTrue(Sale.objects.filter(pk=sale_id).exists())


class AdjustmentApiTests(DocumentTestCase):
    URL = "/api/v2/adjustments"

    def setUp(self):
        super().setUp()
        self.other = _make_product(code="P-2", stock=5)

    def _create(self, items, type_="addition"):
        return self._send("post", self.URL, {"type": type_, "items": items})

    def test_create_applies_item_types(self):
        response = self._create([
            {"product_id": self.product.pk, "quantity": 3},
            {"product_id": self.other.pk, "quantity": 2, "type": "subtraction"},
        ])
        self.assertEqual(response.status_code, 201)
        self.assertTrue(re.match(r"^ADJ-\d+$", response.json()["reference"]))
        self.assertEqual(self._stock(), 13)
        self.assertEqual(self._stock(self.other), 3)

    def test_missing_fields(self):
        response = self._create([])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Missing required fields")

    def test_put_reverts_then_applies(self):
        pk = self._create([{"product_id": self.product.pk, "quantity": 3}]).json()["id"]
        response = self._send("put", f"{self.URL}/{pk}", {
            "type": "subtraction",
            "items": [{"product_id": self.other.pk, "quantity": 1}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self._stock(), 10)
        self.assertEqual(self._stock(self.other), 4)
        self.assertEqual(response.json()["items"][0]["product_code"], "P-2")

    def test_put_with_unknown_product_changes_nothing(self):
        pk = self._create([{"product_id": self.product.pk, "quantity": 3}]).json()["id"]
        response = self._send("put", f"{self.URL}/{pk}", {"items": [{"product_id": 999, "quantity": 1}]})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self._stock(), 13)
        self.assertEqual(Adjustment.objects.get(pk=pk).items.count(), 1)

    def test_delete_reverts_stock(self):
        pk = self._create([{"product_id": self.product.pk, "quantity": 3}]).json()["id"]
        response = self.client.delete(f"{self.URL}/{pk}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self._stock(), 10)

    def test_not_found(self):
        response = self.client.get(f"{self.URL}/999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Adjustment not found")


class SalePaymentApiTests(DocumentTestCase):
    URL = "/api/v2/payments/sales"

    def setUp(self):
        super().setUp()
        customer = Customer.objects.create(name="Rudo")
        now = timezone.now()
        Sale.objects.create(reference="SL-1", customer=customer, total="10.00", paid="10.00", date=now - timedelta(days=10))
        Sale.objects.create(reference="SL-2", total="4.00", paid="4.00", date=now)
        Sale.objects.create(reference="SL-3", total="6.00", paid="0", payment_status="unpaid", date=now)

    def test_lists_paid_sales_newest_first(self):
        data = self.client.get(self.URL).json()
        self.assertEqual(data["pagination"]["total"], 2)
        self.assertEqual([p["reference"] for p in data["data"]], ["PAY-SL-2", "PAY-SL-1"])
        self.assertEqual(data["data"][1]["customer_name"], "Rudo")
        self.assertEqual(data["data"][1]["sale_reference"], "SL-1")

    def test_date_range_is_inclusive(self):
        today = timezone.localdate()
        data = self.client.get(self.URL, {"from": today.isoformat(), "to": today.isoformat()}).json()
        self.assertEqual([p["sale_reference"] for p in data["data"]], ["SL-2"])

    def test_search_by_customer(self):
        data = self.client.get(self.URL, {"search": "rudo"}).json()
        self.assertEqual([p["sale_reference"] for p in data["data"]], ["SL-1"])

    def test_invalid_dates(self):
        for params in ({"from": "yesterday"}, {"to": "2024-13-45"}):
            response = self.client.get(self.URL, params)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json()["error"], "Invalid date range")
