"""Units, warehouses and currencies."""

from django.test import TestCase

from pos.models import Category, Currency, Product, Sale, Unit, Warehouse
from pos.tests.test_catalog import JsonClientMixin


def _make_warehouse(name="Main", email="main@acme.co.zw"):
    return Warehouse.objects.create(name=name, phone="0772000000", email=email, city="Harare", country="Zimbabwe")


def _warehouse_body(**overrides):
    body = {"name": "Main", "phone": "0772000000", "email": "main@acme.co.zw", "city": "Harare", "country": "Zimbabwe"}
    body.update(overrides)
    return body


class UnitApiTests(JsonClientMixin, TestCase):
    URL = "/api/v2/settings/units"

    def test_create_and_list(self):
        response = self._send("post", self.URL, {"name": "Piece", "short_name": "pc", "operator": "*", "operation_value": 1})
        self.assertEqual(response.status_code, 201)
        piece = response.json()
        response = self._send("post", self.URL, {
            "name": "Dozen", "short_name": "dz", "operator": "*", "operation_value": 12, "base_unit": piece["id"],
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["base_unit"], piece["id"])

        listing = self.client.get(self.URL).json()
        self.assertEqual(listing["pagination"]["total"], 2)
        by_name = {u["name"]: u for u in listing["data"]}
        self.assertEqual(by_name["Piece"]["_count"]["sub_units"], 1)

        detail = self.client.get(self.URL, {"id": piece["id"]}).json()
        self.assertEqual([s["short_name"] for s in detail["sub_units"]], ["dz"])

    def test_validation_messages(self):
        cases = [
            ({"short_name": "pc", "operator": "*", "operation_value": 1}, "Unit name is required"),
            ({"name": "Piece", "operator": "*", "operation_value": 1}, "Unit short name is required"),
            ({"name": "Piece", "short_name": "pc", "operation_value": 1}, "Unit operator is required"),
            ({"name": "Piece", "short_name": "pc", "operator": "%", "operation_value": 1},
             "Unit operator must be one of: *, /, +, -"),
            ({"name": "Piece", "short_name": "pc", "operator": "*"}, "Operation value is required"),
            ({"name": "Piece", "short_name": "pc", "operator": "*", "operation_value": 0},
             "Operation value must be a positive number"),
            ({"name": "Piece", "short_name": "pc", "operator": "*", "operation_value": 1, "base_unit": 999},
             "Base unit not found"),
        ]
        for body, message in cases:
            response = self._send("post", self.URL, body)
            self.assertEqual(response.status_code, 400, body)
            self.assertEqual(response.json()["error"], message)

    def test_duplicates_ignore_case(self):
        Unit.objects.create(name="Piece", short_name="pc")
        response = self._send("post", self.URL, {"name": "PIECE", "short_name": "x", "operator": "*", "operation_value": 1})
        self.assertEqual(response.json()["error"], "Unit with this name already exists")
        response = self._send("post", self.URL, {"name": "Each", "short_name": "PC", "operator": "*", "operation_value": 1})
        self.assertEqual(response.json()["error"], "Unit with this short name already exists")

    def test_cannot_be_own_base_unit(self):
        unit = Unit.objects.create(name="Piece", short_name="pc")
        response = self._send("patch", f"{self.URL}?id={unit.pk}", {"base_unit": unit.pk})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Unit cannot be its own base unit")

    def test_patch_keeps_other_fields(self):
        unit = Unit.objects.create(name="Piece", short_name="pc", operator="*", operation_value=1)
        response = self._send("patch", f"{self.URL}?id={unit.pk}", {"name": "Pieces"})
        self.assertEqual(response.status_code, 200)
        unit.refresh_from_db()
        self.assertEqual((unit.name, unit.short_name), ("Pieces", "pc"))

    def test_delete_guards(self):
        base = Unit.objects.create(name="Piece", short_name="pc")
        Unit.objects.create(name="Dozen", short_name="dz", base_unit=base, operation_value=12)
        response = self.client.delete(f"{self.URL}?id={base.pk}")
        self.assertEqual(response.status_code, 400)
        self.assertIn("sub-units", response.json()["error"])

        litre = Unit.objects.create(name="Litre", short_name="l")
        category = Category.objects.create(code="GEN", name="General")
        Product.objects.create(code="P-1", name="Milk", category=category, unit=litre)
        response = self.client.delete(f"{self.URL}?id={litre.pk}")
        self.assertEqual(response.json()["error"],
                         "Cannot delete unit with associated products. Please reassign or delete the products first.")

        self.assertEqual(self.client.delete(self.URL).json()["error"], "Unit ID is required")
        self.assertEqual(self.client.delete(f"{self.URL}?id=999").status_code, 404)


class WarehouseApiTests(JsonClientMixin, TestCase):
    URL = "/api/v2/settings/warehouses"

    def test_create_and_filter(self):
        response = self._send("post", self.URL, _warehouse_body())
        self.assertEqual(response.status_code, 201)
        Warehouse.objects.create(
            name="Bulawayo Depot", phone="0292000000", email="byo@acme.co.zw", city="Bulawayo", country="Zimbabwe"
        )
        listing = self.client.get(self.URL, {"city": "bulawayo"}).json()
        self.assertEqual([w["name"] for w in listing["data"]], ["Bulawayo Depot"])

    def test_required_fields_and_email(self):
        body = _warehouse_body()
        del body["phone"]
        self.assertEqual(self._send("post", self.URL, body).json()["error"], "Warehouse phone is required")
        response = self._send("post", self.URL, _warehouse_body(email="not-an-email"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Invalid email format")

    def test_duplicate_email(self):
        _make_warehouse()
        response = self._send("post", self.URL, _warehouse_body(name="Second", email="MAIN@acme.co.zw"))
        self.assertEqual(response.json()["error"], "Warehouse with this email already exists")

    def test_put_requires_all_fields(self):
        warehouse = _make_warehouse()
        response = self._send("put", f"{self.URL}?id={warehouse.pk}", {"name": "Renamed"})
        self.assertEqual(response.status_code, 400)
        response = self._send("put", f"{self.URL}?id={warehouse.pk}", _warehouse_body(name="Renamed"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Renamed")

    def test_delete_lists_associations(self):
        warehouse = _make_warehouse()
        category = Category.objects.create(code="GEN", name="General")
        Product.objects.create(code="P-1", name="Milk", category=category, warehouse=warehouse)
        Sale.objects.create(reference="SL-1", total="1.00", warehouse=warehouse)
        response = self.client.delete(f"{self.URL}?id={warehouse.pk}")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["error"],
            "Cannot delete warehouse with associated products, sales. Please reassign or delete them first.",
        )
        self.assertTrue(Warehouse.objects.filter(pk=warehouse.pk).exists())

    def test_sale_with_unknown_warehouse(self):
        category = Category.objects.create(code="GEN", name="General")
        product = Product.objects.create(code="P-1", name="Milk", category=category, stock=5)
        response = self._send("post", "/api/v2/pos/sales", {
            "total": 5, "warehouse_id": 999,
            "items": [{"product_id": product.pk, "quantity": 1, "unit_price": 5}],
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Warehouse not found")


class CurrencyApiTests(JsonClientMixin, TestCase):
    URL = "/api/v2/settings/currencies"

    def test_create_uppercases_code(self):
        response = self._send("post", self.URL, {"code": "zwg", "name": "Zimbabwe Gold", "symbol": "ZiG", "exchange_rate": "26.5"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["code"], "ZWG")
        self.assertEqual(response.json()["exchange_rate"], 26.5)

    def test_validation(self):
        response = self._send("post", self.URL, {"code": "USD", "name": "US Dollar", "symbol": "$"})
        self.assertEqual(response.json()["error"], "Exchange rate is required")
        response = self._send("post", self.URL, {"code": "USD", "name": "US Dollar", "symbol": "$", "exchange_rate": -1})
        self.assertEqual(response.json()["error"], "Exchange rate must be a positive number")
        Currency.objects.create(code="USD", name="US Dollar", symbol="$")
        response = self._send("post", self.URL, {"code": "usd", "name": "Other", "symbol": "$", "exchange_rate": 1})
        self.assertEqual(response.json()["error"], "Currency with this code already exists")

    def test_patch_and_delete(self):
        currency = Currency.objects.create(code="USD", name="US Dollar", symbol="$")
        response = self._send("patch", f"{self.URL}?id={currency.pk}", {"symbol": "US$"})
        self.assertEqual(response.json()["symbol"], "US$")
        response = self._send("patch", f"{self.URL}?id={currency.pk}", {"symbol": " "})
        self.assertEqual(response.json()["error"], "Currency symbol cannot be empty")
        response = self.client.delete(f"{self.URL}?id={currency.pk}")
        self.assertEqual(response.json(), {"message": "Currency deleted successfully", "success": True})
        self.assertFalse(Currency.objects.exists())
