"""Tests for expense categories and expenses."""

import json
from decimal import Decimal

from django.test import Client, TestCase

from expenses.models import Expense, ExpenseCategory


class ExpenseCategoryApiTests(TestCase):
    URL = "/api/v2/expense-categories"

    def setUp(self):
        self.client = Client()

    def _send(self, method, url, body):
        return getattr(self.client, method)(url, data=json.dumps(body), content_type="application/json")

    def test_create_and_duplicate_name(self):
        response = self._send("post", self.URL, {"name": " Rent "})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["name"], "Rent")
        response = self._send("post", self.URL, {"name": "RENT"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Expense category name already exists")

    def test_name_required(self):
        response = self._send("post", self.URL, {"description": "x"})
        self.assertEqual(response.json()["error"], "Name is required")

    def test_rename_to_own_name_in_other_case(self):
        category = ExpenseCategory.objects.create(name="Rent")
        response = self._send("put", f"{self.URL}?id={category.pk}", {"name": "rent"})
        self.assertEqual(response.status_code, 200)

    def test_update_unknown(self):
        response = self._send("put", f"{self.URL}?id=999", {"name": "Rent"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Expense category not found")

    def test_delete_blocked_by_expenses(self):
        category = ExpenseCategory.objects.create(name="Rent")
        Expense.objects.create(reference="EXP-1", category=category, amount=Decimal("100"))
        response = self.client.delete(f"{self.URL}?id={category.pk}")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Cannot delete expense category with existing expenses")
        self.assertTrue(ExpenseCategory.objects.exists())


class ExpenseApiTests(TestCase):
    URL = "/api/v2/expenses"

    def setUp(self):
        self.client = Client()
        self.category = ExpenseCategory.objects.create(name="Utilities")

    def _send(self, method, url, body):
        return getattr(self.client, method)(url, data=json.dumps(body), content_type="application/json")

    def test_create_defaults(self):
        response = self._send("post", self.URL, {"category_id": self.category.pk, "amount": "45.10"})
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data["reference"].startswith("EXP-"))
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["category"], {"name": "Utilities"})

    def test_required_fields(self):
        response = self._send("post", self.URL, {"amount": "1"})
        self.assertEqual(response.status_code, 400)
        response = self._send("post", self.URL, {"category_id": self.category.pk, "amount": "-1"})
        self.assertEqual(response.json()["error"], "Amount must be greater than 0")

    def test_patch_approves(self):
        expense = Expense.objects.create(reference="EXP-1", category=self.category, amount=Decimal("10"))
        response = self._send("patch", f"{self.URL}?id={expense.pk}", {"status": "approved"})
        self.assertEqual(response.status_code, 200)
        expense.refresh_from_db()
        self.assertEqual((expense.status, expense.reference), ("approved", "EXP-1"))

    def test_approved_expense_cannot_be_deleted(self):
        expense = Expense.objects.create(reference="EXP-1", category=self.category, amount=Decimal("10"), status="approved")
        response = self.client.delete(f"{self.URL}?id={expense.pk}")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Cannot delete an approved expense")
        self.assertTrue(Expense.objects.filter(pk=expense.pk).exists())

    def test_delete_pending(self):
        expense = Expense.objects.create(reference="EXP-1", category=self.category, amount=Decimal("10"))
        self.assertEqual(self.client.delete(f"{self.URL}?id={expense.pk}").status_code, 200)
        self.assertFalse(Expense.objects.exists())

    def test_search_by_category_name(self):
        other = ExpenseCategory.objects.create(name="Rent")
        Expense.objects.create(reference="EXP-1", category=self.category, amount=Decimal("10"))
        Expense.objects.create(reference="EXP-2", category=other, amount=Decimal("20"))
        data = self.client.get(self.URL, {"search": "rent"}).json()
        self.assertEqual([e["reference"] for e in data["data"]], ["EXP-2"])
