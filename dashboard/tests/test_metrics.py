"""Dashboard statistics and profit & loss."""

from datetime import date, datetime, timedelta
from decimal import Decimal

from django.test import Client, TestCase
from django.utils import timezone

from dashboard.services.metrics_service import (
    get_dashboard_stats,
    get_low_stock,
    get_profit_loss,
    get_recent_transactions,
    get_sales_chart,
    get_top_products,
)
from expenses.models import Expense, ExpenseCategory
from pos.models import (
    Category,
    Customer,
    Product,
    Purchase,
    PurchaseReturn,
    Sale,
    SaleItem,
    SalesReturn,
    Supplier,
    Warehouse,
)


def _at(day):
    return timezone.make_aware(datetime(2026, 3, day, 12, 0))


class DashboardStatsTests(TestCase):
    def setUp(self):
        Customer.objects.create(name="A")
        Customer.objects.create(name="B", status="inactive")
        self.supplier = Supplier.objects.create(name="S")
        category = ExpenseCategory.objects.create(name="Rent")
        Sale.objects.create(reference="SL-1", total=Decimal("100"))
        Sale.objects.create(reference="SL-2", total=Decimal("40"), status="cancelled")
        Purchase.objects.create(reference="PR-1", supplier=self.supplier, total=Decimal("60"))
        Purchase.objects.create(reference="PR-2", supplier=self.supplier, total=Decimal("10"), status="pending")
        Expense.objects.create(reference="EXP-1", category=category, amount=Decimal("15"), status="approved")
        Expense.objects.create(reference="EXP-2", category=category, amount=Decimal("99"))

    def test_totals_only_count_settled_documents(self):
        stats = get_dashboard_stats()
        self.assertEqual(stats["total_customers"], 1)
        self.assertEqual(stats["total_suppliers"], 1)
        self.assertEqual(stats["total_sales"], 100.0)
        self.assertEqual(stats["total_purchases"], 60.0)
        self.assertEqual(stats["total_expenses"], 15.0)
        self.assertEqual((stats["todays_sales"], stats["todays_purchases"], stats["todays_expenses"]), (1, 1, 1))

    def test_endpoint(self):
        response = Client().get("/api/v2/dashboard")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["total_sales"], 100.0)


class ProfitLossTests(TestCase):
    def setUp(self):
        supplier = Supplier.objects.create(name="S")
        category = ExpenseCategory.objects.create(name="Rent")
        Sale.objects.create(reference="SL-1", total=Decimal("200"), date=_at(5))
        Sale.objects.create(reference="SL-2", total=Decimal("50"), date=_at(20))
        SalesReturn.objects.create(reference="SR-1", total=Decimal("20"), date=_at(6))
        purchase = Purchase.objects.create(reference="PR-1", supplier=supplier, total=Decimal("80"), date=_at(5))
        PurchaseReturn.objects.create(reference="PRT-1", supplier=supplier, purchase=purchase, total=Decimal("10"), date=_at(7))
        Expense.objects.create(reference="EXP-1", category=category, amount=Decimal("30"), date=_at(10))

    def test_range_is_inclusive(self):
        report = get_profit_loss(date(2026, 3, 1), date(2026, 3, 10))
        self.assertEqual(report["sales"], {"count": 1, "total": 200.0})
        self.assertEqual(report["received"], 180.0)
        self.assertEqual(report["sent"], 100.0)
        self.assertEqual(report["profit"], 90.0)
        self.assertEqual(report["paymentsNet"], 80.0)

    def test_endpoint_defaults_and_bad_dates(self):
        client = Client()
        data = client.get("/api/v2/reports/profit-loss", {"to": "2026-03-31"}).json()
        self.assertEqual(data["from"], "1970-01-01")
        self.assertEqual(data["sales"]["total"], 250.0)
        response = client.get("/api/v2/reports/profit-loss", {"from": "yesterday"})
        self.assertEqual(response.status_code, 400)


class SalesChartTests(TestCase):
    def test_one_point_per_day(self):
        supplier = Supplier.objects.create(name="S")
        now = timezone.now()
        Sale.objects.create(reference="SL-1", total=Decimal("30"), date=now)
        Sale.objects.create(reference="SL-2", total=Decimal("20"), date=now)
        Sale.objects.create(reference="SL-3", total=Decimal("5"), date=now, status="cancelled")
        Sale.objects.create(reference="SL-4", total=Decimal("7"), date=now - timedelta(days=2))
        Purchase.objects.create(reference="PR-1", supplier=supplier, total=Decimal("12"), date=now)
        Sale.objects.create(reference="SL-OLD", total=Decimal("99"), date=now - timedelta(days=40))

        chart = get_sales_chart(7)
        self.assertEqual(len(chart), 7)
        self.assertEqual(chart[-1], {"date": timezone.localdate().isoformat(), "sales": 50.0, "purchases": 12.0})
        self.assertEqual(chart[-3]["sales"], 7.0)
        self.assertEqual(sum(point["sales"] for point in chart), 57.0)

    def test_endpoint_caps_days(self):
        response = Client().get("/api/v2/dashboard/sales-chart", {"days": 1000})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 366)


class TopProductsTests(TestCase):
    def test_ranked_by_revenue(self):
        category = Category.objects.create(code="GEN", name="General")
        bread = Product.objects.create(code="P-1", name="Bread", category=category)
        milk = Product.objects.create(code="P-2", name="Milk", category=category)
        sale = Sale.objects.create(reference="SL-1", total=Decimal("23"))
        SaleItem.objects.create(sale=sale, product=bread, quantity=3, unit_price=Decimal("1"), subtotal=Decimal("3"))
        SaleItem.objects.create(sale=sale, product=milk, quantity=2, unit_price=Decimal("10"), subtotal=Decimal("20"))
        pending = Sale.objects.create(reference="SL-2", total=Decimal("100"), status="pending")
        SaleItem.objects.create(sale=pending, product=bread, quantity=1, unit_price=Decimal("100"), subtotal=Decimal("100"))

        top = get_top_products(days=30, limit=5)
        self.assertEqual([p["name"] for p in top], ["Milk", "Bread"])
        self.assertEqual((top[1]["units_sold"], top[1]["revenue"]), (3, 3.0))

        response = Client().get("/api/v2/dashboard/top-products", {"limit": 1})
        self.assertEqual([p["code"] for p in response.json()], ["P-2"])


class RecentTransactionsTests(TestCase):
    def test_merged_newest_first(self):
        supplier = Supplier.objects.create(name="S")
        category = ExpenseCategory.objects.create(name="Rent")
        sale = Sale.objects.create(reference="SL-1", total=Decimal("10"))
        purchase = Purchase.objects.create(reference="PR-1", supplier=supplier, total=Decimal("20"))
        expense = Expense.objects.create(reference="EXP-1", category=category, amount=Decimal("5"), description="Rent")
        base = timezone.now()
        Sale.objects.filter(pk=sale.pk).update(created_at=base - timedelta(minutes=3))
        Purchase.objects.filter(pk=purchase.pk).update(created_at=base - timedelta(minutes=1))
        Expense.objects.filter(pk=expense.pk).update(created_at=base - timedelta(minutes=2))

        entries = get_recent_transactions(10)
        self.assertEqual([e["type"] for e in entries], ["purchase", "expense", "sale"])
        self.assertEqual(entries[1]["description"], "Rent")
        self.assertEqual(entries[0]["amount"], 20.0)
        self.assertEqual(len(get_recent_transactions(2)), 2)


class LowStockTests(TestCase):
    def test_threshold_and_warehouse_name(self):
        category = Category.objects.create(code="GEN", name="General")
        warehouse = Warehouse.objects.create(
            name="Main", phone="0772000000", email="main@acme.co.zw", city="Harare", country="Zimbabwe"
        )
        Product.objects.create(code="P-1", name="Bread", category=category, stock=2, alert_quantity=5, warehouse=warehouse)
        Product.objects.create(code="P-2", name="Milk", category=category, stock=4)
        Product.objects.create(code="P-3", name="Rice", category=category, stock=50)
        Product.objects.create(code="P-4", name="Salt", category=category, stock=0, status="inactive")

        rows = get_low_stock(threshold=10)
        self.assertEqual([r["code"] for r in rows], ["P-1", "P-2"])
        self.assertEqual((rows[0]["min_stock"], rows[0]["warehouse_name"]), (5, "Main"))
        self.assertEqual((rows[1]["min_stock"], rows[1]["warehouse_name"]), (10, "Default Warehouse"))

        response = Client().get("/api/v2/dashboard/low-stock", {"limit": 1})
        self.assertEqual(len(response.json()), 1)
