"""
Dashboard aggregates: headline counts and totals, the daily sales chart, top
products, recent transactions, low stock and the profit & loss report.
"""

import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from expenses.models import Expense
from pos.models import Customer, Product, Purchase, PurchaseReturn, Sale, SaleItem, SalesReturn, Supplier
from pos.services.stock_service import low_stock_products

ZERO = Decimal("0")


def _sum(qs, field) -> Decimal:
    return qs.aggregate(total=Sum(field))["total"] or ZERO


def get_dashboard_stats() -> dict:
    """Active party/product counts, lifetime totals and today's document counts."""
    start_today = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
    completed_sales = Sale.objects.filter(status="completed")
    received_purchases = Purchase.objects.filter(status="received")
    approved_expenses = Expense.objects.filter(status="approved")
    return {
        "total_customers": Customer.objects.filter(status="active").count(),
        "total_suppliers": Supplier.objects.filter(status="active").count(),
        "total_products": Product.objects.filter(status="active").count(),
        "total_sales": float(_sum(completed_sales, "total")),
        "total_purchases": float(_sum(received_purchases, "total")),
        "total_expenses": float(_sum(approved_expenses, "amount")),
        "todays_sales": completed_sales.filter(created_at__gte=start_today).count(),
        "todays_purchases": received_purchases.filter(created_at__gte=start_today).count(),
        "todays_expenses": approved_expenses.filter(created_at__gte=start_today).count(),
    }


def _in_range(qs, date_from: date, date_to: date):
    return qs.filter(date__date__gte=date_from, date__date__lte=date_to)


def _count_and_total(qs, field="total") -> dict:
    agg = qs.aggregate(count=Count("id"), total=Sum(field))
    return {"count": agg["count"], "total": agg["total"] or ZERO}


def get_profit_loss(date_from: date, date_to: date) -> dict:
    """
    Both bounds inclusive.
    received = sales - sales returns
    sent = purchases - purchase returns + expenses
    profit = sales - purchases - expenses
    """
    sales = _count_and_total(_in_range(Sale.objects.all(), date_from, date_to))
    purchases = _count_and_total(_in_range(Purchase.objects.all(), date_from, date_to))
    sales_returns = _count_and_total(_in_range(SalesReturn.objects.all(), date_from, date_to))
    purchase_returns = _count_and_total(_in_range(PurchaseReturn.objects.all(), date_from, date_to))
    expenses_total = _sum(_in_range(Expense.objects.all(), date_from, date_to), "amount")

    received = sales["total"] - sales_returns["total"]
    sent = purchases["total"] - purchase_returns["total"] + expenses_total
    profit = sales["total"] - purchases["total"] - expenses_total

    def out(block):
        return {"count": block["count"], "total": float(block["total"])}

    return {
        "from": date_from.isoformat(),
        "to": date_to.isoformat(),
        "sales": out(sales),
        "purchases": out(purchases),
        "salesReturns": out(sales_returns),
        "purchaseReturns": out(purchase_returns),
        "expenses": {"total": float(expenses_total)},
        "received": float(received),
        "sent": float(sent),
        "profit": float(profit),
        "paymentsNet": float(received - sent),
    }


def _daily_totals(qs, since) -> dict:
    rows = (
        qs.filter(date__gte=since)
        .annotate(day=TruncDate("date"))
        .values("day")
        .annotate(total=Sum("total"))
        .order_by("day")
    )
    return {row["day"]: row["total"] or ZERO for row in rows}


def get_sales_chart(days: int = 30) -> list:
    """One point per local calendar day, oldest first: completed sales and received purchases."""
    today = timezone.localdate()
    first_day = today - timedelta(days=days - 1)
    since = timezone.make_aware(datetime.combine(first_day, time.min))
    sales = _daily_totals(Sale.objects.filter(status="completed"), since)
    purchases = _daily_totals(Purchase.objects.filter(status="received"), since)
    chart = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        chart.append({
            "date": day.isoformat(),
            "sales": float(sales.get(day, ZERO)),
            "purchases": float(purchases.get(day, ZERO)),
        })
    return chart


def get_top_products(days: int = 30, limit: int = 10) -> list:
    """Best sellers by revenue over completed sales of the last `days` days."""
    since = timezone.now() - timedelta(days=days)
    rows = (
        SaleItem.objects.filter(sale__status="completed", sale__date__gte=since)
        .values("product_id", "product__name", "product__code")
        .annotate(units_sold=Sum("quantity"), revenue=Sum("subtotal"))
        .order_by("-revenue", "product_id")[:limit]
    )
    return [
        {
            "id": row["product_id"],
            "name": row["product__name"],
            "code": row["product__code"] or "",
            "units_sold": row["units_sold"] or 0,
            "revenue": float(row["revenue"] or ZERO),
        }
        for row in rows
    ]


def get_recent_transactions(limit: int = 10) -> list:
    """Newest sales, purchases and expenses merged by creation time."""
    per_kind = math.ceil(limit / 3)
    entries = []
    for sale in Sale.objects.order_by("-created_at")[:per_kind]:
        entries.append((sale.created_at, {
            "id": sale.pk, "type": "sale", "reference": sale.reference,
            "amount": float(sale.total), "date": sale.date.isoformat(), "status": sale.status,
        }))
    for purchase in Purchase.objects.order_by("-created_at")[:per_kind]:
        entries.append((purchase.created_at, {
            "id": purchase.pk, "type": "purchase", "reference": purchase.reference,
            "amount": float(purchase.total), "date": purchase.date.isoformat(), "status": purchase.status,
        }))
    for expense in Expense.objects.order_by("-created_at")[:per_kind]:
        entries.append((expense.created_at, {
            "id": expense.pk, "type": "expense", "reference": expense.reference or f"EXP-{expense.pk}",
            "amount": float(expense.amount), "date": expense.date.isoformat(), "status": expense.status,
            "description": expense.description,
        }))
    entries.sort(key=lambda entry: entry[0], reverse=True)
    return [entry for _, entry in entries[:limit]]


def get_low_stock(threshold: int, limit: int = 10) -> list:
    products = low_stock_products(threshold).select_related("warehouse")[:limit]
    return [
        {
            "id": p.pk,
            "name": p.name,
            "code": p.code or "",
            "current_stock": p.stock,
            "min_stock": p.alert_quantity or threshold,
            "warehouse_name": p.warehouse.name if p.warehouse_id else "Default Warehouse",
        }
        for p in products
    ]
