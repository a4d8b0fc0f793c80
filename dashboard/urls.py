from django.urls import path

from . import views

urlpatterns = [
    path("dashboard", views.api_dashboard, name="dashboard"),
    path("dashboard/sales-chart", views.api_sales_chart, name="sales_chart"),
    path("dashboard/top-products", views.api_top_products, name="top_products"),
    path("dashboard/recent-transactions", views.api_recent_transactions, name="recent_transactions"),
    path("dashboard/low-stock", views.api_low_stock, name="low_stock"),
    path("reports/profit-loss", views.api_profit_loss, name="profit_loss"),
    path("notifications", views.api_notifications, name="notifications"),
]
