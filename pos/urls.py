from django.urls import path

from . import views_billing, views_catalog, views_parties, views_sales, views_settings, views_stock

urlpatterns = [
    path("organization", views_parties.api_organization, name="organization"),
    path("customers", views_parties.api_customers, name="customers"),
    path("suppliers", views_parties.api_suppliers, name="suppliers"),
    path("brands", views_catalog.api_brands, name="brands"),
    path("categories", views_catalog.api_categories, name="categories"),
    path("products", views_catalog.api_products, name="products"),
    path("settings/units", views_settings.api_units, name="units"),
    path("settings/warehouses", views_settings.api_warehouses, name="warehouses"),
    path("settings/currencies", views_settings.api_currencies, name="currencies"),
    path("pos/sales", views_sales.api_pos_sales, name="pos_sales"),
    path("payments/sales", views_sales.api_sale_payments, name="sale_payments"),
    path("sales-returns", views_sales.api_sales_returns, name="sales_returns"),
    path("purchases", views_stock.api_purchases, name="purchases"),
    path("purchase-returns", views_stock.api_purchase_returns, name="purchase_returns"),
    path("adjustments", views_stock.api_adjustments, name="adjustments"),
    path("adjustments/<int:pk>", views_stock.api_adjustment_detail, name="adjustment_detail"),
    path("quotations", views_billing.api_quotations, name="quotations"),
    path("quotations/items", views_billing.api_quotation_items, name="quotation_items"),
    path("invoices", views_billing.api_invoices, name="invoices"),
    path("invoices/items", views_billing.api_invoice_items, name="invoice_items"),
    path("invoices/<int:pk>", views_billing.api_invoice_detail, name="invoice_detail"),
]
