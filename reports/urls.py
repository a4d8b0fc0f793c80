from django.urls import path

from . import views

urlpatterns = [
    path("pdf/receipt", views.api_pdf_receipt, name="pdf_receipt"),
    path("pdf/invoice", views.api_pdf_invoice, name="pdf_invoice"),
    path("pdf/quotation", views.api_pdf_quotation, name="pdf_quotation"),
    path("pdf/sales-report", views.api_pdf_sales_report, name="pdf_sales_report"),
    path("reports/pdf", views.api_report_pdf, name="report_pdf"),
    path("reports/sales/excel", views.api_sales_excel, name="sales_excel"),
]
