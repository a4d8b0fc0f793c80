from django.urls import path

from . import views

urlpatterns = [
    path("config", views.api_fdms_config, name="fdms_config"),
    path("invoice", views.api_fdms_invoice, name="fdms_invoice"),
    path("status", views.api_fdms_status, name="fdms_status"),
]
