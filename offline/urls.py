"""Offline app URLs."""

from django.urls import path

from . import views

urlpatterns = [
    path("", views.api_offline_queue, name="offline_queue"),
    path("sync/", views.api_offline_sync, name="offline_sync"),
]
