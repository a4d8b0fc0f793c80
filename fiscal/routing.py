"""WebSocket URL routing for FDMS status updates."""

from django.urls import re_path

from fiscal.consumers import FDMSStatusConsumer

websocket_urlpatterns = [
    re_path(r"ws/fdms/status/$", FDMSStatusConsumer.as_asgi()),
]
