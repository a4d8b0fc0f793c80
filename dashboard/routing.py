"""WebSocket URL routing for notifications."""

from django.urls import re_path

from dashboard.consumers import NotificationConsumer

websocket_urlpatterns = [
    re_path(r"ws/notifications/$", NotificationConsumer.as_asgi()),
]
