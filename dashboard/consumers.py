"""WebSocket consumer for live notifications."""

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from dashboard.services.notification_service import NOTIFICATIONS_GROUP


class NotificationConsumer(AsyncJsonWebsocketConsumer):
    """Consumes the notifications group. Authenticated users only."""

    async def connect(self):
        user = self.scope.get("user")
        if not user or not user.is_authenticated:
            await self.close()
            return
        await self.channel_layer.group_add(NOTIFICATIONS_GROUP, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(NOTIFICATIONS_GROUP, self.channel_name)

    async def notification_event(self, event):
        await self.send_json(event.get("data", {}))
