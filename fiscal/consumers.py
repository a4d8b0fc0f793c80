"""WebSocket consumer for real-time FDMS status updates."""

import logging

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from fiscal.services.fdms_events import FDMS_STATUS_GROUP

logger = logging.getLogger("fiscal")


class FDMSStatusConsumer(AsyncJsonWebsocketConsumer):
    """Consumes the fdms_status group. Authenticated users only."""

    async def connect(self):
        user = self.scope.get("user")
        if not user or not user.is_authenticated:
            await self.close()
            return
        self.room_group_name = FDMS_STATUS_GROUP
        await self.channel_layer.group_add(self.room_group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "room_group_name"):
            await self.channel_layer.group_discard(self.room_group_name, self.channel_name)

    async def receive_json(self, content):
        pass

    async def fdms_event(self, event):
        await self.send_json(event.get("data", {}))
