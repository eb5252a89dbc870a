import json
from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services.slots import slots_group


class SlotUpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes ``slots.changed`` events for one professional's collection."""

    async def connect(self):
        self.professional_id = int(self.scope["url_route"]["kwargs"]["professional_id"])
        self.group = slots_group(self.professional_id)
        await self.channel_layer.group_add(self.group, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "professionalId": self.professional_id}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.group, self.channel_name)

    async def slots_changed(self, event):
        # event: {"type": "slots.changed", "professionalId": int, "version": int}
        await self.send(json.dumps(event))
