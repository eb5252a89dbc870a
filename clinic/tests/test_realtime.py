import pytest
from asgiref.sync import sync_to_async
from channels.testing import WebsocketCommunicator

from carebook.asgi import application
from clinic.services import slots as slot_service

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]


async def _subscribe(professional_id):
    communicator = WebsocketCommunicator(application, f'/ws/slots/{professional_id}/')
    connected, _ = await communicator.connect()
    assert connected
    assert await communicator.receive_json_from() == {'type': 'welcome', 'professionalId': professional_id}
    return communicator


async def test_slot_change_reaches_subscribers(pharmacist, other_pharmacist, future_day):
    mine = await _subscribe(pharmacist.id)
    theirs = await _subscribe(other_pharmacist.id)

    _, version = await sync_to_async(slot_service.add_slot)(
        pharmacist, date=future_day, start_time='09:00', end_time='10:00',
    )

    event = await mine.receive_json_from(timeout=2)
    assert event == {'type': 'slots.changed', 'professionalId': pharmacist.id, 'version': version}
    assert await theirs.receive_nothing(timeout=0.2)

    await mine.disconnect()
    await theirs.disconnect()


async def test_disconnected_client_leaves_group(pharmacist, future_day):
    communicator = await _subscribe(pharmacist.id)
    await communicator.disconnect()

    await sync_to_async(slot_service.add_slot)(pharmacist, date=future_day, start_time='11:00', end_time='12:00')

    layer = slot_service.get_channel_layer()
    assert not layer.groups.get(slot_service.slots_group(pharmacist.id))
