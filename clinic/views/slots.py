"""
Slot collection endpoints for the signed-in professional.

``/api/<kind>s/slots`` lists (GET), adds one slot (POST) or replaces the
whole collection (PUT, version required).  ``/api/<kind>s/slots/<id>``
edits (PATCH) or removes (DELETE) a single slot by its id.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import IsProfessional
from clinic.serializers.slots import SlotCreateSerializer, SlotReplaceSerializer, SlotUpdateSerializer
from clinic.services import slots as slot_service
from clinic.services.identity import resolve_professional


def _if_match_version(request):
    raw = (request.headers.get('If-Match') or '').strip().strip('"')
    if raw.startswith('W/'):
        raw = raw[2:].strip('"')
    return int(raw) if raw.isdigit() else None


@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsProfessional])
def my_slots(request, kind):
    professional = resolve_professional(request.user, kind)

    if request.method == 'GET':
        return Response({'ok': True, **slot_service.list_slots(professional)})

    if request.method == 'POST':
        s = SlotCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        slot, version = slot_service.add_slot(
            professional,
            date=s.validated_data['date'],
            start_time=s.validated_data['startTime'],
            end_time=s.validated_data['endTime'],
            actor=request.user,
        )
        return Response({'ok': True, 'slot': slot_service.slot_payload(slot), 'version': version},
                        status=status.HTTP_201_CREATED)

    s = SlotReplaceSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    version = s.validated_data.get('version')
    if version is None:
        version = _if_match_version(request)
    state = slot_service.replace_slots(professional, s.entries(), expected_version=version, actor=request.user)
    return Response({'ok': True, **state})


my_slots.cls.throttle_scope = 'slot_write'


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsProfessional])
def my_slot_detail(request, kind, slot_id):
    professional = resolve_professional(request.user, kind)

    if request.method == 'DELETE':
        version = slot_service.delete_slot(professional, slot_id, actor=request.user)
        return Response({'ok': True, 'deleted': slot_id, 'version': version})

    s = SlotUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    changes = {}
    if 'date' in data:
        changes['date'] = data['date']
    if 'startTime' in data:
        changes['start_time'] = data['startTime']
    if 'endTime' in data:
        changes['end_time'] = data['endTime']
    slot, version = slot_service.update_slot(
        professional, slot_id, changes=changes, expected_version=data.get('version'), actor=request.user,
    )
    return Response({'ok': True, 'slot': slot_service.slot_payload(slot), 'version': version})


my_slot_detail.cls.throttle_scope = 'slot_write'
