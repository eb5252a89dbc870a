import datetime

import pytest

from clinic.models import AuditEvent, Professional, Slot, User
from clinic.services import slots as slot_service

pytestmark = pytest.mark.django_db

SLOTS_URL = '/api/pharmacists/slots'


def _projection(slots):
    return [(s['date'], s['startTime'], s['endTime'], s['isBooked']) for s in slots]


def test_add_slot_appends_one_unbooked_slot(pharmacist, client_for, future_day, make_slot):
    make_slot(pharmacist, future_day, '08:00', '08:30')
    client = client_for(pharmacist.user)

    r = client.post(SLOTS_URL, {'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '09:30'}, format='json')

    assert r.status_code == 201
    assert r.data['slot']['isBooked'] is False
    assert r.data['version'] == 1
    listing = client.get(SLOTS_URL)
    assert len(listing.data['slots']) == 2
    assert listing.data['version'] == 1
    assert AuditEvent.objects.filter(action='slot_added', object_id=pharmacist.id).exists()


def test_add_then_list_sorted_by_date(pharmacist, client_for, make_slot):
    make_slot(pharmacist, datetime.date(2025, 6, 1), '09:00', '10:00')
    client = client_for(pharmacist.user)

    r = client.post(SLOTS_URL, {'date': '2025-06-02', 'startTime': '14:00', 'endTime': '15:00'}, format='json')
    assert r.status_code == 201

    slots = client.get(SLOTS_URL).data['slots']
    assert _projection(slots) == [
        ('2025-06-01', '09:00', '10:00', False),
        ('2025-06-02', '14:00', '15:00', False),
    ]


def test_add_rejects_duplicate_window(pharmacist, client_for, future_day, make_slot):
    make_slot(pharmacist, future_day, '09:00', '10:00')
    client = client_for(pharmacist.user)

    # same window in 12h spelling
    r = client.post(SLOTS_URL, {'date': future_day.isoformat(), 'startTime': '09:00 AM', 'endTime': '10:00 AM'}, format='json')

    assert r.status_code == 409
    assert r.data['error']['code'] == 'slot_conflict'
    assert Slot.objects.filter(professional=pharmacist).count() == 1


@pytest.mark.parametrize('start,end', [('10:00', '09:00'), ('10:00', '10:00'), ('25:00', '26:00'), ('nine', '10:00')])
def test_add_rejects_invalid_window(pharmacist, client_for, future_day, start, end):
    r = client_for(pharmacist.user).post(
        SLOTS_URL, {'date': future_day.isoformat(), 'startTime': start, 'endTime': end}, format='json',
    )
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'
    assert not Slot.objects.exists()


def test_add_requires_all_fields(pharmacist, client_for):
    r = client_for(pharmacist.user).post(SLOTS_URL, {'startTime': '09:00'}, format='json')
    assert r.status_code == 400
    assert set(r.data['error']['fields']) == {'date', 'endTime'}


def test_delete_keeps_remaining_order(pharmacist, client_for, future_day, make_slot):
    a = make_slot(pharmacist, future_day, '09:00', '09:30')
    b = make_slot(pharmacist, future_day, '10:00', '10:30')
    c = make_slot(pharmacist, future_day, '11:00', '11:30')
    client = client_for(pharmacist.user)

    r = client.delete(f'{SLOTS_URL}/{b.id}')

    assert r.status_code == 200
    assert r.data['deleted'] == b.id
    assert [s['id'] for s in client.get(SLOTS_URL).data['slots']] == [a.id, c.id]


def test_delete_booked_slot_is_rejected(pharmacist, client_for, future_day, make_slot):
    slot = make_slot(pharmacist, future_day, booked=True)

    r = client_for(pharmacist.user).delete(f'{SLOTS_URL}/{slot.id}')

    assert r.status_code == 409
    assert r.data['error']['code'] == 'slot_booked'
    assert Slot.objects.filter(pk=slot.pk).exists()


def test_delete_foreign_slot_is_not_found(pharmacist, other_pharmacist, client_for, future_day, make_slot):
    slot = make_slot(other_pharmacist, future_day)

    r = client_for(pharmacist.user).delete(f'{SLOTS_URL}/{slot.id}')

    assert r.status_code == 404
    assert r.data['error']['code'] == 'slot_not_found'
    assert Slot.objects.filter(pk=slot.pk).exists()


def test_update_slot_and_stale_slot_version(pharmacist, client_for, future_day, make_slot):
    slot = make_slot(pharmacist, future_day, '09:00', '09:30')
    client = client_for(pharmacist.user)

    r = client.patch(f'{SLOTS_URL}/{slot.id}', {'endTime': '09:45', 'version': 1}, format='json')
    assert r.status_code == 200
    assert r.data['slot']['endTime'] == '09:45'
    assert r.data['slot']['version'] == 2

    stale = client.patch(f'{SLOTS_URL}/{slot.id}', {'endTime': '10:00', 'version': 1}, format='json')
    assert stale.status_code == 409
    assert stale.data['error']['code'] == 'version_conflict'
    assert stale.data['current']['endTime'] == '09:45'


def test_update_booked_slot_is_rejected(pharmacist, client_for, future_day, make_slot):
    slot = make_slot(pharmacist, future_day, booked=True)

    r = client_for(pharmacist.user).patch(f'{SLOTS_URL}/{slot.id}', {'startTime': '08:00'}, format='json')

    assert r.status_code == 409
    slot.refresh_from_db()
    assert slot.start_time == '09:00'


def test_replace_round_trip_preserves_values(pharmacist, client_for):
    client = client_for(pharmacist.user)
    submitted = [
        {'date': '2030-01-05', 'startTime': '09:00 AM', 'endTime': '09:30 AM'},
        {'date': '2030-01-05', 'startTime': '02:00 PM', 'endTime': '02:45 PM'},
        {'date': '2030-01-06', 'startTime': '18:15', 'endTime': '19:00'},
    ]

    r = client.put(SLOTS_URL, {'slots': submitted, 'version': 0}, format='json')
    assert r.status_code == 200
    assert r.data['version'] == 1

    fetched = client.get(SLOTS_URL).data['slots']
    assert _projection(fetched) == [(s['date'], s['startTime'], s['endTime'], False) for s in submitted]


def test_replace_requires_version(pharmacist, client_for, future_day):
    r = client_for(pharmacist.user).put(
        SLOTS_URL, {'slots': [{'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00'}]}, format='json',
    )
    assert r.status_code == 428
    assert r.data['error']['code'] == 'version_required'
    assert not Slot.objects.exists()


def test_replace_accepts_if_match_header(pharmacist, client_for, future_day):
    r = client_for(pharmacist.user).put(
        SLOTS_URL,
        {'slots': [{'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00'}]},
        format='json', HTTP_IF_MATCH='"0"',
    )
    assert r.status_code == 200
    assert len(r.data['slots']) == 1


def test_replace_ignores_client_is_booked(pharmacist, client_for, future_day):
    r = client_for(pharmacist.user).put(SLOTS_URL, {
        'slots': [{'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00', 'isBooked': True}],
        'version': 0,
    }, format='json')
    assert r.status_code == 200
    assert r.data['slots'][0]['isBooked'] is False


def test_replace_cannot_drop_booked_slot(pharmacist, client_for, future_day, make_slot):
    booked = make_slot(pharmacist, future_day, '09:00', '10:00', booked=True)
    free = make_slot(pharmacist, future_day, '11:00', '12:00')
    client = client_for(pharmacist.user)

    r = client.put(SLOTS_URL, {
        'slots': [{'id': free.id, 'date': future_day.isoformat(), 'startTime': '11:00', 'endTime': '12:00'},
                  {'date': future_day.isoformat(), 'startTime': '13:00', 'endTime': '14:00'}],
        'version': 0,
    }, format='json')

    assert r.status_code == 409
    assert r.data['error']['code'] == 'slot_booked'
    # nothing applied
    assert sorted(Slot.objects.values_list('id', flat=True)) == sorted([booked.id, free.id])
    pharmacist.refresh_from_db()
    assert pharmacist.slots_version == 0


def test_replace_rejects_duplicates_in_payload(pharmacist, client_for, future_day):
    entry = {'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00'}
    r = client_for(pharmacist.user).put(SLOTS_URL, {'slots': [entry, dict(entry)], 'version': 0}, format='json')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'slot_conflict'


def test_replace_shifts_chained_windows(pharmacist, client_for, future_day, make_slot):
    a = make_slot(pharmacist, future_day, '09:00', '10:00')
    b = make_slot(pharmacist, future_day, '10:00', '11:00')
    day = future_day.isoformat()

    # a moves into b's current window before b moves on
    r = client_for(pharmacist.user).put(SLOTS_URL, {
        'slots': [{'id': a.id, 'date': day, 'startTime': '10:00', 'endTime': '11:00'},
                  {'id': b.id, 'date': day, 'startTime': '11:00', 'endTime': '12:00'}],
        'version': 0,
    }, format='json')

    assert r.status_code == 200
    assert [(s['id'], s['startTime']) for s in r.data['slots']] == [(a.id, '10:00'), (b.id, '11:00')]
    assert all(s['version'] == 2 for s in r.data['slots'])


def test_replace_swaps_windows_and_keeps_ids(pharmacist, client_for, future_day, make_slot):
    a = make_slot(pharmacist, future_day, '09:00', '10:00')
    b = make_slot(pharmacist, future_day, '14:00', '15:00')
    day = future_day.isoformat()

    r = client_for(pharmacist.user).put(SLOTS_URL, {
        'slots': [{'id': a.id, 'date': day, 'startTime': '14:00', 'endTime': '15:00'},
                  {'id': b.id, 'date': day, 'startTime': '09:00', 'endTime': '10:00'}],
        'version': 0,
    }, format='json')

    assert r.status_code == 200
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.date, a.start_time) == (future_day, '14:00')
    assert (b.date, b.start_time) == (future_day, '09:00')
    assert Slot.objects.filter(professional=pharmacist).count() == 2


def test_stale_replace_is_rejected_with_current_state(pharmacist, client_for, future_day, make_slot):
    existing = make_slot(pharmacist, future_day, '09:00', '10:00')
    first, second = client_for(pharmacist.user), client_for(pharmacist.user)
    base = first.get(SLOTS_URL).data
    keep = {'id': existing.id, 'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00'}

    a = first.put(SLOTS_URL, {'slots': [keep, {'date': future_day.isoformat(), 'startTime': '11:00', 'endTime': '12:00'}],
                              'version': base['version']}, format='json')
    b = second.put(SLOTS_URL, {'slots': [keep, {'date': future_day.isoformat(), 'startTime': '13:00', 'endTime': '14:00'}],
                               'version': base['version']}, format='json')

    assert a.status_code == 200
    assert b.status_code == 409
    assert b.data['error']['code'] == 'version_conflict'
    assert [s['startTime'] for s in b.data['current']['slots']] == ['09:00', '11:00']
    assert b.data['current']['version'] == a.data['version']


def test_concurrent_element_adds_both_survive(pharmacist, client_for, future_day, make_slot):
    make_slot(pharmacist, future_day, '09:00', '10:00')
    first, second = client_for(pharmacist.user), client_for(pharmacist.user)
    first.get(SLOTS_URL)
    second.get(SLOTS_URL)

    ra = first.post(SLOTS_URL, {'date': future_day.isoformat(), 'startTime': '11:00', 'endTime': '12:00'}, format='json')
    rb = second.post(SLOTS_URL, {'date': future_day.isoformat(), 'startTime': '13:00', 'endTime': '14:00'}, format='json')

    assert ra.status_code == rb.status_code == 201
    starts = [s['startTime'] for s in first.get(SLOTS_URL).data['slots']]
    assert starts == ['09:00', '11:00', '13:00']


def test_mutation_broadcasts_after_commit(monkeypatch, django_capture_on_commit_callbacks, pharmacist, client_for, future_day):
    sent = []
    monkeypatch.setattr(slot_service, 'broadcast_slots_changed', lambda pid, version: sent.append((pid, version)))

    with django_capture_on_commit_callbacks(execute=True):
        r = client_for(pharmacist.user).post(
            SLOTS_URL, {'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00'}, format='json',
        )

    assert r.status_code == 201
    assert sent == [(pharmacist.id, 1)]


def test_slot_endpoints_resolve_caller_profile(client_for, doctor, patient):
    orphan = User.objects.create_user(username='pharm_noprofile', password='x', role='pharmacist')

    r = client_for(orphan).get(SLOTS_URL)
    assert r.status_code == 404
    assert r.data['error']['code'] == 'professional_not_found'

    # a doctor cannot edit through the pharmacist routes
    assert client_for(doctor.user).get(SLOTS_URL).status_code == 403
    assert client_for(patient).get(SLOTS_URL).status_code == 403
    assert client_for(None).get(SLOTS_URL).status_code == 401


def test_each_kind_has_its_own_routes(doctor, nutritionist, client_for, future_day):
    body = {'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00'}
    assert client_for(doctor.user).post('/api/doctors/slots', body, format='json').status_code == 201
    assert client_for(nutritionist.user).post('/api/nutritionists/slots', body, format='json').status_code == 201
    assert Slot.objects.filter(professional=doctor).count() == 1
    assert Slot.objects.filter(professional=nutritionist).count() == 1


def test_public_listing_shows_upcoming_slots_only(pharmacist, client_for, future_day, past_day, make_slot):
    make_slot(pharmacist, past_day, '09:00', '10:00')
    upcoming = make_slot(pharmacist, future_day, '09:00', '10:00')

    r = client_for(None).get('/api/pharmacists')

    assert r.status_code == 200
    [item] = r.data['data']
    assert item['id'] == pharmacist.id
    assert [s['id'] for s in item['availableSlots']] == [upcoming.id]


def test_public_listing_reflects_new_slot(pharmacist, client_for, future_day):
    anon = client_for(None)
    assert anon.get('/api/pharmacists').data['data'][0]['availableSlots'] == []

    client_for(pharmacist.user).post(
        SLOTS_URL, {'date': future_day.isoformat(), 'startTime': '09:00', 'endTime': '10:00'}, format='json',
    )

    assert len(anon.get('/api/pharmacists').data['data'][0]['availableSlots']) == 1


def test_professional_detail_404(client_for, pharmacist):
    anon = client_for(None)
    assert anon.get(f'/api/pharmacists/{pharmacist.id}').status_code == 200
    assert anon.get(f'/api/doctors/{pharmacist.id}').status_code == 404


def test_purge_expired_slots_keeps_booked(pharmacist, future_day, past_day, make_slot):
    expired_free = make_slot(pharmacist, past_day, '09:00', '10:00')
    expired_booked = make_slot(pharmacist, past_day, '11:00', '12:00', booked=True)
    upcoming = make_slot(pharmacist, future_day)

    assert slot_service.purge_expired_slots(dry_run=True) == 1
    assert slot_service.purge_expired_slots() == 1

    remaining = set(Slot.objects.values_list('id', flat=True))
    assert remaining == {expired_booked.id, upcoming.id}
    assert expired_free.id not in remaining
    assert Professional.objects.get(pk=pharmacist.pk).slots_version == 1
