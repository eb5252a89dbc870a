import pytest

from clinic.models import Booking, Notification, Professional, Slot

pytestmark = pytest.mark.django_db


def _book(client, body):
    return client.post('/api/bookings', body, format='json')


def test_booking_claims_slot_and_notifies(pharmacist, patient, admin, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day, '10:00 AM', '10:30 AM')

    r = _book(client_for(patient), booking_body(slot))

    assert r.status_code == 201
    data = r.data['data']
    assert data['status'] == 'confirmed'
    assert data['slotTime'] == '10:00 AM'
    assert data['paymentAmount'] == 200
    assert data['professionalShare'] == 100
    slot.refresh_from_db()
    assert slot.is_booked is True
    assert Professional.objects.get(pk=pharmacist.pk).slots_version == 1
    assert set(Notification.objects.values_list('user_id', 'type')) == {
        (patient.id, 'booking_confirmed'),
        (pharmacist.user_id, 'new_booking'),
        (admin.id, 'new_booking'),
    }


def test_double_booking_yields_one_success(pharmacist, patient, other_patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)

    first = _book(client_for(patient), booking_body(slot))
    second = _book(client_for(other_patient), booking_body(slot))

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.data['error']['code'] == 'slot_booked'
    assert Booking.objects.filter(slot=slot).count() == 1


def test_expired_and_unknown_slots_are_not_bookable(pharmacist, patient, client_for, past_day, make_slot, booking_body):
    expired = make_slot(pharmacist, past_day)
    client = client_for(patient)

    r = _book(client, booking_body(expired))
    assert r.status_code == 400
    assert r.data['error']['code'] == 'slot_expired'

    body = booking_body(expired)
    body['slotId'] = expired.id + 1000
    assert _book(client, body).status_code == 404
    assert not Booking.objects.exists()


def test_service_must_match_professional_kind(doctor, patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(doctor, future_day)

    r = _book(client_for(patient), booking_body(slot, 'prescription_review'))

    assert r.status_code == 400
    slot.refresh_from_db()
    assert slot.is_booked is False


@pytest.mark.parametrize('service,amount,share', [
    ('prescription_review', 200, 100),
    ('full_consultation', 500, 250),
])
def test_pharmacist_prices(pharmacist, patient, client_for, future_day, make_slot, booking_body, service, amount, share):
    slot = make_slot(pharmacist, future_day)
    r = _book(client_for(patient), booking_body(slot, service))
    assert (r.data['data']['paymentAmount'], r.data['data']['professionalShare']) == (amount, share)


def test_doctor_price_follows_fee(doctor, patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(doctor, future_day)
    r = _book(client_for(patient), booking_body(slot, 'doctor_consultation'))
    assert (r.data['data']['paymentAmount'], r.data['data']['professionalShare']) == (800, 400)


def test_only_patients_book(pharmacist, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    assert _book(client_for(pharmacist.user), booking_body(slot)).status_code == 403
    assert _book(client_for(None), booking_body(slot)).status_code == 401


def test_available_slots_marks_booked(pharmacist, patient, client_for, future_day, past_day, make_slot, booking_body):
    free = make_slot(pharmacist, future_day, '09:00', '10:00')
    taken = make_slot(pharmacist, future_day, '11:00', '12:00')
    make_slot(pharmacist, past_day)
    _book(client_for(patient), booking_body(taken))

    r = client_for(None).get(f'/api/bookings/available-slots/{pharmacist.id}')

    assert r.status_code == 200
    assert [(s['id'], s['isBooked']) for s in r.data['data']] == [(free.id, False), (taken.id, True)]
    assert client_for(None).get('/api/bookings/available-slots/9999').status_code == 404


def test_cancel_frees_slot(pharmacist, patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    client = client_for(patient)
    booking_id = _book(client, booking_body(slot)).data['data']['id']

    r = client.patch(f'/api/bookings/{booking_id}/cancel')

    assert r.status_code == 200
    assert r.data['data']['status'] == 'cancelled'
    slot.refresh_from_db()
    assert slot.is_booked is False
    assert Notification.objects.filter(user=pharmacist.user, type='booking_cancelled').exists()

    again = client.patch(f'/api/bookings/{booking_id}/cancel')
    assert again.status_code == 400
    assert again.data['error']['code'] == 'invalid_state'


def test_cancel_by_stranger_is_forbidden(pharmacist, patient, other_patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    booking_id = _book(client_for(patient), booking_body(slot)).data['data']['id']

    assert client_for(other_patient).patch(f'/api/bookings/{booking_id}/cancel').status_code == 403


def test_reschedule_moves_claim(pharmacist, patient, client_for, future_day, make_slot, booking_body):
    old = make_slot(pharmacist, future_day, '09:00', '10:00')
    new = make_slot(pharmacist, future_day, '11:00', '12:00')
    booking_id = _book(client_for(patient), booking_body(old)).data['data']['id']

    r = client_for(pharmacist.user).patch(f'/api/bookings/{booking_id}/reschedule', {'slotId': new.id}, format='json')

    assert r.status_code == 200
    assert r.data['data']['slotId'] == new.id
    assert r.data['data']['slotTime'] == '11:00'
    old.refresh_from_db()
    new.refresh_from_db()
    assert (old.is_booked, new.is_booked) == (False, True)


def test_reschedule_to_other_professionals_slot_fails(pharmacist, other_pharmacist, patient, client_for, future_day,
                                                      make_slot, booking_body):
    old = make_slot(pharmacist, future_day)
    foreign = make_slot(other_pharmacist, future_day)
    booking_id = _book(client_for(patient), booking_body(old)).data['data']['id']

    r = client_for(pharmacist.user).patch(f'/api/bookings/{booking_id}/reschedule', {'slotId': foreign.id}, format='json')

    assert r.status_code == 404
    old.refresh_from_db()
    assert old.is_booked is True


def test_session_lifecycle_and_single_review(pharmacist, patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    patient_client, pro_client = client_for(patient), client_for(pharmacist.user)
    booking_id = _book(patient_client, booking_body(slot)).data['data']['id']

    early = patient_client.post(f'/api/bookings/{booking_id}/review', {'rating': 5}, format='json')
    assert early.status_code == 400

    link = pro_client.patch(f'/api/bookings/{booking_id}/meeting-link',
                            {'meetLink': 'https://meet.example.com/abc'}, format='json')
    assert link.data['data']['meetLink'] == 'https://meet.example.com/abc'
    result = pro_client.put(f'/api/bookings/{booking_id}/test-result',
                            {'testResultUrl': 'https://files.example.com/lab.pdf'}, format='json')
    assert result.data['data']['testResults'][0]['url'] == 'https://files.example.com/lab.pdf'
    treated = pro_client.patch(f'/api/bookings/{booking_id}/treatment-status', {'treatmentStatus': 'treated'}, format='json')
    assert treated.data['data']['status'] == 'completed'

    review = patient_client.post(f'/api/bookings/{booking_id}/review', {'rating': 4, 'feedback': 'Very <b>clear</b>'}, format='json')
    assert review.status_code == 200
    assert review.data['data']['review']['feedback'] == 'Very clear'
    twice = patient_client.post(f'/api/bookings/{booking_id}/review', {'rating': 5}, format='json')
    assert twice.status_code == 400

    reviews = client_for(None).get(f'/api/bookings/reviews/{pharmacist.id}')
    assert reviews.data['totalReviews'] == 1
    assert reviews.data['averageRating'] == 4.0


def test_other_professional_cannot_manage_booking(pharmacist, other_pharmacist, patient, client_for, future_day,
                                                  make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    booking_id = _book(client_for(patient), booking_body(slot)).data['data']['id']

    r = client_for(other_pharmacist.user).put(f'/api/bookings/{booking_id}/report',
                                              {'reportUrl': 'https://files.example.com/r.pdf'}, format='json')
    assert r.status_code == 403


def test_my_bookings_by_role(pharmacist, patient, other_patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    _book(client_for(patient), booking_body(slot))

    assert len(client_for(patient).get('/api/bookings/mine').data['data']) == 1
    assert len(client_for(pharmacist.user).get('/api/bookings/mine').data['data']) == 1
    assert client_for(other_patient).get('/api/bookings/mine').data['data'] == []


def test_booked_slot_survives_delete_race(pharmacist, patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    _book(client_for(patient), booking_body(slot))

    r = client_for(pharmacist.user).delete(f'/api/pharmacists/slots/{slot.id}')

    assert r.status_code == 409
    assert Slot.objects.filter(pk=slot.pk, is_booked=True).exists()


def test_payment_stats(pharmacist, patient, client_for, future_day, make_slot, booking_body):
    pro_client = client_for(pharmacist.user)
    for start, end in (('09:00', '10:00'), ('11:00', '12:00')):
        slot = make_slot(pharmacist, future_day, start, end)
        booking_id = _book(client_for(patient), booking_body(slot, 'full_consultation')).data['data']['id']
        pro_client.put(f'/api/bookings/{booking_id}/report', {'reportUrl': 'https://files.example.com/r.pdf'}, format='json')
    Booking.objects.filter(pk=booking_id).update(professional_paid=True)

    r = pro_client.get('/api/pharmacists/payment-stats')

    assert r.status_code == 200
    data = r.data['data']
    assert (data['totalEarned'], data['totalPaid'], data['outstanding']) == (500, 250, 250)
    assert data['unpaidBookings'] == 1
