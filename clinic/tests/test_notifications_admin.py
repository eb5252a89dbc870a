import pytest

from clinic.models import Booking, Notification, Professional, User
from clinic.services.notifications import notify

pytestmark = pytest.mark.django_db


def test_notification_inbox(patient, other_patient, client_for):
    first = notify(patient, 'booking_confirmed', 'Booking Confirmed', 'See you soon')
    second = notify(patient, 'meeting_link_added', 'Meeting Link', 'Link added')
    foreign = notify(other_patient, 'booking_confirmed', 'Booking Confirmed', 'Not yours')
    client = client_for(patient)

    listed = client.get('/api/notifications').data['data']
    assert [n['id'] for n in listed] == [second.id, first.id]
    assert client.get('/api/notifications/unread-count').data['count'] == 2

    assert client.patch(f'/api/notifications/{first.id}/read').status_code == 200
    assert [n['id'] for n in client.get('/api/notifications', {'unread': '1'}).data['data']] == [second.id]
    assert client.patch(f'/api/notifications/{foreign.id}/read').status_code == 404

    assert client.patch('/api/notifications/mark-all-read').data['updated'] == 1
    assert client.get('/api/notifications/unread-count').data['count'] == 0

    assert client.delete(f'/api/notifications/{foreign.id}').status_code == 404
    assert client.delete(f'/api/notifications/{first.id}').status_code == 200
    assert client.delete('/api/notifications').data['deleted'] == 1
    assert Notification.objects.filter(user=other_patient).count() == 1


def test_suspend_and_unsuspend(admin, patient, client_for):
    admin_client = client_for(admin)

    r = admin_client.post(f'/api/admin/users/{patient.id}/suspend', {'reason': 'Abusive messages'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['isSuspended'] is True
    again = admin_client.post(f'/api/admin/users/{patient.id}/suspend', {'reason': 'again'}, format='json')
    assert again.status_code == 400

    assert admin_client.post(f'/api/admin/users/{admin.id}/suspend', {'reason': 'x'}, format='json').status_code == 403

    r = admin_client.post(f'/api/admin/users/{patient.id}/unsuspend')
    assert r.data['data']['isSuspended'] is False


def test_list_users_filters_by_role(admin, patient, pharmacist, client_for):
    r = client_for(admin).get('/api/admin/users', {'role': 'patient'})
    assert [u['username'] for u in r.data['data']] == [patient.username]
    assert r.data['pagination']['total'] == 1
    assert client_for(patient).get('/api/admin/users').status_code == 403


def test_create_and_delete_professional(admin, client_for):
    user = User.objects.create_user(username='newdoc', password='P@ssw0rd1', role='patient')
    admin_client = client_for(admin)

    r = admin_client.post('/api/admin/professionals', {
        'userId': user.id, 'kind': 'doctor', 'specialization': 'Cardiology', 'consultationFee': 900,
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['consultationFee'] == 900
    user.refresh_from_db()
    assert user.role == 'doctor'
    assert [d['id'] for d in client_for(None).get('/api/doctors').data['data']] == [r.data['data']['id']]

    duplicate = admin_client.post('/api/admin/professionals', {'userId': user.id, 'kind': 'doctor'}, format='json')
    assert duplicate.status_code == 400

    assert admin_client.delete(f"/api/admin/professionals/{r.data['data']['id']}").status_code == 200
    user.refresh_from_db()
    assert user.role == 'patient'
    assert not Professional.objects.exists()
    assert client_for(None).get('/api/doctors').data['data'] == []


def test_professional_with_active_booking_is_kept(admin, pharmacist, patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    client_for(patient).post('/api/bookings', booking_body(slot), format='json')

    r = client_for(admin).delete(f'/api/admin/professionals/{pharmacist.id}')

    assert r.status_code == 400
    assert Professional.objects.filter(pk=pharmacist.pk).exists()


def test_mark_payouts(admin, pharmacist, patient, client_for, future_day, make_slot, booking_body):
    slot = make_slot(pharmacist, future_day)
    booking_id = client_for(patient).post('/api/bookings', booking_body(slot, 'full_consultation'),
                                          format='json').data['data']['id']
    admin_client = client_for(admin)

    # not completed yet
    assert admin_client.post('/api/admin/payouts/mark-paid', {'bookingIds': [booking_id]},
                             format='json').data['modifiedCount'] == 0

    Booking.objects.filter(pk=booking_id).update(status=Booking.STATUS_COMPLETED)
    r = admin_client.post('/api/admin/payouts/mark-paid', {'bookingIds': [booking_id]}, format='json')

    assert r.data['modifiedCount'] == 1
    assert Booking.objects.get(pk=booking_id).professional_paid is True
    note = Notification.objects.get(user=pharmacist.user, type='payment_approved')
    assert '250' in note.message
