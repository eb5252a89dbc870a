import pytest

from clinic.models import Complaint, Notification

pytestmark = pytest.mark.django_db


def _submit(client, **overrides):
    body = {
        'title': 'App crashed during payment',
        'description': 'The page froze after I pressed pay.',
        'category': 'technical_issue',
        'priority': 'high',
    }
    body.update(overrides)
    return client.post('/api/complaints', body, format='json')


def test_submit_sanitizes_and_notifies_admins(patient, admin, client_for):
    r = _submit(client_for(patient), title='<b>Broken</b> link')

    assert r.status_code == 201
    assert r.data['data']['title'] == 'Broken link'
    assert r.data['data']['status'] == 'open'
    assert Notification.objects.filter(user=admin, type='new_complaint').count() == 1


def test_owner_can_edit_only_while_open(patient, admin, client_for):
    client = client_for(patient)
    cid = _submit(client).data['data']['id']

    r = client.put(f'/api/complaints/{cid}', {'priority': 'urgent'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['priority'] == 'urgent'

    client_for(admin).put(f'/api/complaints/admin/{cid}/status', {'status': 'in_progress'}, format='json')
    r = client.put(f'/api/complaints/{cid}', {'priority': 'low'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_state'


def test_detail_is_private(patient, other_patient, admin, client_for):
    cid = _submit(client_for(patient)).data['data']['id']

    assert client_for(other_patient).get(f'/api/complaints/{cid}').status_code == 403
    assert client_for(patient).get(f'/api/complaints/{cid}').status_code == 200
    admin_view = client_for(admin).get(f'/api/complaints/{cid}')
    assert 'internalNotes' in admin_view.data['data']


def test_rating_requires_resolution(patient, admin, client_for):
    client, admin_client = client_for(patient), client_for(admin)
    cid = _submit(client).data['data']['id']

    assert client.post(f'/api/complaints/{cid}/rating', {'rating': 5}, format='json').status_code == 400

    resolved = admin_client.put(f'/api/complaints/admin/{cid}/status',
                                {'status': 'resolved', 'message': 'Fixed in the latest release.'}, format='json')
    assert resolved.data['data']['resolution']['message'] == 'Fixed in the latest release.'

    r = client.post(f'/api/complaints/{cid}/rating', {'rating': 5}, format='json')
    assert r.status_code == 200
    assert r.data['data']['resolution']['satisfactionRating'] == 5
    assert Notification.objects.filter(user=patient, type='complaint_updated').exists()


def test_admin_list_orders_by_priority_and_paginates(patient, admin, client_for):
    client = client_for(patient)
    _submit(client, title='low one', priority='low')
    _submit(client, title='urgent one', priority='urgent')
    _submit(client, title='medium one', priority='medium')

    r = client_for(admin).get('/api/complaints/admin/all', {'limit': 2})

    assert r.status_code == 200
    assert [c['title'] for c in r.data['complaints']] == ['urgent one', 'medium one']
    assert (r.data['total'], r.data['totalPages'], r.data['currentPage']) == (3, 2, 1)
    assert r.data['stats'] == {'open': 3}

    filtered = client_for(admin).get('/api/complaints/admin/all', {'search': 'low'})
    assert [c['title'] for c in filtered.data['complaints']] == ['low one']


def test_admin_routes_need_admin(patient, client_for):
    assert client_for(patient).get('/api/complaints/admin/all').status_code == 403
    assert client_for(patient).get('/api/complaints/admin/statistics').status_code == 403


def test_assign_respond_note_and_statistics(patient, admin, client_for):
    admin_client = client_for(admin)
    cid = _submit(client_for(patient)).data['data']['id']

    assigned = admin_client.put(f'/api/complaints/admin/{cid}/assign', {'assignedTo': admin.id}, format='json')
    assert assigned.data['data']['status'] == 'in_progress'
    assert assigned.data['data']['assignedTo'] == admin.id

    bad = admin_client.put(f'/api/complaints/admin/{cid}/assign', {'assignedTo': patient.id}, format='json')
    assert bad.status_code == 400

    responded = admin_client.post(f'/api/complaints/admin/{cid}/respond', {'message': 'Looking into it'}, format='json')
    assert responded.data['data']['adminResponse']['message'] == 'Looking into it'

    noted = admin_client.post(f'/api/complaints/admin/{cid}/note', {'note': 'Reproduced on Android'}, format='json')
    assert [n['note'] for n in noted.data['data']['internalNotes']] == ['Reproduced on Android']
    # notes never reach the owner
    assert 'internalNotes' not in client_for(patient).get(f'/api/complaints/{cid}').data['data']

    stats = admin_client.get('/api/complaints/admin/statistics').data['data']
    assert stats['statusStats'] == {'in_progress': 1}
    assert stats['categoryStats'] == {'technical_issue': 1}
    assert len(stats['monthlyStats']) == 1


def test_related_booking_must_belong_to_user(patient, client_for):
    r = _submit(client_for(patient), relatedBooking=12345)
    assert r.status_code == 400
    assert not Complaint.objects.exists()
