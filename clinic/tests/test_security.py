import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from clinic.services import notifications as notification_service

pytestmark = pytest.mark.django_db


def _bearer(user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {AccessToken.for_user(user)}')
    return client


def test_bearer_token_resolves_user(patient):
    r = _bearer(patient).get('/api/notifications/unread-count')
    assert r.status_code == 200
    assert r.data == {'ok': True, 'count': 0}


def test_token_carries_user_id_claim(patient):
    # newer releases write the claim as a string
    assert str(AccessToken.for_user(patient)['userId']) == str(patient.id)


def test_suspended_user_is_rejected(patient):
    client = _bearer(patient)
    patient.is_suspended = True
    patient.suspension_reason = 'Chargeback fraud'
    patient.save()

    r = client.get('/api/notifications/unread-count')

    assert r.status_code == 401
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'account_suspended'
    assert 'Chargeback fraud' in r.data['error']['message']


def test_garbage_token_is_rejected():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    r = client.get('/api/notifications/unread-count')
    assert r.status_code == 401
    assert 'WWW-Authenticate' in r


def test_missing_credentials():
    r = APIClient().get('/api/bookings/mine')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'not_authenticated'


def test_unhandled_error_is_wrapped(monkeypatch, patient, client_for):
    def boom(user):
        raise RuntimeError('database on fire')
    monkeypatch.setattr(notification_service, 'unread_count', boom)

    r = client_for(patient).get('/api/notifications/unread-count')

    assert r.status_code == 500
    assert r.data == {'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}}


def test_request_id_is_echoed():
    r = APIClient().get('/healthz', HTTP_X_REQUEST_ID='req-42')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}
    assert r['X-Request-ID'] == 'req-42'


def test_request_id_is_generated():
    r = APIClient().get('/healthz')
    assert r['X-Request-ID']
