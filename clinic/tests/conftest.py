import datetime

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.models import Professional, Slot, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle history and the listing cache live in locmem
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def future_day():
    return timezone.localdate() + datetime.timedelta(days=7)


@pytest.fixture
def past_day():
    return timezone.localdate() - datetime.timedelta(days=2)


@pytest.fixture
def admin(db):
    return User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin')


@pytest.fixture
def patient(db):
    return User.objects.create_user(username='patient1', password='P@ssw0rd1', role='patient',
                                    first_name='Ravi', last_name='Kumar')


@pytest.fixture
def other_patient(db):
    return User.objects.create_user(username='patient2', password='P@ssw0rd1', role='patient')


def _professional(username, kind, **extra):
    user = User.objects.create_user(username=username, password='P@ssw0rd1', role=kind,
                                    first_name=username.capitalize())
    return Professional.objects.create(user=user, kind=kind, **extra)


@pytest.fixture
def pharmacist(db):
    return _professional('pharm1', 'pharmacist')


@pytest.fixture
def other_pharmacist(db):
    return _professional('pharm2', 'pharmacist')


@pytest.fixture
def doctor(db):
    return _professional('doc1', 'doctor', consultation_fee=800)


@pytest.fixture
def nutritionist(db):
    return _professional('nutri1', 'nutritionist', consultation_fee=600)


@pytest.fixture
def client_for():
    def make(user):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return make


@pytest.fixture
def make_slot():
    def make(professional, day, start='09:00', end='10:00', booked=False):
        return Slot.objects.create(professional=professional, date=day, start_time=start, end_time=end,
                                   is_booked=booked)
    return make


@pytest.fixture
def booking_body():
    def make(slot, service_type='prescription_review'):
        return {
            'slotId': slot.id,
            'serviceType': service_type,
            'patientDetails': {
                'age': 34,
                'sex': 'male',
                'prescriptionUrl': 'https://files.example.com/rx/1.pdf',
                'additionalNotes': 'Allergic to penicillin',
            },
            'paymentId': 'pay_123',
        }
    return make
