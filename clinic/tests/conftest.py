import datetime as dt

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import DoctorProfile, Medicine, PatientProfile, Registration, User

PASSWORD = 'Str0ng-Passw0rd!'
VISIT_DATE = dt.date(2025, 6, 1)


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and the doctor list live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    seq = {'n': 0}

    def _make(role=User.ROLE_PATIENT, *, email=None, name=None, fee=None, password=PASSWORD):
        seq['n'] += 1
        email = email or f'{role}{seq["n"]}@hospital.test'
        user = User.objects.create_user(username=email, email=email, password=password,
                                        first_name=name or f'{role.title()} {seq["n"]}', role=role)
        if role == User.ROLE_DOCTOR:
            extra = {'consultation_fee': fee} if fee is not None else {}
            DoctorProfile.objects.create(user=user, specialization='Cardiology', **extra)
        elif role == User.ROLE_PATIENT:
            PatientProfile.objects.create(user=user)
        return user
    return _make


@pytest.fixture
def patient(make_user):
    return make_user(User.ROLE_PATIENT)


@pytest.fixture
def doctor(make_user):
    return make_user(User.ROLE_DOCTOR)


@pytest.fixture
def admin_user(make_user):
    return make_user(User.ROLE_ADMIN)


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def book(db):
    def _book(doctor, patient, at, *, on=VISIT_DATE, status=Registration.STATUS_PENDING):
        hour, minute = (int(x) for x in at.split(':'))
        return Registration.objects.create(doctor=doctor, patient=patient, visit_date=on,
                                           visit_time=dt.time(hour, minute), status=status)
    return _book


@pytest.fixture
def medicine(db):
    def _medicine(name='Paracetamol', stock=10):
        return Medicine.objects.create(name=name, medicine_type='tablet', dosage='500mg', unit='tablet', stock=stock)
    return _medicine
