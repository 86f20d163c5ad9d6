import datetime as dt

import pytest
from django.urls import reverse

from clinic.context import Caller
from clinic.exceptions import SlotUnavailable
from clinic.models import Registration, User
from clinic.services.scheduling import book_registration, booking_window, check_availability

from .conftest import VISIT_DATE

pytestmark = pytest.mark.django_db


def post_booking(client, doctor, at, on=VISIT_DATE):
    return client.post(reverse('patient-registration'),
                       {'doctor_id': doctor.id, 'visit_date': on.isoformat(), 'visit_time': at},
                       format='json')


def test_booking_within_the_hour_is_rejected_and_later_slot_accepted(doctor, make_user, client_for):
    first, second = make_user(), make_user()
    r = post_booking(client_for(first), doctor, '09:00')
    assert r.status_code == 201
    assert r.data['data']['visit_time'] == '09:00'
    assert r.data['data']['status'] == 'pending'

    r = post_booking(client_for(second), doctor, '09:30')
    assert r.status_code == 422
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'slot_unavailable'

    r = post_booking(client_for(second), doctor, '11:00')
    assert r.status_code == 201
    assert Registration.objects.filter(doctor=doctor).count() == 2


def test_exactly_one_hour_apart_conflicts(doctor, patient, book):
    book(doctor, patient, '09:00')
    assert not check_availability(doctor.id, VISIT_DATE, dt.time(10, 0)).available
    assert not check_availability(doctor.id, VISIT_DATE, dt.time(8, 0)).available
    assert check_availability(doctor.id, VISIT_DATE, dt.time(10, 1)).available


def test_cancelled_and_completed_bookings_do_not_block(doctor, patient, book):
    book(doctor, patient, '09:00', status=Registration.STATUS_CANCELLED)
    book(doctor, patient, '14:00', status=Registration.STATUS_COMPLETED)
    assert check_availability(doctor.id, VISIT_DATE, dt.time(9, 15)).available
    assert check_availability(doctor.id, VISIT_DATE, dt.time(14, 0)).available


def test_other_date_or_doctor_does_not_conflict(doctor, make_user, patient, book):
    other_doctor = make_user(User.ROLE_DOCTOR)
    book(doctor, patient, '09:00')
    assert check_availability(doctor.id, VISIT_DATE + dt.timedelta(days=1), dt.time(9, 0)).available
    assert check_availability(other_doctor.id, VISIT_DATE, dt.time(9, 0)).available


def test_window_is_clamped_to_the_visit_date():
    start, end = booking_window(VISIT_DATE, dt.time(0, 30))
    assert start == dt.time(0, 0)
    assert end == dt.time(1, 30)
    start, end = booking_window(VISIT_DATE, dt.time(23, 30))
    assert start == dt.time(22, 30)
    assert end == dt.time.max


def test_late_evening_booking_ignores_next_morning(doctor, patient, book):
    book(doctor, patient, '00:15', on=VISIT_DATE + dt.timedelta(days=1))
    assert check_availability(doctor.id, VISIT_DATE, dt.time(23, 45)).available


def test_service_raises_slot_unavailable(doctor, make_user, book):
    book(doctor, make_user(), '09:00')
    caller = Caller(user=make_user())
    with pytest.raises(SlotUnavailable):
        book_registration(caller, doctor_id=doctor.id, visit_date=VISIT_DATE, visit_time=dt.time(9, 59))


def test_seconds_are_truncated(doctor, patient):
    reg = book_registration(Caller(user=patient), doctor_id=doctor.id, visit_date=VISIT_DATE,
                            visit_time=dt.time(9, 0, 42))
    assert reg.visit_time == dt.time(9, 0)


def test_unknown_doctor_is_not_found(patient, client_for, make_user):
    not_a_doctor = make_user(User.ROLE_PATIENT)
    r = post_booking(client_for(patient), not_a_doctor, '09:00')
    assert r.status_code == 404
    assert r.data['error']['code'] == 'not_found'


def test_invalid_time_is_a_validation_error(doctor, patient, client_for):
    r = post_booking(client_for(patient), doctor, '25:99')
    assert r.status_code == 422
    assert r.data['error']['code'] == 'validation_error'
    assert 'visit_time' in r.data['error']['fields']


def test_availability_endpoint(doctor, patient, book, client_for):
    book(doctor, patient, '09:00')
    url = reverse('patient-doctor-availability', args=[doctor.id])
    r = client_for(patient).get(url, {'date': VISIT_DATE.isoformat(), 'time': '09:45'})
    assert r.status_code == 200
    assert r.data['data']['available'] is False
    assert r.data['data']['conflict_time'] == '09:00'
    assert r.data['data']['window_start'] == '08:45'

    r = client_for(patient).get(url, {'date': VISIT_DATE.isoformat(), 'time': '10:30'})
    assert r.data['data']['available'] is True


def test_doctor_moves_registration_through_statuses(doctor, patient, book, client_for):
    reg = book(doctor, patient, '09:00')
    client = client_for(doctor)
    url = reverse('doctor-registration-status', args=[reg.id])

    r = client.put(url, {'status': 'confirmed'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'confirmed'

    r = client.put(url, {'status': 'completed'}, format='json')
    assert r.status_code == 200

    r = client.put(url, {'status': 'pending'}, format='json')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'conflict'


def test_doctor_cannot_touch_another_doctors_registration(doctor, make_user, patient, book, client_for):
    reg = book(make_user(User.ROLE_DOCTOR), patient, '09:00')
    r = client_for(doctor).put(reverse('doctor-registration-status', args=[reg.id]), {'status': 'confirmed'},
                               format='json')
    assert r.status_code == 403


def test_registration_lists_are_scoped_to_the_caller(doctor, make_user, book, client_for):
    mine, theirs = make_user(), make_user()
    book(doctor, mine, '09:00')
    book(doctor, theirs, '11:00')

    r = client_for(mine).get(reverse('patient-registrations'))
    assert [x['visit_time'] for x in r.data['data']] == ['09:00']

    r = client_for(doctor).get(reverse('doctor-registrations'), {'date': VISIT_DATE.isoformat()})
    assert [x['visit_time'] for x in r.data['data']] == ['09:00', '11:00']
