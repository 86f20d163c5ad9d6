import datetime as dt
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.models import Registration, Report, User

pytestmark = pytest.mark.django_db


def test_daily_report_counts_todays_active_bookings(make_user, book, client_for):
    doctor = make_user(User.ROLE_DOCTOR, fee=Decimal('150000'))
    today = timezone.localdate()
    book(doctor, make_user(), '09:00', on=today)
    book(doctor, make_user(), '11:00', on=today, status=Registration.STATUS_COMPLETED)
    book(doctor, make_user(), '13:00', on=today, status=Registration.STATUS_CANCELLED)
    book(doctor, make_user(), '09:00', on=today - dt.timedelta(days=1))

    r = client_for(doctor).get(reverse('doctor-report'))
    assert r.status_code == 201
    assert r.data['data']['patient_count'] == 2
    assert r.data['data']['income'] == '300000.00'
    assert r.data['data']['report_date'] == today.isoformat()


def test_second_report_on_the_same_day_conflicts(doctor, client_for):
    client = client_for(doctor)
    assert client.get(reverse('doctor-report')).status_code == 201
    r = client.get(reverse('doctor-report'))
    assert r.status_code == 409
    assert Report.objects.filter(doctor=doctor).count() == 1


def test_report_list(doctor, client_for):
    Report.objects.create(doctor=doctor, patient_count=3, income=Decimal('300000'), report_date='2025-06-01')
    r = client_for(doctor).get(reverse('doctor-reports'))
    assert r.status_code == 200
    assert r.data['data'][0]['patient_count'] == 3
