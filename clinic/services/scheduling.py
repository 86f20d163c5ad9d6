"""
Booking (registration) scheduling.

A doctor cannot hold two active bookings on the same date whose times
are within ``BOOKING_WINDOW_MINUTES`` of each other.  The window is a
closed interval clamped to the booking's calendar date, so bookings on
the neighbouring date are never compared.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

import bleach
from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.context import Caller
from clinic.exceptions import Conflict, SlotUnavailable
from clinic.models import Registration, User
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Availability:
    available: bool
    window_start: time
    window_end: time
    conflict: Optional[Registration] = None


def booking_window(visit_date: date, visit_time: time) -> tuple[time, time]:
    delta = timedelta(minutes=settings.BOOKING_WINDOW_MINUTES)
    at = datetime.combine(visit_date, visit_time)
    start = max(at - delta, datetime.combine(visit_date, time.min))
    end = min(at + delta, datetime.combine(visit_date, time.max))
    return start.time(), end.time()


def find_conflict(doctor_id: int, visit_date: date, visit_time: time) -> Optional[Registration]:
    start, end = booking_window(visit_date, visit_time)
    return (
        Registration.objects
        .filter(
            doctor_id=doctor_id,
            visit_date=visit_date,
            visit_time__range=(start, end),
            status__in=Registration.ACTIVE_STATUSES,
        )
        .order_by('visit_time', 'id')
        .first()
    )


def check_availability(doctor_id: int, visit_date: date, visit_time: time) -> Availability:
    start, end = booking_window(visit_date, visit_time)
    conflict = find_conflict(doctor_id, visit_date, visit_time)
    return Availability(available=conflict is None, window_start=start, window_end=end, conflict=conflict)


def get_doctor_or_404(doctor_id: int) -> User:
    doctor = User.objects.filter(id=doctor_id, role=User.ROLE_DOCTOR, is_active=True).first()
    if not doctor:
        raise NotFound('Doctor not found')
    return doctor


def book_registration(caller: Caller, *, doctor_id: int, visit_date: date, visit_time: time,
                      complaint: str = '') -> Registration:
    """Create a booking for the calling patient.

    The doctor's user row is locked for the duration of the check and
    insert so that two concurrent requests for the same doctor cannot
    both pass the availability check.
    """
    caller.require(User.ROLE_PATIENT)
    visit_time = visit_time.replace(second=0, microsecond=0)
    with transaction.atomic():
        doctor = (
            User.objects.select_for_update()
            .filter(id=doctor_id, role=User.ROLE_DOCTOR, is_active=True)
            .first()
        )
        if doctor is None:
            raise NotFound('Doctor not found')

        conflict = find_conflict(doctor.id, visit_date, visit_time)
        if conflict is not None:
            logger.info('slot unavailable: doctor=%s %s %s conflicts with registration %s',
                        doctor.id, visit_date, visit_time, conflict.id)
            raise SlotUnavailable()

        registration = Registration.objects.create(
            patient=caller.user,
            doctor=doctor,
            visit_date=visit_date,
            visit_time=visit_time,
            complaint=bleach.clean((complaint or '').strip(), strip=True),
        )
        log_action(user=caller.user, action='registration_create', object_type='registration',
                   object_id=registration.id,
                   detail={'doctorId': doctor.id, 'date': visit_date.isoformat(), 'time': visit_time.strftime('%H:%M')})
    logger.info('registration %s booked: doctor=%s patient=%s', registration.id, doctor.id, caller.user_id)
    return registration


def update_registration_status(caller: Caller, registration_id: int, new_status: str) -> Registration:
    caller.require(User.ROLE_DOCTOR)
    with transaction.atomic():
        registration = Registration.objects.select_for_update().filter(id=registration_id).first()
        if registration is None:
            raise NotFound('Registration not found')
        if registration.doctor_id != caller.user_id:
            raise PermissionDenied('unauthorized')
        if registration.status == new_status:
            return registration
        if not registration.can_transition_to(new_status):
            raise Conflict(f'Cannot change registration status from {registration.status} to {new_status}')
        previous = registration.status
        registration.status = new_status
        registration.save(update_fields=['status', 'updated_at'])
        log_action(user=caller.user, action='registration_status', object_type='registration',
                   object_id=registration.id, detail={'from': previous, 'to': new_status})
    return registration


def registrations_for(caller: Caller, *, status: Optional[str] = None, visit_date: Optional[date] = None):
    qs = Registration.objects.select_related('doctor', 'patient')
    if caller.is_doctor:
        qs = qs.filter(doctor_id=caller.user_id)
    elif caller.is_patient:
        qs = qs.filter(patient_id=caller.user_id)
    elif not caller.is_admin:
        qs = qs.none()
    if status:
        qs = qs.filter(status=status)
    if visit_date:
        qs = qs.filter(visit_date=visit_date)
    return qs.order_by('visit_date', 'visit_time', 'id')


def format_registration(r: Registration) -> dict:
    return {
        'id': r.id,
        'patient_id': r.patient_id,
        'patient_name': r.patient.full_name,
        'doctor_id': r.doctor_id,
        'doctor_name': r.doctor.full_name,
        'visit_date': r.visit_date.isoformat(),
        'visit_time': r.visit_time.strftime('%H:%M'),
        'status': r.status,
        'complaint': r.complaint,
        'created_at': r.created_at.isoformat() if r.created_at else None,
        'updated_at': r.updated_at.isoformat() if r.updated_at else None,
    }
