"""
Doctor applications: a registered patient asks to become a doctor and
an administrator approves or rejects the request.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

import bleach
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.context import Caller
from clinic.exceptions import Conflict
from clinic.models import DoctorApplication, DoctorProfile, User
from clinic.services.audit import log_action
from clinic.services.doctors import invalidate_doctor_list

logger = logging.getLogger(__name__)


def _clean(v: Optional[str]) -> str:
    return bleach.clean((v or '').strip(), strip=True)


def submit_application(caller: Caller, data: dict) -> DoctorApplication:
    caller.require(User.ROLE_PATIENT)
    if DoctorApplication.objects.filter(user_id=caller.user_id, status=DoctorApplication.STATUS_PENDING).exists():
        raise Conflict('You already have a pending application')
    app = DoctorApplication.objects.create(
        user=caller.user,
        full_name=_clean(data['full_name']),
        national_id=_clean(data['national_id']),
        license_number=_clean(data['license_number']),
        specialization=_clean(data['specialization']),
        cv_url=data.get('cv_url') or '',
        diploma_url=data.get('diploma_url') or '',
    )
    log_action(user=caller.user, action='doctor_application_submit', object_type='doctor_application',
               object_id=app.id, detail={'specialization': app.specialization})
    return app


def list_applications(*, status: Optional[str] = None):
    qs = DoctorApplication.objects.select_related('user').order_by('-application_date', '-id')
    if status:
        qs = qs.filter(status=status)
    return qs


def _lock_pending(application_id: int) -> DoctorApplication:
    app = DoctorApplication.objects.select_for_update().filter(id=application_id).first()
    if app is None:
        raise NotFound('Doctor application not found')
    if app.status != DoctorApplication.STATUS_PENDING:
        raise Conflict(f'Application has already been {app.status}')
    return app


def approve_application(caller: Caller, application_id: int, *, admin_notes: str = '',
                        consultation_fee: Optional[Decimal] = None) -> DoctorApplication:
    """Approve an application: the applicant becomes a doctor with a profile."""
    caller.require(User.ROLE_ADMIN)
    with transaction.atomic():
        app = _lock_pending(application_id)
        user = app.user
        user.role = User.ROLE_DOCTOR
        user.first_name = app.full_name or user.first_name
        user.save(update_fields=['role', 'first_name'])
        DoctorProfile.objects.update_or_create(
            user=user,
            defaults={
                'license_number': app.license_number,
                'specialization': app.specialization,
                'practice_schedule': settings.DEFAULT_PRACTICE_SCHEDULE,
                'consultation_fee': consultation_fee or Decimal(str(settings.DEFAULT_CONSULTATION_FEE)),
            },
        )
        app.status = DoctorApplication.STATUS_APPROVED
        app.admin_notes = _clean(admin_notes)
        app.processed_at = timezone.now()
        app.save(update_fields=['status', 'admin_notes', 'processed_at'])
        log_action(user=caller.user, action='doctor_application_approve', object_type='doctor_application',
                   object_id=app.id, detail={'userId': user.id})
    invalidate_doctor_list()
    logger.info('doctor application %s approved by %s', app.id, caller.user_id)
    return app


def reject_application(caller: Caller, application_id: int, *, admin_notes: str) -> DoctorApplication:
    caller.require(User.ROLE_ADMIN)
    with transaction.atomic():
        app = _lock_pending(application_id)
        app.status = DoctorApplication.STATUS_REJECTED
        app.admin_notes = _clean(admin_notes)
        app.processed_at = timezone.now()
        app.save(update_fields=['status', 'admin_notes', 'processed_at'])
        log_action(user=caller.user, action='doctor_application_reject', object_type='doctor_application',
                   object_id=app.id, detail={'userId': app.user_id})
    logger.info('doctor application %s rejected by %s', app.id, caller.user_id)
    return app


def format_application(a: DoctorApplication) -> dict:
    return {
        'id': a.id,
        'user_id': a.user_id,
        'email': a.user.email,
        'full_name': a.full_name,
        'national_id': a.national_id,
        'license_number': a.license_number,
        'specialization': a.specialization,
        'cv_url': a.cv_url,
        'diploma_url': a.diploma_url,
        'status': a.status,
        'admin_notes': a.admin_notes,
        'application_date': a.application_date.isoformat() if a.application_date else None,
        'processed_at': a.processed_at.isoformat() if a.processed_at else None,
    }
