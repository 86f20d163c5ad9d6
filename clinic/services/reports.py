from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from clinic.context import Caller
from clinic.exceptions import Conflict
from clinic.models import DoctorProfile, Registration, Report, User
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)


def consultation_fee(doctor: User) -> Decimal:
    profile = DoctorProfile.objects.filter(user=doctor).only('consultation_fee').first()
    if profile is not None and profile.consultation_fee is not None:
        return profile.consultation_fee
    return Decimal(str(settings.DEFAULT_CONSULTATION_FEE))


def make_daily_report(caller: Caller, report_date=None) -> Report:
    """Snapshot today's patient count and income for the calling doctor."""
    caller.require(User.ROLE_DOCTOR)
    report_date = report_date or timezone.localdate()
    if Report.objects.filter(doctor_id=caller.user_id, report_date=report_date).exists():
        raise Conflict('Report for today already exists')

    count = (
        Registration.objects
        .filter(doctor_id=caller.user_id, visit_date=report_date)
        .exclude(status=Registration.STATUS_CANCELLED)
        .count()
    )
    income = consultation_fee(caller.user) * count
    try:
        with transaction.atomic():
            report = Report.objects.create(doctor=caller.user, patient_count=count, income=income,
                                           report_date=report_date)
    except IntegrityError:
        raise Conflict('Report for today already exists')
    log_action(user=caller.user, action='report_create', object_type='report', object_id=report.id,
               detail={'date': report_date.isoformat(), 'patientCount': count, 'income': str(income)})
    logger.info('daily report %s for doctor %s: %s patients', report_date, caller.user_id, count)
    return report


def reports_for(caller: Caller):
    caller.require(User.ROLE_DOCTOR)
    return Report.objects.filter(doctor_id=caller.user_id).order_by('-report_date')


def format_report(r: Report) -> dict:
    return {
        'id': r.id,
        'doctor_id': r.doctor_id,
        'report_date': r.report_date.isoformat(),
        'patient_count': r.patient_count,
        'income': str(r.income),
    }
