"""
Medical records written by doctors, with their prescriptions.
"""
from __future__ import annotations

import logging
from typing import Optional

import bleach
from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.context import Caller
from clinic.exceptions import Conflict
from clinic.models import MedicalRecord, PrescriptionLine, Registration, User
from clinic.services.audit import log_action
from clinic.services.inventory import PrescriptionItem, apply_prescription

logger = logging.getLogger(__name__)


def _clean(v: Optional[str]) -> str:
    return bleach.clean((v or '').strip(), strip=True)


def create_medical_record(caller: Caller, *, registration_id: int, diagnosis: str, treatment: str,
                          additional_notes: str = '', items: Optional[list[PrescriptionItem]] = None,
                          input_date=None) -> MedicalRecord:
    """Write a record for one of the caller's registrations.

    The record, its prescription lines and the stock decrements commit
    together; a stock shortage leaves no record behind.
    """
    caller.require(User.ROLE_DOCTOR)
    with transaction.atomic():
        registration = Registration.objects.filter(id=registration_id).first()
        if registration is None:
            raise NotFound('Registration not found')
        if registration.doctor_id != caller.user_id:
            raise PermissionDenied('Registration belongs to another doctor')
        if registration.status == Registration.STATUS_CANCELLED:
            raise Conflict('Cannot write a medical record for a cancelled registration')

        record = MedicalRecord.objects.create(
            registration=registration,
            diagnosis=_clean(diagnosis),
            treatment=_clean(treatment),
            additional_notes=_clean(additional_notes),
            input_date=input_date or timezone.now(),
        )
        lines = apply_prescription(record, list(items or []))
        log_action(user=caller.user, action='medical_record_create', object_type='medical_record',
                   object_id=record.id,
                   detail={'registrationId': registration.id,
                           'medicines': [{'medicineId': l.medicine_id, 'quantity': l.quantity} for l in lines]})
    logger.info('medical record %s written by doctor %s with %d prescription lines',
                record.id, caller.user_id, len(lines))
    return record


def _with_lines(qs):
    return qs.select_related('registration__patient', 'registration__doctor').prefetch_related(
        Prefetch('prescription_lines', queryset=PrescriptionLine.objects.select_related('medicine').order_by('id'))
    )


def records_for(caller: Caller):
    qs = MedicalRecord.objects.all()
    if caller.is_doctor:
        qs = qs.filter(registration__doctor_id=caller.user_id)
    elif caller.is_patient:
        qs = qs.filter(registration__patient_id=caller.user_id)
    elif not caller.is_admin:
        qs = qs.none()
    return _with_lines(qs).order_by('-input_date', '-id')


def get_record(caller: Caller, record_id: int) -> MedicalRecord:
    record = _with_lines(MedicalRecord.objects.filter(id=record_id)).first()
    if record is None:
        raise NotFound('Medical record not found')
    reg = record.registration
    if caller.is_admin or caller.user_id in (reg.doctor_id, reg.patient_id):
        return record
    raise PermissionDenied('Medical record belongs to another user')


def format_record(r: MedicalRecord) -> dict:
    reg = r.registration
    return {
        'id': r.id,
        'registration_id': reg.id,
        'patient_id': reg.patient_id,
        'patient_name': reg.patient.full_name,
        'doctor_id': reg.doctor_id,
        'doctor_name': reg.doctor.full_name,
        'visit_date': reg.visit_date.isoformat(),
        'diagnosis': r.diagnosis,
        'treatment': r.treatment,
        'additional_notes': r.additional_notes,
        'input_date': r.input_date.isoformat(),
        'medicines': [
            {
                'medicine_id': line.medicine_id,
                'name': line.medicine.name,
                'dosage': line.medicine.dosage,
                'unit': line.medicine.unit,
                'quantity': line.quantity,
                'usage_instructions': line.usage_instructions,
            }
            for line in r.prescription_lines.all()
        ],
    }
