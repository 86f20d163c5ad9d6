"""
Medicine inventory and the prescription stock ledger.

Stock only changes through two doors: an administrator editing a
medicine, or :func:`apply_prescription` decrementing it while a medical
record is written.  Both run inside a transaction with the medicine
rows locked.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.context import Caller
from clinic.exceptions import Conflict, InsufficientStock
from clinic.models import MedicalRecord, Medicine, PrescriptionLine
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)

MEDICINE_FIELDS = ('name', 'medicine_type', 'dosage', 'unit', 'stock', 'description')


@dataclass(frozen=True)
class PrescriptionItem:
    medicine_id: int
    quantity: int
    usage_instructions: str = ''


def _requested_totals(items: Iterable[PrescriptionItem]) -> dict[int, int]:
    totals: dict[int, int] = {}
    for item in items:
        totals[item.medicine_id] = totals.get(item.medicine_id, 0) + item.quantity
    return totals


def apply_prescription(record: MedicalRecord, items: list[PrescriptionItem]) -> list[PrescriptionLine]:
    """Attach ``items`` to ``record`` and take them out of stock.

    Every line is checked before anything is written; when any medicine
    is short the whole prescription is refused with one
    :class:`InsufficientStock` listing all short lines.  Callers that
    also create ``record`` must do so inside the same transaction.
    """
    if not items:
        return []
    requested = _requested_totals(items)
    with transaction.atomic():
        medicines = {
            m.id: m
            for m in Medicine.objects.select_for_update().filter(id__in=list(requested)).order_by('id')
        }
        missing = [mid for mid in requested if mid not in medicines]
        if missing:
            raise NotFound(f"Medicine not found: {', '.join(str(m) for m in missing)}")

        shortages = [
            {
                'medicine_id': mid,
                'medicine_name': medicines[mid].name,
                'available': medicines[mid].stock,
                'requested': qty,
            }
            for mid, qty in requested.items()
            if qty > medicines[mid].stock
        ]
        if shortages:
            logger.info('prescription for record %s refused: %s', record.id, shortages)
            raise InsufficientStock(shortages)

        lines = [
            PrescriptionLine.objects.create(
                record=record,
                medicine=medicines[item.medicine_id],
                quantity=item.quantity,
                usage_instructions=item.usage_instructions,
            )
            for item in items
        ]
        now = timezone.now()
        for mid, qty in requested.items():
            Medicine.objects.filter(id=mid).update(stock=F('stock') - qty, updated_at=now)
    logger.info('prescription applied to record %s: %s', record.id, requested)
    return lines


def available_medicines():
    return Medicine.objects.filter(stock__gt=0).order_by('name')


def get_medicine_or_404(medicine_id: int) -> Medicine:
    medicine = Medicine.objects.filter(id=medicine_id).first()
    if medicine is None:
        raise NotFound('Medicine not found')
    return medicine


def create_medicine(caller: Caller, data: dict) -> Medicine:
    medicine = Medicine.objects.create(**{k: data[k] for k in MEDICINE_FIELDS if k in data})
    log_action(user=caller.user, action='medicine_create', object_type='medicine', object_id=medicine.id,
               detail={'stock': medicine.stock})
    return medicine


def update_medicine(caller: Caller, medicine_id: int, data: dict) -> Medicine:
    with transaction.atomic():
        medicine = Medicine.objects.select_for_update().filter(id=medicine_id).first()
        if medicine is None:
            raise NotFound('Medicine not found')
        previous_stock = medicine.stock
        changed = []
        for key in MEDICINE_FIELDS:
            if key in data and data[key] is not None:
                setattr(medicine, key, data[key])
                changed.append(key)
        if changed:
            medicine.save(update_fields=changed + ['updated_at'])
            log_action(user=caller.user, action='medicine_update', object_type='medicine', object_id=medicine.id,
                       detail={'fields': changed, 'previous_stock': previous_stock, 'new_stock': medicine.stock})
    return medicine


def set_stock(caller: Caller, medicine_id: int, stock: int, reason: Optional[str] = None) -> tuple[Medicine, int]:
    """Overwrite the stock level; returns the medicine and the previous level."""
    with transaction.atomic():
        medicine = Medicine.objects.select_for_update().filter(id=medicine_id).first()
        if medicine is None:
            raise NotFound('Medicine not found')
        previous = medicine.stock
        medicine.stock = stock
        medicine.save(update_fields=['stock', 'updated_at'])
        log_action(user=caller.user, action='medicine_stock', object_type='medicine', object_id=medicine.id,
                   detail={'previous_stock': previous, 'new_stock': stock, 'reason': reason or ''})
    logger.info('stock of medicine %s set %s -> %s by %s', medicine.id, previous, stock, caller.user_id)
    return medicine, previous


def delete_medicine(caller: Caller, medicine_id: int) -> None:
    with transaction.atomic():
        medicine = get_medicine_or_404(medicine_id)
        if medicine.prescription_lines.exists():
            raise Conflict('Cannot delete medicine with existing prescriptions')
        log_action(user=caller.user, action='medicine_delete', object_type='medicine', object_id=medicine.id,
                   detail={'name': medicine.name})
        medicine.delete()


def format_medicine(m: Medicine) -> dict:
    return {
        'id': m.id,
        'name': m.name,
        'medicine_type': m.medicine_type,
        'dosage': m.dosage,
        'unit': m.unit,
        'stock': m.stock,
        'description': m.description,
    }
