import pytest
from django.db import DatabaseError
from django.db.models.query import QuerySet
from django.urls import reverse

from clinic.context import Caller
from clinic.exceptions import InsufficientStock
from clinic.models import AuditEvent, MedicalRecord, Medicine, PrescriptionLine, Registration
from clinic.services.inventory import PrescriptionItem
from clinic.services.records import create_medical_record

pytestmark = pytest.mark.django_db


@pytest.fixture
def visit(doctor, patient, book):
    return book(doctor, patient, '09:00', status=Registration.STATUS_CONFIRMED)


def write_record(client, visit, medicines):
    return client.post(reverse('doctor-records'), {
        'registration_id': visit.id,
        'diagnosis': 'Acute bronchitis',
        'treatment': 'Rest and fluids',
        'medicines': medicines,
    }, format='json')


def test_prescribe_five_then_six_from_ten(doctor, visit, medicine, client_for):
    para = medicine(stock=10)
    client = client_for(doctor)

    r = write_record(client, visit, [{'medicine_id': para.id, 'quantity': 5, 'usage_instructions': '3x daily'}])
    assert r.status_code == 201
    assert r.data['data']['medicines'][0]['quantity'] == 5
    para.refresh_from_db()
    assert para.stock == 5

    r = write_record(client, visit, [{'medicine_id': para.id, 'quantity': 6}])
    assert r.status_code == 422
    assert r.data['error']['code'] == 'insufficient_stock'
    assert r.data['error']['items'] == [
        {'medicine_id': para.id, 'medicine_name': 'Paracetamol', 'available': 5, 'requested': 6},
    ]
    para.refresh_from_db()
    assert para.stock == 5
    assert MedicalRecord.objects.count() == 1


def test_one_short_line_blocks_every_line(doctor, visit, medicine):
    para = medicine('Paracetamol', stock=10)
    amox = medicine('Amoxicillin', stock=2)
    omep = medicine('Omeprazole', stock=1)

    with pytest.raises(InsufficientStock) as exc:
        create_medical_record(Caller(user=doctor), registration_id=visit.id, diagnosis='x', treatment='y', items=[
            PrescriptionItem(para.id, 4),
            PrescriptionItem(amox.id, 3),
            PrescriptionItem(omep.id, 2),
        ])

    assert sorted(i['medicine_id'] for i in exc.value.items) == sorted([amox.id, omep.id])
    assert dict(Medicine.objects.values_list('name', 'stock')) == {
        'Paracetamol': 10, 'Amoxicillin': 2, 'Omeprazole': 1,
    }
    assert not MedicalRecord.objects.exists()
    assert not PrescriptionLine.objects.exists()


def test_repeated_medicine_is_checked_against_the_total(doctor, visit, medicine):
    para = medicine(stock=5)
    with pytest.raises(InsufficientStock) as exc:
        create_medical_record(Caller(user=doctor), registration_id=visit.id, diagnosis='x', treatment='y', items=[
            PrescriptionItem(para.id, 3, 'morning'),
            PrescriptionItem(para.id, 3, 'evening'),
        ])
    assert exc.value.items[0]['requested'] == 6
    para.refresh_from_db()
    assert para.stock == 5


def test_successful_prescription_decrements_each_line(doctor, visit, medicine):
    para = medicine('Paracetamol', stock=10)
    amox = medicine('Amoxicillin', stock=7)
    record = create_medical_record(Caller(user=doctor), registration_id=visit.id, diagnosis='x', treatment='y',
                                   items=[PrescriptionItem(para.id, 10), PrescriptionItem(amox.id, 1)])
    assert Medicine.objects.get(id=para.id).stock == 0
    assert Medicine.objects.get(id=amox.id).stock == 6
    assert record.prescription_lines.count() == 2
    assert AuditEvent.objects.filter(action='medical_record_create', object_id=record.id).exists()


def test_failed_stock_write_rolls_back_the_whole_record(doctor, visit, medicine, monkeypatch):
    para = medicine('Paracetamol', stock=10)
    amox = medicine('Amoxicillin', stock=10)
    real_update = QuerySet.update
    calls = []

    def update_failing_on_second_medicine(self, **kwargs):
        calls.append(kwargs)
        if len(calls) == 2:
            raise DatabaseError('disk full')
        return real_update(self, **kwargs)

    monkeypatch.setattr(QuerySet, 'update', update_failing_on_second_medicine)
    with pytest.raises(DatabaseError):
        create_medical_record(Caller(user=doctor), registration_id=visit.id, diagnosis='x', treatment='y',
                              items=[PrescriptionItem(para.id, 3), PrescriptionItem(amox.id, 4)])
    monkeypatch.undo()

    assert len(calls) == 2
    assert dict(Medicine.objects.values_list('name', 'stock')) == {'Paracetamol': 10, 'Amoxicillin': 10}
    assert not MedicalRecord.objects.exists()
    assert not PrescriptionLine.objects.exists()


def test_unknown_medicine_is_not_found(doctor, visit, client_for):
    r = write_record(client_for(doctor), visit, [{'medicine_id': 9999, 'quantity': 1}])
    assert r.status_code == 404
    assert not MedicalRecord.objects.exists()


def test_zero_quantity_is_rejected(doctor, visit, medicine, client_for):
    para = medicine()
    r = write_record(client_for(doctor), visit, [{'medicine_id': para.id, 'quantity': 0}])
    assert r.status_code == 422
    assert r.data['error']['code'] == 'validation_error'


def test_record_without_medicines(doctor, visit, client_for):
    r = write_record(client_for(doctor), visit, [])
    assert r.status_code == 201
    assert r.data['data']['medicines'] == []


def test_record_for_another_doctors_visit_is_forbidden(make_user, visit, client_for):
    other = make_user('doctor')
    r = write_record(client_for(other), visit, [])
    assert r.status_code == 403


def test_record_for_cancelled_visit_conflicts(doctor, patient, book, client_for):
    cancelled = book(doctor, patient, '15:00', status=Registration.STATUS_CANCELLED)
    r = write_record(client_for(doctor), cancelled, [])
    assert r.status_code == 409


def test_patient_sees_own_records(doctor, patient, visit, medicine, client_for):
    para = medicine()
    write_record(client_for(doctor), visit, [{'medicine_id': para.id, 'quantity': 2}])
    r = client_for(patient).get(reverse('patient-medical-records'))
    assert r.status_code == 200
    assert len(r.data['data']) == 1
    assert r.data['data'][0]['medicines'][0]['name'] == 'Paracetamol'

    record_id = r.data['data'][0]['id']
    r = client_for(doctor).get(reverse('doctor-record-detail', args=[record_id]))
    assert r.data['data']['diagnosis'] == 'Acute bronchitis'


def test_doctor_medicine_list_hides_empty_stock(doctor, medicine, client_for):
    medicine('Paracetamol', stock=3)
    medicine('Omeprazole', stock=0)
    r = client_for(doctor).get(reverse('doctor-medicines'))
    assert [m['name'] for m in r.data['data']] == ['Paracetamol']
