from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.permissions import IsDoctorRole, IsPatientRole
from clinic.serializers.records import MedicalRecordCreateSerializer
from clinic.services.inventory import PrescriptionItem
from clinic.services.records import create_medical_record, format_record, get_record, records_for

from .common import ok, validated


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_records(request):
    caller = caller_from_request(request)
    if request.method == 'GET':
        return ok([format_record(r) for r in records_for(caller)])

    vd = dict(validated(MedicalRecordCreateSerializer, request.data))
    items = [PrescriptionItem(**line) for line in vd.pop('medicines', [])]
    record = create_medical_record(caller, items=items, **vd)
    return ok(format_record(get_record(caller, record.id)), 'Medical record created successfully',
              status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_record_detail(request, record_id: int):
    return ok(format_record(get_record(caller_from_request(request), record_id)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_records(request):
    return ok([format_record(r) for r in records_for(caller_from_request(request))])
