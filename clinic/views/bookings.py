from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.permissions import IsDoctorRole, IsPatientRole
from clinic.serializers.bookings import (
    RegistrationCreateSerializer,
    RegistrationQuerySerializer,
    RegistrationStatusSerializer,
)
from clinic.services.scheduling import (
    book_registration,
    format_registration,
    registrations_for,
    update_registration_status,
)

from .common import ok, validated


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def create_registration(request):
    """Book a visit; 422 ``slot_unavailable`` when the doctor is busy within the hour."""
    vd = validated(RegistrationCreateSerializer, request.data)
    caller = caller_from_request(request)
    reg = book_registration(caller, **vd)
    reg = registrations_for(caller).get(id=reg.id)
    return ok(format_registration(reg), 'Registration created successfully', status.HTTP_201_CREATED)


def _list(request):
    vd = validated(RegistrationQuerySerializer, request.query_params)
    qs = registrations_for(caller_from_request(request), status=vd.get('status'), visit_date=vd.get('date'))
    return ok([format_registration(r) for r in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_registrations(request):
    return _list(request)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_registrations(request):
    return _list(request)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def registration_status(request, registration_id: int):
    vd = validated(RegistrationStatusSerializer, request.data)
    caller = caller_from_request(request)
    reg = update_registration_status(caller, registration_id, vd['status'])
    reg = registrations_for(caller).get(id=reg.id)
    return ok(format_registration(reg), 'Registration status updated successfully')
