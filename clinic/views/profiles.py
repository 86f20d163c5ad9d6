from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.permissions import IsDoctorRole, IsPatientRole
from clinic.serializers.accounts import DoctorProfileSerializer, PatientProfileSerializer
from clinic.services import accounts

from .common import ok, validated


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_me(request):
    return ok(accounts.format_user(request.user))


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_profile(request):
    vd = validated(PatientProfileSerializer, request.data)
    user = accounts.update_patient_profile(caller_from_request(request), vd)
    return ok(accounts.format_user(user), 'Profile updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_me(request):
    return ok(accounts.format_user(request.user))


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_profile(request):
    vd = validated(DoctorProfileSerializer, request.data)
    user = accounts.update_doctor_profile(caller_from_request(request), vd)
    return ok(accounts.format_user(user), 'Profile updated successfully')
