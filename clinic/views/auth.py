"""
Registration, login and logout endpoints.

Each portal (patient, doctor, admin) has its own login route; valid
credentials presented at the wrong portal are refused with 403.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.context import caller_from_request
from clinic.models import User
from clinic.permissions import IsDoctorRole, IsPatientRole
from clinic.serializers.accounts import DoctorRegisterSerializer, LoginSerializer, RefreshSerializer, RegisterSerializer
from clinic.services import accounts
from clinic.throttling import LoginRateThrottle, RegisterRateThrottle

from .common import ok, validated


def _session(user, message, http_status=status.HTTP_200_OK):
    data = {'user': accounts.format_user(user)}
    data.update(accounts.issue_tokens(user))
    return ok(data, message, http_status)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([RegisterRateThrottle])
def patient_register(request):
    vd = validated(RegisterSerializer, request.data)
    user = accounts.register_user(role=User.ROLE_PATIENT, **vd)
    return _session(user, 'Patient registered successfully', status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([RegisterRateThrottle])
def doctor_register(request):
    vd = dict(validated(DoctorRegisterSerializer, request.data))
    profile = {k: vd.pop(k) for k in ('specialization', 'license_number', 'consultation_fee') if k in vd}
    user = accounts.register_user(role=User.ROLE_DOCTOR, profile=profile, **vd)
    return _session(user, 'Doctor registered successfully', status.HTTP_201_CREATED)


def _login(request, role):
    vd = validated(LoginSerializer, request.data)
    user = accounts.login(request, email=vd['email'], password=vd['password'], role=role)
    return _session(user, 'Login successful')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def patient_login(request):
    return _login(request, User.ROLE_PATIENT)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def doctor_login(request):
    return _login(request, User.ROLE_DOCTOR)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def admin_login(request):
    return _login(request, User.ROLE_ADMIN)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def token_refresh(request):
    """Return a new JWT access token from a refresh token."""
    vd = validated(RefreshSerializer, request.data)
    try:
        refresh = RefreshToken(vd['refresh'])
    except TokenError as e:
        raise AuthenticationFailed(str(e))
    return ok({'jwt_access': str(refresh.access_token)}, 'Token refreshed')


def _logout(request):
    count = accounts.logout(caller_from_request(request))
    return ok({'blacklisted': count}, 'Logged out successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPatientRole])
def patient_logout(request):
    return _logout(request)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_logout(request):
    return _logout(request)
