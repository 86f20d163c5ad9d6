"""
User accounts: registration, login/logout and administration.

Login looks the account up by email and then defers to Django's
``authenticate`` so that password hashing, ``is_active`` and any
configured backends behave as usual.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

import bleach
from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import AuthenticationFailed, NotFound, PermissionDenied, ValidationError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.context import Caller
from clinic.exceptions import Conflict
from clinic.models import DoctorProfile, PatientProfile, User
from clinic.services.audit import log_action
from clinic.services.doctors import invalidate_doctor_list

logger = logging.getLogger(__name__)

PATIENT_PROFILE_FIELDS = ('national_id', 'birth_date', 'gender', 'address', 'blood_type', 'medical_history')
DOCTOR_PROFILE_FIELDS = ('license_number', 'specialization', 'practice_schedule', 'consultation_fee')


def _clean(v: Optional[str]) -> str:
    return bleach.clean((v or '').strip(), strip=True)


def _check_password(password: str, user: Optional[User] = None) -> None:
    try:
        validate_password(password, user=user)
    except DjangoValidationError as e:
        raise ValidationError({'password': e.messages})


def register_user(*, name: str, email: str, password: str, role: str = User.ROLE_PATIENT,
                  phone_number: str = '', profile: Optional[dict] = None) -> User:
    email = email.strip().lower()
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError({'email': ['The email has already been taken.']})
    candidate = User(username=email, email=email, first_name=_clean(name))
    _check_password(password, candidate)

    profile = profile or {}
    with transaction.atomic():
        user = User.objects.create_user(
            username=email, email=email, password=password,
            first_name=_clean(name), phone_number=_clean(phone_number), role=role,
        )
        if role == User.ROLE_DOCTOR:
            DoctorProfile.objects.create(
                user=user,
                license_number=_clean(profile.get('license_number')),
                specialization=_clean(profile.get('specialization')),
                practice_schedule=_clean(profile.get('practice_schedule')) or settings.DEFAULT_PRACTICE_SCHEDULE,
                consultation_fee=profile.get('consultation_fee') or Decimal(str(settings.DEFAULT_CONSULTATION_FEE)),
            )
        elif role == User.ROLE_PATIENT:
            PatientProfile.objects.create(user=user)
        log_action(user=user, action='register', object_type='user', object_id=user.id, detail={'role': role})
    if role == User.ROLE_DOCTOR:
        invalidate_doctor_list()
    logger.info('registered %s user %s', role, user.id)
    return user


def issue_tokens(user: User) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'token': token_obj.key,
        'token_type': 'Bearer',
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
    }


def login(request, *, email: str, password: str, role: str) -> User:
    """Authenticate ``email``/``password`` for the ``role`` portal.

    Bad credentials are a 401; valid credentials for an account of a
    different role are a 403.
    """
    ip = request.META.get('REMOTE_ADDR') if request is not None else None
    account = User.objects.filter(email__iexact=email.strip()).first()
    user = authenticate(request, username=account.username, password=password) if account else None
    if user is None:
        log_action(user=None, action='login', object_type='user', object_id=account.id if account else None,
                   detail={'result': 'fail', 'email': email, 'portal': role, 'ip': ip})
        raise AuthenticationFailed('Invalid credentials')
    if user.role != role:
        log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'wrong_role', 'portal': role, 'ip': ip})
        raise PermissionDenied(f'Access denied. This account is not a {role} account.')
    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'portal': role, 'ip': ip})
    return user


def _revoke_tokens(user: User) -> int:
    Token.objects.filter(user=user).delete()
    count = 0
    for token in OutstandingToken.objects.filter(user=user):
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        count += int(created)
    return count


def logout(caller: Caller) -> int:
    """Revoke the caller's opaque token and blacklist their refresh tokens."""
    count = _revoke_tokens(caller.user)
    log_action(user=caller.user, action='logout', object_type='user', object_id=caller.user_id,
               detail={'blacklisted': count})
    return count


def update_patient_profile(caller: Caller, data: dict) -> User:
    caller.require(User.ROLE_PATIENT)
    user = caller.user
    with transaction.atomic():
        if data.get('name'):
            user.first_name = _clean(data['name'])
        if 'phone_number' in data:
            user.phone_number = _clean(data['phone_number'])
        user.save(update_fields=['first_name', 'phone_number'])
        profile, _ = PatientProfile.objects.get_or_create(user=user)
        for key in PATIENT_PROFILE_FIELDS:
            if key in data:
                value = data[key]
                setattr(profile, key, _clean(value) if isinstance(value, str) else value)
        profile.save()
        log_action(user=user, action='profile_update', object_type='user', object_id=user.id,
                   detail={'fields': sorted(data)})
    return User.objects.select_related('patient_profile').get(id=user.id)


def update_doctor_profile(caller: Caller, data: dict) -> User:
    caller.require(User.ROLE_DOCTOR)
    user = caller.user
    with transaction.atomic():
        fields = []
        if data.get('name'):
            user.first_name = _clean(data['name'])
            fields.append('first_name')
        if 'phone_number' in data:
            user.phone_number = _clean(data['phone_number'])
            fields.append('phone_number')
        if data.get('password'):
            _check_password(data['password'], user)
            user.set_password(data['password'])
            fields.append('password')
        if fields:
            user.save(update_fields=fields)
        profile, _ = DoctorProfile.objects.get_or_create(
            user=user, defaults={'practice_schedule': settings.DEFAULT_PRACTICE_SCHEDULE})
        for key in DOCTOR_PROFILE_FIELDS:
            if key in data and data[key] is not None:
                value = data[key]
                setattr(profile, key, _clean(value) if isinstance(value, str) else value)
        profile.save()
        log_action(user=user, action='profile_update', object_type='user', object_id=user.id,
                   detail={'fields': sorted(k for k in data if k != 'password')})
    invalidate_doctor_list()
    return User.objects.select_related('doctor_profile').get(id=user.id)


def list_users(*, role: Optional[str] = None, q: Optional[str] = None):
    qs = User.objects.select_related('doctor_profile', 'patient_profile').order_by('id')
    if role:
        qs = qs.filter(role=role)
    if q:
        qs = qs.filter(first_name__icontains=q) | qs.filter(email__icontains=q)
    return qs


def change_role(caller: Caller, user_id: int, role: str) -> User:
    caller.require(User.ROLE_ADMIN)
    with transaction.atomic():
        user = User.objects.select_for_update().filter(id=user_id).first()
        if user is None:
            raise NotFound('User not found')
        if user.id == caller.user_id:
            raise Conflict('Administrators cannot change their own role')
        previous = user.role
        user.role = role
        user.save(update_fields=['role'])
        if role == User.ROLE_DOCTOR:
            DoctorProfile.objects.get_or_create(
                user=user, defaults={'practice_schedule': settings.DEFAULT_PRACTICE_SCHEDULE})
        elif role == User.ROLE_PATIENT:
            PatientProfile.objects.get_or_create(user=user)
        log_action(user=caller.user, action='user_role', object_type='user', object_id=user.id,
                   detail={'from': previous, 'to': role})
    if User.ROLE_DOCTOR in (previous, role):
        invalidate_doctor_list()
    logger.info('admin %s changed role of user %s: %s -> %s', caller.user_id, user.id, previous, role)
    return user


def deactivate_user(caller: Caller, user_id: int) -> User:
    """Close an account without removing it.

    Bookings, medical records and the prescriptions that moved stock
    reference the user, so the row stays and only loses its access.
    """
    caller.require(User.ROLE_ADMIN)
    with transaction.atomic():
        user = User.objects.select_for_update().filter(id=user_id).first()
        if user is None:
            raise NotFound('User not found')
        if user.id == caller.user_id:
            raise Conflict('Administrators cannot delete their own account')
        if user.is_active:
            user.is_active = False
            user.save(update_fields=['is_active'])
        revoked = _revoke_tokens(user)
        log_action(user=caller.user, action='user_deactivate', object_type='user', object_id=user.id,
                   detail={'email': user.email, 'role': user.role, 'blacklisted': revoked})
    if user.role == User.ROLE_DOCTOR:
        invalidate_doctor_list()
    logger.info('admin %s deactivated user %s', caller.user_id, user.id)
    return user


def format_user(u: User) -> dict:
    data = {
        'id': u.id,
        'name': u.full_name,
        'email': u.email,
        'phone_number': u.phone_number,
        'role': u.role,
        'is_active': u.is_active,
        'date_joined': u.date_joined.isoformat() if u.date_joined else None,
    }
    if u.role == User.ROLE_DOCTOR and hasattr(u, 'doctor_profile'):
        profile = u.doctor_profile
        data['doctor_profile'] = {
            'license_number': profile.license_number,
            'specialization': profile.specialization,
            'practice_schedule': profile.practice_schedule,
            'consultation_fee': str(profile.consultation_fee),
        }
    elif u.role == User.ROLE_PATIENT and hasattr(u, 'patient_profile'):
        p = u.patient_profile
        data['patient_profile'] = {
            'national_id': p.national_id,
            'birth_date': p.birth_date.isoformat() if p.birth_date else None,
            'gender': p.gender,
            'address': p.address,
            'blood_type': p.blood_type,
            'medical_history': p.medical_history,
        }
    return data
