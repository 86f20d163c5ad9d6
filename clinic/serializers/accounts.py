import bleach
from rest_framework import serializers

from clinic.models import User


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)

    def validate_email(self, v):
        return (v or '').strip().lower()


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(min_length=8, max_length=128, trim_whitespace=False, write_only=True)
    phone_number = serializers.CharField(required=False, allow_blank=True, max_length=20)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if len(v) < 2:
            raise serializers.ValidationError('The name must be at least 2 characters.')
        return v


class DoctorRegisterSerializer(RegisterSerializer):
    specialization = serializers.CharField(required=False, allow_blank=True, max_length=255)
    license_number = serializers.CharField(required=False, allow_blank=True, max_length=64)
    consultation_fee = serializers.DecimalField(required=False, max_digits=12, decimal_places=2, min_value=0)


class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class PatientProfileSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=150)
    phone_number = serializers.CharField(required=False, allow_blank=True, max_length=20)
    national_id = serializers.CharField(required=False, allow_blank=True, max_length=32)
    birth_date = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(required=False, allow_blank=True, choices=['male', 'female', 'other'])
    address = serializers.CharField(required=False, allow_blank=True, max_length=500)
    blood_type = serializers.ChoiceField(required=False, allow_blank=True,
                                         choices=['A', 'B', 'AB', 'O', 'A+', 'A-', 'B+', 'B-',
                                                  'AB+', 'AB-', 'O+', 'O-'])
    medical_history = serializers.CharField(required=False, allow_blank=True)


class DoctorProfileSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=150)
    phone_number = serializers.CharField(required=False, allow_blank=True, max_length=20)
    specialization = serializers.CharField(required=False, allow_blank=True, max_length=255)
    practice_schedule = serializers.CharField(required=False, allow_blank=True, max_length=255)
    consultation_fee = serializers.DecimalField(required=False, max_digits=12, decimal_places=2, min_value=0)
    password = serializers.CharField(required=False, min_length=8, max_length=128, trim_whitespace=False,
                                     write_only=True)


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES])


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(required=False, choices=[c[0] for c in User.ROLE_CHOICES])
    q = serializers.CharField(required=False, allow_blank=True)
