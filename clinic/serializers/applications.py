from rest_framework import serializers

from clinic.models import DoctorApplication


class DoctorApplicationSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    national_id = serializers.CharField(max_length=32)
    license_number = serializers.CharField(max_length=64)
    specialization = serializers.CharField(max_length=255)
    cv_url = serializers.URLField(required=False, allow_blank=True, max_length=512)
    diploma_url = serializers.URLField(required=False, allow_blank=True, max_length=512)


class ApproveSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(required=False, allow_blank=True)
    consultation_fee = serializers.DecimalField(required=False, max_digits=12, decimal_places=2, min_value=0)


class RejectSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(min_length=10)


class ApplicationQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(required=False, choices=[c[0] for c in DoctorApplication.STATUS_CHOICES])
