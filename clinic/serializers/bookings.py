from rest_framework import serializers

from clinic.models import Registration

TIME_FORMATS = ['%H:%M', '%H:%M:%S']


class RegistrationCreateSerializer(serializers.Serializer):
    doctor_id = serializers.IntegerField(min_value=1)
    visit_date = serializers.DateField()
    visit_time = serializers.TimeField(input_formats=TIME_FORMATS)
    complaint = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class RegistrationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Registration.STATUS_CHOICES])


class RegistrationQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(required=False, choices=[c[0] for c in Registration.STATUS_CHOICES])
    date = serializers.DateField(required=False)


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    time = serializers.TimeField(input_formats=TIME_FORMATS)


class DoctorListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    specialization = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)
