from rest_framework import serializers


class PrescriptionLineSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    usage_instructions = serializers.CharField(required=False, allow_blank=True, max_length=255)


class MedicalRecordCreateSerializer(serializers.Serializer):
    registration_id = serializers.IntegerField(min_value=1)
    diagnosis = serializers.CharField()
    treatment = serializers.CharField()
    additional_notes = serializers.CharField(required=False, allow_blank=True)
    input_date = serializers.DateTimeField(required=False)
    medicines = PrescriptionLineSerializer(many=True, required=False)
