import bleach
from rest_framework import serializers

from clinic.models import Medicine


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class MedicineSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    medicine_type = serializers.CharField(max_length=100)
    dosage = serializers.CharField(max_length=100)
    unit = serializers.CharField(max_length=50)
    stock = serializers.IntegerField(min_value=0)
    description = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, v):
        v = _clean(v)
        qs = Medicine.objects.filter(name__iexact=v)
        instance_id = self.context.get('medicine_id')
        if instance_id:
            qs = qs.exclude(id=instance_id)
        if qs.exists():
            raise serializers.ValidationError('The name has already been taken.')
        return v

    def validate_medicine_type(self, v):
        return _clean(v)

    def validate_dosage(self, v):
        return _clean(v)

    def validate_unit(self, v):
        return _clean(v)

    def validate_description(self, v):
        return _clean(v)


class StockSerializer(serializers.Serializer):
    stock = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
