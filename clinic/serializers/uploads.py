from django.conf import settings
from rest_framework import serializers


class DocumentUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    type = serializers.ChoiceField(choices=settings.UPLOAD_DOCUMENT_TYPES)

    def validate_file(self, f):
        max_bytes = settings.UPLOAD_MAX_MB * 1024 * 1024
        if f.size > max_bytes:
            raise serializers.ValidationError(f'The file may not be greater than {settings.UPLOAD_MAX_MB} MB.')
        content_type = getattr(f, 'content_type', '') or ''
        if content_type not in settings.ALLOWED_UPLOAD_TYPES or not f.name.lower().endswith('.pdf'):
            raise serializers.ValidationError('The file must be a file of type: pdf.')
        return f
