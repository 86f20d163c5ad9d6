from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.serializers.uploads import DocumentUploadSerializer
from clinic.services.documents import store_document

from .common import ok, validated


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_document(request):
    """Store a PDF (cv, diploma or certificate) and return its URL."""
    vd = validated(DocumentUploadSerializer, request.data)
    data = store_document(caller_from_request(request), vd['file'], vd['type'], request=request)
    return ok(data, 'File uploaded successfully', status.HTTP_201_CREATED)
