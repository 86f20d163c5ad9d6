from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.permissions import IsAdminRole
from clinic.serializers.applications import (
    ApplicationQuerySerializer,
    ApproveSerializer,
    DoctorApplicationSerializer,
    RejectSerializer,
)
from clinic.services import applications

from .common import ok, validated


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def submit_application(request):
    vd = validated(DoctorApplicationSerializer, request.data)
    app = applications.submit_application(caller_from_request(request), vd)
    return ok(applications.format_application(app), 'Application submitted successfully', status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def application_list(request):
    vd = validated(ApplicationQuerySerializer, request.query_params)
    qs = applications.list_applications(status=vd.get('status'))
    return ok([applications.format_application(a) for a in qs])


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def application_approve(request, application_id: int):
    vd = validated(ApproveSerializer, request.data)
    app = applications.approve_application(caller_from_request(request), application_id, **vd)
    return ok(applications.format_application(app), 'Application approved successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def application_reject(request, application_id: int):
    vd = validated(RejectSerializer, request.data)
    app = applications.reject_application(caller_from_request(request), application_id, **vd)
    return ok(applications.format_application(app), 'Application rejected successfully')
