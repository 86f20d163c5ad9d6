from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.permissions import IsDoctorRole
from clinic.services.reports import format_report, make_daily_report, reports_for

from .common import ok


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def daily_report(request):
    """Build today's report for the calling doctor (409 if it already exists)."""
    report = make_daily_report(caller_from_request(request))
    return ok(format_report(report), 'Report generated successfully', status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def report_list(request):
    return ok([format_report(r) for r in reports_for(caller_from_request(request))])
