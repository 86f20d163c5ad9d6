from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsPatientRole
from clinic.serializers.bookings import AvailabilityQuerySerializer, DoctorListQuerySerializer
from clinic.services.doctors import doctor_list_version, list_doctors
from clinic.services.scheduling import check_availability, get_doctor_or_404

from .common import ok, validated


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def doctor_list(request):
    """Return the active doctors.
    Query params:
      - q: optional search (name or specialization contains)
      - specialization: exact specialization
      - page, pageSize: pagination (optional)
    """
    vd = validated(DoctorListQuerySerializer, request.query_params)
    q = (vd.get('q') or '').strip() or None
    specialization = (vd.get('specialization') or '').strip() or None
    page, page_size = vd.get('page'), vd.get('pageSize')

    cache_key = (f"doctors:v={doctor_list_version()}:q={q or ''}:s={specialization or ''}"
                 f":p={page}:ps={page_size}")
    cached = cache.get(cache_key)
    if cached is None:
        doctors, total = list_doctors(q=q, specialization=specialization, page=page, page_size=page_size)
        cached = {'doctors': doctors, 'pagination': {'total': total, 'page': page or 1, 'pageSize': page_size or total}}
        cache.set(cache_key, cached, settings.DOCTOR_LIST_CACHE_SECONDS)
    return ok(cached['doctors'], pagination=cached['pagination'])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientRole])
def doctor_availability(request, doctor_id: int):
    vd = validated(AvailabilityQuerySerializer, request.query_params)
    doctor = get_doctor_or_404(doctor_id)
    result = check_availability(doctor.id, vd['date'], vd['time'])
    return ok({
        'doctor_id': doctor.id,
        'date': vd['date'].isoformat(),
        'time': vd['time'].strftime('%H:%M'),
        'available': result.available,
        'window_start': result.window_start.strftime('%H:%M'),
        'window_end': result.window_end.strftime('%H:%M'),
        'conflict_time': result.conflict.visit_time.strftime('%H:%M') if result.conflict else None,
    })
