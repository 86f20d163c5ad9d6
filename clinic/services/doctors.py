from typing import Optional

from django.core.cache import cache
from django.db.models import Q

from clinic.models import User

DOCTOR_LIST_VERSION_KEY = 'doctors:version'


def doctor_list_version() -> int:
    return cache.get_or_set(DOCTOR_LIST_VERSION_KEY, 1, None)


def invalidate_doctor_list() -> None:
    """Retire every cached doctor list page by bumping the key version."""
    try:
        cache.incr(DOCTOR_LIST_VERSION_KEY)
    except ValueError:
        cache.set(DOCTOR_LIST_VERSION_KEY, doctor_list_version() + 1, None)


def list_doctors(*, q: Optional[str]=None, specialization: Optional[str]=None,
                 page: Optional[int]=None, page_size: Optional[int]=None) -> tuple[list[dict], int]:
    qs = User.objects.filter(role=User.ROLE_DOCTOR, is_active=True).select_related('doctor_profile')
    if q:
        qs = qs.filter(Q(first_name__icontains=q) | Q(doctor_profile__specialization__icontains=q))
    if specialization:
        qs = qs.filter(doctor_profile__specialization__iexact=specialization)

    qs = qs.order_by('first_name', 'id')
    total = qs.count()
    if page and page_size:
        start = (page-1)*page_size
        qs = qs[start:start + page_size]

    data = []
    for u in qs:
        profile = u.doctor_profile if hasattr(u, 'doctor_profile') else None
        data.append({
            'id': u.id,
            'name': u.full_name,
            'email': u.email,
            'phone_number': u.phone_number,
            'specialization': profile.specialization if profile else '',
            'practice_schedule': profile.practice_schedule if profile else '',
            'consultation_fee': str(profile.consultation_fee) if profile else None,
        })
    return data, total
