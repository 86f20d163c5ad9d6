import logging

from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)


def healthz(request):
    """Liveness plus a trivial database round trip."""
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as e:
        logger.error('health check database failure: %s', e)
        return JsonResponse({'ok': False, 'error': {'code': 'storage_error', 'message': 'database unavailable'}},
                            status=503)
    return JsonResponse({'ok': True, 'db': bool(row and row[0] == 1), 'time': timezone.now().isoformat()})
