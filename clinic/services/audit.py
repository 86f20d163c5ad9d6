"""
Audit trail for business events.

Every event is stored as an :class:`AuditEvent` row and echoed to the
``clinic.audit`` logger so that log shipping sees the same stream.
"""
import logging
from typing import Any, Dict, Optional

from clinic.models import AuditEvent, User

logger = logging.getLogger('clinic.audit')


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None,
               object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    # anonymous callers (failed logins) are stored without a user
    actor = user if getattr(user, 'pk', None) else None
    event = AuditEvent.objects.create(
        user=actor,
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )
    logger.info('%s by=%s %s:%s %s', action, actor.pk if actor else '-', object_type or '-',
                object_id if object_id is not None else '-', event.detail)
    return event


def events_for(object_type: str, object_id: int):
    return AuditEvent.objects.filter(object_type=object_type, object_id=object_id).order_by('created_at', 'id')
