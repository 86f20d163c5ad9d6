"""
Supporting document storage (CVs, diplomas, certificates).
"""
from __future__ import annotations

import logging
import uuid

from django.core.files.storage import default_storage
from django.utils import timezone

from clinic.context import Caller
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)


def store_document(caller: Caller, upload, document_type: str, request=None) -> dict:
    """Persist ``upload`` under ``documents/`` and describe where it went."""
    stamp = timezone.now().strftime('%Y%m%d%H%M%S')
    name = f"documents/{document_type}_{stamp}_{uuid.uuid4().hex[:8]}.pdf"
    path = default_storage.save(name, upload)
    url = default_storage.url(path)
    if request is not None:
        url = request.build_absolute_uri(url)
    log_action(user=caller.user, action='document_upload', object_type='document', object_id=None,
               detail={'path': path, 'type': document_type, 'size': upload.size})
    logger.info('stored %s document %s (%d bytes) for user %s', document_type, path, upload.size, caller.user_id)
    return {
        'file_url': url,
        'file_path': path,
        'file_size': upload.size,
        'file_type': document_type,
        'original_name': upload.name,
    }
