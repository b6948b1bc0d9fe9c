"""Helpers for writing audit entries.

Services call :func:`record` after a successful admin action. Values inside
``changes`` are converted to JSON friendly types so callers can pass dates and
decimals straight through.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from audit.models import AuditLog

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def client_ip(request) -> str | None:
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def record(admin, action: str, entity_type: str, entity_id: Any = None,
           changes: dict | None = None, request=None) -> AuditLog:
    """Persist an audit entry for ``admin`` performing ``action``."""
    if admin is not None and not getattr(admin, 'is_authenticated', True):
        admin = None
    entry = AuditLog.objects.create(
        admin=admin,
        action=action,
        entity_type=entity_type,
        entity_id='' if entity_id is None else str(entity_id),
        changes=_jsonable(changes or {}),
        ip_address=client_ip(request),
    )
    logger.info("Audit %s on %s:%s by %s", action, entity_type, entity_id, admin)
    return entry
