"""
Core — Audit Service

Writes audit log entries for ledger, planning and auth events.

@file core/services.py
"""

import json
import logging
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder
from django.forms.models import model_to_dict

from core.constants import LOGGER_NAME
from core.models import AuditLog

logger = logging.getLogger(LOGGER_NAME)


class AuditService:
    """Append-only audit trail shared by every service that writes."""

    @staticmethod
    def log(
        *,
        actor,
        action: str,
        model_name: str,
        object_id: str,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str = '',
    ) -> AuditLog:
        # Anonymous callers are stored without an actor.
        if not getattr(actor, 'is_authenticated', False):
            actor = None
        entry = AuditLog.objects.create(
            actor=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.debug('Audit %s %s:%s by %s.', action, model_name, object_id, actor)
        return entry

    @staticmethod
    def snapshot(instance, fields=None) -> dict[str, Any]:
        """
        Column values of ``instance`` as JSON-ready primitives: foreign keys
        by pk, decimals and UUIDs as strings, dates in ISO format.
        """
        return json.loads(json.dumps(model_to_dict(instance, fields=fields), cls=DjangoJSONEncoder))

    @staticmethod
    def request_meta(request) -> dict[str, Any]:
        """Client address and user agent of ``request``, as ``log`` keyword arguments."""
        forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
        ip_address = forwarded.split(',')[0].strip() or request.META.get('REMOTE_ADDR')
        return {
            'ip_address': ip_address,
            'user_agent': request.META.get('HTTP_USER_AGENT', ''),
        }
