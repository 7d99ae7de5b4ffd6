"""
Users — Signals

Audit logging for account creation.

@file users/signals.py
"""

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from core.constants import AUDIT_ACTION_CREATE, LOGGER_NAME
from core.services import AuditService
from users.models import User

logger = logging.getLogger(LOGGER_NAME)


@receiver(post_save, sender=User)
def user_post_save(sender, instance, created, **kwargs):
    if not created:
        return
    AuditService.log(
        actor=instance.created_by,
        action=AUDIT_ACTION_CREATE,
        model_name='User',
        object_id=str(instance.pk),
        new_values=AuditService.snapshot(
            instance, fields=['username', 'email', 'first_name', 'last_name'],
        ),
    )
    logger.info('User %s registered.', instance.username)
