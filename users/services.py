"""
Users — Service Layer

Registration and auth event logging. No HTTP context — services
receive plain Python arguments and raise typed exceptions.

@file users/services.py
"""

import logging

from django.db import transaction

from core.constants import LOGGER_NAME
from core.exceptions import DuplicateResourceError, UnauthenticatedError
from core.services import AuditService

from .models import User

logger = logging.getLogger(LOGGER_NAME)


def require_principal(actor):
    """Return ``actor`` if it is an authenticated user, else raise."""
    if actor is None or not getattr(actor, 'is_authenticated', False):
        raise UnauthenticatedError()
    return actor


class UserService:
    """Account registration."""

    @staticmethod
    @transaction.atomic
    def register_user(
        *,
        username: str,
        password: str,
        email: str | None = None,
        **extra_fields,
    ) -> User:
        if User.objects.filter(username=username).exists():
            raise DuplicateResourceError(detail=f'Username {username} already registered.')
        if email and User.objects.filter(email__iexact=email).exists():
            raise DuplicateResourceError(detail=f'Email {email} already registered.')

        return User.objects.create_user(
            username=username, password=password, email=email, **extra_fields,
        )


class AuthService:
    """Authentication audit events."""

    @staticmethod
    def log_auth_event(*, action: str, user=None, ip_address=None, user_agent=''):
        AuditService.log(
            actor=user,
            action=action,
            model_name='User',
            object_id=str(user.pk) if user else '',
            ip_address=ip_address,
            user_agent=user_agent,
        )
