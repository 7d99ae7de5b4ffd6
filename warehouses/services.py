"""
Warehouses — Service Layer

Warehouse metadata for the ledger engine: resolving a ledger handle for a
principal, post-commit activity notification, and thin CRUD.

@file warehouses/services.py
"""

import logging
from functools import partial

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
    AUDIT_ACTION_UPDATE,
    LOGGER_NAME,
)
from core.exceptions import DuplicateResourceError, ResourceNotFoundError
from core.services import AuditService
from users.services import require_principal

from .models import Warehouse

logger = logging.getLogger(LOGGER_NAME)

EDITABLE_FIELDS = {'name', 'city', 'address', 'inauguration_date', 'notes'}


class WarehouseService:
    """Ledger handle resolution, activity tracking and CRUD."""

    @staticmethod
    def ledger_for(actor, warehouse_id, *, for_update: bool = False) -> Warehouse:
        """
        Return the warehouse whose ledger ``actor`` may operate on.

        Raises UnauthenticatedError without a principal and
        ResourceNotFoundError when the warehouse is missing or owned by
        someone else.
        """
        require_principal(actor)
        qs = Warehouse.objects.filter(owner=actor)
        if for_update:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=warehouse_id)
        except (Warehouse.DoesNotExist, ValueError, ValidationError):
            raise ResourceNotFoundError(detail='Warehouse not found.')

    @staticmethod
    def notify_activity(warehouse_id) -> None:
        """
        Schedule a last-activity update once the current transaction commits.

        Fire-and-forget: the callback is robust, so a failing broker is logged
        by Django and never surfaces in the ledger operation. Nothing runs if
        the transaction rolls back.
        """
        from .tasks import touch_last_activity_task

        transaction.on_commit(
            partial(touch_last_activity_task.delay, str(warehouse_id)),
            robust=True,
        )

    @staticmethod
    def touch_last_activity(warehouse_id) -> bool:
        updated = Warehouse.objects.filter(pk=warehouse_id).update(
            last_activity_at=timezone.now(),
        )
        return bool(updated)

    @staticmethod
    @transaction.atomic
    def create_warehouse(*, actor, name: str, **fields) -> Warehouse:
        require_principal(actor)
        if Warehouse.objects.filter(owner=actor, name=name).exists():
            raise DuplicateResourceError(detail=f'Warehouse "{name}" already exists.')

        warehouse = Warehouse(
            owner=actor,
            name=name,
            created_by=actor,
            **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS},
        )
        warehouse.save()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='Warehouse',
            object_id=str(warehouse.pk),
            new_values=AuditService.snapshot(warehouse, fields=sorted(EDITABLE_FIELDS)),
        )
        logger.info('Warehouse %s "%s" created by %s.', warehouse.pk, name, actor)
        return warehouse

    @staticmethod
    @transaction.atomic
    def update_warehouse(*, actor, warehouse_id, **fields) -> Warehouse:
        warehouse = WarehouseService.ledger_for(actor, warehouse_id, for_update=True)

        new_name = fields.get('name')
        if new_name and new_name != warehouse.name:
            clash = Warehouse.objects.filter(owner=actor, name=new_name).exclude(pk=warehouse.pk)
            if clash.exists():
                raise DuplicateResourceError(detail=f'Warehouse "{new_name}" already exists.')

        old_snapshot = AuditService.snapshot(warehouse, fields=sorted(EDITABLE_FIELDS))
        for field, value in fields.items():
            if field in EDITABLE_FIELDS:
                setattr(warehouse, field, value)
        warehouse.updated_by = actor
        warehouse.last_activity_at = timezone.now()
        warehouse.save()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_UPDATE,
            model_name='Warehouse',
            object_id=str(warehouse.pk),
            old_values=old_snapshot,
            new_values=AuditService.snapshot(warehouse, fields=sorted(EDITABLE_FIELDS)),
        )
        return warehouse

    @staticmethod
    @transaction.atomic
    def delete_warehouse(*, actor, warehouse_id) -> None:
        """Delete a warehouse with its ledger and the planned movements targeting it."""
        warehouse = WarehouseService.ledger_for(actor, warehouse_id, for_update=True)
        old_snapshot = AuditService.snapshot(warehouse, fields=sorted(EDITABLE_FIELDS))
        pk = warehouse.pk
        warehouse.delete()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DELETE,
            model_name='Warehouse',
            object_id=str(pk),
            old_values=old_snapshot,
        )
        logger.info('Warehouse %s deleted by %s.', pk, actor)
