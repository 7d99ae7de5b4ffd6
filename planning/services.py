"""
Planning — Service Layer

PlannedMovementService: CRUD over the caller's planned movements.
ShiftService: applies a planned movement to its target warehouse ledger
and retires it, as one transaction.

@file planning/services.py
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
    AUDIT_ACTION_SHIFT,
    AUDIT_ACTION_UPDATE,
    LOGGER_NAME,
)
from core.exceptions import (
    BusinessRuleViolation,
    InsufficientStockError,
    NegativeStockError,
    ResourceNotFoundError,
)
from core.services import AuditService
from ledger.models import Movement
from ledger.services import LedgerService
from users.services import require_principal
from warehouses.services import WarehouseService

from .models import PlannedMovement

logger = logging.getLogger(LOGGER_NAME)

PLANNED_FIELDS = (
    'product_name',
    'supplier',
    'customer',
    'import_quantity',
    'import_unit_price',
    'export_quantity',
    'export_unit_price',
    'effective_date',
)
SNAPSHOT_FIELDS = [*PLANNED_FIELDS, 'target_warehouse']


def _clean_planned_fields(fields: dict, *, partial: bool = False) -> dict:
    data = {k: v for k, v in fields.items() if k in PLANNED_FIELDS}
    if not partial:
        data.setdefault('effective_date', timezone.localdate())
        data.setdefault('product_name', '')
        data.setdefault('supplier', '')
        data.setdefault('customer', '')
        for key in ('import_quantity', 'export_quantity', 'import_unit_price', 'export_unit_price'):
            data.setdefault(key, 0)

    if 'product_name' in data:
        name = (data['product_name'] or '').strip()
        if not name:
            raise BusinessRuleViolation(detail='Product name is required.')
        data['product_name'] = name
    for key in ('supplier', 'customer'):
        if key in data and data[key] is None:
            data[key] = ''
    for key in ('import_quantity', 'export_quantity', 'import_unit_price', 'export_unit_price'):
        if key in data:
            if data[key] is None:
                data[key] = 0
            if data[key] < 0:
                raise BusinessRuleViolation(detail=f'{key} cannot be negative.')
    return data


def _check_legs(planned: PlannedMovement) -> None:
    if planned.import_quantity == 0 and planned.export_quantity == 0:
        raise BusinessRuleViolation(
            detail='A planned movement needs an import or an export quantity.',
        )


class PlannedMovementService:
    """CRUD for planned movements, always scoped to the acting principal."""

    @staticmethod
    def list_planned(*, actor, target_warehouse_id=None) -> QuerySet:
        require_principal(actor)
        qs = PlannedMovement.objects.filter(owner=actor).select_related('target_warehouse')
        if target_warehouse_id:
            qs = qs.filter(target_warehouse_id=target_warehouse_id)
        return qs.order_by('id')

    @staticmethod
    def get_planned(*, actor, planned_id, for_update: bool = False) -> PlannedMovement:
        """Return the caller's planned movement; someone else's is reported as missing."""
        require_principal(actor)
        qs = PlannedMovement.objects.filter(owner=actor).select_related('target_warehouse')
        if for_update:
            qs = qs.select_for_update(of=('self',))
        try:
            return qs.get(pk=planned_id)
        except (PlannedMovement.DoesNotExist, ValueError, TypeError):
            raise ResourceNotFoundError(detail=f'Planned movement {planned_id} not found.')

    @staticmethod
    @transaction.atomic
    def add_planned(*, actor, target_warehouse_id, **fields) -> PlannedMovement:
        warehouse = WarehouseService.ledger_for(actor, target_warehouse_id)
        planned = PlannedMovement(
            owner=actor,
            target_warehouse=warehouse,
            created_by=actor,
            **_clean_planned_fields(fields),
        )
        _check_legs(planned)
        planned.save()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='PlannedMovement',
            object_id=str(planned.pk),
            new_values=AuditService.snapshot(planned, fields=SNAPSHOT_FIELDS),
        )
        logger.info(
            'Planned movement %s created for warehouse %s by %s.',
            planned.pk, warehouse.pk, actor,
        )
        return planned

    @staticmethod
    def add_planned_import(
        *, actor, target_warehouse_id, product_name, quantity, unit_price=Decimal('0'),
        supplier='', effective_date=None,
    ) -> PlannedMovement:
        return PlannedMovementService.add_planned(
            actor=actor,
            target_warehouse_id=target_warehouse_id,
            product_name=product_name,
            supplier=supplier,
            import_quantity=quantity,
            import_unit_price=unit_price,
            export_quantity=0,
            export_unit_price=Decimal('0'),
            effective_date=effective_date or timezone.localdate(),
        )

    @staticmethod
    def add_planned_export(
        *, actor, target_warehouse_id, product_name, quantity, unit_price=Decimal('0'),
        customer='', effective_date=None,
    ) -> PlannedMovement:
        return PlannedMovementService.add_planned(
            actor=actor,
            target_warehouse_id=target_warehouse_id,
            product_name=product_name,
            customer=customer,
            import_quantity=0,
            import_unit_price=Decimal('0'),
            export_quantity=quantity,
            export_unit_price=unit_price,
            effective_date=effective_date or timezone.localdate(),
        )

    @staticmethod
    @transaction.atomic
    def update_planned(
        *, actor, planned_id, target_warehouse_id=None, partial: bool = True, **fields
    ) -> PlannedMovement:
        planned = PlannedMovementService.get_planned(
            actor=actor, planned_id=planned_id, for_update=True,
        )
        old_snapshot = AuditService.snapshot(planned, fields=SNAPSHOT_FIELDS)

        if target_warehouse_id is not None:
            planned.target_warehouse = WarehouseService.ledger_for(actor, target_warehouse_id)
        for field, value in _clean_planned_fields(fields, partial=partial).items():
            setattr(planned, field, value)
        _check_legs(planned)
        planned.updated_by = actor
        planned.save()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_UPDATE,
            model_name='PlannedMovement',
            object_id=str(planned.pk),
            old_values=old_snapshot,
            new_values=AuditService.snapshot(planned, fields=SNAPSHOT_FIELDS),
        )
        return planned

    @staticmethod
    @transaction.atomic
    def delete_planned(*, actor, planned_id) -> None:
        planned = PlannedMovementService.get_planned(
            actor=actor, planned_id=planned_id, for_update=True,
        )
        old_snapshot = AuditService.snapshot(planned, fields=SNAPSHOT_FIELDS)
        pk = planned.pk
        planned.delete()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DELETE,
            model_name='PlannedMovement',
            object_id=str(pk),
            old_values=old_snapshot,
        )
        logger.info('Planned movement %s deleted by %s.', pk, actor)


class ShiftService:
    """Converts planned movements into ledger movements."""

    @staticmethod
    @transaction.atomic
    def shift(*, actor, planned_id) -> list[Movement]:
        """
        Append the import leg, then the export leg, of a planned movement to
        its target warehouse ledger and delete the planned movement.

        Legs become separate ledger rows, import first. Any failure
        (InsufficientStockError on the export leg included) rolls back the
        whole shift: no leg is kept and the planned movement survives.
        """
        planned = PlannedMovementService.get_planned(
            actor=actor, planned_id=planned_id, for_update=True,
        )
        common = {
            'product_name': planned.product_name,
            'supplier': planned.supplier,
            'customer': planned.customer,
            'effective_date': planned.effective_date,
        }

        movements = []
        try:
            if planned.import_quantity > 0:
                movements.append(LedgerService.append(
                    actor=actor,
                    warehouse_id=planned.target_warehouse_id,
                    import_quantity=planned.import_quantity,
                    import_unit_price=planned.import_unit_price,
                    **common,
                ))
            if planned.export_quantity > 0:
                movements.append(LedgerService.append(
                    actor=actor,
                    warehouse_id=planned.target_warehouse_id,
                    export_quantity=planned.export_quantity,
                    export_unit_price=planned.export_unit_price,
                    **common,
                ))
        except (InsufficientStockError, NegativeStockError):
            logger.warning(
                'Shift of planned movement %s into warehouse %s failed; rolled back.',
                planned.pk, planned.target_warehouse_id,
            )
            raise

        old_snapshot = AuditService.snapshot(planned, fields=SNAPSHOT_FIELDS)
        pk = planned.pk
        planned.delete()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_SHIFT,
            model_name='PlannedMovement',
            object_id=str(pk),
            old_values=old_snapshot,
            new_values={'movement_ids': [m.pk for m in movements]},
        )
        logger.info(
            'Planned movement %s shifted into warehouse %s as movements %s.',
            pk, planned.target_warehouse_id, [m.pk for m in movements],
        )
        return movements
