"""
Ledger — Service Layer

The running-total engine. append / update / delete keep every product's
running_total equal to the prefix sum of its movements and never negative.
update and delete repair the suffix of the product history after the
mutation point in the same transaction; a walk that would go negative
aborts the whole operation.

All writes run under transaction.atomic and, on PostgreSQL, a
transaction-scoped advisory lock per (warehouse, product).

@file ledger/services.py
"""

import hashlib
import logging
from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from django.db import connection, transaction
from django.db.models import Max, QuerySet
from django.utils import timezone

from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
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
from warehouses.models import Warehouse
from warehouses.services import WarehouseService

from .models import Movement

logger = logging.getLogger(LOGGER_NAME)

# Caller-writable columns. id and running_total are owned by the engine.
MOVEMENT_FIELDS = (
    'product_name',
    'supplier',
    'customer',
    'import_quantity',
    'import_unit_price',
    'export_quantity',
    'export_unit_price',
    'effective_date',
)
SNAPSHOT_FIELDS = [*MOVEMENT_FIELDS, 'running_total']


def replay_totals(base: int, deltas: Iterable[tuple[int, int]]) -> list[int]:
    """
    Prefix sums of ``deltas`` starting from ``base``.

    ``deltas`` yields (movement_id, import - export) in id order. Raises
    NegativeStockError naming the first movement whose total drops below
    zero; nothing is returned in that case.
    """
    running = base
    totals = []
    for movement_id, delta in deltas:
        running += delta
        if running < 0:
            raise NegativeStockError(
                detail=(
                    f'Negative stock detected in history at movement {movement_id} '
                    f'(total would be {running}).'
                ),
                movement_id=movement_id,
            )
        totals.append(running)
    return totals


def _advisory_lock_key(warehouse_id, product_name: str) -> int:
    """Stable bigint key for PostgreSQL advisory lock (same ledger+product = same key)."""
    raw = f'{warehouse_id}:{product_name}'.encode()
    h = hashlib.sha256(raw).digest()[:8]
    return int.from_bytes(h, 'big') % (2**63)


def _lock_products(warehouse_id, *product_names: str) -> None:
    """Serialize writers of the given product ledgers until the transaction ends."""
    if connection.vendor != 'postgresql':
        # No advisory locks elsewhere: fall back to the warehouse row lock.
        list(
            Warehouse.objects.select_for_update()
            .filter(pk=warehouse_id)
            .values_list('pk', flat=True)
        )
        return
    with connection.cursor() as cursor:
        for name in sorted(set(product_names)):
            cursor.execute(
                'SELECT pg_advisory_xact_lock(%s)', [_advisory_lock_key(warehouse_id, name)],
            )


def _clean_movement_fields(fields: dict, *, partial: bool = False) -> dict:
    """Keep writable columns, normalise blanks and reject negative amounts."""
    data = {k: v for k, v in fields.items() if k in MOVEMENT_FIELDS}

    if not partial:
        data.setdefault('import_quantity', 0)
        data.setdefault('export_quantity', 0)
        data.setdefault('import_unit_price', Decimal('0'))
        data.setdefault('export_unit_price', Decimal('0'))
        data.setdefault('supplier', '')
        data.setdefault('customer', '')
        data.setdefault('effective_date', timezone.localdate())
        if not (data.get('product_name') or '').strip():
            raise BusinessRuleViolation(detail='Product name is required.')

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


def _check_direction(import_quantity: int, export_quantity: int) -> None:
    if import_quantity > 0 and export_quantity > 0:
        raise BusinessRuleViolation(
            detail='A movement is either an import or an export, not both.',
        )
    if import_quantity == 0 and export_quantity == 0:
        raise BusinessRuleViolation(detail='Movement quantity must be positive.')


class LedgerService:
    """Running-total ledger: reads, append, update, delete, recompute, verify."""

    # -- lookups ------------------------------------------------------------

    @staticmethod
    def current_total(warehouse, product_name: str) -> int:
        """Running total of the latest movement of the product, or 0."""
        total = (
            Movement.objects
            .filter(warehouse_id=getattr(warehouse, 'pk', warehouse), product_name=product_name)
            .order_by('-id')
            .values_list('running_total', flat=True)
            .first()
        )
        return total or 0

    @staticmethod
    def total_before(warehouse, product_name: str, movement_id: int) -> int:
        """Running total of the latest movement of the product with id < movement_id, or 0."""
        total = (
            Movement.objects
            .filter(
                warehouse_id=getattr(warehouse, 'pk', warehouse),
                product_name=product_name,
                id__lt=movement_id,
            )
            .order_by('-id')
            .values_list('running_total', flat=True)
            .first()
        )
        return total or 0

    @staticmethod
    def get_all(*, actor, warehouse_id, product_name: str | None = None) -> QuerySet:
        """Ledger rows of a warehouse in id order."""
        warehouse = WarehouseService.ledger_for(actor, warehouse_id)
        qs = Movement.objects.filter(warehouse=warehouse)
        if product_name:
            qs = qs.filter(product_name=product_name)
        return qs.order_by('id')

    @staticmethod
    def get_by_id(*, actor, warehouse_id, movement_id) -> Movement:
        warehouse = WarehouseService.ledger_for(actor, warehouse_id)
        return LedgerService._get_movement(warehouse, movement_id)

    @staticmethod
    def get_current_total(*, actor, warehouse_id, product_name: str) -> int:
        warehouse = WarehouseService.ledger_for(actor, warehouse_id)
        return LedgerService.current_total(warehouse, product_name)

    @staticmethod
    def product_totals(*, actor, warehouse_id) -> list[dict]:
        """Current stock per product: the latest row of each product lineage."""
        warehouse = WarehouseService.ledger_for(actor, warehouse_id)
        latest_ids = (
            Movement.objects
            .filter(warehouse=warehouse)
            .values('product_name')
            .annotate(last_id=Max('id'))
            .values_list('last_id', flat=True)
        )
        rows = Movement.objects.filter(pk__in=list(latest_ids)).order_by('product_name')
        return [
            {
                'product_name': row.product_name,
                'total_quantity': row.running_total,
                'last_movement_id': row.pk,
                'last_movement_date': row.effective_date,
            }
            for row in rows
        ]

    @staticmethod
    def _get_movement(warehouse: Warehouse, movement_id, *, for_update: bool = False) -> Movement:
        qs = Movement.objects.filter(warehouse=warehouse)
        if for_update:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=movement_id)
        except (Movement.DoesNotExist, ValueError, TypeError):
            raise ResourceNotFoundError(detail=f'Movement {movement_id} not found.')

    # -- writes -------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def append(*, actor, warehouse_id, **fields) -> Movement:
        """
        Append a movement at the end of the product history.

        Exports are checked against the current total first and rejected with
        InsufficientStockError without writing anything.
        """
        warehouse = WarehouseService.ledger_for(actor, warehouse_id)
        data = _clean_movement_fields(fields)
        _check_direction(data['import_quantity'], data['export_quantity'])
        product_name = data['product_name']
        _lock_products(warehouse.pk, product_name)

        total = LedgerService.current_total(warehouse, product_name)
        if data['export_quantity'] > total:
            logger.warning(
                'Export rejected: %s in warehouse %s has %s, requested %s.',
                product_name, warehouse.pk, total, data['export_quantity'],
            )
            raise InsufficientStockError(
                detail=(
                    f'Insufficient stock for {product_name}: '
                    f'available={total}, requested={data["export_quantity"]}.'
                ),
            )

        movement = Movement(
            warehouse=warehouse,
            running_total=total + data['import_quantity'] - data['export_quantity'],
            created_by=actor,
            **data,
        )
        movement.save()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='Movement',
            object_id=str(movement.pk),
            new_values=AuditService.snapshot(movement, fields=SNAPSHOT_FIELDS),
        )
        WarehouseService.notify_activity(warehouse.pk)
        logger.info(
            'Movement %s appended: %s %+d -> %s (warehouse %s).',
            movement.pk, product_name, movement.delta, movement.running_total, warehouse.pk,
        )
        return movement

    @staticmethod
    @transaction.atomic
    def update(*, actor, warehouse_id, movement_id, partial: bool = True, **fields) -> Movement:
        """
        Overwrite a movement and repair every later total of its product.

        If the product name changes, the previous product's history is
        repaired from the same point. A negative total anywhere rolls the
        whole update back with NegativeStockError.

        With ``partial=False`` omitted writable fields are reset to their
        defaults instead of keeping their stored values.
        """
        warehouse = WarehouseService.ledger_for(actor, warehouse_id)
        movement = LedgerService._get_movement(warehouse, movement_id, for_update=True)
        changes = _clean_movement_fields(fields, partial=partial)
        old_snapshot = AuditService.snapshot(movement, fields=SNAPSHOT_FIELDS)
        old_product = movement.product_name

        for field, value in changes.items():
            setattr(movement, field, value)
        _check_direction(movement.import_quantity, movement.export_quantity)
        _lock_products(warehouse.pk, old_product, movement.product_name)

        movement.updated_by = actor
        movement.save(update_fields=[*changes.keys(), 'updated_by', 'updated_at'])

        try:
            LedgerService._recompute(warehouse, movement.product_name, from_id=movement.pk)
            if old_product != movement.product_name:
                LedgerService._recompute(warehouse, old_product, from_id=movement.pk)
        except NegativeStockError as exc:
            logger.warning(
                'Update of movement %s rejected (warehouse %s): %s',
                movement.pk, warehouse.pk, exc.detail,
            )
            raise

        movement.refresh_from_db()
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_UPDATE,
            model_name='Movement',
            object_id=str(movement.pk),
            old_values=old_snapshot,
            new_values=AuditService.snapshot(movement, fields=SNAPSHOT_FIELDS),
        )
        WarehouseService.notify_activity(warehouse.pk)
        logger.info('Movement %s updated by %s.', movement.pk, actor)
        return movement

    @staticmethod
    @transaction.atomic
    def delete(*, actor, warehouse_id, movement_id) -> None:
        """
        Remove a movement and repair every later total of its product.

        A negative total rolls the delete back: the row stays at its id and
        no total changes.
        """
        warehouse = WarehouseService.ledger_for(actor, warehouse_id)
        movement = LedgerService._get_movement(warehouse, movement_id, for_update=True)
        product_name = movement.product_name
        _lock_products(warehouse.pk, product_name)

        old_snapshot = AuditService.snapshot(movement, fields=SNAPSHOT_FIELDS)
        pk = movement.pk
        movement.delete()

        try:
            LedgerService._recompute(warehouse, product_name, from_id=pk + 1)
        except NegativeStockError as exc:
            logger.warning(
                'Delete of movement %s rejected (warehouse %s): %s',
                pk, warehouse.pk, exc.detail,
            )
            raise

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DELETE,
            model_name='Movement',
            object_id=str(pk),
            old_values=old_snapshot,
        )
        WarehouseService.notify_activity(warehouse.pk)
        logger.info('Movement %s deleted by %s.', pk, actor)

    @staticmethod
    def _recompute(warehouse: Warehouse, product_name: str, *, from_id: int) -> int:
        """
        Rewrite running totals of ``product_name`` for rows with id >= from_id.

        Totals are computed for the whole suffix before any row is written.
        Must run inside the caller's transaction. Returns the number of rows
        whose total changed.
        """
        base = LedgerService.total_before(warehouse, product_name, from_id)
        rows = list(
            Movement.objects
            .filter(warehouse=warehouse, product_name=product_name, id__gte=from_id)
            .order_by('id')
            .only('id', 'import_quantity', 'export_quantity', 'running_total')
        )
        totals = replay_totals(base, ((row.pk, row.delta) for row in rows))

        changed = []
        for row, total in zip(rows, totals):
            if row.running_total != total:
                row.running_total = total
                changed.append(row)
        if changed:
            Movement.objects.bulk_update(changed, ['running_total'])
        logger.debug(
            'Recomputed %s from #%s in warehouse %s: %d rows walked, %d changed.',
            product_name, from_id, warehouse.pk, len(rows), len(changed),
        )
        return len(changed)

    # -- integrity ----------------------------------------------------------

    @staticmethod
    def verify(warehouse) -> list[dict]:
        """
        Replay every product history of a ledger without writing.

        Returns one finding per row whose stored total differs from the
        prefix sum or whose prefix sum is negative.
        """
        running: dict[str, int] = defaultdict(int)
        findings = []
        rows = (
            Movement.objects
            .filter(warehouse_id=getattr(warehouse, 'pk', warehouse))
            .order_by('id')
            .values_list('id', 'product_name', 'import_quantity', 'export_quantity', 'running_total')
        )
        for movement_id, product_name, imported, exported, stored in rows.iterator():
            running[product_name] += imported - exported
            expected = running[product_name]
            if stored != expected or expected < 0:
                findings.append({
                    'movement_id': movement_id,
                    'product_name': product_name,
                    'stored_total': stored,
                    'expected_total': expected,
                })
        return findings
