"""
Tests — LedgerService running-total engine.

@file ledger/tests/test_services.py
"""

import datetime
from decimal import Decimal

import pytest

from core.exceptions import (
    BusinessRuleViolation,
    InsufficientStockError,
    NegativeStockError,
    ResourceNotFoundError,
    UnauthenticatedError,
)
from core.models import AuditLog
from ledger.models import Movement
from ledger.services import LedgerService, replay_totals
from tests.factories import WarehouseFactory


pytestmark = pytest.mark.django_db


def ledger_state(warehouse):
    """(id, product, running_total) of every row, in ledger order."""
    return list(
        Movement.objects.filter(warehouse=warehouse)
        .order_by('id')
        .values_list('id', 'product_name', 'running_total')
    )


@pytest.fixture
def book(user, warehouse):
    """Shortcuts bound to the ``user`` / ``warehouse`` ledger."""

    class Book:
        @staticmethod
        def imp(qty, product='Widget', **extra):
            return LedgerService.append(
                actor=user, warehouse_id=warehouse.pk,
                product_name=product, import_quantity=qty, **extra,
            )

        @staticmethod
        def exp(qty, product='Widget', **extra):
            return LedgerService.append(
                actor=user, warehouse_id=warehouse.pk,
                product_name=product, export_quantity=qty, **extra,
            )

        @staticmethod
        def update(movement, **fields):
            return LedgerService.update(
                actor=user, warehouse_id=warehouse.pk, movement_id=movement.pk, **fields,
            )

        @staticmethod
        def delete(movement):
            LedgerService.delete(actor=user, warehouse_id=warehouse.pk, movement_id=movement.pk)

        @staticmethod
        def totals():
            return [row[2] for row in ledger_state(warehouse)]

    return Book


class TestReplayTotals:

    def test_prefix_sums(self):
        assert replay_totals(0, [(1, 10), (2, 5), (3, -12)]) == [10, 15, 3]

    def test_starts_from_base(self):
        assert replay_totals(7, [(4, -7), (5, 2)]) == [0, 2]

    def test_empty(self):
        assert replay_totals(3, []) == []

    def test_names_first_negative_row(self):
        with pytest.raises(NegativeStockError) as exc_info:
            replay_totals(0, [(1, 10), (3, -12), (4, -1)])
        assert exc_info.value.movement_id == 3


class TestAppend:

    @pytest.mark.parametrize('deltas', [
        [10],
        [10, -3, 5, -12],
        [1, 1, 1, -3, 4],
        [100, -50, -50, 20],
    ])
    def test_last_total_is_prefix_sum(self, book, deltas):
        for delta in deltas:
            if delta > 0:
                book.imp(delta)
            else:
                book.exp(-delta)
        totals = book.totals()
        assert totals[-1] == sum(deltas)
        running = 0
        for delta, total in zip(deltas, totals):
            running += delta
            assert total == running

    def test_products_are_independent(self, book, warehouse):
        book.imp(10, product='Bolt')
        book.imp(4, product='Nut')
        book.exp(3, product='Bolt')
        assert LedgerService.current_total(warehouse, 'Bolt') == 7
        assert LedgerService.current_total(warehouse, 'Nut') == 4

    def test_warehouses_are_independent(self, user, book, warehouse):
        other = WarehouseFactory(owner=user, name='Annex')
        book.imp(10)
        LedgerService.append(actor=user, warehouse_id=other.pk, product_name='Widget', import_quantity=2)
        assert LedgerService.current_total(warehouse, 'Widget') == 10
        assert LedgerService.current_total(other, 'Widget') == 2

    def test_export_exceeding_stock_leaves_ledger_untouched(self, book, warehouse):
        book.imp(5)
        before = ledger_state(warehouse)
        audit_before = AuditLog.objects.count()

        with pytest.raises(InsufficientStockError):
            book.exp(6)

        assert ledger_state(warehouse) == before
        assert AuditLog.objects.count() == audit_before

    def test_export_of_exact_stock(self, book):
        book.imp(5)
        movement = book.exp(5)
        assert movement.running_total == 0

    def test_export_from_empty_ledger(self, book):
        with pytest.raises(InsufficientStockError):
            book.exp(1)

    def test_both_directions_rejected(self, user, warehouse):
        with pytest.raises(BusinessRuleViolation):
            LedgerService.append(
                actor=user, warehouse_id=warehouse.pk, product_name='Widget',
                import_quantity=1, export_quantity=1,
            )

    def test_zero_quantity_rejected(self, user, warehouse):
        with pytest.raises(BusinessRuleViolation):
            LedgerService.append(actor=user, warehouse_id=warehouse.pk, product_name='Widget')

    def test_blank_product_rejected(self, user, warehouse):
        with pytest.raises(BusinessRuleViolation):
            LedgerService.append(
                actor=user, warehouse_id=warehouse.pk, product_name='   ', import_quantity=1,
            )

    def test_engine_owned_fields_are_ignored(self, book):
        movement = book.imp(4, running_total=1000, id=999)
        assert movement.running_total == 4
        assert movement.pk != 999

    def test_defaults_and_audit(self, user, book):
        movement = book.imp(3, supplier='Acme', import_unit_price=Decimal('1.20'))
        assert movement.effective_date is not None
        assert movement.created_by == user
        log = AuditLog.objects.get(model_name='Movement', object_id=str(movement.pk))
        assert log.action == 'CREATE'
        assert log.new_values['running_total'] == 3
        assert log.new_values['import_unit_price'] == '1.20'

    def test_requires_principal(self, warehouse):
        with pytest.raises(UnauthenticatedError):
            LedgerService.append(
                actor=None, warehouse_id=warehouse.pk, product_name='Widget', import_quantity=1,
            )

    def test_foreign_warehouse_is_not_found(self, other_user, warehouse):
        with pytest.raises(ResourceNotFoundError):
            LedgerService.append(
                actor=other_user, warehouse_id=warehouse.pk, product_name='Widget', import_quantity=1,
            )


class TestReads:

    def test_total_before(self, book, warehouse):
        a = book.imp(10)
        b = book.imp(5)
        c = book.exp(12)
        assert LedgerService.total_before(warehouse, 'Widget', a.pk) == 0
        assert LedgerService.total_before(warehouse, 'Widget', b.pk) == 10
        assert LedgerService.total_before(warehouse, 'Widget', c.pk) == 15
        assert LedgerService.total_before(warehouse, 'Widget', c.pk + 1) == 3

    def test_current_total_of_unknown_product(self, warehouse):
        assert LedgerService.current_total(warehouse, 'Ghost') == 0

    def test_get_all_is_ordered_and_repeatable(self, user, book, warehouse):
        book.imp(1, product='B', effective_date=datetime.date(2026, 1, 5))
        book.imp(1, product='A', effective_date=datetime.date(2026, 1, 1))
        first = list(LedgerService.get_all(actor=user, warehouse_id=warehouse.pk))
        second = list(LedgerService.get_all(actor=user, warehouse_id=warehouse.pk))
        assert [m.pk for m in first] == [m.pk for m in second]
        assert [m.pk for m in first] == sorted(m.pk for m in first)

    def test_get_all_by_product(self, user, book, warehouse):
        book.imp(1, product='A')
        book.imp(1, product='B')
        rows = LedgerService.get_all(actor=user, warehouse_id=warehouse.pk, product_name='B')
        assert [m.product_name for m in rows] == ['B']

    def test_get_by_id(self, user, book, warehouse):
        movement = book.imp(2)
        found = LedgerService.get_by_id(actor=user, warehouse_id=warehouse.pk, movement_id=movement.pk)
        assert found == movement

    def test_get_by_id_missing(self, user, warehouse):
        with pytest.raises(ResourceNotFoundError):
            LedgerService.get_by_id(actor=user, warehouse_id=warehouse.pk, movement_id=12345)

    def test_get_by_id_of_other_warehouse(self, user, book):
        movement = book.imp(2)
        other = WarehouseFactory(owner=user)
        with pytest.raises(ResourceNotFoundError):
            LedgerService.get_by_id(actor=user, warehouse_id=other.pk, movement_id=movement.pk)

    def test_product_totals(self, user, book, warehouse):
        book.imp(10, product='Bolt')
        book.imp(4, product='Nut')
        last = book.exp(3, product='Bolt')
        rows = LedgerService.product_totals(actor=user, warehouse_id=warehouse.pk)
        assert [(r['product_name'], r['total_quantity']) for r in rows] == [('Bolt', 7), ('Nut', 4)]
        assert rows[0]['last_movement_id'] == last.pk


class TestUpdate:

    def test_downstream_totals_are_recomputed(self, book, warehouse):
        a = book.imp(10)
        book.imp(5)
        book.exp(12)
        book.imp(1, product='Other')

        updated = book.update(a, import_quantity=20)

        assert updated.running_total == 20
        assert book.totals() == [20, 25, 13, 1]

    def test_full_update_resets_omitted_fields(self, book):
        book.imp(10)
        b = book.exp(3, customer='Acme')

        updated = book.update(b, partial=False, product_name='Widget', import_quantity=5)

        assert updated.export_quantity == 0
        assert updated.customer == ''
        assert updated.running_total == 15

    def test_totals_match_prefix_from_update_point(self, book, warehouse):
        rows = [book.imp(4), book.imp(6), book.exp(3), book.imp(2), book.exp(5)]
        target = rows[2]
        book.update(target, export_quantity=1)

        base = LedgerService.total_before(warehouse, 'Widget', target.pk)
        running = base
        for row in Movement.objects.filter(warehouse=warehouse, id__gte=target.pk).order_by('id'):
            running += row.delta
            assert row.running_total == running

    def test_update_that_goes_negative_is_rolled_back(self, book, warehouse):
        a = book.imp(10)
        book.imp(5)
        book.exp(12)
        before = ledger_state(warehouse)
        fields_before = Movement.objects.get(pk=a.pk).import_quantity

        with pytest.raises(NegativeStockError) as exc_info:
            book.update(a, import_quantity=1)

        assert ledger_state(warehouse) == before
        assert Movement.objects.get(pk=a.pk).import_quantity == fields_before
        assert exc_info.value.movement_id is not None
        assert not AuditLog.objects.filter(action='UPDATE').exists()

    def test_switch_direction(self, book):
        book.imp(10)
        b = book.imp(5)
        book.update(b, import_quantity=0, export_quantity=5)
        assert book.totals() == [10, 5]

    def test_both_directions_rejected(self, book):
        a = book.imp(10)
        with pytest.raises(BusinessRuleViolation):
            book.update(a, export_quantity=2)

    def test_rename_product_recomputes_both_histories(self, book, warehouse):
        book.imp(5, product='Bolt')
        b = book.imp(3, product='Bolt')
        book.imp(2, product='Nut')
        book.exp(1, product='Bolt')

        book.update(b, product_name='Nut')

        assert LedgerService.current_total(warehouse, 'Bolt') == 4
        assert LedgerService.current_total(warehouse, 'Nut') == 5
        assert book.totals() == [5, 3, 5, 4]

    def test_rename_that_strands_old_product_is_rolled_back(self, book, warehouse):
        a = book.imp(10, product='Bolt')
        book.exp(4, product='Bolt')
        before = ledger_state(warehouse)

        with pytest.raises(NegativeStockError):
            book.update(a, product_name='Nut')

        assert ledger_state(warehouse) == before

    def test_audit_snapshots(self, book):
        a = book.imp(10)
        book.update(a, supplier='NewCo')
        log = AuditLog.objects.get(action='UPDATE', object_id=str(a.pk))
        assert log.new_values['supplier'] == 'NewCo'
        assert log.old_values['supplier'] != 'NewCo'

    def test_missing_movement(self, user, warehouse):
        with pytest.raises(ResourceNotFoundError):
            LedgerService.update(
                actor=user, warehouse_id=warehouse.pk, movement_id=999, import_quantity=1,
            )


class TestDelete:

    def test_delete_recomputes_later_rows(self, book):
        book.imp(10)
        b = book.imp(5)
        book.exp(3)
        book.delete(b)
        assert book.totals() == [10, 7]

    def test_delete_last_row(self, book, warehouse):
        book.imp(10)
        c = book.exp(4)
        book.delete(c)
        assert LedgerService.current_total(warehouse, 'Widget') == 10

    def test_delete_that_goes_negative_is_rolled_back(self, book, warehouse):
        a = book.imp(10)
        b = book.imp(5)
        c = book.exp(12)
        before = ledger_state(warehouse)
        assert before == [(a.pk, 'Widget', 10), (b.pk, 'Widget', 15), (c.pk, 'Widget', 3)]

        with pytest.raises(NegativeStockError) as exc_info:
            book.delete(b)

        assert exc_info.value.movement_id == c.pk
        assert ledger_state(warehouse) == before
        assert not AuditLog.objects.filter(action='DELETE').exists()

    def test_delete_only_touches_its_product(self, book):
        book.imp(10, product='Bolt')
        nut = book.imp(3, product='Nut')
        book.exp(2, product='Bolt')
        book.delete(nut)
        assert book.totals() == [10, 8]

    def test_missing_movement(self, user, warehouse):
        with pytest.raises(ResourceNotFoundError):
            LedgerService.delete(actor=user, warehouse_id=warehouse.pk, movement_id=999)


class TestVerify:

    def test_consistent_ledger(self, book, warehouse):
        book.imp(10)
        book.exp(3)
        assert LedgerService.verify(warehouse) == []

    def test_reports_corrupted_rows(self, book, warehouse):
        book.imp(10)
        b = book.exp(3)
        Movement.objects.filter(pk=b.pk).update(running_total=99)
        assert LedgerService.verify(warehouse) == [{
            'movement_id': b.pk,
            'product_name': 'Widget',
            'stored_total': 99,
            'expected_total': 7,
        }]
