"""
Ledger — API Integration Tests

@file ledger/tests/test_views.py
"""

import pytest
from django.urls import reverse
from rest_framework import status

from ledger.models import Movement
from ledger.services import LedgerService


pytestmark = pytest.mark.django_db


def list_url(warehouse):
    return reverse('api-v1:ledger:movement-list', kwargs={'warehouse_id': warehouse.pk})


def detail_url(warehouse, movement):
    return reverse(
        'api-v1:ledger:movement-detail',
        kwargs={'warehouse_id': warehouse.pk, 'pk': movement.pk},
    )


def append(user, warehouse, **fields):
    fields.setdefault('product_name', 'Widget')
    return LedgerService.append(actor=user, warehouse_id=warehouse.pk, **fields)


class TestMovementViewSet:

    def test_create_import(self, authenticated_client, warehouse):
        resp = authenticated_client.post(
            list_url(warehouse),
            {
                'product_name': 'Widget',
                'effective_date': '2026-02-01',
                'supplier': 'Acme',
                'import_quantity': 12,
                'import_unit_price': '3.50',
            },
            format='json',
        )
        assert resp.status_code == status.HTTP_201_CREATED
        body = resp.json()
        assert body['success'] is True
        assert body['data']['running_total'] == 12
        assert body['data']['movement_type'] == 'IMPORT'

    def test_create_export_beyond_stock(self, authenticated_client, user, warehouse):
        append(user, warehouse, import_quantity=2)
        resp = authenticated_client.post(
            list_url(warehouse),
            {'product_name': 'Widget', 'effective_date': '2026-02-01', 'export_quantity': 3},
            format='json',
        )
        assert resp.status_code == status.HTTP_409_CONFLICT
        body = resp.json()
        assert body['success'] is False
        assert body['code'] == 'INSUFFICIENT_STOCK'
        assert Movement.objects.count() == 1

    def test_create_with_both_legs(self, authenticated_client, warehouse):
        resp = authenticated_client.post(
            list_url(warehouse),
            {
                'product_name': 'Widget', 'effective_date': '2026-02-01',
                'import_quantity': 1, 'export_quantity': 1,
            },
            format='json',
        )
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.json()['code'] == 'VALIDATION_ERROR'

    def test_create_with_negative_price(self, authenticated_client, warehouse):
        resp = authenticated_client.post(
            list_url(warehouse),
            {
                'product_name': 'Widget', 'effective_date': '2026-02-01',
                'import_quantity': 1, 'import_unit_price': '-1.00',
            },
            format='json',
        )
        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_in_ledger_order(self, authenticated_client, user, warehouse):
        first = append(user, warehouse, import_quantity=5)
        second = append(user, warehouse, export_quantity=2)
        resp = authenticated_client.get(list_url(warehouse))
        assert resp.status_code == status.HTTP_200_OK
        assert [row['id'] for row in resp.data['results']] == [first.pk, second.pk]
        assert [row['running_total'] for row in resp.data['results']] == [5, 3]
        assert resp.json()['meta']['count'] is None

    def test_list_filtered_by_product(self, authenticated_client, user, warehouse):
        append(user, warehouse, product_name='Bolt', import_quantity=5)
        append(user, warehouse, product_name='Nut', import_quantity=5)
        resp = authenticated_client.get(list_url(warehouse), {'product_name': 'Nut'})
        assert [row['product_name'] for row in resp.data['results']] == ['Nut']

    def test_list_foreign_ledger(self, api_client, other_user, warehouse):
        api_client.force_authenticate(user=other_user)
        resp = api_client.get(list_url(warehouse))
        assert resp.status_code == status.HTTP_404_NOT_FOUND

    def test_retrieve(self, authenticated_client, user, warehouse):
        movement = append(user, warehouse, import_quantity=5)
        resp = authenticated_client.get(detail_url(warehouse, movement))
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data['id'] == movement.pk

    def test_partial_update_recomputes(self, authenticated_client, user, warehouse):
        first = append(user, warehouse, import_quantity=5)
        second = append(user, warehouse, export_quantity=2)
        resp = authenticated_client.patch(
            detail_url(warehouse, first), {'import_quantity': 9}, format='json',
        )
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data['running_total'] == 9
        second.refresh_from_db()
        assert second.running_total == 7

    def test_put_replaces_whole_row(self, authenticated_client, user, warehouse):
        append(user, warehouse, import_quantity=10)
        export = append(user, warehouse, export_quantity=3, customer='Acme')
        resp = authenticated_client.put(
            detail_url(warehouse, export),
            {'product_name': 'Widget', 'effective_date': '2024-01-01', 'import_quantity': 5},
            format='json',
        )
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data['import_quantity'] == 5
        assert resp.data['export_quantity'] == 0
        assert resp.data['customer'] == ''
        assert resp.data['running_total'] == 15

    def test_update_negative_stock(self, authenticated_client, user, warehouse):
        first = append(user, warehouse, import_quantity=5)
        second = append(user, warehouse, export_quantity=4)
        resp = authenticated_client.patch(
            detail_url(warehouse, first), {'import_quantity': 1}, format='json',
        )
        assert resp.status_code == status.HTTP_409_CONFLICT
        body = resp.json()
        assert body['code'] == 'NEGATIVE_STOCK'
        assert body['errors']['movement_id'] == second.pk

    def test_delete(self, authenticated_client, user, warehouse):
        movement = append(user, warehouse, import_quantity=5)
        resp = authenticated_client.delete(detail_url(warehouse, movement))
        assert resp.status_code == status.HTTP_204_NO_CONTENT
        assert not Movement.objects.exists()

    def test_delete_negative_stock(self, authenticated_client, user, warehouse):
        append(user, warehouse, import_quantity=10)
        middle = append(user, warehouse, import_quantity=5)
        append(user, warehouse, export_quantity=12)
        resp = authenticated_client.delete(detail_url(warehouse, middle))
        assert resp.status_code == status.HTTP_409_CONFLICT
        assert Movement.objects.count() == 3

    def test_totals(self, authenticated_client, user, warehouse):
        append(user, warehouse, product_name='Bolt', import_quantity=5)
        append(user, warehouse, product_name='Nut', import_quantity=2)
        resp = authenticated_client.get(
            reverse('api-v1:ledger:movement-totals', kwargs={'warehouse_id': warehouse.pk}),
        )
        assert resp.status_code == status.HTTP_200_OK
        assert {r['product_name']: r['total_quantity'] for r in resp.data} == {'Bolt': 5, 'Nut': 2}

    def test_current_total(self, authenticated_client, user, warehouse):
        append(user, warehouse, import_quantity=5)
        url = reverse('api-v1:ledger:movement-current-total', kwargs={'warehouse_id': warehouse.pk})
        resp = authenticated_client.get(url, {'product_name': 'Widget'})
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data == {'product_name': 'Widget', 'total_quantity': 5}

    def test_current_total_requires_product(self, authenticated_client, warehouse):
        url = reverse('api-v1:ledger:movement-current-total', kwargs={'warehouse_id': warehouse.pk})
        resp = authenticated_client.get(url)
        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_unauthenticated(self, api_client, warehouse):
        resp = api_client.get(list_url(warehouse))
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED
