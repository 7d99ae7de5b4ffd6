"""
Ledger — Views

Ledger of one warehouse: list / retrieve / append / update / delete
movements, plus per-product totals. Every write goes through
LedgerService so running totals are always repaired in one transaction.

@file ledger/views.py
"""

from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.pagination import LedgerCursorPagination

from .serializers import (
    MovementReadSerializer,
    MovementWriteSerializer,
    ProductTotalSerializer,
)
from .services import LedgerService


class MovementViewSet(viewsets.ModelViewSet):
    """
    Movements of /warehouses/{warehouse_id}/movements/.

    Rows are returned in ledger order (id ascending) with cursor pagination.
    """

    permission_classes = [IsAuthenticated]
    pagination_class = LedgerCursorPagination
    filterset_fields = ['product_name', 'effective_date']
    search_fields = ['product_name', 'supplier', 'customer']
    ordering_fields = ['id']
    ordering = ['id']

    def get_queryset(self):
        return LedgerService.get_all(
            actor=self.request.user,
            warehouse_id=self.kwargs['warehouse_id'],
        )

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve'):
            return MovementReadSerializer
        if self.action == 'totals':
            return ProductTotalSerializer
        return MovementWriteSerializer

    def create(self, request, *args, **kwargs):
        serializer = MovementWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        movement = LedgerService.append(
            actor=request.user,
            warehouse_id=self.kwargs['warehouse_id'],
            **serializer.validated_data,
        )
        return Response(MovementReadSerializer(movement).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = MovementWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        movement = LedgerService.update(
            actor=request.user,
            warehouse_id=self.kwargs['warehouse_id'],
            movement_id=kwargs['pk'],
            partial=partial,
            **serializer.validated_data,
        )
        return Response(MovementReadSerializer(movement).data)

    def destroy(self, request, *args, **kwargs):
        LedgerService.delete(
            actor=request.user,
            warehouse_id=self.kwargs['warehouse_id'],
            movement_id=kwargs['pk'],
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'], url_path='totals')
    def totals(self, request, warehouse_id=None):
        """Current stock per product."""
        rows = LedgerService.product_totals(actor=request.user, warehouse_id=warehouse_id)
        return Response(ProductTotalSerializer(rows, many=True).data)

    @action(detail=False, methods=['get'], url_path='current-total')
    def current_total(self, request, warehouse_id=None):
        product_name = request.query_params.get('product_name', '').strip()
        if not product_name:
            raise serializers.ValidationError({'product_name': ['This query parameter is required.']})
        total = LedgerService.get_current_total(
            actor=request.user,
            warehouse_id=warehouse_id,
            product_name=product_name,
        )
        return Response({'product_name': product_name, 'total_quantity': total})
