"""
Warehouses — Views

CRUD over the caller's own warehouses. Another principal's warehouse is
indistinguishable from a missing one (404).

@file warehouses/views.py
"""

from django.db.models import Count
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Warehouse
from .serializers import WarehouseReadSerializer, WarehouseWriteSerializer
from .services import WarehouseService


class WarehouseViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated]
    filterset_fields = ['city']
    search_fields = ['name', 'city', 'address']
    ordering_fields = ['name', 'city', 'created_at', 'last_activity_at']
    ordering = ['name']

    def get_queryset(self):
        return (
            Warehouse.objects
            .filter(owner=self.request.user)
            .select_related('owner')
            .annotate(movement_count=Count('movements'))
        )

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve'):
            return WarehouseReadSerializer
        return WarehouseWriteSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        warehouse = WarehouseService.create_warehouse(
            actor=request.user,
            **serializer.validated_data,
        )
        read_serializer = WarehouseReadSerializer(warehouse, context={'request': request})
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        warehouse = WarehouseService.update_warehouse(
            actor=request.user,
            warehouse_id=instance.pk,
            **serializer.validated_data,
        )
        return Response(WarehouseReadSerializer(warehouse, context={'request': request}).data)

    def perform_destroy(self, instance):
        WarehouseService.delete_warehouse(actor=self.request.user, warehouse_id=instance.pk)
