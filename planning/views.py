"""
Planning — Views

CRUD over the caller's planned movements and the shift action that
applies one to its target warehouse ledger.

@file planning/views.py
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ledger.serializers import MovementReadSerializer

from .serializers import PlannedMovementReadSerializer, PlannedMovementWriteSerializer
from .services import PlannedMovementService, ShiftService


class PlannedMovementViewSet(viewsets.ModelViewSet):
    """
    /planned-movements/ — listing is ordered by id.

    POST /planned-movements/{id}/shift/ returns the ledger rows created.
    """

    permission_classes = [IsAuthenticated]
    filterset_fields = ['target_warehouse', 'product_name', 'effective_date']
    search_fields = ['product_name', 'supplier', 'customer']
    ordering_fields = ['id', 'effective_date']
    ordering = ['id']

    def get_queryset(self):
        return PlannedMovementService.list_planned(actor=self.request.user)

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve'):
            return PlannedMovementReadSerializer
        return PlannedMovementWriteSerializer

    def retrieve(self, request, *args, **kwargs):
        planned = PlannedMovementService.get_planned(actor=request.user, planned_id=kwargs['pk'])
        return Response(PlannedMovementReadSerializer(planned).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        planned = PlannedMovementService.add_planned(
            actor=request.user,
            **serializer.validated_data,
        )
        return Response(PlannedMovementReadSerializer(planned).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        planned = PlannedMovementService.update_planned(
            actor=request.user,
            planned_id=kwargs['pk'],
            partial=partial,
            **serializer.validated_data,
        )
        return Response(PlannedMovementReadSerializer(planned).data)

    def destroy(self, request, *args, **kwargs):
        PlannedMovementService.delete_planned(actor=request.user, planned_id=kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='shift')
    def shift(self, request, pk=None):
        movements = ShiftService.shift(actor=request.user, planned_id=pk)
        return Response(
            MovementReadSerializer(movements, many=True).data,
            status=status.HTTP_200_OK,
        )
