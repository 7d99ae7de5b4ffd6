"""
Planning — Serializers

@file planning/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from .models import PlannedMovement

__all__ = [
    'PlannedMovementReadSerializer',
    'PlannedMovementWriteSerializer',
]


class PlannedMovementReadSerializer(serializers.ModelSerializer):
    target_warehouse_name = serializers.CharField(source='target_warehouse.name', read_only=True)

    class Meta:
        model = PlannedMovement
        fields = [
            'id', 'target_warehouse', 'target_warehouse_name',
            'product_name', 'effective_date', 'supplier', 'customer',
            'import_quantity', 'import_unit_price',
            'export_quantity', 'export_unit_price',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PlannedMovementWriteSerializer(serializers.ModelSerializer):
    # Ownership of the warehouse is checked by PlannedMovementService.
    target_warehouse = serializers.UUIDField(source='target_warehouse_id')

    class Meta:
        model = PlannedMovement
        fields = [
            'target_warehouse', 'product_name', 'effective_date',
            'supplier', 'customer',
            'import_quantity', 'import_unit_price',
            'export_quantity', 'export_unit_price',
        ]
        extra_kwargs = {
            'import_unit_price': {'min_value': Decimal('0')},
            'export_unit_price': {'min_value': Decimal('0')},
        }

    def validate(self, attrs):
        if self.partial:
            return attrs
        if not attrs.get('import_quantity') and not attrs.get('export_quantity'):
            raise serializers.ValidationError(
                'Either import_quantity or export_quantity must be positive.',
            )
        return attrs
