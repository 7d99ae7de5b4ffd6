"""
Ledger — Serializers

Read serializer exposes the derived running total; write serializer only
accepts caller-owned columns. Explicit field lists; no __all__.

@file ledger/serializers.py
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Movement

__all__ = [
    'MovementReadSerializer',
    'MovementWriteSerializer',
    'ProductTotalSerializer',
]


class MovementReadSerializer(serializers.ModelSerializer):
    movement_type = serializers.SerializerMethodField()

    class Meta:
        model = Movement
        fields = [
            'id', 'warehouse', 'product_name', 'effective_date',
            'supplier', 'customer', 'movement_type',
            'import_quantity', 'import_unit_price',
            'export_quantity', 'export_unit_price',
            'running_total',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_movement_type(self, obj):
        return 'IMPORT' if obj.is_import else 'EXPORT'


class MovementWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Movement
        fields = [
            'product_name', 'effective_date', 'supplier', 'customer',
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
        imported = attrs.get('import_quantity', 0)
        exported = attrs.get('export_quantity', 0)
        if imported and exported:
            raise serializers.ValidationError(
                'A movement is either an import or an export, not both.',
            )
        if not imported and not exported:
            raise serializers.ValidationError(
                'Either import_quantity or export_quantity must be positive.',
            )
        return attrs


class ProductTotalSerializer(serializers.Serializer):
    product_name = serializers.CharField(read_only=True)
    total_quantity = serializers.IntegerField(read_only=True)
    last_movement_id = serializers.IntegerField(read_only=True)
    last_movement_date = serializers.DateField(read_only=True)
