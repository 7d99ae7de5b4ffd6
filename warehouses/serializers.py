"""
Warehouses — Serializers

@file warehouses/serializers.py
"""

from rest_framework import serializers

from .models import Warehouse

__all__ = [
    'WarehouseReadSerializer',
    'WarehouseWriteSerializer',
]


class WarehouseReadSerializer(serializers.ModelSerializer):
    owner_username = serializers.CharField(source='owner.username', read_only=True)
    movement_count = serializers.SerializerMethodField()

    class Meta:
        model = Warehouse
        fields = [
            'id', 'name', 'city', 'address', 'inauguration_date', 'notes',
            'owner', 'owner_username', 'movement_count',
            'last_activity_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_movement_count(self, obj):
        annotated = getattr(obj, 'movement_count', None)
        if annotated is not None:
            return annotated
        return obj.movements.count()


class WarehouseWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ['name', 'city', 'address', 'inauguration_date', 'notes']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Warehouse name cannot be blank.')
        return value
