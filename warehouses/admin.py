"""
Warehouses — Django Admin Configuration

@file warehouses/admin.py
"""

from django.contrib import admin
from django.db.models import Count
from django.utils.translation import gettext_lazy as _

from .models import Warehouse


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = (
        'name', 'owner', 'city', 'inauguration_date', 'movement_count',
        'last_activity_at', 'created_at',
    )
    list_filter = ('city',)
    search_fields = ('name', 'city', 'address', 'owner__username')
    readonly_fields = (
        'id', 'last_activity_at', 'created_at', 'updated_at',
        'created_by', 'updated_by',
    )
    list_select_related = ('owner',)
    show_full_result_count = False
    list_per_page = 30
    date_hierarchy = 'created_at'
    ordering = ('name',)

    fieldsets = (
        (_('Identification'), {
            'fields': ('id', 'owner', 'name'),
        }),
        (_('Location'), {
            'fields': ('city', 'address', 'inauguration_date'),
        }),
        (_('Notes'), {
            'fields': ('notes',),
        }),
        (_('Metadata'), {
            'fields': ('last_activity_at', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_movement_count=Count('movements'))

    @admin.display(description=_('Movements'), ordering='_movement_count')
    def movement_count(self, obj):
        return obj._movement_count
