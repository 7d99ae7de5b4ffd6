"""
Planning — Django Admin Configuration

@file planning/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import PlannedMovement


@admin.register(PlannedMovement)
class PlannedMovementAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'owner', 'target_warehouse', 'product_name',
        'import_quantity', 'export_quantity', 'effective_date',
    )
    list_filter = ('effective_date',)
    search_fields = ('product_name', 'supplier', 'customer', 'target_warehouse__name', 'owner__username')
    readonly_fields = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by')
    list_select_related = ('owner', 'target_warehouse')
    show_full_result_count = False
    list_per_page = 50
    ordering = ('id',)

    fieldsets = (
        (_('Plan'), {
            'fields': ('id', 'owner', 'target_warehouse', 'product_name', 'effective_date'),
        }),
        (_('Import leg'), {
            'fields': ('supplier', 'import_quantity', 'import_unit_price'),
        }),
        (_('Export leg'), {
            'fields': ('customer', 'export_quantity', 'export_unit_price'),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )
