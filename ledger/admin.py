"""
Ledger — Django Admin Configuration

Read-only view of ledger rows. Running totals are derived data, so rows
are never edited here: corrections go through the API and LedgerService.

@file ledger/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import Movement


@admin.register(Movement)
class MovementAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'warehouse', 'product_name', 'direction_badge',
        'quantity', 'running_total', 'effective_date', 'created_by',
    )
    list_filter = ('effective_date', 'warehouse')
    search_fields = ('product_name', 'supplier', 'customer', 'warehouse__name')
    readonly_fields = (
        'id', 'warehouse', 'product_name', 'supplier', 'customer',
        'import_quantity', 'import_unit_price', 'export_quantity', 'export_unit_price',
        'running_total', 'effective_date',
        'created_at', 'updated_at', 'created_by', 'updated_by',
    )
    list_select_related = ('warehouse', 'created_by')
    show_full_result_count = False
    list_per_page = 50
    date_hierarchy = 'effective_date'
    ordering = ('warehouse', 'id')

    fieldsets = (
        (_('Movement'), {
            'fields': ('id', 'warehouse', 'product_name', 'effective_date', 'running_total'),
        }),
        (_('Import'), {
            'fields': ('supplier', 'import_quantity', 'import_unit_price'),
        }),
        (_('Export'), {
            'fields': ('customer', 'export_quantity', 'export_unit_price'),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Type'))
    def direction_badge(self, obj):
        color = '#22c55e' if obj.is_import else '#f59e0b'
        label = 'IMPORT' if obj.is_import else 'EXPORT'
        return format_html(
            '<span style="background:{};color:#fff;padding:2px 8px;'
            'border-radius:4px;font-size:11px;font-weight:600;">{}</span>',
            color, label,
        )

    @admin.display(description=_('Quantity'))
    def quantity(self, obj):
        return obj.import_quantity or obj.export_quantity
