"""
Core — Django Admin Configuration

Audit trail viewer. Entries are written by the services only, so every
permission except view is withheld.

@file core/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from core.models import AuditLog

Action = AuditLog.ActionChoices

# Ledger-changing actions stand out; session events stay muted.
ACTION_COLORS = {
    Action.CREATE: '#15803d',
    Action.UPDATE: '#1d4ed8',
    Action.DELETE: '#b91c1c',
    Action.SHIFT: '#7c3aed',
}
MUTED = '#6b7280'


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action_badge', 'target', 'actor', 'ip_address')
    list_filter = ('action', 'model_name')
    search_fields = ('object_id', 'actor__username')
    list_select_related = ('actor',)
    date_hierarchy = 'timestamp'
    ordering = ('-timestamp',)
    show_full_result_count = False

    fieldsets = (
        (None, {'fields': ('action', 'model_name', 'object_id', 'actor', 'timestamp')}),
        (_('Client'), {'fields': ('ip_address', 'user_agent'), 'classes': ('collapse',)}),
        (_('Values'), {'fields': ('old_values', 'new_values')}),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Target'), ordering='model_name')
    def target(self, obj):
        return f'{obj.model_name} #{obj.object_id}'

    @admin.display(description=_('Action'), ordering='action')
    def action_badge(self, obj):
        return format_html(
            '<b style="color:{};">{}</b>',
            ACTION_COLORS.get(obj.action, MUTED), obj.get_action_display(),
        )
