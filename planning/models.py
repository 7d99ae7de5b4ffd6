"""
Planning — Models

Movements scheduled against one of the owner's warehouses but not yet
applied to its ledger. Unlike ledger rows, a planned movement may carry
both an import leg and an export leg; shifting it appends one ledger row
per non-zero leg.

@file planning/models.py
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import AuditFieldsMixin, TimestampMixin


class PlannedMovement(TimestampMixin, AuditFieldsMixin):
    id = models.BigAutoField(primary_key=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='planned_movements',
        verbose_name=_('owner'),
    )
    target_warehouse = models.ForeignKey(
        'warehouses.Warehouse',
        on_delete=models.CASCADE,
        related_name='planned_movements',
        verbose_name=_('target warehouse'),
    )
    product_name = models.CharField(_('product'), max_length=255)
    supplier = models.CharField(_('supplier'), max_length=255, blank=True)
    customer = models.CharField(_('customer'), max_length=255, blank=True)
    import_quantity = models.PositiveIntegerField(_('import quantity'), default=0)
    import_unit_price = models.DecimalField(
        _('import unit price'), max_digits=14, decimal_places=2, default=Decimal('0'),
    )
    export_quantity = models.PositiveIntegerField(_('export quantity'), default=0)
    export_unit_price = models.DecimalField(
        _('export unit price'), max_digits=14, decimal_places=2, default=Decimal('0'),
    )
    effective_date = models.DateField(_('date'))

    class Meta:
        verbose_name = _('planned movement')
        verbose_name_plural = _('planned movements')
        ordering = ['id']
        indexes = [
            models.Index(fields=['owner', 'id'], name='planning_owner_seq_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(import_quantity__gt=0) | models.Q(export_quantity__gt=0),
                name='planning_has_quantity',
                violation_error_message='A planned movement needs an import or an export quantity',
            ),
            models.CheckConstraint(
                condition=models.Q(import_unit_price__gte=0) & models.Q(export_unit_price__gte=0),
                name='planning_prices_non_negative',
            ),
        ]

    def __str__(self):
        return f'#{self.pk} {self.product_name} +{self.import_quantity}/-{self.export_quantity}'

    @property
    def target_warehouse_name(self) -> str:
        return self.target_warehouse.name
