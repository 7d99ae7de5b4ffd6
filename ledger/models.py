"""
Ledger — Models

Per-warehouse stock ledger. Every row is a pure import or a pure export
of one product and stores the running total of that product as of the
row. Rows are ordered by their integer id, never by effective_date.

running_total is derived data: only ledger.services writes it, as the
prefix sum of (import_quantity - export_quantity) over the product's rows.

@file ledger/models.py
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import AuditFieldsMixin, TimestampMixin


class Movement(TimestampMixin, AuditFieldsMixin):
    """One import or export event in a warehouse ledger."""

    id = models.BigAutoField(primary_key=True)
    warehouse = models.ForeignKey(
        'warehouses.Warehouse',
        on_delete=models.CASCADE,
        related_name='movements',
        verbose_name=_('warehouse'),
    )
    product_name = models.CharField(_('product'), max_length=255, db_index=True)
    supplier = models.CharField(_('supplier'), max_length=255, blank=True)
    customer = models.CharField(_('customer'), max_length=255, blank=True)
    running_total = models.IntegerField(
        _('total quantity'), default=0,
        help_text=_('Stock of the product after this movement'),
    )
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
        verbose_name = _('movement')
        verbose_name_plural = _('movements')
        ordering = ['id']
        indexes = [
            models.Index(fields=['warehouse', 'product_name', 'id'], name='ledger_product_seq_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(running_total__gte=0),
                name='ledger_running_total_non_negative',
                violation_error_message='Running total cannot be negative',
            ),
            models.CheckConstraint(
                condition=~(models.Q(import_quantity__gt=0) & models.Q(export_quantity__gt=0)),
                name='ledger_single_direction',
                violation_error_message='A movement is either an import or an export',
            ),
            models.CheckConstraint(
                condition=models.Q(import_unit_price__gte=0) & models.Q(export_unit_price__gte=0),
                name='ledger_prices_non_negative',
            ),
        ]

    def __str__(self):
        return f'#{self.pk} {self.product_name} {self.delta:+d} -> {self.running_total}'

    @property
    def delta(self) -> int:
        return self.import_quantity - self.export_quantity

    @property
    def is_import(self) -> bool:
        return self.import_quantity > 0
