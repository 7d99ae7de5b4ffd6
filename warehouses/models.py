"""
Warehouses — Models

Warehouse metadata owned by a user. Each warehouse is the handle of one
stock ledger (ledger.Movement rows point at it).

@file warehouses/models.py
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import BaseModel


class Warehouse(BaseModel):
    """
    A named warehouse belonging to one principal.

    last_activity_at is bumped after every committed ledger write.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='warehouses',
        verbose_name=_('owner'),
    )
    name = models.CharField(_('name'), max_length=255)
    city = models.CharField(_('city'), max_length=120, blank=True)
    address = models.CharField(_('address'), max_length=500, blank=True)
    inauguration_date = models.DateField(_('inauguration date'), null=True, blank=True)
    notes = models.TextField(_('notes'), blank=True)
    last_activity_at = models.DateTimeField(
        _('last activity'), null=True, blank=True, db_index=True,
    )

    class Meta:
        verbose_name = _('warehouse')
        verbose_name_plural = _('warehouses')
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['owner', 'name'],
                name='unique_warehouse_name_per_owner',
            ),
        ]

    def __str__(self):
        return self.name
