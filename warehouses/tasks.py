"""
Warehouses — Celery Tasks

@file warehouses/tasks.py
"""

import logging

from celery import shared_task

from core.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


@shared_task(name='warehouses.touch_last_activity', ignore_result=True)
def touch_last_activity_task(warehouse_id):
    """Stamp last_activity_at on a warehouse after a committed ledger write."""
    from .services import WarehouseService

    updated = WarehouseService.touch_last_activity(warehouse_id)
    if not updated:
        logger.warning('touch_last_activity: warehouse %s no longer exists.', warehouse_id)
    return updated
