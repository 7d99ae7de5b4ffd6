"""
Ledger — Celery Tasks

Periodic integrity check of every ledger.

@file ledger/tasks.py
"""

import logging

from celery import shared_task

from core.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


@shared_task(name='ledger.verify_all_ledgers')
def verify_all_ledgers_task():
    """
    Nightly task: replay every warehouse ledger and log rows whose stored
    running total is wrong. Registered with Celery Beat.
    """
    from warehouses.models import Warehouse

    from .services import LedgerService

    checked = 0
    broken = 0
    for warehouse_id in Warehouse.objects.values_list('pk', flat=True).iterator():
        findings = LedgerService.verify(warehouse_id)
        checked += 1
        if findings:
            broken += 1
            logger.warning(
                'Ledger of warehouse %s has %d inconsistent rows, first: %s',
                warehouse_id, len(findings), findings[0],
            )
    logger.info('verify_all_ledgers_task completed: %d ledgers, %d inconsistent.', checked, broken)
    return {'checked': checked, 'inconsistent': broken}
