"""
Ledger — Management Command: verify_ledgers

Replays running totals of one or all warehouse ledgers and reports rows
whose stored total differs from the prefix sum of their movements.

Usage::

    python manage.py verify_ledgers
    python manage.py verify_ledgers --warehouse <uuid>

Read-only: nothing is rewritten.

@file ledger/management/commands/verify_ledgers.py
"""

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from ledger.services import LedgerService
from warehouses.models import Warehouse


class Command(BaseCommand):
    help = 'Check that every ledger running total equals the prefix sum of its movements.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--warehouse',
            type=str,
            help='Only check the ledger of this warehouse id.',
        )

    def handle(self, *args, **options):
        warehouses = Warehouse.objects.select_related('owner').order_by('created_at')
        if options.get('warehouse'):
            try:
                warehouses = warehouses.filter(pk=options['warehouse'])
                found = warehouses.exists()
            except ValidationError:
                found = False
            if not found:
                raise CommandError(f'Warehouse {options["warehouse"]} not found.')

        inconsistent = 0
        for warehouse in warehouses:
            findings = LedgerService.verify(warehouse)
            if not findings:
                self.stdout.write(f'{warehouse.owner} / {warehouse.name}: OK')
                continue
            inconsistent += 1
            self.stdout.write(self.style.WARNING(
                f'{warehouse.owner} / {warehouse.name}: {len(findings)} inconsistent rows',
            ))
            for finding in findings:
                self.stdout.write(
                    f'  #{finding["movement_id"]} {finding["product_name"]}: '
                    f'stored={finding["stored_total"]} expected={finding["expected_total"]}'
                )

        if inconsistent:
            self.stdout.write(self.style.ERROR(f'{inconsistent} ledger(s) inconsistent.'))
        else:
            self.stdout.write(self.style.SUCCESS('All ledgers consistent.'))
