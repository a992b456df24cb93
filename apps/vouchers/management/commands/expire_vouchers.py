"""
Management command that expires overdue vouchers.

Meant to run hourly from cron:

    0 * * * * python manage.py expire_vouchers

Usage:
    python manage.py expire_vouchers [--dry-run]
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.vouchers.models import Voucher, VoucherStatus
from apps.vouchers.services import expire_overdue_vouchers


class Command(BaseCommand):
    help = 'Mark every Issued voucher past its expiry date as Expired'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the vouchers that would expire without changing them',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        overdue = Voucher.objects.filter(
            status=VoucherStatus.ISSUED,
            expiry_date__lt=now,
        ).select_related('outlet')

        count = overdue.count()
        if count == 0:
            self.stdout.write(self.style.SUCCESS('No overdue vouchers.'))
            return

        self.stdout.write(f'Found {count} overdue voucher(s):')
        for voucher in overdue:
            outlet = voucher.outlet.code if voucher.outlet else '-'
            self.stdout.write(
                f'  - {voucher.id} | {voucher.recipient_name} | {outlet} | expired {voucher.expiry_date:%Y-%m-%d}'
            )

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('--dry-run mode: No changes made.'))
            return

        expired = expire_overdue_vouchers(now=now)
        self.stdout.write(self.style.SUCCESS(f'Expired {expired} voucher(s).'))
