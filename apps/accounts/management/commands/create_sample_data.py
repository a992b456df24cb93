"""
Management command to seed the database.

Usage:
    python manage.py create_sample_data [--samples] [--clear]

Always ensures the default administrator (admin / admin123) exists so the
first login works. With --samples it also creates:
- 2 outlets (Anna Nagar, Velachery)
- 1 outlet user per outlet
- 3 package templates
- Vouchers in every status
- Customer packages with some services already redeemed
"""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.outlets.models import Outlet
from apps.packages.models import PackageTemplate, CustomerPackage, ServiceRecord
from apps.packages.services import PackageLedgerService
from apps.vouchers.models import Voucher, VoucherType
from apps.vouchers.services import issue_voucher, redeem_voucher, expire_overdue_vouchers


DEFAULT_ADMIN_USERNAME = 'admin'
DEFAULT_ADMIN_PASSWORD = 'admin123'
SAMPLE_STAFF_PASSWORD = 'password123'

SAMPLE_OUTLETS = [
    {
        'code': 'ANN',
        'name': 'Naturals Anna Nagar',
        'location': 'Chennai',
        'address': '12, 2nd Avenue\nAnna Nagar, Chennai 600040',
        'gstin': '33AAACN1234F1Z5',
        'phone': '044-26161234',
        'staff': 'anna-desk',
    },
    {
        'code': 'VEL',
        'name': 'Naturals Velachery',
        'location': 'Chennai',
        'address': '45, 100 Feet Road\nVelachery, Chennai 600042',
        'gstin': '33AAACN1234F2Z4',
        'phone': '044-22431234',
        'staff': 'vel-desk',
    },
]

SAMPLE_TEMPLATES = [
    (Decimal('5000'), Decimal('7000')),
    (Decimal('10000'), Decimal('15000')),
    (Decimal('2000'), Decimal('2500')),
]


class Command(BaseCommand):
    help = 'Create the default admin and, optionally, sample outlets, staff, vouchers and packages'

    def add_arguments(self, parser):
        parser.add_argument(
            '--samples',
            action='store_true',
            help='Also create sample outlets, staff, vouchers and packages',
        )
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data (except the default admin) first',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        admin = self.create_admin()

        if options['samples']:
            self.stdout.write('Creating sample data...')
            staff = self.create_outlets_and_staff()
            templates = self.create_templates()
            self.create_vouchers(staff)
            self.create_packages(staff, templates)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Accounts:')
        self.stdout.write(f'  {admin.username} / {DEFAULT_ADMIN_PASSWORD} (admin)')
        if options['samples']:
            for outlet in SAMPLE_OUTLETS:
                self.stdout.write(f"  {outlet['staff']} / {SAMPLE_STAFF_PASSWORD} ({outlet['code']})")

    def clear_data(self):
        """Clear all data; the ledger goes first because packages protect it."""
        ServiceRecord.objects.all().delete()
        CustomerPackage.objects.all().delete()
        PackageTemplate.objects.all().delete()
        Voucher.objects.all().delete()
        User.objects.exclude(username=DEFAULT_ADMIN_USERNAME).delete()
        Outlet.objects.all().delete()

    def create_admin(self):
        admin = User.objects.filter(username=DEFAULT_ADMIN_USERNAME).first()
        if admin is None:
            admin = User.objects.create_superuser(
                username=DEFAULT_ADMIN_USERNAME,
                password=DEFAULT_ADMIN_PASSWORD,
            )
            self.stdout.write('  Created default admin')
        return admin

    def create_outlets_and_staff(self):
        """Create outlets with one outlet user each."""
        self.stdout.write('  Creating outlets and staff...')

        staff = []
        for data in SAMPLE_OUTLETS:
            outlet, _ = Outlet.objects.get_or_create(
                code=data['code'],
                defaults={
                    'name': data['name'],
                    'location': data['location'],
                    'address': data['address'],
                    'gstin': data['gstin'],
                    'phone': data['phone'],
                }
            )
            user, created = User.objects.get_or_create(
                username=data['staff'],
                defaults={'role': UserRole.USER, 'outlet': outlet}
            )
            if created:
                user.set_password(SAMPLE_STAFF_PASSWORD)
                user.save()
            staff.append(user)

        return staff

    def create_templates(self):
        self.stdout.write('  Creating package templates...')

        templates = []
        for package_value, service_value in SAMPLE_TEMPLATES:
            template = PackageTemplate.objects.filter(
                package_value=package_value,
                service_value=service_value,
            ).first()
            if template is None:
                template = PackageLedgerService.create_template(
                    name='',
                    package_value=package_value,
                    service_value=service_value,
                )
            templates.append(template)

        return templates

    def create_vouchers(self, staff):
        """Issue vouchers at each outlet and move some through redeem and expiry."""
        self.stdout.write('  Creating vouchers...')

        now = timezone.now()
        for index, user in enumerate(staff):
            if Voucher.objects.filter(outlet=user.outlet).exists():
                continue

            issue_voucher(
                issued_by=user,
                recipient_name='Priya Raman',
                recipient_mobile=f'98400{index}0001',
                bill_no=f'{user.outlet.code}-1001',
            )
            redeemed = issue_voucher(
                issued_by=user,
                recipient_name='Karthik S',
                recipient_mobile=f'98400{index}0002',
                bill_no=f'{user.outlet.code}-1002',
                voucher_type=VoucherType.FAMILY_AND_FRIENDS,
                discount_percentage=20,
            )
            redeem_voucher(
                voucher_id=redeemed.id,
                redemption_bill_no=f'{user.outlet.code}-2001',
                redeemed_by=user,
            )
            lapsed = issue_voucher(
                issued_by=user,
                recipient_name='Meena V',
                recipient_mobile=f'98400{index}0003',
                bill_no=f'{user.outlet.code}-1003',
                validity_days=1,
            )
            Voucher.objects.filter(id=lapsed.id).update(
                issue_date=now - timedelta(days=31),
                expiry_date=now - timedelta(days=1),
            )

        expire_overdue_vouchers(now=now)

    def create_packages(self, staff, templates):
        """Assign packages and redeem a visit on one of them."""
        self.stdout.write('  Creating customer packages...')

        for index, user in enumerate(staff):
            if CustomerPackage.objects.filter(outlet=user.outlet).exists():
                continue

            package = PackageLedgerService.assign_package(
                assigned_by=user,
                template_id=templates[0].id,
                customer_name='Divya Krishnan',
                customer_mobile=f'99400{index}0001',
                initial_services=[
                    {'service_name': 'Haircut', 'service_value': Decimal('800')},
                ],
            )
            PackageLedgerService.redeem_services(
                customer_package_id=package.id,
                services=[
                    {'service_name': 'Hair Spa', 'service_value': Decimal('1200')},
                    {'service_name': 'Pedicure', 'service_value': Decimal('600')},
                ],
                redeemed_by=user,
            )
            PackageLedgerService.assign_package(
                assigned_by=user,
                template_id=templates[-1].id,
                customer_name='Lakshmi N',
                customer_mobile=f'99400{index}0002',
            )
