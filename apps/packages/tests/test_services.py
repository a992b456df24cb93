import uuid
from decimal import Decimal

import pytest

from apps.packages.exceptions import (
    TemplateNotFoundError,
    CustomerPackageNotFoundError,
    TransactionNotFoundError,
    InvalidPackageDataError,
    InsufficientBalanceError,
    PackageOperationNotAllowedError,
    LedgerImmutableError,
)
from apps.packages.models import PackageTemplate, CustomerPackage, ServiceRecord, bill_number
from apps.packages.services import PackageLedgerService


def test_bill_number_is_last_six_upper():
    tid = uuid.UUID('12345678-1234-5678-1234-56789abcdef0')
    assert bill_number(tid) == 'BCDEF0'


@pytest.mark.django_db
class TestTemplates:

    def test_default_name(self):
        template = PackageLedgerService.create_template(
            name='',
            package_value=Decimal('5000'),
            service_value=Decimal('7000'),
        )

        assert template.name == 'Pay 5000 Get 7000'
        assert template.service_value == Decimal('7000.00')

    def test_default_name_keeps_paise(self):
        template = PackageLedgerService.create_template(
            name='  ',
            package_value=Decimal('999.50'),
            service_value=Decimal('1500'),
        )

        assert template.name == 'Pay 999.50 Get 1500'

    def test_explicit_name(self):
        template = PackageLedgerService.create_template(
            name='Bridal Gold',
            package_value=Decimal('10000'),
            service_value=Decimal('15000'),
        )

        assert template.name == 'Bridal Gold'

    @pytest.mark.parametrize('package_value, service_value', [
        (Decimal('0'), Decimal('100')),
        (Decimal('100'), Decimal('-1')),
    ])
    def test_non_positive_values_rejected(self, package_value, service_value):
        with pytest.raises(InvalidPackageDataError):
            PackageLedgerService.create_template(
                name='Bad',
                package_value=package_value,
                service_value=service_value,
            )
        assert PackageTemplate.objects.count() == 0

    def test_delete_keeps_assigned_snapshot(self, template, customer_package):
        PackageLedgerService.delete_template(template_id=template.id)

        customer_package.refresh_from_db()
        assert customer_package.template is None
        assert customer_package.template_name == 'Pay 5000 Get 7000'
        assert customer_package.service_value == Decimal('7000.00')
        assert not PackageTemplate.objects.filter(id=template.id).exists()

    def test_delete_missing_template(self):
        with pytest.raises(TemplateNotFoundError):
            PackageLedgerService.delete_template(template_id=uuid.uuid4())


@pytest.mark.django_db
class TestAssignPackage:

    def test_assign_without_services(self, package_staff, package_outlet, template):
        package = PackageLedgerService.assign_package(
            assigned_by=package_staff,
            template_id=template.id,
            customer_name='Divya',
            customer_mobile='9840098400',
        )

        assert package.outlet == package_outlet
        assert package.template_name == template.name
        assert package.remaining_service_value == Decimal('7000.00')
        assert package.assigned_by == package_staff
        assert not package.service_records.exists()

    def test_assign_with_initial_services(self, package_staff, template):
        package = PackageLedgerService.assign_package(
            assigned_by=package_staff,
            template_id=template.id,
            customer_name='Divya',
            customer_mobile='9840098400',
            initial_services=[
                {'service_name': 'Haircut', 'service_value': Decimal('800')},
                {'service_name': 'Facial', 'service_value': Decimal('1500')},
            ],
        )

        assert package.remaining_service_value == Decimal('4700.00')
        records = list(package.service_records.all())
        assert len(records) == 2
        assert len({record.transaction_id for record in records}) == 1
        assert all(record.redeemed_date == package.assigned_date for record in records)

    def test_initial_services_may_use_whole_value(self, package_staff, template):
        package = PackageLedgerService.assign_package(
            assigned_by=package_staff,
            template_id=template.id,
            customer_name='Divya',
            customer_mobile='9840098400',
            initial_services=[{'service_name': 'Bridal', 'service_value': Decimal('7000')}],
        )

        assert package.remaining_service_value == Decimal('0.00')
        assert not package.is_active

    def test_initial_services_over_value_creates_nothing(self, package_staff, template):
        with pytest.raises(InsufficientBalanceError):
            PackageLedgerService.assign_package(
                assigned_by=package_staff,
                template_id=template.id,
                customer_name='Divya',
                customer_mobile='9840098400',
                initial_services=[
                    {'service_name': 'Bridal', 'service_value': Decimal('6000')},
                    {'service_name': 'Facial', 'service_value': Decimal('1000.01')},
                ],
            )

        assert CustomerPackage.objects.count() == 0
        assert ServiceRecord.objects.count() == 0

    def test_admin_cannot_assign(self, package_admin, template):
        with pytest.raises(PackageOperationNotAllowedError):
            PackageLedgerService.assign_package(
                assigned_by=package_admin,
                template_id=template.id,
                customer_name='Divya',
                customer_mobile='9840098400',
            )

    def test_unknown_template(self, package_staff):
        with pytest.raises(TemplateNotFoundError):
            PackageLedgerService.assign_package(
                assigned_by=package_staff,
                template_id=uuid.uuid4(),
                customer_name='Divya',
                customer_mobile='9840098400',
            )

    def test_blank_customer_rejected(self, package_staff, template):
        with pytest.raises(InvalidPackageDataError):
            PackageLedgerService.assign_package(
                assigned_by=package_staff,
                template_id=template.id,
                customer_name=' ',
                customer_mobile='9840098400',
            )


@pytest.mark.django_db
class TestRedeemServices:

    def test_redeem_draws_balance(self, package_staff, customer_package):
        package, records = PackageLedgerService.redeem_services(
            customer_package_id=customer_package.id,
            services=[
                {'service_name': 'Pedicure', 'service_value': Decimal('600')},
                {'service_name': 'Manicure', 'service_value': Decimal('400')},
            ],
            redeemed_by=package_staff,
        )

        assert package.remaining_service_value == Decimal('4000.00')
        assert len(records) == 2
        assert records[0].transaction_id == records[1].transaction_id
        customer_package.refresh_from_db()
        assert customer_package.remaining_service_value == Decimal('4000.00')

    def test_redeem_exact_remaining(self, package_staff, customer_package):
        package, _ = PackageLedgerService.redeem_services(
            customer_package_id=customer_package.id,
            services=[{'service_name': 'Bridal', 'service_value': Decimal('5000')}],
            redeemed_by=package_staff,
        )

        assert package.remaining_service_value == Decimal('0.00')

    def test_over_balance_changes_nothing(self, package_staff, customer_package):
        with pytest.raises(InsufficientBalanceError):
            PackageLedgerService.redeem_services(
                customer_package_id=customer_package.id,
                services=[
                    {'service_name': 'Bridal', 'service_value': Decimal('4500')},
                    {'service_name': 'Facial', 'service_value': Decimal('500.01')},
                ],
                redeemed_by=package_staff,
            )

        customer_package.refresh_from_db()
        assert customer_package.remaining_service_value == Decimal('5000.00')
        assert customer_package.service_records.count() == 2

    def test_empty_services_rejected(self, package_staff, customer_package):
        with pytest.raises(InvalidPackageDataError):
            PackageLedgerService.redeem_services(
                customer_package_id=customer_package.id,
                services=[],
                redeemed_by=package_staff,
            )

    @pytest.mark.parametrize('value', [Decimal('0'), Decimal('-50')])
    def test_non_positive_value_rejected(self, package_staff, customer_package, value):
        with pytest.raises(InvalidPackageDataError):
            PackageLedgerService.redeem_services(
                customer_package_id=customer_package.id,
                services=[{'service_name': 'Haircut', 'service_value': value}],
                redeemed_by=package_staff,
            )

    def test_other_outlet_staff_can_redeem(self, package_other_staff, customer_package):
        package, records = PackageLedgerService.redeem_services(
            customer_package_id=customer_package.id,
            services=[{'service_name': 'Haircut', 'service_value': Decimal('500')}],
            redeemed_by=package_other_staff,
        )

        assert package.remaining_service_value == Decimal('4500.00')
        assert records[0].recorded_by == package_other_staff

    def test_admin_cannot_redeem(self, package_admin, customer_package):
        with pytest.raises(PackageOperationNotAllowedError):
            PackageLedgerService.redeem_services(
                customer_package_id=customer_package.id,
                services=[{'service_name': 'Haircut', 'service_value': Decimal('500')}],
                redeemed_by=package_admin,
            )

    def test_unknown_package(self, package_staff):
        with pytest.raises(CustomerPackageNotFoundError):
            PackageLedgerService.redeem_services(
                customer_package_id=uuid.uuid4(),
                services=[{'service_name': 'Haircut', 'service_value': Decimal('500')}],
                redeemed_by=package_staff,
            )

    def test_balance_matches_ledger(self, package_staff, template):
        package = PackageLedgerService.assign_package(
            assigned_by=package_staff,
            template_id=template.id,
            customer_name='Divya',
            customer_mobile='9840098400',
            initial_services=[{'service_name': 'Haircut', 'service_value': Decimal('700')}],
        )
        for value in ['1000', '250.50', '49.50']:
            package, _ = PackageLedgerService.redeem_services(
                customer_package_id=package.id,
                services=[{'service_name': 'Service', 'service_value': Decimal(value)}],
                redeemed_by=package_staff,
            )

        drawn = sum(record.service_value for record in package.service_records.all())
        assert package.remaining_service_value == package.service_value - drawn
        assert package.remaining_service_value == Decimal('5000.00')


@pytest.mark.django_db
class TestLedgerIsAppendOnly:

    def test_record_cannot_be_modified(self, customer_package):
        record = customer_package.service_records.first()
        record.service_value = Decimal('1.00')

        with pytest.raises(LedgerImmutableError):
            record.save()

    def test_record_cannot_be_deleted(self, customer_package):
        record = customer_package.service_records.first()

        with pytest.raises(LedgerImmutableError):
            record.delete()


@pytest.mark.django_db
class TestHistoryAndLookup:

    def test_history_grouped_newest_first(self, package_staff, customer_package):
        _, records = PackageLedgerService.redeem_services(
            customer_package_id=customer_package.id,
            services=[{'service_name': 'Pedicure', 'service_value': Decimal('600')}],
            redeemed_by=package_staff,
        )

        history = PackageLedgerService.get_package_history(customer_package_id=customer_package.id)

        assert len(history) == 2
        assert history[0]['transaction_id'] == records[0].transaction_id
        assert history[0]['total'] == Decimal('600.00')
        assert history[0]['bill_no'] == bill_number(records[0].transaction_id)
        assert history[1]['total'] == Decimal('2000.00')
        assert {r.service_name for r in history[1]['services']} == {'Haircut', 'Hair Spa'}

    def test_history_unknown_package(self):
        with pytest.raises(CustomerPackageNotFoundError):
            PackageLedgerService.get_package_history(customer_package_id=uuid.uuid4())

    def test_transaction_records(self, customer_package):
        transaction_id = customer_package.service_records.first().transaction_id

        records = PackageLedgerService.get_transaction_records(
            customer_package_id=customer_package.id,
            transaction_id=transaction_id,
        )

        assert len(records) == 2

    def test_transaction_records_missing(self, customer_package):
        with pytest.raises(TransactionNotFoundError):
            PackageLedgerService.get_transaction_records(
                customer_package_id=customer_package.id,
                transaction_id='not-a-uuid',
            )

    def test_find_by_mobile_spans_outlets(self, template, customer_package, other_outlet_package):
        found = PackageLedgerService.find_packages_by_mobile(' 9876543210 ')
        assert list(found) == [customer_package]

        assert not PackageLedgerService.find_packages_by_mobile('').exists()

    def test_filter_scopes_outlet_users(self, package_staff, package_admin, package_other_outlet,
                                        customer_package, other_outlet_package):
        assert list(PackageLedgerService.filter_packages(package_staff)) == [customer_package]
        assert PackageLedgerService.filter_packages(package_admin).count() == 2
        assert list(
            PackageLedgerService.filter_packages(package_admin, outlet_id=package_other_outlet.id)
        ) == [other_outlet_package]

    def test_filter_active_and_search(self, package_admin, customer_package):
        customer_package.remaining_service_value = Decimal('0.00')
        customer_package.save()

        assert not PackageLedgerService.filter_packages(package_admin, active_only=True).exists()
        assert PackageLedgerService.filter_packages(package_admin, search='priya').count() == 1
