"""
Package Services Module
=======================

Business logic for prepaid service packages: templates, assignment to a
customer and the balance ledger that redemptions draw down.

Classes:
    PackageLedgerService: Template management, assignment, redemption and history.

Example:
    Selling a package and redeeming two services on the next visit::

        from apps.packages.services import PackageLedgerService
        from decimal import Decimal

        template = PackageLedgerService.create_template(
            name='',
            package_value=Decimal('5000'),
            service_value=Decimal('7000'),
        )
        package = PackageLedgerService.assign_package(
            assigned_by=request.user,
            template_id=template.id,
            customer_name='Priya',
            customer_mobile='9876543210',
        )
        package, records = PackageLedgerService.redeem_services(
            customer_package_id=package.id,
            services=[
                {'service_name': 'Haircut', 'service_value': Decimal('800')},
                {'service_name': 'Facial', 'service_value': Decimal('1500')},
            ],
            redeemed_by=request.user,
        )
        print(package.remaining_service_value)  # 4700.00
"""

import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import UserRole

from .exceptions import (
    TemplateNotFoundError,
    CustomerPackageNotFoundError,
    TransactionNotFoundError,
    InvalidPackageDataError,
    InsufficientBalanceError,
    PackageOperationNotAllowedError,
)
from .models import PackageTemplate, CustomerPackage, ServiceRecord, bill_number

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _plain_amount(value):
    """5000.00 -> '5000', 5000.50 -> '5000.50'."""
    value = _money(value)
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value:.2f}"


class PackageLedgerService:
    """
    Service for package templates and the customer package balance ledger.

    The ledger invariant is 0 <= remaining_service_value <= service_value.
    Every operation that moves the balance runs in one transaction and
    locks the package row, so a rejected request leaves no trace.

    Methods:
        create_template: Create a template (admin).
        delete_template: Delete a template; assigned packages keep their snapshot.
        assign_package: Sell a template to a customer, optionally drawing initial services.
        redeem_services: Draw services from a package as one transaction.
        get_package_history: Service records grouped by transaction, newest first.
        get_transaction_records: Records of a single transaction, for its bill.
        find_packages_by_mobile: Cross-outlet lookup for the redeem screen.
        filter_packages: Packages visible to a user.
    """

    @staticmethod
    def create_template(name, package_value, service_value):
        """
        Create a package template.

        Args:
            name (str): Display name; blank gives "Pay <package> Get <service>".
            package_value (Decimal): Amount the customer pays.
            service_value (Decimal): Amount of service the customer is entitled to.

        Returns:
            PackageTemplate: The created template.

        Raises:
            InvalidPackageDataError: If either value is not positive.
        """
        package_value = _money(package_value)
        service_value = _money(service_value)
        if package_value <= 0 or service_value <= 0:
            raise InvalidPackageDataError("Package and service values must be greater than zero")

        name = (name or '').strip()
        if not name:
            name = f"Pay {_plain_amount(package_value)} Get {_plain_amount(service_value)}"

        template = PackageTemplate.objects.create(
            name=name,
            package_value=package_value,
            service_value=service_value,
        )
        logger.info("Created package template %r", template.name)
        return template

    @staticmethod
    def delete_template(template_id):
        """
        Delete a template.

        Customer packages already assigned keep working from their snapshot
        fields; their template reference becomes null.

        Raises:
            TemplateNotFoundError: If the template doesn't exist.
        """
        with transaction.atomic():
            try:
                template = PackageTemplate.objects.select_for_update().get(id=template_id)
            except (PackageTemplate.DoesNotExist, ValidationError):
                raise TemplateNotFoundError(f"Package template {template_id} not found")

            name = template.name
            template.delete()
        logger.info("Deleted package template %r", name)

    @staticmethod
    def _clean_services(services):
        """Validate (service_name, service_value) rows and return them with their total."""
        cleaned = []
        for service in services or []:
            service_name = (service.get('service_name') or '').strip()
            if not service_name:
                raise InvalidPackageDataError("Service name is required")
            try:
                service_value = _money(service.get('service_value'))
            except (TypeError, ArithmeticError):
                raise InvalidPackageDataError(f"Invalid value for service {service_name}")
            if service_value <= 0:
                raise InvalidPackageDataError(
                    f"Value for service {service_name} must be greater than zero"
                )
            cleaned.append((service_name, service_value))

        total = sum((value for _, value in cleaned), Decimal('0.00'))
        return cleaned, total

    @staticmethod
    def _write_records(package, services, redeemed_date, recorded_by):
        transaction_id = uuid.uuid4()
        records = [
            ServiceRecord.objects.create(
                customer_package=package,
                service_name=service_name,
                service_value=service_value,
                redeemed_date=redeemed_date,
                transaction_id=transaction_id,
                recorded_by=recorded_by,
            )
            for service_name, service_value in services
        ]
        return transaction_id, records

    @staticmethod
    def assign_package(
        assigned_by,
        template_id,
        customer_name,
        customer_mobile,
        initial_services=None,
        assigned_date=None
    ):
        """
        Assign a template to a customer at the assigner's outlet.

        Initial services, if any, are drawn immediately and recorded as one
        transaction dated assigned_date.

        Args:
            assigned_by (User): Outlet user selling the package.
            template_id (UUID): Template being sold.
            customer_name (str): Customer name.
            customer_mobile (str): Customer mobile, used for lookup later.
            initial_services (list[dict], optional): Rows with service_name
                and service_value drawn at sale time.
            assigned_date (datetime, optional): Defaults to now.

        Returns:
            CustomerPackage: The new package.

        Raises:
            PackageOperationNotAllowedError: If assigned_by is not an outlet user.
            TemplateNotFoundError: If the template doesn't exist.
            InvalidPackageDataError: On blank customer data or bad service rows.
            InsufficientBalanceError: If initial services exceed the template's
                service value. Nothing is created.
        """
        if not assigned_by.can_issue():
            raise PackageOperationNotAllowedError(
                "Only outlet users assigned to an outlet can assign packages"
            )

        customer_name = (customer_name or '').strip()
        customer_mobile = (customer_mobile or '').strip()
        if not customer_name or not customer_mobile:
            raise InvalidPackageDataError("Customer name and mobile are required")

        services, total = PackageLedgerService._clean_services(initial_services)
        assigned_date = assigned_date or timezone.now()

        with transaction.atomic():
            try:
                template = PackageTemplate.objects.get(id=template_id)
            except (PackageTemplate.DoesNotExist, ValidationError):
                raise TemplateNotFoundError(f"Package template {template_id} not found")

            if total > template.service_value:
                logger.warning(
                    "Assign refused for %s: initial services %s exceed %s",
                    customer_mobile, total, template.service_value
                )
                raise InsufficientBalanceError(
                    f"Initial services total {total} exceeds package service value "
                    f"{template.service_value}"
                )

            package = CustomerPackage.objects.create(
                customer_name=customer_name,
                customer_mobile=customer_mobile,
                template=template,
                template_name=template.name,
                package_value=template.package_value,
                service_value=template.service_value,
                outlet=assigned_by.outlet,
                assigned_date=assigned_date,
                remaining_service_value=template.service_value - total,
                assigned_by=assigned_by,
            )

            if services:
                PackageLedgerService._write_records(package, services, assigned_date, assigned_by)

        logger.info(
            "Assigned %r to %s at %s (initial services %s, remaining %s)",
            template.name, customer_mobile, assigned_by.outlet.code, total,
            package.remaining_service_value
        )
        return package

    @staticmethod
    def redeem_services(customer_package_id, services, redeemed_by, redeemed_date=None):
        """
        Draw services from a package as one transaction.

        All-or-nothing: either every row is recorded and the balance drops by
        their total, or nothing changes.

        Args:
            customer_package_id (UUID): Package to draw from.
            services (list[dict]): Rows with service_name and service_value.
            redeemed_by (User): Outlet user recording the visit; any outlet.
            redeemed_date (datetime, optional): Defaults to now.

        Returns:
            tuple: (CustomerPackage, list[ServiceRecord]) after the redemption.

        Raises:
            PackageOperationNotAllowedError: If redeemed_by is not an outlet user.
            InvalidPackageDataError: If services is empty or a row is invalid.
            CustomerPackageNotFoundError: If the package doesn't exist.
            InsufficientBalanceError: If the total exceeds the remaining balance.
        """
        if not redeemed_by.can_issue():
            raise PackageOperationNotAllowedError(
                "Only outlet users assigned to an outlet can redeem package services"
            )

        services, total = PackageLedgerService._clean_services(services)
        if not services:
            raise InvalidPackageDataError("At least one service is required")
        redeemed_date = redeemed_date or timezone.now()

        with transaction.atomic():
            try:
                package = CustomerPackage.objects.select_for_update().get(id=customer_package_id)
            except (CustomerPackage.DoesNotExist, ValidationError):
                raise CustomerPackageNotFoundError(f"Customer package {customer_package_id} not found")

            if total > package.remaining_service_value:
                logger.warning(
                    "Redeem refused for package %s: %s requested, %s remaining",
                    package.id, total, package.remaining_service_value
                )
                raise InsufficientBalanceError(
                    f"Services total {total} exceeds remaining balance "
                    f"{package.remaining_service_value}"
                )

            package.remaining_service_value -= total
            package.save(update_fields=['remaining_service_value', 'updated_at'])

            transaction_id, records = PackageLedgerService._write_records(
                package, services, redeemed_date, redeemed_by
            )

        logger.info(
            "Redeemed %s from package %s (bill %s), remaining %s",
            total, package.id, bill_number(transaction_id), package.remaining_service_value
        )
        return package, records

    @staticmethod
    def get_customer_package(customer_package_id):
        """
        Raises:
            CustomerPackageNotFoundError: If the package doesn't exist.
        """
        try:
            return (
                CustomerPackage.objects
                .select_related('outlet', 'template', 'assigned_by')
                .get(id=customer_package_id)
            )
        except (CustomerPackage.DoesNotExist, ValidationError):
            raise CustomerPackageNotFoundError(f"Customer package {customer_package_id} not found")

    @staticmethod
    def get_package_history(customer_package_id):
        """
        Service records of a package grouped by transaction, newest first.

        Returns:
            list[dict]: Each with transaction_id, bill_no, redeemed_date,
            total and services (list[ServiceRecord]).

        Raises:
            CustomerPackageNotFoundError: If the package doesn't exist.
        """
        try:
            exists = CustomerPackage.objects.filter(id=customer_package_id).exists()
        except ValidationError:
            exists = False
        if not exists:
            raise CustomerPackageNotFoundError(f"Customer package {customer_package_id} not found")

        groups = {}
        records = (
            ServiceRecord.objects
            .filter(customer_package_id=customer_package_id)
            .order_by('-redeemed_date', '-created_at', 'service_name')
        )
        for record in records:
            entry = groups.get(record.transaction_id)
            if entry is None:
                entry = groups[record.transaction_id] = {
                    'transaction_id': record.transaction_id,
                    'bill_no': record.bill_no,
                    'redeemed_date': record.redeemed_date,
                    'total': Decimal('0.00'),
                    'services': [],
                }
            entry['services'].append(record)
            entry['total'] += record.service_value

        return list(groups.values())

    @staticmethod
    def get_transaction_records(customer_package_id, transaction_id):
        """
        Records redeemed together in one transaction of a package.

        Raises:
            TransactionNotFoundError: If the package has no such transaction.
        """
        try:
            records = list(
                ServiceRecord.objects
                .filter(customer_package_id=customer_package_id, transaction_id=transaction_id)
                .order_by('created_at', 'service_name')
            )
        except ValidationError:
            records = []
        if not records:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found for this package")
        return records

    @staticmethod
    def find_packages_by_mobile(mobile):
        """Packages of a customer mobile across every outlet."""
        mobile = (mobile or '').strip()
        if not mobile:
            return CustomerPackage.objects.none()
        return (
            CustomerPackage.objects
            .filter(customer_mobile=mobile)
            .select_related('outlet', 'template')
        )

    @staticmethod
    def filter_packages(user, outlet_id=None, search=None, active_only=False):
        """
        Packages visible to user.

        Admins see every outlet and may pick one; outlet users see their own.
        """
        queryset = CustomerPackage.objects.select_related('outlet', 'template', 'assigned_by')

        if user.role == UserRole.ADMIN:
            if outlet_id:
                queryset = queryset.filter(outlet_id=outlet_id)
        elif user.outlet_id:
            queryset = queryset.filter(outlet_id=user.outlet_id)
        else:
            return queryset.none()

        if search:
            search = search.strip()
            queryset = queryset.filter(
                Q(customer_name__icontains=search) | Q(customer_mobile__icontains=search)
            )
        if active_only:
            queryset = queryset.filter(remaining_service_value__gt=0)

        return queryset
