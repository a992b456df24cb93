from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
import uuid

from .exceptions import LedgerImmutableError


def bill_number(transaction_id):
    """Printed bill number: last six characters of the transaction id."""
    return str(transaction_id)[-6:].upper()


class PackageTemplate(models.Model):
    """Prepaid offer such as "Pay 5000 Get 7000". Immutable once created."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    package_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    service_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'package_templates'
        ordering = ['package_value', 'name']

    def __str__(self):
        return self.name


class CustomerPackage(models.Model):
    """
    A template sold to a customer, drawn down over several visits.

    Name and values are copied from the template at assignment so the
    package survives template deletion.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer_name = models.CharField(max_length=200)
    customer_mobile = models.CharField(max_length=20, db_index=True)

    template = models.ForeignKey(
        PackageTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='customer_packages'
    )
    template_name = models.CharField(max_length=200)
    package_value = models.DecimalField(max_digits=10, decimal_places=2)
    service_value = models.DecimalField(max_digits=10, decimal_places=2)

    outlet = models.ForeignKey(
        'outlets.Outlet',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='customer_packages'
    )
    assigned_date = models.DateTimeField(default=timezone.now)
    remaining_service_value = models.DecimalField(max_digits=10, decimal_places=2)
    assigned_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='packages_assigned'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customer_packages'
        indexes = [
            models.Index(fields=['outlet', 'assigned_date'], name='cust_pkg_outlet_assigned_idx'),
        ]
        ordering = ['-assigned_date']

    def __str__(self):
        return f"{self.customer_name} - {self.template_name}"

    @property
    def invoice_number(self):
        return bill_number(self.id)

    @property
    def redeemed_value(self):
        return self.service_value - self.remaining_service_value

    @property
    def is_active(self):
        return self.remaining_service_value > 0


class ServiceRecord(models.Model):
    """
    One service drawn from a customer package.

    Append-only. Records sharing a transaction_id were redeemed together
    and print on one bill.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer_package = models.ForeignKey(
        CustomerPackage,
        on_delete=models.PROTECT,
        related_name='service_records'
    )
    service_name = models.CharField(max_length=200)
    service_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    redeemed_date = models.DateTimeField()
    transaction_id = models.UUIDField(db_index=True)
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='service_records'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'service_records'
        indexes = [
            models.Index(fields=['customer_package', 'transaction_id'], name='svc_rec_package_txn_idx'),
            models.Index(fields=['redeemed_date'], name='svc_rec_redeemed_idx'),
        ]
        ordering = ['-redeemed_date', 'created_at']

    def __str__(self):
        return f"{self.service_name} ({self.service_value})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise LedgerImmutableError("Service records cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise LedgerImmutableError("Service records cannot be deleted")

    @property
    def bill_no(self):
        return bill_number(self.transaction_id)
