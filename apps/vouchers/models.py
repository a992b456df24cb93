from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone
import secrets
import string


VOUCHER_ID_PREFIX = 'VC-'
VOUCHER_ID_ALPHABET = string.ascii_uppercase + string.digits
VOUCHER_ID_LENGTH = 8


class VoucherStatus(models.TextChoices):
    ISSUED = 'Issued', 'Issued'
    REDEEMED = 'Redeemed', 'Redeemed'
    EXPIRED = 'Expired', 'Expired'


class VoucherType(models.TextChoices):
    PARTNER = 'Partner', 'Partner'
    FAMILY_AND_FRIENDS = 'Family & Friends', 'Family & Friends'


def generate_voucher_id():
    """Return a fresh code such as VC-7K2QX9MB."""
    suffix = ''.join(secrets.choice(VOUCHER_ID_ALPHABET) for _ in range(VOUCHER_ID_LENGTH))
    return f"{VOUCHER_ID_PREFIX}{suffix}"


class Voucher(models.Model):
    """Discount voucher issued at an outlet and later redeemed against a bill."""

    id = models.CharField(primary_key=True, max_length=11, editable=False)

    # Recipient
    recipient_name = models.CharField(max_length=200)
    recipient_mobile = models.CharField(max_length=20, db_index=True)

    # Issuing outlet (kept as null when the outlet is deleted)
    outlet = models.ForeignKey(
        'outlets.Outlet',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers'
    )

    voucher_type = models.CharField(
        max_length=20,
        choices=VoucherType.choices,
        default=VoucherType.PARTNER
    )
    discount_percentage = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(100)]
    )
    bill_no = models.CharField(max_length=50)

    # Lifecycle
    issue_date = models.DateTimeField(default=timezone.now)
    expiry_date = models.DateTimeField()
    status = models.CharField(
        max_length=10,
        choices=VoucherStatus.choices,
        default=VoucherStatus.ISSUED
    )
    redeemed_date = models.DateTimeField(null=True, blank=True)
    redemption_bill_no = models.CharField(max_length=50, blank=True)

    issued_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers_issued'
    )
    redeemed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vouchers_redeemed'
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'vouchers'
        indexes = [
            models.Index(fields=['status', 'expiry_date'], name='vouchers_status_expiry_idx'),
            models.Index(fields=['outlet', 'issue_date'], name='vouchers_outlet_issued_idx'),
            models.Index(fields=['redeemed_date'], name='vouchers_redeemed_idx'),
        ]
        ordering = ['-issue_date']

    def __str__(self):
        return f"{self.id} - {self.recipient_name} ({self.status})"

    def is_overdue(self, now=None):
        """Issued and past its expiry date."""
        now = now or timezone.now()
        return self.status == VoucherStatus.ISSUED and self.expiry_date < now

    @property
    def is_redeemable(self):
        return self.status == VoucherStatus.ISSUED and not self.is_overdue()
