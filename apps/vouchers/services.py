"""
Voucher Services Module
=======================

Business rules for the voucher lifecycle::

    Issued ──redeem──▶ Redeemed
       │
       └──expiry sweep──▶ Expired

Redeemed and Expired are terminal. Every transition runs in a database
transaction; redemption takes a row lock so two counters cannot redeem
the same voucher.
"""

import csv
import logging
from datetime import datetime, timedelta
from io import StringIO
from typing import Optional

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Q
from django.utils import timezone

from apps.accounts.models import User, UserRole

from .exceptions import (
    VoucherNotFoundError,
    VoucherNotRedeemableError,
    VoucherExpiredError,
    IssuerNotAllowedError,
    InvalidVoucherDataError,
)
from .models import Voucher, VoucherStatus, VoucherType, generate_voucher_id

logger = logging.getLogger(__name__)


def _normalize_id(voucher_id: str) -> str:
    return (voucher_id or '').strip().upper()


def issue_voucher(
    *,
    issued_by: User,
    recipient_name: str,
    recipient_mobile: str,
    bill_no: str,
    voucher_type: str = VoucherType.PARTNER,
    discount_percentage: Optional[int] = None,
    validity_days: Optional[int] = None,
    expiry_date: Optional[datetime] = None,
    max_retries: int = 5
) -> Voucher:
    """
    Issue a new voucher at the issuer's outlet.

    Args:
        issued_by: Outlet user issuing the voucher
        recipient_name: Partner or customer name printed on the voucher
        recipient_mobile: Contact number, also used for lookup at redemption
        bill_no: Bill the voucher was issued against
        voucher_type: Partner or Family & Friends
        discount_percentage: 1..100, defaults to VOUCHER_DEFAULT_DISCOUNT_PERCENTAGE
        validity_days: Days from now until expiry, defaults to VOUCHER_DEFAULT_VALIDITY_DAYS
        expiry_date: Explicit expiry; wins over validity_days and must be in the future
        max_retries: Attempts at generating an unused voucher id

    Returns:
        Created Voucher in Issued state

    Raises:
        IssuerNotAllowedError: If issued_by is an admin or has no outlet
        InvalidVoucherDataError: On blank fields, bad discount or past expiry
    """
    if not issued_by.can_issue():
        logger.warning("Voucher issue refused for %s", issued_by.username)
        raise IssuerNotAllowedError(
            "Only outlet users assigned to an outlet can issue vouchers"
        )

    recipient_name = (recipient_name or '').strip()
    recipient_mobile = (recipient_mobile or '').strip()
    bill_no = (bill_no or '').strip()
    if not recipient_name or not recipient_mobile:
        raise InvalidVoucherDataError("Recipient name and mobile are required")
    if not bill_no:
        raise InvalidVoucherDataError("Bill number is required")

    if discount_percentage is None:
        discount_percentage = settings.VOUCHER_DEFAULT_DISCOUNT_PERCENTAGE
    if not 1 <= discount_percentage <= 100:
        raise InvalidVoucherDataError("Discount percentage must be between 1 and 100")

    now = timezone.now()
    if expiry_date is not None:
        if expiry_date <= now:
            raise InvalidVoucherDataError("Expiry date must be in the future")
    else:
        if validity_days is None:
            validity_days = settings.VOUCHER_DEFAULT_VALIDITY_DAYS
        if validity_days < 1:
            raise InvalidVoucherDataError("Validity must be at least one day")
        expiry_date = now + timedelta(days=validity_days)

    for attempt in range(max_retries):
        try:
            with transaction.atomic():
                voucher = Voucher.objects.create(
                    id=generate_voucher_id(),
                    recipient_name=recipient_name,
                    recipient_mobile=recipient_mobile,
                    outlet=issued_by.outlet,
                    voucher_type=voucher_type,
                    discount_percentage=discount_percentage,
                    bill_no=bill_no,
                    issue_date=now,
                    expiry_date=expiry_date,
                    status=VoucherStatus.ISSUED,
                    issued_by=issued_by,
                )
        except IntegrityError:
            # Voucher id collision
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique voucher id after {max_retries} attempts"
                )
            continue

        logger.info(
            "Issued voucher %s (%s%%) at outlet %s by %s",
            voucher.id, discount_percentage, issued_by.outlet.code, issued_by.username
        )
        return voucher

    raise RuntimeError("Unexpected error in voucher issue")


def redeem_voucher(*, voucher_id: str, redemption_bill_no: str, redeemed_by: User) -> Voucher:
    """
    Redeem an Issued voucher against a bill.

    The id match is case-insensitive. Staff of any outlet may redeem.
    An Issued voucher found past its expiry is flipped to Expired and the
    redemption is refused.

    Raises:
        InvalidVoucherDataError: If the redemption bill number is blank
        VoucherNotFoundError: If no voucher has this id
        VoucherNotRedeemableError: If the voucher is Redeemed or Expired
        VoucherExpiredError: If the voucher is Issued but overdue
    """
    redemption_bill_no = (redemption_bill_no or '').strip()
    if not redemption_bill_no:
        raise InvalidVoucherDataError("Redemption bill number is required")

    voucher_id = _normalize_id(voucher_id)
    expired = False

    with transaction.atomic():
        try:
            voucher = Voucher.objects.select_for_update().get(id=voucher_id)
        except Voucher.DoesNotExist:
            raise VoucherNotFoundError(f"Voucher {voucher_id} not found")

        if voucher.status != VoucherStatus.ISSUED:
            logger.warning(
                "Redeem refused for %s: status is %s", voucher.id, voucher.status
            )
            raise VoucherNotRedeemableError(
                f"Voucher {voucher.id} is already {voucher.status.lower()}"
            )

        now = timezone.now()
        if voucher.is_overdue(now):
            voucher.status = VoucherStatus.EXPIRED
            voucher.save(update_fields=['status', 'updated_at'])
            expired = True
        else:
            voucher.status = VoucherStatus.REDEEMED
            voucher.redeemed_date = now
            voucher.redemption_bill_no = redemption_bill_no
            voucher.redeemed_by = redeemed_by
            voucher.save(update_fields=[
                'status', 'redeemed_date', 'redemption_bill_no', 'redeemed_by', 'updated_at'
            ])

    if expired:
        logger.warning("Redeem refused for %s: expired on %s", voucher.id, voucher.expiry_date)
        raise VoucherExpiredError(f"Voucher {voucher.id} has expired")

    logger.info(
        "Redeemed voucher %s against bill %s by %s",
        voucher.id, redemption_bill_no, redeemed_by.username
    )
    return voucher


def expire_overdue_vouchers(now: Optional[datetime] = None) -> int:
    """
    Flip every Issued voucher whose expiry date has passed to Expired.

    Returns:
        Number of vouchers expired
    """
    now = now or timezone.now()
    count = (
        Voucher.objects
        .filter(status=VoucherStatus.ISSUED, expiry_date__lt=now)
        .update(status=VoucherStatus.EXPIRED, updated_at=now)
    )
    if count:
        logger.info("Expiry sweep marked %d voucher(s) as expired", count)
    return count


def get_voucher_by_id(*, voucher_id: str) -> Voucher:
    """
    Get a voucher by id, case-insensitively. Runs the expiry sweep first.

    Raises:
        VoucherNotFoundError: If voucher doesn't exist
    """
    voucher_id = _normalize_id(voucher_id)
    expire_overdue_vouchers()
    try:
        return (
            Voucher.objects
            .select_related('outlet', 'issued_by', 'redeemed_by')
            .get(id=voucher_id)
        )
    except Voucher.DoesNotExist:
        raise VoucherNotFoundError(f"Voucher {voucher_id} not found")


def find_vouchers(term: str):
    """
    Vouchers whose id matches term case-insensitively or whose
    recipient mobile equals term. Runs the expiry sweep first.
    """
    term = (term or '').strip()
    if not term:
        return Voucher.objects.none()

    expire_overdue_vouchers()
    return (
        Voucher.objects
        .filter(Q(id=term.upper()) | Q(recipient_mobile=term))
        .select_related('outlet', 'issued_by', 'redeemed_by')
    )


def filter_vouchers(
    *,
    user: User,
    status: Optional[str] = None,
    voucher_type: Optional[str] = None,
    outlet_id=None,
    search: Optional[str] = None,
    issued_from=None,
    issued_to=None
):
    """
    Vouchers visible to user, narrowed by the optional filters.

    Admins see every outlet and may pick one with outlet_id. Outlet users
    only ever see their own outlet.
    """
    expire_overdue_vouchers()

    queryset = Voucher.objects.select_related('outlet', 'issued_by', 'redeemed_by')

    if user.role == UserRole.ADMIN:
        if outlet_id:
            queryset = queryset.filter(outlet_id=outlet_id)
    elif user.outlet_id:
        queryset = queryset.filter(outlet_id=user.outlet_id)
    else:
        return queryset.none()

    if status:
        queryset = queryset.filter(status=status)
    if voucher_type:
        queryset = queryset.filter(voucher_type=voucher_type)
    if search:
        search = search.strip()
        queryset = queryset.filter(
            Q(id__icontains=search)
            | Q(recipient_name__icontains=search)
            | Q(recipient_mobile__icontains=search)
        )
    if issued_from:
        queryset = queryset.filter(issue_date__date__gte=issued_from)
    if issued_to:
        queryset = queryset.filter(issue_date__date__lte=issued_to)

    return queryset


CSV_HEADERS = [
    'Voucher ID',
    'Recipient Name',
    'Recipient Mobile',
    'Outlet',
    'Type',
    'Discount %',
    'Bill No',
    'Issue Date',
    'Expiry Date',
    'Status',
    'Redeemed Date',
    'Redemption Bill No',
]


def _format_dt(value):
    if value is None:
        return ''
    return timezone.localtime(value).strftime('%Y-%m-%d %H:%M')


def build_vouchers_csv(vouchers) -> str:
    """Render vouchers as CSV text with a header row."""
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for voucher in vouchers:
        writer.writerow([
            voucher.id,
            voucher.recipient_name,
            voucher.recipient_mobile,
            voucher.outlet.name if voucher.outlet else '',
            voucher.voucher_type,
            voucher.discount_percentage,
            voucher.bill_no,
            _format_dt(voucher.issue_date),
            _format_dt(voucher.expiry_date),
            voucher.status,
            _format_dt(voucher.redeemed_date),
            voucher.redemption_bill_no,
        ])
    return buffer.getvalue()
