import re
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.vouchers.exceptions import (
    VoucherNotFoundError,
    VoucherNotRedeemableError,
    VoucherExpiredError,
    IssuerNotAllowedError,
    InvalidVoucherDataError,
)
from apps.vouchers.models import Voucher, VoucherStatus, VoucherType, generate_voucher_id
from apps.vouchers.services import (
    issue_voucher,
    redeem_voucher,
    expire_overdue_vouchers,
    get_voucher_by_id,
    find_vouchers,
    filter_vouchers,
    build_vouchers_csv,
)


def test_generated_id_format():
    assert re.fullmatch(r'VC-[A-Z0-9]{8}', generate_voucher_id())


@pytest.mark.django_db
class TestIssueVoucher:

    def test_issue_with_defaults(self, voucher_staff, voucher_outlet, settings):
        settings.VOUCHER_DEFAULT_VALIDITY_DAYS = 30
        settings.VOUCHER_DEFAULT_DISCOUNT_PERCENTAGE = 10

        before = timezone.now()
        voucher = issue_voucher(
            issued_by=voucher_staff,
            recipient_name=' Lakshmi ',
            recipient_mobile='9840012345',
            bill_no='B-77',
        )

        assert re.fullmatch(r'VC-[A-Z0-9]{8}', voucher.id)
        assert voucher.status == VoucherStatus.ISSUED
        assert voucher.outlet == voucher_outlet
        assert voucher.recipient_name == 'Lakshmi'
        assert voucher.discount_percentage == 10
        assert voucher.voucher_type == VoucherType.PARTNER
        assert voucher.issued_by == voucher_staff
        delta = voucher.expiry_date - voucher.issue_date
        assert delta == timedelta(days=30)
        assert voucher.issue_date >= before

    def test_issue_with_explicit_expiry(self, voucher_staff):
        expiry = timezone.now() + timedelta(days=3)
        voucher = issue_voucher(
            issued_by=voucher_staff,
            recipient_name='Arun',
            recipient_mobile='9840000000',
            bill_no='B-78',
            voucher_type=VoucherType.FAMILY_AND_FRIENDS,
            discount_percentage=25,
            expiry_date=expiry,
        )

        assert voucher.expiry_date == expiry
        assert voucher.discount_percentage == 25

    def test_past_expiry_rejected(self, voucher_staff):
        with pytest.raises(InvalidVoucherDataError):
            issue_voucher(
                issued_by=voucher_staff,
                recipient_name='Arun',
                recipient_mobile='9840000000',
                bill_no='B-79',
                expiry_date=timezone.now() - timedelta(minutes=1),
            )

    def test_discount_out_of_range(self, voucher_staff):
        with pytest.raises(InvalidVoucherDataError):
            issue_voucher(
                issued_by=voucher_staff,
                recipient_name='Arun',
                recipient_mobile='9840000000',
                bill_no='B-80',
                discount_percentage=0,
            )

    def test_blank_bill_rejected(self, voucher_staff):
        with pytest.raises(InvalidVoucherDataError):
            issue_voucher(
                issued_by=voucher_staff,
                recipient_name='Arun',
                recipient_mobile='9840000000',
                bill_no='  ',
            )

    def test_admin_cannot_issue(self, voucher_admin):
        with pytest.raises(IssuerNotAllowedError):
            issue_voucher(
                issued_by=voucher_admin,
                recipient_name='Arun',
                recipient_mobile='9840000000',
                bill_no='B-81',
            )
        assert Voucher.objects.count() == 0

    def test_user_without_outlet_cannot_issue(self, db):
        loose = User.objects.create_user(username='loose', password='x', role=UserRole.USER)
        with pytest.raises(IssuerNotAllowedError):
            issue_voucher(
                issued_by=loose,
                recipient_name='Arun',
                recipient_mobile='9840000000',
                bill_no='B-82',
            )

    def test_id_collision_is_retried(self, voucher_staff, issued_voucher):
        ids = iter([issued_voucher.id, 'VC-FRESH001'])
        with patch('apps.vouchers.services.generate_voucher_id', side_effect=lambda: next(ids)):
            voucher = issue_voucher(
                issued_by=voucher_staff,
                recipient_name='Arun',
                recipient_mobile='9840000000',
                bill_no='B-83',
            )

        assert voucher.id == 'VC-FRESH001'
        assert Voucher.objects.count() == 2


@pytest.mark.django_db
class TestRedeemVoucher:

    def test_redeem_issued(self, issued_voucher, voucher_staff):
        voucher = redeem_voucher(
            voucher_id=issued_voucher.id,
            redemption_bill_no='R-500',
            redeemed_by=voucher_staff,
        )

        assert voucher.status == VoucherStatus.REDEEMED
        assert voucher.redemption_bill_no == 'R-500'
        assert voucher.redeemed_by == voucher_staff
        assert voucher.redeemed_date is not None

    def test_id_is_case_insensitive(self, issued_voucher, voucher_staff):
        voucher = redeem_voucher(
            voucher_id='vc-issued01',
            redemption_bill_no='R-501',
            redeemed_by=voucher_staff,
        )

        assert voucher.status == VoucherStatus.REDEEMED

    def test_second_redeem_fails(self, issued_voucher, voucher_staff):
        redeem_voucher(voucher_id=issued_voucher.id, redemption_bill_no='R-1', redeemed_by=voucher_staff)

        with pytest.raises(VoucherNotRedeemableError):
            redeem_voucher(voucher_id=issued_voucher.id, redemption_bill_no='R-2', redeemed_by=voucher_staff)

        issued_voucher.refresh_from_db()
        assert issued_voucher.redemption_bill_no == 'R-1'

    def test_overdue_voucher_expires_instead(self, overdue_voucher, voucher_staff):
        with pytest.raises(VoucherExpiredError):
            redeem_voucher(voucher_id=overdue_voucher.id, redemption_bill_no='R-3', redeemed_by=voucher_staff)

        overdue_voucher.refresh_from_db()
        assert overdue_voucher.status == VoucherStatus.EXPIRED
        assert overdue_voucher.redeemed_date is None

    def test_expired_voucher_not_redeemable(self, overdue_voucher, voucher_staff):
        expire_overdue_vouchers()

        with pytest.raises(VoucherNotRedeemableError):
            redeem_voucher(voucher_id=overdue_voucher.id, redemption_bill_no='R-4', redeemed_by=voucher_staff)

    def test_blank_bill_rejected(self, issued_voucher, voucher_staff):
        with pytest.raises(InvalidVoucherDataError):
            redeem_voucher(voucher_id=issued_voucher.id, redemption_bill_no=' ', redeemed_by=voucher_staff)

        issued_voucher.refresh_from_db()
        assert issued_voucher.status == VoucherStatus.ISSUED

    def test_unknown_voucher(self, voucher_staff):
        with pytest.raises(VoucherNotFoundError):
            redeem_voucher(voucher_id='VC-NOPE0000', redemption_bill_no='R-5', redeemed_by=voucher_staff)

    def test_cross_outlet_redemption(self, other_outlet_voucher, voucher_staff):
        voucher = redeem_voucher(
            voucher_id=other_outlet_voucher.id,
            redemption_bill_no='R-6',
            redeemed_by=voucher_staff,
        )

        assert voucher.status == VoucherStatus.REDEEMED
        assert voucher.outlet == other_outlet_voucher.outlet


@pytest.mark.django_db
class TestExpirySweep:

    def test_sweep_expires_only_overdue(self, issued_voucher, overdue_voucher):
        count = expire_overdue_vouchers()

        assert count == 1
        overdue_voucher.refresh_from_db()
        issued_voucher.refresh_from_db()
        assert overdue_voucher.status == VoucherStatus.EXPIRED
        assert issued_voucher.status == VoucherStatus.ISSUED

    def test_no_issued_voucher_left_overdue(self, issued_voucher, overdue_voucher):
        now = timezone.now()
        expire_overdue_vouchers(now=now)

        assert not Voucher.objects.filter(
            status=VoucherStatus.ISSUED, expiry_date__lt=now
        ).exists()

    def test_sweep_leaves_redeemed_alone(self, overdue_voucher):
        Voucher.objects.filter(id=overdue_voucher.id).update(status=VoucherStatus.REDEEMED)

        assert expire_overdue_vouchers() == 0
        overdue_voucher.refresh_from_db()
        assert overdue_voucher.status == VoucherStatus.REDEEMED

    def test_sweep_with_future_now(self, issued_voucher):
        assert expire_overdue_vouchers(now=timezone.now() + timedelta(days=31)) == 1


@pytest.mark.django_db
class TestLookup:

    def test_get_by_id(self, issued_voucher):
        assert get_voucher_by_id(voucher_id='vc-issued01') == issued_voucher

    def test_get_missing(self, db):
        with pytest.raises(VoucherNotFoundError):
            get_voucher_by_id(voucher_id='VC-MISSING0')

    def test_get_runs_sweep(self, overdue_voucher):
        voucher = get_voucher_by_id(voucher_id=overdue_voucher.id)

        assert voucher.status == VoucherStatus.EXPIRED
        assert not voucher.is_redeemable

    def test_find_by_mobile(self, issued_voucher, other_outlet_voucher):
        results = list(find_vouchers('9876543210'))

        assert results == [issued_voucher]

    def test_find_by_id_any_outlet(self, other_outlet_voucher):
        assert list(find_vouchers('vc-velach01')) == [other_outlet_voucher]

    def test_find_runs_sweep(self, overdue_voucher):
        results = list(find_vouchers(overdue_voucher.recipient_mobile))

        assert results[0].status == VoucherStatus.EXPIRED

    def test_blank_term(self, issued_voucher):
        assert list(find_vouchers('  ')) == []


@pytest.mark.django_db
class TestFilterVouchers:

    def test_staff_sees_own_outlet(self, voucher_staff, issued_voucher, other_outlet_voucher):
        ids = {v.id for v in filter_vouchers(user=voucher_staff)}

        assert ids == {issued_voucher.id}

    def test_admin_sees_all(self, voucher_admin, issued_voucher, other_outlet_voucher):
        ids = {v.id for v in filter_vouchers(user=voucher_admin)}

        assert ids == {issued_voucher.id, other_outlet_voucher.id}

    def test_admin_outlet_filter(self, voucher_admin, voucher_other_outlet, issued_voucher, other_outlet_voucher):
        ids = {v.id for v in filter_vouchers(user=voucher_admin, outlet_id=voucher_other_outlet.id)}

        assert ids == {other_outlet_voucher.id}

    def test_staff_cannot_escape_outlet(self, voucher_staff, voucher_other_outlet, other_outlet_voucher):
        assert list(filter_vouchers(user=voucher_staff, outlet_id=voucher_other_outlet.id)) == []

    def test_status_filter_after_sweep(self, voucher_staff, issued_voucher, overdue_voucher):
        ids = {v.id for v in filter_vouchers(user=voucher_staff, status=VoucherStatus.EXPIRED)}

        assert ids == {overdue_voucher.id}

    def test_search(self, voucher_admin, issued_voucher, other_outlet_voucher):
        ids = {v.id for v in filter_vouchers(user=voucher_admin, search='meena')}

        assert ids == {other_outlet_voucher.id}


@pytest.mark.django_db
def test_csv_export(issued_voucher):
    content = build_vouchers_csv([issued_voucher])
    lines = content.strip().splitlines()

    assert lines[0].startswith('Voucher ID,Recipient Name')
    assert 'VC-ISSUED01' in lines[1]
    assert 'Anna Nagar' in lines[1]
    assert len(lines) == 2
