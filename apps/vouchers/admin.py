from django.contrib import admin
from django.utils.html import format_html
from apps.vouchers.models import Voucher, VoucherStatus
from apps.vouchers.services import expire_overdue_vouchers


STATUS_COLOURS = {
    VoucherStatus.ISSUED: '#A47449',
    VoucherStatus.REDEEMED: '#6B8E5E',
    VoucherStatus.EXPIRED: '#B85C5C',
}


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    """Read-only admin for Vouchers. Vouchers change state only through services."""

    list_display = [
        'id',
        'recipient_name',
        'recipient_mobile',
        'outlet',
        'voucher_type',
        'discount_percentage',
        'status_badge',
        'issue_date',
        'expiry_date',
    ]
    list_filter = ['status', 'voucher_type', 'outlet', 'issue_date']
    search_fields = ['id', 'recipient_name', 'recipient_mobile', 'bill_no', 'redemption_bill_no']
    readonly_fields = [
        'id',
        'recipient_name',
        'recipient_mobile',
        'outlet',
        'voucher_type',
        'discount_percentage',
        'bill_no',
        'issue_date',
        'expiry_date',
        'status',
        'redeemed_date',
        'redemption_bill_no',
        'issued_by',
        'redeemed_by',
        'updated_at',
    ]
    date_hierarchy = 'issue_date'
    ordering = ['-issue_date']

    fieldsets = (
        ('Recipient', {
            'fields': ('id', 'recipient_name', 'recipient_mobile')
        }),
        ('Voucher', {
            'fields': ('outlet', 'voucher_type', 'discount_percentage', 'bill_no', 'issued_by')
        }),
        ('Lifecycle', {
            'fields': ('issue_date', 'expiry_date', 'status', 'redeemed_date', 'redemption_bill_no', 'redeemed_by')
        }),
        ('Metadata', {
            'fields': ('updated_at',),
            'classes': ('collapse',)
        }),
    )

    actions = ['run_expiry_sweep']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def status_badge(self, obj):
        """Display status as colored badge."""
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLOURS.get(obj.status, '#ccc'),
            obj.status,
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    @admin.action(description='Expire all overdue vouchers now')
    def run_expiry_sweep(self, request, queryset):
        count = expire_overdue_vouchers()
        self.message_user(request, f'Expired {count} overdue voucher(s).')

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('outlet', 'issued_by', 'redeemed_by')
