from django.contrib import admin
from apps.packages.models import PackageTemplate, CustomerPackage, ServiceRecord


@admin.register(PackageTemplate)
class PackageTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'package_value', 'service_value', 'created_at']
    search_fields = ['name']
    readonly_fields = ['id', 'created_at']
    ordering = ['package_value']

    def has_change_permission(self, request, obj=None):
        return False


class ServiceRecordInline(admin.TabularInline):
    """Read-only ledger rows of a package."""

    model = ServiceRecord
    extra = 0
    fields = ['service_name', 'service_value', 'redeemed_date', 'bill_no', 'recorded_by']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CustomerPackage)
class CustomerPackageAdmin(admin.ModelAdmin):
    """Admin interface for customer packages. Balances move only through services."""

    list_display = [
        'customer_name',
        'customer_mobile',
        'template_name',
        'outlet',
        'service_value',
        'remaining_service_value',
        'assigned_date',
    ]
    list_filter = ['outlet', 'assigned_date']
    search_fields = ['customer_name', 'customer_mobile', 'template_name']
    readonly_fields = [
        'id',
        'template',
        'template_name',
        'package_value',
        'service_value',
        'remaining_service_value',
        'outlet',
        'assigned_date',
        'assigned_by',
        'created_at',
        'updated_at',
    ]
    date_hierarchy = 'assigned_date'
    inlines = [ServiceRecordInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('outlet', 'template', 'assigned_by')
