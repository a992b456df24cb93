from django.contrib import admin
from apps.outlets.models import Outlet


@admin.register(Outlet)
class OutletAdmin(admin.ModelAdmin):
    """Admin interface for Outlets."""

    list_display = ['name', 'code', 'location', 'staff_count', 'phone', 'created_at']
    search_fields = ['name', 'code', 'location', 'gstin']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['name']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'code', 'location')
        }),
        ('Billing Details', {
            'fields': ('address', 'gstin', 'phone')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def staff_count(self, obj):
        """Show number of assigned users."""
        return obj.staff.count()
    staff_count.short_description = 'Staff'
