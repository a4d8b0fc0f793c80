from django.conf import settings
from django.contrib import admin, messages

from .models import FDMSApiLog, FiscalConfiguration, FiscalDevice, FiscalTransaction


class FiscalDeviceInline(admin.TabularInline):
    model = FiscalDevice
    extra = 0
    max_num = 0
    can_delete = False
    fields = ("device_id", "device_serial_no", "status", "operating_mode", "global_receipt_counter", "daily_receipt_counter")
    readonly_fields = fields


@admin.register(FiscalConfiguration)
class FiscalConfigurationAdmin(admin.ModelAdmin):
    list_display = ("taxpayer_tin", "business_name", "branch_name", "status", "is_fdms_enabled", "test_environment", "updated_at")
    list_filter = ("status", "is_fdms_enabled", "test_environment")
    search_fields = ("taxpayer_tin", "business_name")
    inlines = [FiscalDeviceInline]


@admin.action(description="Activate selected devices")
def activate_devices(modeladmin, request, queryset):
    updated = queryset.exclude(status="Active").update(status="Active")
    modeladmin.message_user(request, f"{updated} device(s) activated.", messages.SUCCESS)


@admin.register(FiscalDevice)
class FiscalDeviceAdmin(admin.ModelAdmin):
    list_display = (
        "device_id",
        "configuration",
        "status",
        "operating_mode",
        "global_receipt_counter",
        "daily_receipt_counter",
        "fiscal_day_opened",
        "updated_at",
    )
    list_filter = ("status", "operating_mode")
    search_fields = ("device_id", "device_serial_no")
    # Counters only move through receipt allocation and the daily reset.
    readonly_fields = ("global_receipt_counter", "daily_receipt_counter", "last_receipt_hash", "fiscal_day_opened")
    actions = [activate_devices]


@admin.register(FiscalTransaction)
class FiscalTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "invoice_no",
        "receipt_global_no",
        "receipt_type",
        "receipt_total",
        "currency",
        "zimra_status",
        "retry_count",
        "receipt_date",
    )
    list_filter = ("zimra_status", "receipt_type", "device")
    search_fields = ("invoice_no", "sale_id", "verification_code")
    readonly_fields = (
        "configuration",
        "device",
        "receipt_global_no",
        "receipt_counter",
        "receipt_type",
        "invoice_no",
        "sale_id",
        "receipt_date",
        "receipt_total",
        "tax_amount",
        "currency",
        "buyer_data",
        "items",
        "request_payload",
        "response_payload",
        "receipt_hash",
        "qr_code_url",
        "verification_code",
        "submitted_at",
        "confirmed_at",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FDMSApiLog)
class FDMSApiLogAdmin(admin.ModelAdmin):
    list_display = ("endpoint", "method", "status_code", "created_at")
    list_filter = ("method",)
    search_fields = ("endpoint", "error_message")

    def has_add_permission(self, request):
        return settings.DEBUG

    def has_change_permission(self, request, obj=None):
        return settings.DEBUG

    def has_delete_permission(self, request, obj=None):
        return settings.DEBUG
