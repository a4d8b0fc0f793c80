from django.contrib import admin

from .models import OfflineQueueEntry


@admin.register(OfflineQueueEntry)
class OfflineQueueEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "invoice_no", "configuration", "status", "failure_reason", "created_at", "processed_at")
    list_filter = ("status",)
    search_fields = ("invoice_no",)
    readonly_fields = ("configuration", "transaction", "invoice_no", "payload", "status", "failure_reason", "processed_at", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
