from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "priority", "read", "created_at")
    list_filter = ("type", "priority", "read")
    search_fields = ("title", "message", "key")
    readonly_fields = ("key", "data", "created_at")
