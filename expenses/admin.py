from django.contrib import admin

from .models import Expense, ExpenseCategory


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "created_at")
    search_fields = ("name",)


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("reference", "category", "amount", "date", "status")
    list_filter = ("status", "category")
    search_fields = ("reference", "description")

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.status == "approved":
            return False
        return super().has_delete_permission(request, obj)
