from django.conf import settings
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone

from pos.models import STATUS_CHOICES

EXPENSE_STATUSES = (
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
)


class ExpenseCategory(models.Model):
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Expense category"
        verbose_name_plural = "Expense categories"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(Lower("name"), name="expenses_category_name_ci_unique"),
        ]

    def __str__(self):
        return self.name


class Expense(models.Model):
    """Approved expenses count toward the dashboard and profit & loss totals."""

    reference = models.CharField(max_length=50, unique=True)
    category = models.ForeignKey(ExpenseCategory, on_delete=models.PROTECT, related_name="expenses")
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    date = models.DateTimeField(default=timezone.now)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=EXPENSE_STATUSES, default="pending", db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        ordering = ["-date", "-id"]

    def __str__(self):
        return f"{self.reference} ({self.amount})"
