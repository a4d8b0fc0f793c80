from django.db import models

NOTIFICATION_TYPES = (
    ("low_stock", "Low stock"),
    ("new_sale", "New sale"),
    ("overdue_payment", "Overdue payment"),
    ("system", "System"),
)

PRIORITIES = (
    ("high", "High"),
    ("medium", "Medium"),
    ("info", "Info"),
    ("low", "Low"),
)


class Notification(models.Model):
    """
    In-app notification. `key` identifies notifications derived from state
    (e.g. low-stock-<product id>) so they are raised once rather than on every poll.
    """

    key = models.CharField(max_length=100, unique=True, null=True, blank=True)
    type = models.CharField(max_length=20, choices=NOTIFICATION_TYPES, default="system", db_index=True)
    title = models.CharField(max_length=255)
    message = models.TextField()
    priority = models.CharField(max_length=10, choices=PRIORITIES, default="info")
    read = models.BooleanField(default=False, db_index=True)
    data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title
