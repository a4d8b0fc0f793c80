"""Offline mode models."""

from django.db import models

QUEUE_STATUSES = (
    ("pending", "Pending"),
    ("synchronized", "Synchronized"),
)


class OfflineQueueEntry(models.Model):
    """Fiscal submission held while ZIMRA is unreachable. Consumed in batches."""

    configuration = models.ForeignKey(
        "fiscal.FiscalConfiguration",
        on_delete=models.CASCADE,
        related_name="offline_queue",
    )
    transaction = models.ForeignKey(
        "fiscal.FiscalTransaction",
        on_delete=models.CASCADE,
        related_name="offline_queue_entries",
        null=True,
        blank=True,
    )
    invoice_no = models.CharField(max_length=100, db_index=True)
    payload = models.JSONField(default=dict)
    status = models.CharField(max_length=20, choices=QUEUE_STATUSES, default="pending", db_index=True)
    failure_reason = models.TextField(blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Offline Queue Entry"
        verbose_name_plural = "Offline Queue"
        ordering = ["created_at", "pk"]

    def __str__(self):
        return f"{self.invoice_no} ({self.status})"
