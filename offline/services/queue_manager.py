"""Queue manager for offline fiscal submissions."""

import logging

from django.db import transaction
from django.utils import timezone

from offline.models import OfflineQueueEntry

logger = logging.getLogger("fiscal")


class QueueManager:
    """Manage the offline fiscal queue."""

    @staticmethod
    def enqueue(fiscal_transaction, reason: str = "") -> OfflineQueueEntry:
        """Queue a transaction once. Re-queueing an already pending transaction returns its entry."""
        if fiscal_transaction.zimra_status == "confirmed":
            raise ValueError("Cannot enqueue an already confirmed transaction")
        entry, created = OfflineQueueEntry.objects.get_or_create(
            transaction=fiscal_transaction,
            status="pending",
            defaults={
                "configuration_id": fiscal_transaction.configuration_id,
                "invoice_no": fiscal_transaction.invoice_no,
                "payload": fiscal_transaction.request_payload or {},
                "failure_reason": reason,
            },
        )
        if created:
            logger.info(
                "Queued offline invoice %s (global_no=%s)",
                fiscal_transaction.invoice_no, fiscal_transaction.receipt_global_no,
                extra={"invoice_no": fiscal_transaction.invoice_no},
            )
        return entry

    @staticmethod
    def get_pending(configuration=None, limit: int | None = None):
        """Pending entries, oldest first."""
        qs = OfflineQueueEntry.objects.filter(status="pending").select_related("transaction", "transaction__device")
        if configuration is not None:
            qs = qs.filter(configuration=configuration)
        qs = qs.order_by("created_at", "pk")
        return qs[:limit] if limit else qs

    @staticmethod
    def mark_synchronized(entry: OfflineQueueEntry) -> None:
        with transaction.atomic():
            entry.status = "synchronized"
            entry.processed_at = timezone.now()
            entry.failure_reason = ""
            entry.save(update_fields=["status", "processed_at", "failure_reason", "updated_at"])

    @staticmethod
    def record_failure(entry: OfflineQueueEntry, reason: str) -> None:
        """Entry stays pending for the next sync run."""
        entry.failure_reason = reason or ""
        entry.save(update_fields=["failure_reason", "updated_at"])

    @staticmethod
    def queue_size(configuration=None) -> int:
        qs = OfflineQueueEntry.objects.filter(status="pending")
        if configuration is not None:
            qs = qs.filter(configuration=configuration)
        return qs.count()

    @staticmethod
    def resolve_transaction(fiscal_transaction) -> int:
        """Mark every pending entry of a transaction synchronized once ZIMRA confirmed it."""
        return OfflineQueueEntry.objects.filter(transaction=fiscal_transaction, status="pending").update(
            status="synchronized",
            processed_at=timezone.now(),
            failure_reason="",
            updated_at=timezone.now(),
        )
