"""
Aggregated FDMS health and the maintenance actions
sync_offline_queue, retry_failed and reset_daily_counter.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from fiscal.models import FiscalConfiguration, FiscalDevice, FiscalTransaction
from fiscal.services.config_service import get_current_configuration, serialize_device
from offline.services.queue_manager import QueueManager

logger = logging.getLogger("fiscal")


class MaintenanceError(Exception):
    """Precondition failure for a maintenance action. Maps to HTTP 400."""


def _failed(facts):
    return facts["failed"] > 0


def _queued(facts):
    return facts["queued"] > 0


# Ordered rule table, first match wins. Queue backlog outranks failures,
# which outrank the enabled/device state.
STATUS_RULES = (
    ("offline", _queued, lambda f: f"{f['queued']} transaction(s) queued for submission"),
    ("warning", _failed, lambda f: f"{f['failed']} failed transaction(s) need attention"),
    ("configured", lambda f: not f["enabled"], lambda f: "FDMS configured but not enabled"),
    ("active", lambda f: f["has_active_device"], lambda f: "FDMS active and ready"),
    ("error", lambda f: True, lambda f: "FDMS enabled but no active fiscal device"),
)


def derive_status(facts: dict) -> tuple[str, str]:
    """
    facts: {enabled, has_active_device, failed, queued}. Returns (status, message).
    Callers handle the not_configured case before calling.
    """
    for status, predicate, message in STATUS_RULES:
        if predicate(facts):
            return status, message(facts)
    raise AssertionError("status rule table has no catch-all")


def get_fdms_status() -> dict:
    config = get_current_configuration()
    if config is None:
        return {
            "configured": False,
            "fdmsEnabled": False,
            "status": "not_configured",
            "message": "ZIMRA FDMS not configured",
        }

    device = config.active_device
    today_start = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
    txns = FiscalTransaction.objects.filter(configuration=config)
    statistics = {
        "totalTransactions": txns.count(),
        "todayTransactions": txns.filter(receipt_date__gte=today_start).count(),
        "pendingTransactions": txns.filter(zimra_status="pending").count(),
        "failedTransactions": txns.filter(zimra_status="failed").count(),
        "offlineQueueSize": QueueManager.queue_size(configuration=config),
    }
    status, message = derive_status({
        "enabled": config.is_fdms_enabled,
        "has_active_device": device is not None,
        "failed": statistics["failedTransactions"],
        "queued": statistics["offlineQueueSize"],
    })
    return {
        "configured": True,
        "fdmsEnabled": config.is_fdms_enabled,
        "status": status,
        "message": message,
        "config": {
            "taxpayerTIN": config.taxpayer_tin,
            "businessName": config.business_name,
            "businessType": config.business_type,
            "testEnvironment": config.test_environment,
            "configStatus": config.status,
        },
        "device": serialize_device(device),
        "statistics": statistics,
    }


def _enabled_configuration() -> FiscalConfiguration:
    config = get_current_configuration()
    if config is None or not config.is_fdms_enabled:
        raise MaintenanceError("FDMS not configured or not enabled")
    return config


def sync_offline_queue() -> dict:
    """Resubmit up to FDMS_SYNC_BATCH_SIZE pending offline entries in order."""
    from offline.services.batch_submitter import BatchSubmitter

    config = _enabled_configuration()
    limit = getattr(settings, "FDMS_SYNC_BATCH_SIZE", 10)
    result = BatchSubmitter.process_queue(config, limit=limit)
    synced = result["synchronized"]
    if synced == 0 and result["halted_reason"] is None:
        message = "No transactions in offline queue"
    else:
        message = f"Synchronized {synced} transactions from offline queue"
    return {"message": message, "synchronized": synced, "haltedReason": result["halted_reason"], "lastError": result["last_error"]}


def retry_failed() -> dict:
    """
    Reset up to FDMS_RETRY_BATCH_SIZE failed transactions below the retry cap
    to pending. The process_pending_transactions task resubmits them.
    """
    config = _enabled_configuration()
    limit = getattr(settings, "FDMS_RETRY_BATCH_SIZE", 5)
    max_retries = getattr(settings, "FDMS_MAX_RETRIES", 3)
    with transaction.atomic():
        ids = list(
            FiscalTransaction.objects.select_for_update()
            .filter(configuration=config, zimra_status="failed", retry_count__lt=max_retries)
            .order_by("receipt_date", "pk")
            .values_list("pk", flat=True)[:limit]
        )
        if ids:
            FiscalTransaction.objects.filter(pk__in=ids).update(
                zimra_status="pending",
                retry_count=F("retry_count") + 1,
                error_message=None,
                updated_at=timezone.now(),
            )
    if not ids:
        return {"message": "No failed transactions to retry", "retried": 0, "transactionIds": []}
    logger.info("Queued %d failed transactions for retry", len(ids), extra={"action": "retry_failed"})
    return {"message": f"Queued {len(ids)} failed transactions for retry", "retried": len(ids), "transactionIds": ids}


def reset_daily_counter() -> dict:
    config = get_current_configuration()
    if config is None:
        raise MaintenanceError("FDMS not configured")
    updated = reset_daily_counters_for(config)
    return {"message": "Daily receipt counter reset successfully", "devices": updated}


def reset_daily_counters_for(config: FiscalConfiguration) -> int:
    """Zero the daily counter on every device of the configuration. Global counters are untouched."""
    updated = FiscalDevice.objects.filter(configuration=config).update(
        daily_receipt_counter=0,
        fiscal_day_opened=None,
        updated_at=timezone.now(),
    )
    logger.info("Reset daily receipt counter on %d device(s) for TIN %s", updated, config.taxpayer_tin)
    return updated


MAINTENANCE_ACTIONS = {
    "sync_offline_queue": sync_offline_queue,
    "retry_failed": retry_failed,
    "reset_daily_counter": reset_daily_counter,
}


def run_action(action: str) -> dict:
    return MAINTENANCE_ACTIONS[action]()
