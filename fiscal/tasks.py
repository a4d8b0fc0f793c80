"""
Celery tasks for the FDMS fiscal engine.

Tasks: process_pending_transactions, reset_daily_counters,
reconcile_fiscalized_sales.
"""

import logging
from typing import Any

from celery import shared_task
from django.apps import apps

from fiscal.models import FiscalConfiguration, FiscalTransaction
from fiscal.services.fdms_events import emit_status_updated
from fiscal.services.status_service import reset_daily_counters_for
from fiscal.services.zimra_client import FiscalError, ZimraClient

logger = logging.getLogger("fiscal")


@shared_task(bind=True, name="fiscal.process_pending_transactions")
def process_pending_transactions(self, limit: int = 20) -> dict[str, Any]:
    """
    Resubmit pending transactions (reset by retry_failed, or left pending by a
    crash between allocation and submission). Offline-queued ones are left to
    the offline sync so they keep queue order.
    Returns {"confirmed": N, "failed": N}.
    """
    confirmed = failed = 0
    pending = (
        FiscalTransaction.objects.filter(
            zimra_status="pending",
            configuration__is_fdms_enabled=True,
            receipt_global_no__isnull=False,
        )
        .exclude(offline_queue_entries__status="pending")
        .select_related("configuration", "device")
        .order_by("receipt_date", "pk")[:limit]
    )
    for txn in pending:
        client = ZimraClient.for_configuration(txn.configuration)
        if client is None:
            continue
        try:
            client.resubmit(txn)
            confirmed += 1
        except FiscalError as e:
            failed += 1
            logger.warning("Resubmission of invoice %s failed: %s", txn.invoice_no, e)
    if confirmed or failed:
        emit_status_updated()
    return {"confirmed": confirmed, "failed": failed}


@shared_task(bind=True, name="fiscal.reset_daily_counters")
def reset_daily_counters(self) -> dict[str, Any]:
    """Nightly reset of daily receipt counters for every configuration."""
    devices = 0
    for config in FiscalConfiguration.objects.all():
        devices += reset_daily_counters_for(config)
    return {"devices": devices}


@shared_task(bind=True, name="fiscal.reconcile_fiscalized_sales")
def reconcile_fiscalized_sales(self, limit: int = 200) -> dict[str, Any]:
    """
    Stamp sales whose confirmed fiscal transaction was never written back
    (the best-effort annotation after submission failed).
    """
    from fiscal.services.invoice_service import annotate_sale

    Sale = apps.get_model("pos", "Sale")
    candidates = (
        FiscalTransaction.objects.filter(zimra_status="confirmed", sale_id__isnull=False)
        .exclude(sale_id="")
        .select_related("device")
        .order_by("-confirmed_at")[:limit]
    )
    repaired = 0
    for txn in candidates:
        if not str(txn.sale_id).isdigit():
            continue
        if not Sale.objects.filter(pk=txn.sale_id, is_fiscalized=False).exists():
            continue
        result = ZimraClient.result_for(txn)
        if annotate_sale(txn.sale_id, result["receiptGlobalNo"], result["qrCode"]):
            repaired += 1
    if repaired:
        logger.info("Reconciled %d sale(s) with fiscal data", repaired)
    return {"repaired": repaired}
