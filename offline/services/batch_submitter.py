"""
Batch submitter. Resubmit queued fiscal transactions sequentially on recovery.
Replay stops immediately on error. No reordering, no skipping.
"""

import logging

from offline.services.offline_detector import OfflineDetector
from offline.services.queue_manager import QueueManager

logger = logging.getLogger("fiscal")


class BatchSubmitter:
    """Submit pending offline entries in queue order. Stops on first error."""

    @classmethod
    def process_queue(cls, configuration, limit: int | None = None) -> dict:
        """
        Returns {
            "synchronized": int,
            "failed": int,
            "halted_reason": str | None,
            "last_error": str | None,
        }
        Entries are marked synchronized only after ZIMRA confirmed them, so a
        second run over the same rows does nothing.
        """
        from fiscal.services.zimra_client import FiscalError, ZimraClient

        result = {"synchronized": 0, "failed": 0, "halted_reason": None, "last_error": None}
        entries = list(QueueManager.get_pending(configuration=configuration, limit=limit))
        if not entries:
            return result

        client = ZimraClient.for_configuration(configuration)
        if client is None:
            result["halted_reason"] = "No fiscal device provisioned"
            return result

        for entry in entries:
            txn = entry.transaction
            if txn is None:
                QueueManager.record_failure(entry, "Queue entry has no fiscal transaction")
                result["failed"] += 1
                result["last_error"] = "Queue entry has no fiscal transaction"
                result["halted_reason"] = "Manual review required"
                break
            try:
                client.resubmit(txn)
            except FiscalError as e:
                err = str(e)
                QueueManager.record_failure(entry, err)
                result["failed"] += 1
                result["last_error"] = err
                result["halted_reason"] = (
                    "Still offline - retry later"
                    if OfflineDetector.is_offline_error(err)
                    else "Submission rejected - manual review required"
                )
                logger.warning("Offline sync halted at invoice %s: %s", entry.invoice_no, err)
                break
            QueueManager.mark_synchronized(entry)
            result["synchronized"] += 1

        logger.info(
            "Offline sync: %d synchronized, %d failed", result["synchronized"], result["failed"],
            extra={"action": "sync_offline_queue"},
        )
        return result
