"""Offline detection from submission errors."""

import logging

logger = logging.getLogger("fiscal")


class OfflineDetector:
    """Decide whether a failure means ZIMRA is unreachable."""

    OFFLINE_INDICATORS = (
        "connection", "timeout", "timed out", "refused", "econnrefused",
        "unreachable", "network", "resolve", "max retries",
    )

    @classmethod
    def is_offline_error(cls, error) -> bool:
        err_str = str(error or "").lower()
        return any(ind in err_str for ind in cls.OFFLINE_INDICATORS)
