"""
HTTP client for ZIMRA FDMS with retry logic and strict TLS.
Retries on: 500/502/503, network failures (ConnectionError, Timeout).
"""

import logging
import time

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger("fiscal")

RETRY_STATUS_CODES = (500, 502, 503)
MAX_NETWORK_RETRIES = 2
NETWORK_RETRY_BACKOFF = 2.0


def requests_session_with_retry(
    retries: int = 3,
    backoff_factor: float = 1.0,
    status_forcelist: tuple = RETRY_STATUS_CODES,
) -> requests.Session:
    """Session that retries 5xx responses with exponential backoff."""
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET", "POST"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def fdms_request(
    method: str,
    url: str,
    *,
    json: dict | None = None,
    headers: dict | None = None,
    timeout: int | None = None,
) -> requests.Response:
    """
    Make an FDMS request. 4xx responses are returned as-is, never retried.
    Connection errors and timeouts are retried, then re-raised to the caller.
    """
    session = requests_session_with_retry()
    timeout = timeout or getattr(settings, "FDMS_REQUEST_TIMEOUT", 30)
    for attempt in range(MAX_NETWORK_RETRIES + 1):
        try:
            return session.request(
                method=method,
                url=url,
                json=json,
                headers=headers,
                timeout=timeout,
                verify=True,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            if attempt >= MAX_NETWORK_RETRIES:
                raise
            sleep_secs = NETWORK_RETRY_BACKOFF ** attempt
            logger.warning(
                "FDMS request failed (attempt %d/%d): %s. Retrying in %.1fs.",
                attempt + 1, MAX_NETWORK_RETRIES + 1, e, sleep_secs,
            )
            time.sleep(sleep_secs)
