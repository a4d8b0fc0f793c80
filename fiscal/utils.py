"""Utility functions for fiscal app."""

import time
from decimal import ROUND_HALF_UP, Decimal

SENSITIVE_KEYS = frozenset({
    "password", "token", "access", "refresh",
    "authorization", "activationkey", "apikey",
})
SIGNATURE_KEYS = frozenset({"signature"})
SIGNATURE_OBJECT_KEYS = frozenset({"receiptdevicesignature", "receiptserversignature"})


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def to_cents(value) -> int:
    """Convert monetary value to integer cents."""
    return int(
        (Decimal(str(value)).quantize(Decimal("0.01"), ROUND_HALF_UP) * 100)
        .to_integral_value()
    )


def mask_sensitive_fields(payload):
    """Mask credentials and signatures before saving to FDMSApiLog."""
    return mask_sensitive_data(payload, mask_signatures=True)


def mask_sensitive_data(obj, mask_signatures: bool = True):
    """
    Recursively mask sensitive fields in a JSON-serializable object.

    Keys are compared case-insensitively with '_' and '-' stripped, so
    ``api_key``, ``apiKey`` and ``API-KEY`` are all masked.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, list):
        return [mask_sensitive_data(i, mask_signatures) for i in obj]
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            k_lower = str(k).lower().replace("_", "").replace("-", "")
            if k_lower in SENSITIVE_KEYS:
                out[k] = "[REDACTED]"
            elif mask_signatures and k_lower in SIGNATURE_KEYS:
                out[k] = "[REDACTED]"
            elif mask_signatures and isinstance(v, dict) and k_lower in SIGNATURE_OBJECT_KEYS:
                out[k] = {sk: "[REDACTED]" for sk in v}
            else:
                out[k] = mask_sensitive_data(v, mask_signatures)
        return out
    return obj
