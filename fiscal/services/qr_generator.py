"""
ZIMRA-compliant QR generation for fiscal receipts.
Format: qrUrl/deviceID(10)receiptDate(ddMMyyyy)receiptGlobalNo(10)receiptQrData(16)
"""

import base64
import hashlib
import logging
from io import BytesIO

import qrcode

logger = logging.getLogger("fiscal")

ZIMRA_QR_URL = "https://invoice.zimra.co.zw"


def receipt_qr_data(receipt_hash: str) -> str:
    """First 16 hex chars of md5 over the receipt hash. Used as verification code."""
    if not receipt_hash:
        return ""
    return hashlib.md5(receipt_hash.upper().encode()).hexdigest().upper()[:16]


def generate_receipt_qr_string(transaction) -> str:
    """Verification URL for a fiscalised transaction, or "" when it has no hash yet."""
    qr_data = receipt_qr_data(transaction.receipt_hash)
    if not qr_data or transaction.device is None:
        return ""
    device_id = str(transaction.device.pk).zfill(10)
    receipt_date = transaction.receipt_date.strftime("%d%m%Y") if transaction.receipt_date else "01011970"
    receipt_global_no = str(transaction.receipt_global_no or 0).zfill(10)
    return f"{ZIMRA_QR_URL}/{device_id}{receipt_date}{receipt_global_no}{qr_data}"


def generate_qr_base64(qr_string: str) -> str:
    """PNG QR image as base64, "" on failure."""
    if not qr_string:
        return ""
    try:
        image = qrcode.make(qr_string)
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return base64.b64encode(buffer.getvalue()).decode()
    except (ValueError, OSError) as e:
        logger.warning("QR image generation failed: %s", e)
        return ""
