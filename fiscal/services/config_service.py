"""
FDMS configuration upsert, enable/disable toggle and virtual device provisioning.
At most one device is provisioned per configuration; the config row is locked
while provisioning so concurrent enables cannot create a second device.
"""

import logging

from django.db import transaction

from fiscal.models import FiscalConfiguration, FiscalDevice
from fiscal.utils import now_ms

logger = logging.getLogger("fiscal")


def get_current_configuration() -> FiscalConfiguration | None:
    """The deployment's configuration (first created)."""
    return FiscalConfiguration.objects.order_by("created_at", "pk").first()


def build_device_identifiers(taxpayer_tin: str, timestamp_ms: int | None = None) -> tuple[str, str]:
    """(device_id, serial) as VFD_<TIN>_<ms> and SN<last 6 of TIN><last 4 of ms>."""
    ms = str(timestamp_ms if timestamp_ms is not None else now_ms())
    return f"VFD_{taxpayer_tin}_{ms}", f"SN{taxpayer_tin[-6:]}{ms[-4:]}"


def ensure_device(configuration: FiscalConfiguration, status: str = "Pending") -> tuple[FiscalDevice, bool]:
    """
    Return (device, created). Creates a device with zeroed counters only when the
    configuration has none. Caller must hold a row lock on the configuration.
    """
    existing = configuration.devices.order_by("created_at").first()
    if existing:
        return existing, False
    device_id, serial = build_device_identifiers(configuration.taxpayer_tin)
    device = FiscalDevice.objects.create(
        configuration=configuration,
        device_id=device_id,
        device_serial_no=serial,
        branch_name=configuration.branch_name,
        branch_address=configuration.branch_address,
        operating_mode="Online",
        status=status,
        global_receipt_counter=0,
        daily_receipt_counter=0,
    )
    logger.info("Created fiscal device %s (status=%s)", device_id, status, extra={"device_id": device_id})
    return device, True


def upsert_configuration(values: dict) -> tuple[FiscalConfiguration, bool]:
    """
    Create or update the configuration keyed by taxpayer TIN.
    `values` is the output of validate_config_payload. Returns (config, created).
    New configurations start in status 'pending'; a device is provisioned
    (status Pending) when FDMS is enabled and none exists.
    """
    tin = values["taxpayer_tin"]
    with transaction.atomic():
        config = FiscalConfiguration.objects.select_for_update().filter(taxpayer_tin=tin).first()
        created = config is None
        if created:
            config = FiscalConfiguration(taxpayer_tin=tin, status="pending")
        for field, value in values.items():
            if field != "taxpayer_tin":
                setattr(config, field, value)
        config.save()
        if config.is_fdms_enabled:
            ensure_device(config, status="Pending")
    logger.info(
        "FDMS configuration %s for TIN %s (enabled=%s)",
        "created" if created else "updated", tin, config.is_fdms_enabled,
    )
    return config, created


def set_fdms_enabled(configuration: FiscalConfiguration, enabled: bool) -> FiscalConfiguration:
    """
    Toggle FDMS mode. Enabling with no device provisions one that is
    immediately Active, unlike the creation path.
    """
    with transaction.atomic():
        config = FiscalConfiguration.objects.select_for_update().get(pk=configuration.pk)
        config.is_fdms_enabled = enabled
        config.save(update_fields=["is_fdms_enabled", "updated_at"])
        if enabled:
            ensure_device(config, status="Active")
    logger.info("FDMS mode %s for TIN %s", "enabled" if enabled else "disabled", config.taxpayer_tin)
    return config


def serialize_device(device: FiscalDevice | None) -> dict | None:
    if device is None:
        return None
    return {
        "deviceId": device.device_id,
        "deviceSerialNo": device.device_serial_no,
        "status": device.status,
        "operatingMode": device.operating_mode,
        "globalReceiptCounter": str(device.global_receipt_counter),
        "dailyReceiptCounter": device.daily_receipt_counter,
        "fiscalDayOpened": device.fiscal_day_opened.isoformat() if device.fiscal_day_opened else None,
    }


def serialize_configuration(config: FiscalConfiguration, include_device: bool = True) -> dict:
    data = {
        "id": config.pk,
        "taxpayerTIN": config.taxpayer_tin,
        "vatRegistrationNo": config.vat_registration_no,
        "businessName": config.business_name,
        "businessType": config.business_type,
        "branchName": config.branch_name,
        "branchAddress": config.branch_address,
        "status": config.status,
        "isFDMSEnabled": config.is_fdms_enabled,
        "testEnvironment": config.test_environment,
        "createdAt": config.created_at.isoformat() if config.created_at else None,
        "updatedAt": config.updated_at.isoformat() if config.updated_at else None,
    }
    if include_device:
        device = config.active_device
        data["hasActiveFiscalDevice"] = device is not None
        data["fiscalDevice"] = serialize_device(device)
    return data
