"""
Base FDMS service for ZIMRA Fiscal Data Management System integration.
Provides common headers and environment selection for FDMS API calls.
"""

from django.conf import settings

from fiscal.models import FiscalConfiguration


class FDMSBaseService:
    """Headers and base URL shared by FDMS API clients."""

    def headers(self) -> dict[str, str]:
        return {
            "DeviceModelName": getattr(settings, "FDMS_DEVICE_MODEL_NAME", "POS-VFD"),
            "DeviceModelVersion": getattr(settings, "FDMS_DEVICE_MODEL_VERSION", "1.0"),
            "Content-Type": "application/json",
        }

    def base_url(self, configuration: FiscalConfiguration) -> str:
        """Test or production FDMS endpoint, chosen by the configuration's environment flag."""
        if configuration.test_environment:
            url = getattr(settings, "FDMS_TEST_BASE_URL", "https://fdmsapitest.zimra.co.zw")
        else:
            url = getattr(settings, "FDMS_PROD_BASE_URL", "https://fdmsapi.zimra.co.zw")
        return url.rstrip("/")
