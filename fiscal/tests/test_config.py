"""FDMS configuration upsert, toggle and device provisioning."""

import json

from django.test import Client, TestCase

from fiscal.models import FiscalConfiguration, FiscalDevice
from fiscal.services.config_service import build_device_identifiers, set_fdms_enabled, upsert_configuration

CONFIG_URL = "/api/v2/fdms/config"


def _config_body(**overrides):
    body = {
        "taxpayerTIN": "1234567890",
        "businessName": "Acme",
        "businessType": "retail",
        "branchName": "Main",
        "branchAddress": "1 Rd",
    }
    body.update(overrides)
    return body


class ConfigApiTests(TestCase):
    def setUp(self):
        self.client = Client()

    def _post(self, body):
        return self.client.post(CONFIG_URL, data=json.dumps(body), content_type="application/json")

    def test_get_without_configuration(self):
        resp = self.client.get(CONFIG_URL)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertFalse(data["success"])
        self.assertIsNone(data["data"])
        self.assertEqual(data["message"], "No ZIMRA configuration found")

    def test_create_enabled_configuration_provisions_one_device(self):
        resp = self._post(_config_body(isFDMSEnabled=True))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["message"], "Configuration created successfully")

        config = FiscalConfiguration.objects.get(taxpayer_tin="1234567890")
        self.assertEqual(config.status, "pending")
        self.assertTrue(config.test_environment)
        devices = FiscalDevice.objects.filter(configuration=config)
        self.assertEqual(devices.count(), 1)
        device = devices.get()
        self.assertEqual(device.status, "Pending")
        self.assertEqual(device.operating_mode, "Online")
        self.assertEqual(device.daily_receipt_counter, 0)
        self.assertEqual(device.global_receipt_counter, 0)
        self.assertTrue(device.device_id.startswith("VFD_1234567890_"))
        self.assertTrue(device.device_serial_no.startswith("SN567890"))

    def test_second_post_updates_by_tin(self):
        self._post(_config_body())
        resp = self._post(_config_body(businessName="Acme Holdings"))
        self.assertEqual(resp.json()["message"], "Configuration updated successfully")
        self.assertEqual(FiscalConfiguration.objects.count(), 1)
        self.assertEqual(FiscalConfiguration.objects.get().business_name, "Acme Holdings")

    def test_invalid_tin_rejected_before_write(self):
        for tin in ("123456789", "12345678901", "12345abcde", "１２３４５６７８９０"):
            resp = self._post(_config_body(taxpayerTIN=tin, isFDMSEnabled=True))
            self.assertEqual(resp.status_code, 400, tin)
            self.assertEqual(resp.json()["error"], "TIN must be exactly 10 digits")
        self.assertEqual(FiscalConfiguration.objects.count(), 0)
        self.assertEqual(FiscalDevice.objects.count(), 0)

    def test_missing_fields(self):
        resp = self._post(_config_body(branchAddress=""))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json()["error"],
            "Missing required fields: taxpayerTIN, businessName, businessType, branchName, branchAddress",
        )
        self.assertFalse(FiscalConfiguration.objects.exists())

    def test_invalid_json(self):
        resp = self.client.post(CONFIG_URL, data="{not json", content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid JSON")

    def test_patch_without_configuration(self):
        resp = self.client.patch(CONFIG_URL, data=json.dumps({"isFDMSEnabled": True}), content_type="application/json")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "No ZIMRA configuration found. Please create configuration first.")

    def test_patch_enable_creates_active_device(self):
        self._post(_config_body())
        self.assertFalse(FiscalDevice.objects.exists())
        resp = self.client.patch(CONFIG_URL, data=json.dumps({"isFDMSEnabled": True}), content_type="application/json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["message"], "FDMS mode enabled successfully")
        self.assertTrue(data["data"]["hasActiveFiscalDevice"])
        self.assertEqual(data["data"]["fiscalDevice"]["globalReceiptCounter"], "0")
        self.assertEqual(FiscalDevice.objects.get().status, "Active")

    def test_patch_disable(self):
        self._post(_config_body(isFDMSEnabled=True))
        resp = self.client.patch(CONFIG_URL, data=json.dumps({"isFDMSEnabled": False}), content_type="application/json")
        self.assertEqual(resp.json()["message"], "FDMS mode disabled successfully")
        self.assertFalse(FiscalConfiguration.objects.get().is_fdms_enabled)

    def test_method_not_allowed(self):
        resp = self.client.delete(CONFIG_URL)
        self.assertEqual(resp.status_code, 405)


class DeviceProvisioningTests(TestCase):
    def test_enabling_twice_yields_one_device(self):
        config, _ = upsert_configuration({
            "taxpayer_tin": "1234567890",
            "business_name": "Acme",
            "business_type": "retail",
            "branch_name": "Main",
            "branch_address": "1 Rd",
            "is_fdms_enabled": False,
        })
        set_fdms_enabled(config, True)
        set_fdms_enabled(config, False)
        set_fdms_enabled(config, True)
        self.assertEqual(FiscalDevice.objects.filter(configuration=config).count(), 1)

    def test_upsert_enabled_twice_keeps_one_device(self):
        values = {
            "taxpayer_tin": "1234567890",
            "business_name": "Acme",
            "business_type": "retail",
            "branch_name": "Main",
            "branch_address": "1 Rd",
            "is_fdms_enabled": True,
        }
        upsert_configuration(values)
        upsert_configuration(values)
        self.assertEqual(FiscalDevice.objects.count(), 1)

    def test_device_identifiers(self):
        device_id, serial = build_device_identifiers("1234567890", timestamp_ms=1700000001234)
        self.assertEqual(device_id, "VFD_1234567890_1700000001234")
        self.assertEqual(serial, "SN5678901234")
