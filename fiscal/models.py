from django.core.validators import RegexValidator
from django.db import models

CONFIG_STATUSES = (
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("active", "Active"),
    ("suspended", "Suspended"),
)

DEVICE_STATUSES = (
    ("Pending", "Pending"),
    ("Active", "Active"),
    ("Blocked", "Blocked"),
)

OPERATING_MODES = (
    ("Online", "Online"),
    ("Offline", "Offline"),
)

ZIMRA_STATUSES = (
    ("pending", "Pending"),
    ("submitted", "Submitted"),
    ("confirmed", "Confirmed"),
    ("failed", "Failed"),
)

tin_validator = RegexValidator(r"^[0-9]{10}$", "TIN must be exactly 10 digits")


class FiscalConfiguration(models.Model):
    """ZIMRA fiscal registration for the business. One per taxpayer TIN."""

    taxpayer_tin = models.CharField(max_length=10, unique=True, validators=[tin_validator])
    vat_registration_no = models.CharField(max_length=50, blank=True, null=True)
    business_name = models.CharField(max_length=255)
    business_type = models.CharField(max_length=100)
    branch_name = models.CharField(max_length=255)
    branch_address = models.TextField()
    is_fdms_enabled = models.BooleanField(default=False)
    test_environment = models.BooleanField(default=True)
    status = models.CharField(max_length=20, choices=CONFIG_STATUSES, default="pending")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Fiscal Configuration"
        verbose_name_plural = "Fiscal Configurations"
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.business_name} ({self.taxpayer_tin})"

    @property
    def active_device(self):
        return self.devices.filter(status="Active").first()


class FiscalDevice(models.Model):
    """Virtual fiscal device holding the receipt counters."""

    configuration = models.ForeignKey(
        FiscalConfiguration,
        on_delete=models.CASCADE,
        related_name="devices",
    )
    device_id = models.CharField(max_length=64, unique=True)
    device_serial_no = models.CharField(max_length=32)
    device_model_name = models.CharField(max_length=100, blank=True)
    operating_mode = models.CharField(max_length=20, choices=OPERATING_MODES, default="Online")
    status = models.CharField(max_length=20, choices=DEVICE_STATUSES, default="Pending")
    global_receipt_counter = models.PositiveBigIntegerField(default=0)
    daily_receipt_counter = models.PositiveIntegerField(default=0)
    fiscal_day_opened = models.DateTimeField(null=True, blank=True)
    last_receipt_hash = models.CharField(max_length=128, blank=True)
    branch_name = models.CharField(max_length=255, blank=True)
    branch_address = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Fiscal Device"
        verbose_name_plural = "Fiscal Devices"
        ordering = ["created_at"]

    def __str__(self):
        return f"FiscalDevice {self.device_id}"


class FiscalTransaction(models.Model):
    """One row per fiscal submission attempt. Never deleted."""

    configuration = models.ForeignKey(
        FiscalConfiguration,
        on_delete=models.PROTECT,
        related_name="transactions",
    )
    device = models.ForeignKey(
        FiscalDevice,
        on_delete=models.PROTECT,
        related_name="transactions",
        null=True,
        blank=True,
    )
    receipt_global_no = models.PositiveBigIntegerField(null=True, blank=True, db_index=True)
    receipt_counter = models.PositiveIntegerField(null=True, blank=True)
    receipt_type = models.CharField(max_length=30, default="FiscalInvoice")
    invoice_no = models.CharField(max_length=100, db_index=True)
    sale_id = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    receipt_date = models.DateTimeField(db_index=True)
    receipt_total = models.DecimalField(max_digits=15, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    currency = models.CharField(max_length=3, default="USD")
    buyer_data = models.JSONField(null=True, blank=True)
    items = models.JSONField(default=list)
    request_payload = models.JSONField(null=True, blank=True)
    response_payload = models.JSONField(null=True, blank=True)
    receipt_hash = models.CharField(max_length=128, blank=True)
    qr_code_url = models.CharField(max_length=255, blank=True)
    verification_code = models.CharField(max_length=32, blank=True)
    zimra_status = models.CharField(max_length=20, choices=ZIMRA_STATUSES, default="pending", db_index=True)
    retry_count = models.PositiveIntegerField(default=0)
    error_message = models.TextField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Fiscal Transaction"
        verbose_name_plural = "Fiscal Transactions"
        ordering = ["-receipt_date"]

    def __str__(self):
        return f"{self.invoice_no} #{self.receipt_global_no or '-'} ({self.zimra_status})"


class FDMSApiLog(models.Model):
    """Audit log for FDMS API calls."""

    endpoint = models.CharField(max_length=255)
    method = models.CharField(max_length=10)
    request_payload = models.JSONField(default=dict)
    response_payload = models.JSONField(null=True, blank=True)
    status_code = models.IntegerField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "FDMS API Log"
        verbose_name_plural = "FDMS API Logs"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.method} {self.endpoint} - {self.status_code or 'error'}"
