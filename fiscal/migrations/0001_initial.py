# Generated manually

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="FiscalConfiguration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "taxpayer_tin",
                    models.CharField(
                        max_length=10,
                        unique=True,
                        validators=[django.core.validators.RegexValidator("^[0-9]{10}$", "TIN must be exactly 10 digits")],
                    ),
                ),
                ("vat_registration_no", models.CharField(blank=True, max_length=50, null=True)),
                ("business_name", models.CharField(max_length=255)),
                ("business_type", models.CharField(max_length=100)),
                ("branch_name", models.CharField(max_length=255)),
                ("branch_address", models.TextField()),
                ("is_fdms_enabled", models.BooleanField(default=False)),
                ("test_environment", models.BooleanField(default=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("active", "Active"), ("suspended", "Suspended")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Fiscal Configuration",
                "verbose_name_plural": "Fiscal Configurations",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="FiscalDevice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("device_id", models.CharField(max_length=64, unique=True)),
                ("device_serial_no", models.CharField(max_length=32)),
                ("device_model_name", models.CharField(blank=True, max_length=100)),
                (
                    "operating_mode",
                    models.CharField(choices=[("Online", "Online"), ("Offline", "Offline")], default="Online", max_length=20),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("Pending", "Pending"), ("Active", "Active"), ("Blocked", "Blocked")],
                        default="Pending",
                        max_length=20,
                    ),
                ),
                ("global_receipt_counter", models.PositiveBigIntegerField(default=0)),
                ("daily_receipt_counter", models.PositiveIntegerField(default=0)),
                ("fiscal_day_opened", models.DateTimeField(blank=True, null=True)),
                ("last_receipt_hash", models.CharField(blank=True, max_length=128)),
                ("branch_name", models.CharField(blank=True, max_length=255)),
                ("branch_address", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "configuration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="devices",
                        to="fiscal.fiscalconfiguration",
                    ),
                ),
            ],
            options={
                "verbose_name": "Fiscal Device",
                "verbose_name_plural": "Fiscal Devices",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="FiscalTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("receipt_global_no", models.PositiveBigIntegerField(blank=True, db_index=True, null=True)),
                ("receipt_counter", models.PositiveIntegerField(blank=True, null=True)),
                ("receipt_type", models.CharField(default="FiscalInvoice", max_length=30)),
                ("invoice_no", models.CharField(db_index=True, max_length=100)),
                ("sale_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("receipt_date", models.DateTimeField(db_index=True)),
                ("receipt_total", models.DecimalField(decimal_places=2, max_digits=15)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("buyer_data", models.JSONField(blank=True, null=True)),
                ("items", models.JSONField(default=list)),
                ("request_payload", models.JSONField(blank=True, null=True)),
                ("response_payload", models.JSONField(blank=True, null=True)),
                ("receipt_hash", models.CharField(blank=True, max_length=128)),
                ("qr_code_url", models.CharField(blank=True, max_length=255)),
                ("verification_code", models.CharField(blank=True, max_length=32)),
                (
                    "zimra_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("submitted", "Submitted"),
                            ("confirmed", "Confirmed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("retry_count", models.PositiveIntegerField(default=0)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "configuration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="fiscal.fiscalconfiguration",
                    ),
                ),
                (
                    "device",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="fiscal.fiscaldevice",
                    ),
                ),
            ],
            options={
                "verbose_name": "Fiscal Transaction",
                "verbose_name_plural": "Fiscal Transactions",
                "ordering": ["-receipt_date"],
            },
        ),
        migrations.CreateModel(
            name="FDMSApiLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("endpoint", models.CharField(max_length=255)),
                ("method", models.CharField(max_length=10)),
                ("request_payload", models.JSONField(default=dict)),
                ("response_payload", models.JSONField(blank=True, null=True)),
                ("status_code", models.IntegerField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "FDMS API Log",
                "verbose_name_plural": "FDMS API Logs",
                "ordering": ["-created_at"],
            },
        ),
    ]
