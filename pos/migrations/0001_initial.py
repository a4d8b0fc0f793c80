# Generated manually

import django.db.models.deletion
import django.db.models.functions.text
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

STATUS = [("active", "Active"), ("inactive", "Inactive")]
PAYMENT = [("unpaid", "Unpaid"), ("partial", "Partial"), ("paid", "Paid")]
RETURN = [("pending", "Pending"), ("completed", "Completed")]
ADJUSTMENT = [("addition", "Addition"), ("subtraction", "Subtraction")]


def money():
    return models.DecimalField(decimal_places=2, default=0, max_digits=15)


def pk():
    return models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")


def party_fields():
    return [
        ("id", pk()),
        ("name", models.CharField(max_length=255)),
        ("email", models.EmailField(blank=True, max_length=254)),
        ("phone", models.CharField(blank=True, max_length=50)),
        ("address", models.TextField(blank=True)),
        ("city", models.CharField(blank=True, max_length=100)),
        ("country", models.CharField(blank=True, max_length=100)),
        ("tax_number", models.CharField(blank=True, max_length=50)),
        ("status", models.CharField(choices=STATUS, db_index=True, default="active", max_length=10)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


def created_by():
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name="+",
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id", pk()),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("address", models.TextField(blank=True)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("country", models.CharField(blank=True, max_length=100)),
                ("tax_number", models.CharField(blank=True, max_length=50)),
                ("registration_number", models.CharField(blank=True, max_length=50)),
                ("website", models.CharField(blank=True, max_length=255)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("currency_symbol", models.CharField(default="$", max_length=5)),
                ("invoice_prefix", models.CharField(default="INV", max_length=10)),
                ("quotation_prefix", models.CharField(default="QT", max_length=10)),
                ("invoice_footer", models.TextField(blank=True)),
                ("terms_conditions", models.TextField(blank=True)),
                ("bank_name", models.CharField(blank=True, max_length=100)),
                ("bank_account", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"verbose_name": "Organization", "verbose_name_plural": "Organization"},
        ),
        migrations.CreateModel(
            name="Customer",
            fields=party_fields(),
            options={"verbose_name": "Customer", "verbose_name_plural": "Customers", "ordering": ["name"], "abstract": False},
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=party_fields(),
            options={"verbose_name": "Supplier", "verbose_name_plural": "Suppliers", "ordering": ["name"], "abstract": False},
        ),
        migrations.CreateModel(
            name="Brand",
            fields=[
                ("id", pk()),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                ("status", models.CharField(choices=STATUS, default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"verbose_name": "Brand", "verbose_name_plural": "Brands", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", pk()),
                ("code", models.CharField(max_length=50)),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                ("status", models.CharField(choices=STATUS, db_index=True, default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"verbose_name": "Category", "verbose_name_plural": "Categories", "ordering": ["name"]},
        ),
        migrations.AddConstraint(
            model_name="category",
            constraint=models.UniqueConstraint(
                django.db.models.functions.text.Lower("code"), name="pos_category_code_ci_unique"
            ),
        ),
        migrations.AddConstraint(
            model_name="category",
            constraint=models.UniqueConstraint(
                django.db.models.functions.text.Lower("name"), name="pos_category_name_ci_unique"
            ),
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", pk()),
                ("code", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("cost", money()),
                ("price", money()),
                ("tax_percent", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("stock", models.IntegerField(default=0)),
                ("alert_quantity", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=STATUS, db_index=True, default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "brand",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="products",
                        to="pos.brand",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="products", to="pos.category"
                    ),
                ),
            ],
            options={"verbose_name": "Product", "verbose_name_plural": "Products", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", pk()),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("subtotal", money()),
                ("tax_rate", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("tax_amount", money()),
                ("discount", money()),
                ("shipping", money()),
                ("total", money()),
                ("paid", money()),
                ("due", money()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                        db_index=True,
                        default="completed",
                        max_length=20,
                    ),
                ),
                ("payment_status", models.CharField(choices=PAYMENT, default="paid", max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("is_fiscalized", models.BooleanField(default=False)),
                ("fiscal_transaction_id", models.CharField(blank=True, max_length=64)),
                ("zimra_qr_code", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", created_by()),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="pos.customer",
                    ),
                ),
            ],
            options={"verbose_name": "Sale", "verbose_name_plural": "Sales", "ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("id", pk()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", money()),
                ("discount", money()),
                ("tax", money()),
                ("subtotal", money()),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="sale_items", to="pos.product"
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="pos.sale"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", pk()),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("subtotal", money()),
                ("tax_amount", money()),
                ("discount", money()),
                ("shipping", money()),
                ("total", money()),
                ("paid", money()),
                ("due", money()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("received", "Received"), ("cancelled", "Cancelled")],
                        db_index=True,
                        default="received",
                        max_length=20,
                    ),
                ),
                ("payment_status", models.CharField(choices=PAYMENT, default="unpaid", max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", created_by()),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="purchases", to="pos.supplier"
                    ),
                ),
            ],
            options={"verbose_name": "Purchase", "verbose_name_plural": "Purchases", "ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="PurchaseItem",
            fields=[
                ("id", pk()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_cost", money()),
                ("discount", money()),
                ("tax", money()),
                ("subtotal", money()),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="purchase_items", to="pos.product"
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="pos.purchase"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="SalesReturn",
            fields=[
                ("id", pk()),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("total", money()),
                ("status", models.CharField(choices=RETURN, default="completed", max_length=20)),
                ("reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="pos.customer",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="pos.sale",
                    ),
                ),
            ],
            options={"verbose_name": "Sales Return", "verbose_name_plural": "Sales Returns", "ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="SalesReturnItem",
            fields=[
                ("id", pk()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", money()),
                ("subtotal", money()),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales_return_items",
                        to="pos.product",
                    ),
                ),
                (
                    "sales_return",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="pos.salesreturn"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="PurchaseReturn",
            fields=[
                ("id", pk()),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("total", money()),
                ("status", models.CharField(choices=RETURN, default="completed", max_length=20)),
                ("reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "purchase",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="pos.purchase",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="returns", to="pos.supplier"
                    ),
                ),
            ],
            options={
                "verbose_name": "Purchase Return",
                "verbose_name_plural": "Purchase Returns",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PurchaseReturnItem",
            fields=[
                ("id", pk()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_cost", money()),
                ("subtotal", money()),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_return_items",
                        to="pos.product",
                    ),
                ),
                (
                    "purchase_return",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="pos.purchasereturn"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Adjustment",
            fields=[
                ("id", pk()),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("type", models.CharField(choices=ADJUSTMENT, default="addition", max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", created_by()),
            ],
            options={
                "verbose_name": "Stock Adjustment",
                "verbose_name_plural": "Stock Adjustments",
                "ordering": ["-date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="AdjustmentItem",
            fields=[
                ("id", pk()),
                ("quantity", models.PositiveIntegerField()),
                ("type", models.CharField(choices=ADJUSTMENT, default="addition", max_length=20)),
                (
                    "adjustment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="pos.adjustment"
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="adjustment_items", to="pos.product"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Quotation",
            fields=[
                ("id", pk()),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("valid_until", models.DateField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("sent", "Sent"),
                            ("accepted", "Accepted"),
                            ("rejected", "Rejected"),
                            ("expired", "Expired"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("subtotal", money()),
                ("tax_amount", money()),
                ("discount", money()),
                ("total", money()),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="quotations", to="pos.customer"
                    ),
                ),
            ],
            options={"verbose_name": "Quotation", "verbose_name_plural": "Quotations", "ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="QuotationItem",
            fields=[
                ("id", pk()),
                ("description", models.CharField(blank=True, max_length=255)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", money()),
                ("total", money()),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="quotation_items",
                        to="pos.product",
                    ),
                ),
                (
                    "quotation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="pos.quotation"
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", pk()),
                ("reference", models.CharField(max_length=50, unique=True)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("subtotal", money()),
                ("tax_rate", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("tax_amount", money()),
                ("discount", money()),
                ("shipping", money()),
                ("total", money()),
                ("paid", money()),
                ("due", money()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("pending", "Pending"),
                            ("sent", "Sent"),
                            ("paid", "Paid"),
                            ("overdue", "Overdue"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("payment_status", models.CharField(choices=PAYMENT, default="unpaid", max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", created_by()),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="pos.customer",
                    ),
                ),
                (
                    "quotation",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices",
                        to="pos.quotation",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices",
                        to="pos.sale",
                    ),
                ),
            ],
            options={"verbose_name": "Invoice", "verbose_name_plural": "Invoices", "ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="InvoiceItem",
            fields=[
                ("id", pk()),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", money()),
                ("discount", money()),
                ("tax", money()),
                ("subtotal", money()),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="pos.invoice"
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="invoice_items", to="pos.product"
                    ),
                ),
            ],
        ),
    ]
