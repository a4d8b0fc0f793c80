"""
Retail models: parties, catalog, units, warehouses, currencies, sales, purchases, returns,
stock adjustments, quotations and invoices. Product stock moves only through pos.services.stock_service.
"""

from django.conf import settings
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone

STATUS_CHOICES = (
    ("active", "Active"),
    ("inactive", "Inactive"),
)

SALE_STATUSES = (
    ("pending", "Pending"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
)

PURCHASE_STATUSES = (
    ("pending", "Pending"),
    ("received", "Received"),
    ("cancelled", "Cancelled"),
)

PAYMENT_STATUSES = (
    ("unpaid", "Unpaid"),
    ("partial", "Partial"),
    ("paid", "Paid"),
)

RETURN_STATUSES = (
    ("pending", "Pending"),
    ("completed", "Completed"),
)

ADJUSTMENT_TYPES = (
    ("addition", "Addition"),
    ("subtraction", "Subtraction"),
)

QUOTATION_STATUSES = (
    ("pending", "Pending"),
    ("sent", "Sent"),
    ("accepted", "Accepted"),
    ("rejected", "Rejected"),
    ("expired", "Expired"),
)

INVOICE_STATUSES = (
    ("draft", "Draft"),
    ("pending", "Pending"),
    ("sent", "Sent"),
    ("paid", "Paid"),
    ("overdue", "Overdue"),
    ("cancelled", "Cancelled"),
)

UNIT_OPERATORS = (
    ("*", "Multiply"),
    ("/", "Divide"),
    ("+", "Add"),
    ("-", "Subtract"),
)


def _money(**kwargs):
    return models.DecimalField(max_digits=15, decimal_places=2, default=0, **kwargs)


class Organization(models.Model):
    """Business identity printed on receipts, invoices and quotations."""

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    tax_number = models.CharField(max_length=50, blank=True)
    registration_number = models.CharField(max_length=50, blank=True)
    website = models.CharField(max_length=255, blank=True)
    currency = models.CharField(max_length=3, default="USD")
    currency_symbol = models.CharField(max_length=5, default="$")
    invoice_prefix = models.CharField(max_length=10, default="INV")
    quotation_prefix = models.CharField(max_length=10, default="QT")
    invoice_footer = models.TextField(blank=True)
    terms_conditions = models.TextField(blank=True)
    bank_name = models.CharField(max_length=100, blank=True)
    bank_account = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Organization"
        verbose_name_plural = "Organization"

    def __str__(self):
        return self.name


class Party(models.Model):
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    tax_number = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return self.name


class Customer(Party):
    class Meta(Party.Meta):
        verbose_name = "Customer"
        verbose_name_plural = "Customers"


class Supplier(Party):
    class Meta(Party.Meta):
        verbose_name = "Supplier"
        verbose_name_plural = "Suppliers"


class Brand(models.Model):
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Brand"
        verbose_name_plural = "Brands"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Unit(models.Model):
    """Unit of measure. A sub-unit converts to its base unit by `operator` and `operation_value`."""

    name = models.CharField(max_length=100)
    short_name = models.CharField(max_length=20)
    base_unit = models.ForeignKey(
        "self", on_delete=models.PROTECT, related_name="sub_units", null=True, blank=True
    )
    operator = models.CharField(max_length=1, choices=UNIT_OPERATORS, default="*")
    operation_value = models.DecimalField(max_digits=12, decimal_places=4, default=1)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Unit"
        verbose_name_plural = "Units"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(Lower("name"), name="pos_unit_name_ci_unique"),
            models.UniqueConstraint(Lower("short_name"), name="pos_unit_short_name_ci_unique"),
        ]

    def __str__(self):
        return f"{self.name} ({self.short_name})"


class Warehouse(models.Model):
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=50)
    email = models.EmailField()
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Warehouse"
        verbose_name_plural = "Warehouses"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(Lower("name"), name="pos_warehouse_name_ci_unique"),
            models.UniqueConstraint(Lower("email"), name="pos_warehouse_email_ci_unique"),
        ]

    def __str__(self):
        return self.name


class Currency(models.Model):
    """Code is stored upper-case. Exchange rate is relative to the organization currency."""

    code = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=100)
    symbol = models.CharField(max_length=10)
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=6, default=1)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Currency"
        verbose_name_plural = "Currencies"
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(Lower("name"), name="pos_currency_name_ci_unique"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"


class Category(models.Model):
    """Code and name are unique case-insensitively."""

    code = models.CharField(max_length=50)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(Lower("code"), name="pos_category_code_ci_unique"),
            models.UniqueConstraint(Lower("name"), name="pos_category_name_ci_unique"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"


class Product(models.Model):
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="products")
    brand = models.ForeignKey(Brand, on_delete=models.PROTECT, related_name="products", null=True, blank=True)
    unit = models.ForeignKey(Unit, on_delete=models.PROTECT, related_name="products", null=True, blank=True)
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, related_name="products", null=True, blank=True
    )
    description = models.TextField(blank=True)
    cost = _money()
    price = _money()
    tax_percent = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    stock = models.IntegerField(default=0)
    alert_quantity = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Product"
        verbose_name_plural = "Products"
        ordering = ["name"]

    def __str__(self):
        return f"{self.code} - {self.name}"


class Sale(models.Model):
    reference = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="sales", null=True, blank=True)
    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, related_name="sales", null=True, blank=True)
    date = models.DateTimeField(default=timezone.now)
    subtotal = _money()
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    tax_amount = _money()
    discount = _money()
    shipping = _money()
    total = _money()
    paid = _money()
    due = _money()
    status = models.CharField(max_length=20, choices=SALE_STATUSES, default="completed", db_index=True)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUSES, default="paid")
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    # Fiscal stamp written after ZIMRA (or non-FDMS) receipting.
    is_fiscalized = models.BooleanField(default=False)
    fiscal_transaction_id = models.CharField(max_length=64, blank=True)
    zimra_qr_code = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Sale"
        verbose_name_plural = "Sales"
        ordering = ["-created_at"]

    def __str__(self):
        return self.reference


class SaleItem(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="sale_items")
    quantity = models.PositiveIntegerField()
    unit_price = _money()
    discount = _money()
    tax = _money()
    subtotal = _money()

    def __str__(self):
        return f"{self.sale.reference}: {self.product_id} x{self.quantity}"


class Purchase(models.Model):
    reference = models.CharField(max_length=50, unique=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="purchases")
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, related_name="purchases", null=True, blank=True
    )
    date = models.DateTimeField(default=timezone.now)
    subtotal = _money()
    tax_amount = _money()
    discount = _money()
    shipping = _money()
    total = _money()
    paid = _money()
    due = _money()
    status = models.CharField(max_length=20, choices=PURCHASE_STATUSES, default="received", db_index=True)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUSES, default="unpaid")
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Purchase"
        verbose_name_plural = "Purchases"
        ordering = ["-created_at"]

    def __str__(self):
        return self.reference


class PurchaseItem(models.Model):
    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="purchase_items")
    quantity = models.PositiveIntegerField()
    unit_cost = _money()
    discount = _money()
    tax = _money()
    subtotal = _money()


class SalesReturn(models.Model):
    reference = models.CharField(max_length=50, unique=True)
    sale = models.ForeignKey(Sale, on_delete=models.PROTECT, related_name="returns", null=True, blank=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="returns", null=True, blank=True)
    date = models.DateTimeField(default=timezone.now)
    total = _money()
    status = models.CharField(max_length=20, choices=RETURN_STATUSES, default="completed")
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Sales Return"
        verbose_name_plural = "Sales Returns"
        ordering = ["-created_at"]

    def __str__(self):
        return self.reference


class SalesReturnItem(models.Model):
    sales_return = models.ForeignKey(SalesReturn, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="sales_return_items")
    quantity = models.PositiveIntegerField()
    unit_price = _money()
    subtotal = _money()


class PurchaseReturn(models.Model):
    reference = models.CharField(max_length=50, unique=True)
    purchase = models.ForeignKey(Purchase, on_delete=models.PROTECT, related_name="returns", null=True, blank=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="returns")
    date = models.DateTimeField(default=timezone.now)
    total = _money()
    status = models.CharField(max_length=20, choices=RETURN_STATUSES, default="completed")
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Purchase Return"
        verbose_name_plural = "Purchase Returns"
        ordering = ["-created_at"]

    def __str__(self):
        return self.reference


class PurchaseReturnItem(models.Model):
    purchase_return = models.ForeignKey(PurchaseReturn, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="purchase_return_items")
    quantity = models.PositiveIntegerField()
    unit_cost = _money()
    subtotal = _money()


class Adjustment(models.Model):
    reference = models.CharField(max_length=50, unique=True)
    date = models.DateTimeField(default=timezone.now)
    type = models.CharField(max_length=20, choices=ADJUSTMENT_TYPES, default="addition")
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Stock Adjustment"
        verbose_name_plural = "Stock Adjustments"
        ordering = ["-date", "-id"]

    def __str__(self):
        return self.reference


class AdjustmentItem(models.Model):
    adjustment = models.ForeignKey(Adjustment, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="adjustment_items")
    quantity = models.PositiveIntegerField()
    type = models.CharField(max_length=20, choices=ADJUSTMENT_TYPES, default="addition")

    @property
    def stock_delta(self) -> int:
        return self.quantity if self.type == "addition" else -self.quantity


class Quotation(models.Model):
    reference = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="quotations")
    date = models.DateTimeField(default=timezone.now)
    valid_until = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=QUOTATION_STATUSES, default="pending", db_index=True)
    subtotal = _money()
    tax_amount = _money()
    discount = _money()
    total = _money()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Quotation"
        verbose_name_plural = "Quotations"
        ordering = ["-created_at"]

    def __str__(self):
        return self.reference


class QuotationItem(models.Model):
    quotation = models.ForeignKey(Quotation, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="quotation_items", null=True, blank=True)
    description = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = _money()
    total = _money()


class Invoice(models.Model):
    reference = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="invoices", null=True, blank=True)
    sale = models.ForeignKey(Sale, on_delete=models.SET_NULL, related_name="invoices", null=True, blank=True)
    quotation = models.ForeignKey(Quotation, on_delete=models.SET_NULL, related_name="invoices", null=True, blank=True)
    date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)
    subtotal = _money()
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    tax_amount = _money()
    discount = _money()
    shipping = _money()
    total = _money()
    paid = _money()
    due = _money()
    status = models.CharField(max_length=20, choices=INVOICE_STATUSES, default="pending", db_index=True)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUSES, default="unpaid")
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Invoice"
        verbose_name_plural = "Invoices"
        ordering = ["-created_at"]

    def __str__(self):
        return self.reference


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="invoice_items")
    quantity = models.PositiveIntegerField()
    unit_price = _money()
    discount = _money()
    tax = _money()
    subtotal = _money()
