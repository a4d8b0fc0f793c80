from django.contrib import admin

from .models import (
    Adjustment,
    AdjustmentItem,
    Brand,
    Category,
    Currency,
    Customer,
    Invoice,
    InvoiceItem,
    Organization,
    Product,
    Purchase,
    PurchaseItem,
    PurchaseReturn,
    Quotation,
    QuotationItem,
    Sale,
    SaleItem,
    SalesReturn,
    Supplier,
    Unit,
    Warehouse,
)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "currency", "updated_at")


@admin.register(Customer, Supplier)
class PartyAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "city", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "email", "phone")


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("name", "short_name", "base_unit", "operator", "operation_value", "status")
    search_fields = ("name", "short_name")


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "country", "email", "status")
    list_filter = ("status", "country")
    search_fields = ("name", "email", "city")


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "symbol", "exchange_rate", "status")
    search_fields = ("code", "name")


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "created_at")
    search_fields = ("name",)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "status", "updated_at")
    search_fields = ("code", "name")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "category", "brand", "price", "stock", "alert_quantity", "status")
    list_filter = ("status", "category")
    search_fields = ("code", "name")
    # Stock moves through sales, purchases, returns and adjustments.
    readonly_fields = ("stock",)


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "unit_price", "discount", "tax", "subtotal")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("reference", "customer", "date", "total", "status", "payment_status", "is_fiscalized")
    list_filter = ("status", "payment_status", "is_fiscalized")
    search_fields = ("reference", "customer__name")
    readonly_fields = ("is_fiscalized", "fiscal_transaction_id", "zimra_qr_code")
    inlines = [SaleItemInline]

    def has_add_permission(self, request):
        return False


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "unit_cost", "discount", "tax", "subtotal")


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ("reference", "supplier", "date", "total", "status", "payment_status")
    list_filter = ("status", "payment_status")
    search_fields = ("reference", "supplier__name")
    inlines = [PurchaseItemInline]

    def has_add_permission(self, request):
        return False


@admin.register(SalesReturn, PurchaseReturn)
class ReturnAdmin(admin.ModelAdmin):
    list_display = ("reference", "date", "total", "status")
    search_fields = ("reference",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class AdjustmentItemInline(admin.TabularInline):
    model = AdjustmentItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "type")


@admin.register(Adjustment)
class AdjustmentAdmin(admin.ModelAdmin):
    list_display = ("reference", "date", "type", "created_at")
    inlines = [AdjustmentItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class QuotationItemInline(admin.TabularInline):
    model = QuotationItem
    extra = 0


@admin.register(Quotation)
class QuotationAdmin(admin.ModelAdmin):
    list_display = ("reference", "customer", "date", "valid_until", "total", "status")
    list_filter = ("status",)
    search_fields = ("reference", "customer__name")
    inlines = [QuotationItemInline]


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("reference", "customer", "date", "due_date", "total", "status", "payment_status")
    list_filter = ("status", "payment_status")
    search_fields = ("reference", "customer__name")
    inlines = [InvoiceItemInline]
