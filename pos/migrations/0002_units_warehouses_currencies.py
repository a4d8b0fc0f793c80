# Generated manually

import django.db.models.deletion
import django.db.models.functions.text
from django.db import migrations, models

STATUS = [("active", "Active"), ("inactive", "Inactive")]
OPERATORS = [("*", "Multiply"), ("/", "Divide"), ("+", "Add"), ("-", "Subtract")]


def pk():
    return models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")


def ci_unique(model_name, field, name):
    return migrations.AddConstraint(
        model_name=model_name,
        constraint=models.UniqueConstraint(django.db.models.functions.text.Lower(field), name=name),
    )


def warehouse_fk(related_name):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.PROTECT,
        related_name=related_name,
        to="pos.warehouse",
    )


class Migration(migrations.Migration):

    dependencies = [
        ("pos", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Unit",
            fields=[
                ("id", pk()),
                ("name", models.CharField(max_length=100)),
                ("short_name", models.CharField(max_length=20)),
                ("operator", models.CharField(choices=OPERATORS, default="*", max_length=1)),
                ("operation_value", models.DecimalField(decimal_places=4, default=1, max_digits=12)),
                ("status", models.CharField(choices=STATUS, db_index=True, default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "base_unit",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sub_units",
                        to="pos.unit",
                    ),
                ),
            ],
            options={"verbose_name": "Unit", "verbose_name_plural": "Units", "ordering": ["name"]},
        ),
        ci_unique("unit", "name", "pos_unit_name_ci_unique"),
        ci_unique("unit", "short_name", "pos_unit_short_name_ci_unique"),
        migrations.CreateModel(
            name="Warehouse",
            fields=[
                ("id", pk()),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(max_length=50)),
                ("email", models.EmailField(max_length=254)),
                ("address", models.TextField(blank=True)),
                ("city", models.CharField(max_length=100)),
                ("country", models.CharField(max_length=100)),
                ("zip_code", models.CharField(blank=True, max_length=20)),
                ("status", models.CharField(choices=STATUS, db_index=True, default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"verbose_name": "Warehouse", "verbose_name_plural": "Warehouses", "ordering": ["name"]},
        ),
        ci_unique("warehouse", "name", "pos_warehouse_name_ci_unique"),
        ci_unique("warehouse", "email", "pos_warehouse_email_ci_unique"),
        migrations.CreateModel(
            name="Currency",
            fields=[
                ("id", pk()),
                ("code", models.CharField(max_length=10, unique=True)),
                ("name", models.CharField(max_length=100)),
                ("symbol", models.CharField(max_length=10)),
                ("exchange_rate", models.DecimalField(decimal_places=6, default=1, max_digits=18)),
                ("status", models.CharField(choices=STATUS, db_index=True, default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"verbose_name": "Currency", "verbose_name_plural": "Currencies", "ordering": ["code"]},
        ),
        ci_unique("currency", "name", "pos_currency_name_ci_unique"),
        migrations.AddField(
            model_name="product",
            name="unit",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="products",
                to="pos.unit",
            ),
        ),
        migrations.AddField(model_name="product", name="warehouse", field=warehouse_fk("products")),
        migrations.AddField(model_name="sale", name="warehouse", field=warehouse_fk("sales")),
        migrations.AddField(model_name="purchase", name="warehouse", field=warehouse_fk("purchases")),
    ]
