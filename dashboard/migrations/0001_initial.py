# Generated manually

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ("type", models.CharField(choices=[("low_stock", "Low stock"), ("new_sale", "New sale"), ("overdue_payment", "Overdue payment"), ("system", "System")], db_index=True, default="system", max_length=20)),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("priority", models.CharField(choices=[("high", "High"), ("medium", "Medium"), ("info", "Info"), ("low", "Low")], default="info", max_length=10)),
                ("read", models.BooleanField(db_index=True, default=False)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Notification",
                "verbose_name_plural": "Notifications",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
