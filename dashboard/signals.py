"""Raise a new_sale notification when a completed sale is recorded."""

from decimal import Decimal

from django.db.models.signals import post_save
from django.dispatch import receiver

from pos.models import Sale

from .services.notification_service import notify


@receiver(post_save, sender=Sale)
def notify_new_sale(sender, instance, created, **kwargs):
    if not created or instance.status != "completed":
        return
    amount = Decimal(str(instance.total))
    notify(
        type="new_sale",
        priority="info",
        title="New Sale",
        message=f"Sale {instance.reference} completed - ${amount:.2f}",
        data={
            "sale_id": instance.pk,
            "reference": instance.reference,
            "customer_name": instance.customer.name if instance.customer_id else None,
            "amount": float(amount),
        },
    )
