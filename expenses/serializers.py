"""Expense request validation."""

from pos.models import STATUS_CHOICES
from pos.serializers import ValidationError, _choices, _datetime, _optional_id, _text, _to_decimal

from .models import EXPENSE_STATUSES


def validate_expense_category(data, partial=False):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    if "name" in data or not partial:
        fields["name"] = _text(data, "name")
        if not fields["name"]:
            raise ValidationError("Name is required", "name")
    if "description" in data or not partial:
        fields["description"] = _text(data, "description")
    if data.get("status") is not None:
        if data["status"] not in _choices(STATUS_CHOICES):
            raise ValidationError("Invalid status", "status")
        fields["status"] = data["status"]
    return fields


def validate_expense(data, partial=False):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON object")
    fields = {}
    if "category_id" in data or not partial:
        fields["category_id"] = _optional_id(data.get("category_id"), "category_id")
    if "amount" in data or not partial:
        fields["amount"] = _to_decimal(data.get("amount"), None)
    if not partial and (fields["category_id"] is None or fields["amount"] is None):
        raise ValidationError("Missing required fields: category_id, amount")
    if "amount" in fields and (fields["amount"] is None or fields["amount"] <= 0):
        raise ValidationError("Amount must be greater than 0", "amount")
    if partial and "category_id" in fields and fields["category_id"] is None:
        raise ValidationError("category_id cannot be empty", "category_id")
    if "reference" in data:
        fields["reference"] = _text(data, "reference") or None
    if "date" in data or not partial:
        fields["date"] = _datetime(data.get("date"))
    if "description" in data:
        fields["description"] = _text(data, "description")
    if "status" in data:
        if data["status"] not in _choices(EXPENSE_STATUSES):
            raise ValidationError("Invalid status", "status")
        fields["status"] = data["status"]
    return fields
