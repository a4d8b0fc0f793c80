"""Expense categories and expenses JSON API."""

import logging

from django.db.models import Count
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from pos.api_utils import iso, money, object_id, paginate, parse_body
from pos.serializers import ValidationError
from pos.services.document_utils import next_reference

from .models import Expense, ExpenseCategory
from .serializers import validate_expense, validate_expense_category

logger = logging.getLogger("pos")


def serialize_expense_category(category, with_expenses=False):
    data = {
        "id": category.pk,
        "name": category.name,
        "description": category.description,
        "status": category.status,
        "created_at": iso(category.created_at),
        "updated_at": iso(category.updated_at),
    }
    if with_expenses:
        data["expenses"] = [
            {"id": e.pk, "reference": e.reference, "amount": money(e.amount), "date": iso(e.date), "status": e.status}
            for e in category.expenses.all()
        ]
    else:
        data["expense_count"] = getattr(category, "expense_count", None)
    return data


def serialize_expense(expense):
    return {
        "id": expense.pk,
        "reference": expense.reference,
        "category_id": expense.category_id,
        "category": {"name": expense.category.name},
        "amount": money(expense.amount),
        "date": iso(expense.date),
        "description": expense.description,
        "status": expense.status,
        "created_at": iso(expense.created_at),
    }


def _name_taken(name, exclude_pk=None):
    qs = ExpenseCategory.objects.filter(name__iexact=name)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_expense_categories(request):
    if request.method == "GET":
        if request.GET.get("id"):
            category = ExpenseCategory.objects.filter(pk=object_id(request)).first()
            if category is None:
                return JsonResponse({"error": "Expense category not found"}, status=404)
            return JsonResponse(serialize_expense_category(category, with_expenses=True))
        qs = ExpenseCategory.objects.annotate(expense_count=Count("expenses"))
        return JsonResponse(paginate(request, qs, serialize_expense_category, ("name", "description")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Expense category ID is required"}, status=400)
        category = ExpenseCategory.objects.filter(pk=pk).first()
        if category is None:
            return JsonResponse({"error": "Expense category not found"}, status=404)
        if category.expenses.exists():
            return JsonResponse({"error": "Cannot delete expense category with existing expenses"}, status=400)
        category.delete()
        return JsonResponse({"message": "Expense category deleted successfully", "success": True})

    body, err = parse_body(request)
    if err:
        return err

    category = None
    if request.method != "POST":
        pk = object_id(request, body)
        if pk is None:
            return JsonResponse({"error": "Expense category ID is required"}, status=400)
    try:
        fields = validate_expense_category(body, partial=request.method == "PATCH")
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    if request.method != "POST":
        category = ExpenseCategory.objects.filter(pk=pk).first()
        if category is None:
            return JsonResponse({"error": "Expense category not found"}, status=404)
    if fields.get("name") and _name_taken(fields["name"], exclude_pk=category.pk if category else None):
        return JsonResponse({"error": "Expense category name already exists"}, status=400)

    if category is None:
        category = ExpenseCategory.objects.create(**fields)
        return JsonResponse(serialize_expense_category(category), status=201)
    for field, value in fields.items():
        setattr(category, field, value)
    category.save()
    return JsonResponse(serialize_expense_category(category))


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_expenses(request):
    """Expenses. Reference defaults to EXP-<ms>; approved expenses cannot be deleted."""
    if request.method == "GET":
        qs = Expense.objects.select_related("category")
        if request.GET.get("id"):
            expense = qs.filter(pk=object_id(request)).first()
            if expense is None:
                return JsonResponse({"error": "Expense not found"}, status=404)
            return JsonResponse(serialize_expense(expense))
        return JsonResponse(paginate(request, qs, serialize_expense, ("reference", "category__name", "description")))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": "Expense ID is required"}, status=400)
        expense = Expense.objects.filter(pk=pk).first()
        if expense is None:
            return JsonResponse({"error": "Expense not found"}, status=404)
        if expense.status == "approved":
            return JsonResponse({"error": "Cannot delete an approved expense"}, status=400)
        expense.delete()
        return JsonResponse({"message": "Expense deleted successfully", "success": True})

    body, err = parse_body(request)
    if err:
        return err
    try:
        fields = validate_expense(body, partial=request.method == "PATCH")
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    if fields.get("category_id") is not None and not ExpenseCategory.objects.filter(pk=fields["category_id"]).exists():
        return JsonResponse({"error": "Expense category not found"}, status=400)
    reference = fields.pop("reference", None)

    if request.method == "POST":
        if reference and Expense.objects.filter(reference=reference).exists():
            return JsonResponse({"error": "Expense reference already exists"}, status=400)
        expense = Expense.objects.create(
            reference=reference or next_reference(Expense, "EXP"),
            created_by=request.user if request.user.is_authenticated else None,
            **fields,
        )
        logger.info("Expense %s recorded (%s)", expense.reference, expense.amount)
        return JsonResponse(serialize_expense(expense), status=201)

    pk = object_id(request, body)
    if pk is None:
        return JsonResponse({"error": "Expense ID is required"}, status=400)
    expense = Expense.objects.filter(pk=pk).first()
    if expense is None:
        return JsonResponse({"error": "Expense not found"}, status=404)
    if reference and reference != expense.reference:
        if Expense.objects.filter(reference=reference).exists():
            return JsonResponse({"error": "Expense reference already exists"}, status=400)
        expense.reference = reference
    for field, value in fields.items():
        setattr(expense, field, value)
    expense.save()
    return JsonResponse(serialize_expense(expense))
