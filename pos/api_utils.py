"""Request parsing and list pagination shared by the retail JSON views."""

import json
import math

from django.db.models import Q
from django.http import JsonResponse


def load_json_body(request):
    """Parsed JSON body. Raises json.JSONDecodeError on malformed input."""
    return json.loads(request.body or "{}")


def parse_body(request):
    """(body, None) or (None, 400 "Invalid JSON" response)."""
    try:
        return load_json_body(request), None
    except json.JSONDecodeError:
        return None, JsonResponse({"error": "Invalid JSON"}, status=400)


def positive_int(value, default):
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def page_params(request, default_limit=10):
    page = positive_int(request.GET.get("page"), 1)
    limit = positive_int(request.GET.get("limit"), default_limit)
    return page, limit


def search_filter(request, fields):
    """Q matching ?search= against any of `fields` (icontains), or None."""
    search = (request.GET.get("search") or "").strip()
    if not search:
        return None
    query = Q()
    for field in fields:
        query |= Q(**{f"{field}__icontains": search})
    return query


def paginate(request, queryset, serialize, search_fields=(), status_field="status"):
    """
    Apply ?search= and ?status= filters and ?page=/&limit= slicing.
    Returns {data, pagination: {total, page, limit, totalPages}}.
    """
    query = search_filter(request, search_fields)
    if query is not None:
        queryset = queryset.filter(query)
    status = request.GET.get("status")
    if status and status_field:
        queryset = queryset.filter(**{status_field: status})
    page, limit = page_params(request)
    total = queryset.count()
    offset = (page - 1) * limit
    return {
        "data": [serialize(obj) for obj in queryset[offset:offset + limit]],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        },
    }


def object_id(request, body=None):
    """Target id from ?id= or, failing that, the body's "id". None if absent or not an integer."""
    raw = request.GET.get("id")
    if raw in (None, "") and isinstance(body, dict):
        raw = body.get("id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def money(value):
    return float(value) if value is not None else 0.0


def iso(value):
    return value.isoformat() if value else None
