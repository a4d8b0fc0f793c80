"""Organization, customer and supplier JSON API."""

import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from pos.api_utils import object_id, paginate, parse_body
from pos.models import Customer, Organization, Supplier
from pos.serializers import ValidationError, validate_organization, validate_party
from pos.services.catalog_service import (
    delete_blocker,
    get_or_create_organization,
    serialize_organization,
    serialize_party,
)

logger = logging.getLogger("pos")

PARTY_SEARCH_FIELDS = ("name", "email", "phone")


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT"])
def api_organization(request):
    """GET returns (creating if needed) the organization; POST creates once; PUT updates."""
    if request.method == "GET":
        return JsonResponse(serialize_organization(get_or_create_organization()))

    body, err = parse_body(request)
    if err:
        return err
    try:
        if request.method == "POST":
            if Organization.objects.exists():
                return JsonResponse({"error": "Organization already exists. Use PUT to update."}, status=400)
            org = Organization.objects.create(**validate_organization(body))
            logger.info("Organization %s created", org.name)
            return JsonResponse(serialize_organization(org), status=201)

        org = Organization.objects.order_by("pk").first()
        if org is None:
            return JsonResponse({"error": "Organization not found. Use POST to create."}, status=404)
        for field, value in validate_organization(body, partial=True).items():
            setattr(org, field, value)
        org.save()
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    return JsonResponse(serialize_organization(org))


def _party_api(request, model, label):
    """Shared customer/supplier CRUD. `label` is "Customer" or "Supplier"."""
    if request.method == "GET":
        if request.GET.get("id"):
            party = model.objects.filter(pk=object_id(request)).first()
            if party is None:
                return JsonResponse({"error": f"{label} not found"}, status=404)
            return JsonResponse(serialize_party(party))
        return JsonResponse(paginate(request, model.objects.all(), serialize_party, PARTY_SEARCH_FIELDS))

    if request.method == "DELETE":
        pk = object_id(request)
        if pk is None:
            return JsonResponse({"error": f"{label} ID is required"}, status=400)
        party = model.objects.filter(pk=pk).first()
        if party is None:
            return JsonResponse({"error": f"{label} not found"}, status=404)
        blocker = delete_blocker(party)
        if blocker:
            return JsonResponse({"error": blocker}, status=400)
        party.delete()
        logger.info("%s %s deleted", label, pk)
        return JsonResponse({"message": f"{label} deleted successfully"})

    body, err = parse_body(request)
    if err:
        return err

    if request.method == "POST":
        try:
            fields = validate_party(body)
        except ValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        party = model.objects.create(**fields)
        return JsonResponse(serialize_party(party), status=201)

    pk = object_id(request, body)
    if request.method == "PUT" and (pk is None or not str((body or {}).get("name") or "").strip()):
        return JsonResponse({"error": "ID and name are required"}, status=400)
    if pk is None:
        return JsonResponse({"error": f"{label} ID is required"}, status=400)
    party = model.objects.filter(pk=pk).first()
    if party is None:
        return JsonResponse({"error": f"{label} not found"}, status=404)
    try:
        fields = validate_party(body, partial=request.method == "PATCH")
    except ValidationError as e:
        return JsonResponse({"error": e.message}, status=400)
    for field, value in fields.items():
        setattr(party, field, value)
    party.save()
    return JsonResponse(serialize_party(party))


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_customers(request):
    return _party_api(request, Customer, "Customer")


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_suppliers(request):
    return _party_api(request, Supplier, "Supplier")
