"""User signup, listing, update, deactivation and email login."""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from pos.api_utils import iso, object_id, page_params, parse_body, search_filter

from .auth import DEFAULT_ROLE, ROLES, get_user_role, is_admin, set_user_role, tokens_for_user

logger = logging.getLogger("pos")

User = get_user_model()


def serialize_user(user):
    return {
        "id": user.pk,
        "name": user.get_full_name() or user.username,
        "email": user.email,
        "role": get_user_role(user),
        "status": "active" if user.is_active else "inactive",
        "created_at": iso(user.date_joined),
        "last_login": iso(user.last_login),
    }


def _email_taken(email, exclude_pk=None):
    qs = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def _signup(request, body):
    """Admin and manager roles are only granted when an admin creates the account."""
    name = str(body.get("name") or "").strip()
    email = str(body.get("email") or "").strip().lower()
    password = body.get("password") or ""
    if not (name and email and password):
        return JsonResponse({"error": "Missing required fields"}, status=400)
    if _email_taken(email) or User.objects.filter(username=email).exists():
        return JsonResponse({"error": "Email already registered"}, status=400)
    user = User.objects.create_user(username=email, email=email, password=password, first_name=name)
    role = body.get("role")
    if role in ("admin", "manager") and not is_admin(request.user):
        role = DEFAULT_ROLE
    set_user_role(user, role)
    logger.info("User %s signed up with role %s", email, get_user_role(user))
    return JsonResponse({"message": "User created successfully", "user": serialize_user(user)}, status=201)


def _list(request):
    if request.GET.get("id"):
        user = User.objects.filter(pk=object_id(request)).first()
        if user is None:
            return JsonResponse({"error": "User not found"}, status=404)
        return JsonResponse(serialize_user(user))
    qs = User.objects.order_by("-date_joined")
    query = search_filter(request, ("first_name", "last_name", "email"))
    if query is not None:
        qs = qs.filter(query)
    role = request.GET.get("role")
    if role == "admin":
        qs = qs.filter(is_superuser=True) | qs.filter(groups__name="admin")
    elif role in ROLES:
        qs = qs.filter(groups__name=role)
    status = request.GET.get("status")
    if status in ("active", "inactive"):
        qs = qs.filter(is_active=status == "active")
    qs = qs.distinct()
    page, limit = page_params(request)
    total = qs.count()
    offset = (page - 1) * limit
    return JsonResponse({
        "users": [serialize_user(u) for u in qs[offset:offset + limit]],
        "pagination": {"page": page, "limit": limit, "total": total, "totalPages": -(-total // limit)},
    })


def _update(request, body):
    """
    PUT: self or admin may change name, email and password; only admins change
    role and status. PATCH: self changes name and password, admins change
    role, status and email.
    """
    pk = object_id(request)
    if pk is None:
        return JsonResponse({"error": "User ID is required"}, status=400)
    current = request.user
    if not current.is_authenticated:
        return JsonResponse({"error": "Unauthorized"}, status=401)
    user = User.objects.filter(pk=pk).first()
    if user is None:
        return JsonResponse({"error": "User not found"}, status=404)
    is_self = current.pk == user.pk
    admin = is_admin(current)
    if not is_self and not admin:
        return JsonResponse({"error": "Forbidden"}, status=403)

    full = request.method == "PUT"
    updates = {}
    if body.get("name") and (full or is_self):
        updates["first_name"] = str(body["name"]).strip()
    email = str(body.get("email") or "").strip().lower()
    if email and (full or admin) and email != user.email:
        if _email_taken(email, exclude_pk=user.pk):
            return JsonResponse({"error": "Email already in use"}, status=400)
        updates["email"] = email
        updates["username"] = email
    if body.get("password") and (full or is_self):
        updates["password"] = body["password"]
    role = body.get("role") if admin and body.get("role") in ROLES else None
    status = body.get("status") if admin and body.get("status") in ("active", "inactive") else None

    if not updates and role is None and status is None:
        return JsonResponse({"error": "No valid updates provided"}, status=400)

    password = updates.pop("password", None)
    for field, value in updates.items():
        setattr(user, field, value)
    if password:
        user.set_password(password)
    if status is not None:
        user.is_active = status == "active"
    user.save()
    if role is not None:
        set_user_role(user, role)
    return JsonResponse({"message": "User updated successfully", "user": serialize_user(user)})


def _deactivate(request):
    """Admin-only soft delete: the account is deactivated, its records are kept."""
    pk = object_id(request)
    if pk is None:
        return JsonResponse({"error": "User ID is required"}, status=400)
    if not is_admin(request.user):
        return JsonResponse({"error": "Unauthorized - Admin access required"}, status=401)
    user = User.objects.filter(pk=pk).first()
    if user is None:
        return JsonResponse({"error": "User not found"}, status=404)
    if user.pk == request.user.pk:
        return JsonResponse({"error": "Cannot delete your own account"}, status=400)
    user.is_active = False
    user.save(update_fields=["is_active"])
    logger.info("User %s deactivated by %s", user.email, request.user.email)
    return JsonResponse({
        "message": "User deactivated successfully",
        "user": {"id": user.pk, "name": user.get_full_name(), "email": user.email},
    })


@csrf_exempt
@require_http_methods(["GET", "POST", "PUT", "PATCH", "DELETE"])
def api_users(request):
    if request.method == "GET":
        return _list(request)
    if request.method == "DELETE":
        return _deactivate(request)
    body, err = parse_body(request)
    if err:
        return err
    if request.method == "POST":
        return _signup(request, body)
    return _update(request, body)


@csrf_exempt
@require_http_methods(["POST"])
def api_login(request):
    """POST {email, password} -> {user, access, refresh}. 401 "Invalid credentials" otherwise."""
    body, err = parse_body(request)
    if err:
        return err
    email = str(body.get("email") or "").strip().lower()
    password = body.get("password") or ""
    account = User.objects.filter(email__iexact=email).first() if email else None
    user = authenticate(request, username=account.username, password=password) if account else None
    if user is None:
        logger.info("Failed login for %s", email or "<empty>")
        return JsonResponse({"error": "Invalid credentials"}, status=401)
    update_last_login(None, user)
    tokens = tokens_for_user(user)
    return JsonResponse({"user": serialize_user(user), "token": tokens["access"], **tokens})
