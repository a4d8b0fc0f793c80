"""User roles and JWT issuance. Roles are Django auth groups; superusers are always admin."""

from django.contrib.auth.models import Group
from rest_framework_simplejwt.tokens import RefreshToken

ROLES = ("user", "manager", "admin")
DEFAULT_ROLE = "user"


def get_user_role(user):
    """Resolve role: admin, manager, user. None for anonymous users."""
    if not user or not user.is_authenticated:
        return None
    if user.is_superuser or user.groups.filter(name="admin").exists():
        return "admin"
    if user.groups.filter(name="manager").exists():
        return "manager"
    return DEFAULT_ROLE


def set_user_role(user, role):
    """Replace the user's role group. Unknown roles become "user"."""
    role = role if role in ROLES else DEFAULT_ROLE
    user.groups.remove(*Group.objects.filter(name__in=ROLES))
    group, _ = Group.objects.get_or_create(name=role)
    user.groups.add(group)
    user.is_staff = role == "admin"
    user.save(update_fields=["is_staff"])
    return role


def is_admin(user):
    return get_user_role(user) == "admin"


def tokens_for_user(user):
    """Access and refresh tokens carrying the user's role, name and email."""
    refresh = RefreshToken.for_user(user)
    refresh["role"] = get_user_role(user)
    refresh["email"] = user.email
    refresh["name"] = user.get_full_name() or user.username
    access = refresh.access_token
    return {"access": str(access), "refresh": str(refresh)}
