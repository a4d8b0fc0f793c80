"""Tests for user management and login."""

import json

from django.contrib.auth import get_user_model
from django.test import Client, TestCase
from rest_framework_simplejwt.tokens import AccessToken

from accounts.auth import get_user_role, set_user_role, tokens_for_user

User = get_user_model()

USERS_URL = "/api/v2/users"
LOGIN_URL = "/api/v2/users/login"


def _make_user(email, role="user", password="secret123"):
    user = User.objects.create_user(username=email, email=email, password=password, first_name=email.split("@")[0])
    set_user_role(user, role)
    return user


class UserApiTestCase(TestCase):
    def setUp(self):
        self.client = Client()

    def _send(self, method, url, body, user=None):
        extra = {}
        if user is not None:
            extra["HTTP_AUTHORIZATION"] = f"Bearer {tokens_for_user(user)['access']}"
        return getattr(self.client, method)(url, data=json.dumps(body), content_type="application/json", **extra)


class SignupTests(UserApiTestCase):
    def test_signup(self):
        response = self._send("post", USERS_URL, {"name": "Tendai", "email": "T@Shop.co", "password": "pw123456"})
        self.assertEqual(response.status_code, 201)
        data = response.json()["user"]
        self.assertEqual((data["email"], data["role"], data["status"]), ("t@shop.co", "user", "active"))

    def test_signup_role_is_constrained(self):
        response = self._send("post", USERS_URL, {"name": "A", "email": "a@x.co", "password": "pw", "role": "root"})
        self.assertEqual(response.json()["user"]["role"], "user")
        admin = _make_user("boss@x.co", role="admin")
        response = self._send(
            "post", USERS_URL, {"name": "M", "email": "m@x.co", "password": "pw", "role": "manager"}, user=admin
        )
        self.assertEqual(response.json()["user"]["role"], "manager")

    def test_anonymous_signup_cannot_claim_elevated_role(self):
        for role in ("admin", "manager"):
            email = f"{role}@x.co"
            response = self._send("post", USERS_URL, {"name": "X", "email": email, "password": "pw", "role": role})
            self.assertEqual(response.status_code, 201)
            self.assertEqual(response.json()["user"]["role"], "user")
            user = User.objects.get(email=email)
            self.assertFalse(user.is_staff)
            self.assertEqual(get_user_role(user), "user")

    def test_non_admin_cannot_grant_admin(self):
        member = _make_user("member@x.co")
        response = self._send(
            "post", USERS_URL, {"name": "X", "email": "x@x.co", "password": "pw", "role": "admin"}, user=member
        )
        self.assertEqual(response.json()["user"]["role"], "user")
        self.assertFalse(User.objects.get(email="x@x.co").is_staff)

    def test_admin_creates_admin(self):
        admin = _make_user("boss@x.co", role="admin")
        response = self._send(
            "post", USERS_URL, {"name": "X", "email": "x@x.co", "password": "pw", "role": "admin"}, user=admin
        )
        self.assertEqual(response.json()["user"]["role"], "admin")
        self.assertTrue(User.objects.get(email="x@x.co").is_staff)

    def test_missing_fields(self):
        response = self._send("post", USERS_URL, {"email": "a@x.co"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Missing required fields")

    def test_duplicate_email(self):
        _make_user("a@x.co")
        response = self._send("post", USERS_URL, {"name": "A", "email": "A@x.co", "password": "pw"})
        self.assertEqual(response.json()["error"], "Email already registered")


class LoginTests(UserApiTestCase):
    def test_login_returns_tokens_with_role(self):
        _make_user("boss@x.co", role="admin")
        response = self._send("post", LOGIN_URL, {"email": "boss@x.co", "password": "secret123"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["user"]["role"], "admin")
        self.assertEqual(AccessToken(data["access"])["role"], "admin")
        self.assertEqual(data["token"], data["access"])

    def test_wrong_password_and_unknown_email(self):
        _make_user("a@x.co")
        for body in ({"email": "a@x.co", "password": "nope"}, {"email": "b@x.co", "password": "secret123"}):
            response = self._send("post", LOGIN_URL, body)
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json()["error"], "Invalid credentials")

    def test_inactive_user_cannot_log_in(self):
        user = _make_user("a@x.co")
        user.is_active = False
        user.save()
        self.assertEqual(self._send("post", LOGIN_URL, {"email": "a@x.co", "password": "secret123"}).status_code, 401)


class UserListTests(UserApiTestCase):
    def test_list_filters_by_role(self):
        _make_user("a@x.co")
        _make_user("m@x.co", role="manager")
        data = self.client.get(USERS_URL, {"role": "manager"}).json()
        self.assertEqual([u["email"] for u in data["users"]], ["m@x.co"])
        self.assertEqual(data["pagination"]["total"], 1)

    def test_single_not_found(self):
        self.assertEqual(self.client.get(USERS_URL, {"id": 999}).status_code, 404)


class UserUpdateTests(UserApiTestCase):
    def setUp(self):
        super().setUp()
        self.admin = _make_user("admin@x.co", role="admin")
        self.alice = _make_user("alice@x.co")
        self.bob = _make_user("bob@x.co")

    def test_requires_token(self):
        response = self._send("put", f"{USERS_URL}?id={self.alice.pk}", {"name": "Alice"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Unauthorized")

    def test_cannot_update_someone_else(self):
        response = self._send("put", f"{USERS_URL}?id={self.bob.pk}", {"name": "Bob"}, user=self.alice)
        self.assertEqual(response.status_code, 403)

    def test_self_update_ignores_role(self):
        response = self._send("put", f"{USERS_URL}?id={self.alice.pk}", {"name": "Alice", "role": "admin"}, user=self.alice)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["name"], "Alice")
        self.assertEqual(get_user_role(User.objects.get(pk=self.alice.pk)), "user")

    def test_email_in_use(self):
        response = self._send("put", f"{USERS_URL}?id={self.alice.pk}", {"email": "bob@x.co"}, user=self.alice)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Email already in use")

    def test_admin_changes_role(self):
        response = self._send("patch", f"{USERS_URL}?id={self.alice.pk}", {"role": "manager"}, user=self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "manager")

    def test_no_valid_updates(self):
        response = self._send("patch", f"{USERS_URL}?id={self.alice.pk}", {"role": "admin"}, user=self.alice)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "No valid updates provided")


class UserDeleteTests(UserApiTestCase):
    def setUp(self):
        super().setUp()
        self.admin = _make_user("admin@x.co", role="admin")
        self.alice = _make_user("alice@x.co")

    def _delete(self, pk, user=None):
        extra = {"HTTP_AUTHORIZATION": f"Bearer {tokens_for_user(user)['access']}"} if user else {}
        return self.client.delete(f"{USERS_URL}?id={pk}", **extra)

    def test_admin_deactivates(self):
        response = self._delete(self.alice.pk, user=self.admin)
        self.assertEqual(response.status_code, 200)
        self.alice.refresh_from_db()
        self.assertFalse(self.alice.is_active)

    def test_non_admin_rejected(self):
        response = self._delete(self.admin.pk, user=self.alice)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Unauthorized - Admin access required")

    def test_cannot_delete_self(self):
        response = self._delete(self.admin.pk, user=self.admin)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Cannot delete your own account")
