"""WebSocket middleware to authenticate via JWT in query string."""

from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken


class JWTWebSocketMiddleware:
    """If ?token= is present and valid, set scope['user'] to its owner."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "websocket":
            return await self.app(scope, receive, send)
        params = parse_qs(scope.get("query_string", b"").decode())
        token_list = params.get("token")
        token = token_list[0] if token_list else None
        if token and (not scope.get("user") or not scope["user"].is_authenticated):
            User = get_user_model()
            try:
                user_id = AccessToken(token).get("user_id")
                if user_id:
                    scope["user"] = await sync_to_async(User.objects.get)(pk=user_id, is_active=True)
            except (TokenError, User.DoesNotExist):
                pass
        return await self.app(scope, receive, send)
