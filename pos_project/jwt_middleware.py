"""Middleware to authenticate API requests via JWT Bearer token."""

import logging

from django.utils.deprecation import MiddlewareMixin
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

logger = logging.getLogger("pos")


class JWTAuthenticationMiddleware(MiddlewareMixin):
    """Set request.user from JWT when Authorization: Bearer <token> is present."""

    def process_request(self, request):
        auth_header = request.META.get("HTTP_AUTHORIZATION")
        if not auth_header or not auth_header.startswith("Bearer "):
            return
        try:
            validated = JWTAuthentication().authenticate(request)
        except (AuthenticationFailed, InvalidToken, TokenError) as e:
            logger.info("Rejected bearer token: %s", e)
            return
        if validated:
            request.user = validated[0]
