"""Render uncaught exceptions on /api/ paths as JSON 500 responses."""

import logging

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger("pos")


class APIExceptionMiddleware(MiddlewareMixin):
    """{"error": <message>} with status 500 instead of the HTML error page."""

    def process_exception(self, request, exception):
        if not request.path.startswith("/api/"):
            return None
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = str(exception) or exception.__class__.__name__
        return JsonResponse({"error": message}, status=500)
