from __future__ import annotations

import hmac
import logging

from django.conf import settings
from rest_framework import permissions

logger = logging.getLogger(__name__)

ADMIN_KEY_HEADER = "X-Admin-Key"


# PUBLIC_INTERFACE
class HasAdminApiKey(permissions.BasePermission):
    """Allow admin endpoints for requests carrying the configured X-Admin-Key.

    With DEBUG on and CROSSWORD_ADMIN_BYPASS_IN_DEBUG set, every request is
    let through so local authoring needs no key.
    """

    message = "Missing or invalid X-Admin-Key header."

    def has_permission(self, request, view) -> bool:
        if settings.DEBUG and getattr(settings, "CROSSWORD_ADMIN_BYPASS_IN_DEBUG", False):
            return True

        expected = getattr(settings, "CROSSWORD_ADMIN_API_KEY", "") or ""
        if not expected:
            logger.error("Admin API key not configured (CROSSWORD_ADMIN_API_KEY)")
            return False

        provided = request.headers.get(ADMIN_KEY_HEADER, "")
        if not provided:
            logger.warning("Admin authentication failed: no %s header", ADMIN_KEY_HEADER)
            return False
        if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            logger.warning("Admin authentication failed: invalid API key")
            return False
        return True
