# -*- coding: utf-8 -*-
"""Error taxonomy shared by the storage layer and the HTTP handlers.

Each error carries the HTTP status it maps to; ``api.py`` turns them into
``{"detail": message}`` responses. ``BackendUnavailable`` is special: the
persistence gateway consumes it and switches to the fallback store.
"""

from __future__ import annotations


class NutraMeterError(Exception):
    """Base class for errors with a user-visible message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(NutraMeterError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(NutraMeterError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(NutraMeterError):
    status_code = 404
    default_message = "Not found"


class ConflictError(NutraMeterError):
    status_code = 409
    default_message = "Conflict"


class UpstreamServiceError(NutraMeterError):
    """The AI analysis service failed or returned output we could not use."""

    status_code = 500
    default_message = "AI analysis failed"


class ServiceUnconfigured(NutraMeterError):
    status_code = 503
    default_message = "Service not configured"


class BackendUnavailable(NutraMeterError):
    """The durable store could not be reached (connect failure, lock timeout, I/O error).

    Only this error triggers the fallback store. Rejections by the store
    (constraint violations) are raised as ``ConflictError``/``ValidationError``.
    """

    status_code = 500
