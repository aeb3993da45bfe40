"""
core/errors.py -- Typed exception hierarchy for every blog API failure mode.

Every error carries a machine-readable code, a user-facing message and the
HTTP status the API layer maps it to. Services and the auth package raise
these; api/main.py owns the single exception handler that turns them into the
{"error": {...}} envelope. Nothing below api/ imports fastapi to report a
failure.

Taxonomy:
  Unauthenticated   -- no usable credential where one is required (401)
    MissingCredentials      -- no Authorization header
    MalformedAuthorization  -- header present but not "Bearer <token>"
    InvalidToken            -- malformed, badly signed or expired token
    BadCredentials          -- login with a wrong username or password
  NotFound          -- target row absent (404), always checked before ownership
  PermissionDenied  -- ownership check failed (403)
  ValidationFailed  -- request body or parameters rejected by the request models (422)
  Conflict          -- uniqueness violation, e.g. taken username (409)
  InternalError     -- hashing, signing or store failure (500)

The three Unauthenticated subclasses exist so callers and logs can tell the
causes apart. Over the wire they all render as the same 401 body.

Layer rule: core/ is the kernel. No imports from api/, auth/, or blog/.
"""

from __future__ import annotations


class BlogError(Exception):
    """Base exception for all blog API errors."""

    code = "internal_error"
    http_status = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        """Return the REST error envelope for this error."""
        return {"error": {"code": self.code, "message": self.message}}


# ---------------------------------------------------------------------------
# Authentication (401)
# ---------------------------------------------------------------------------


class Unauthenticated(BlogError):
    code = "unauthorized"
    http_status = 401
    default_message = "Authentication required."


class MissingCredentials(Unauthenticated):
    """The request carries no Authorization header."""


class MalformedAuthorization(Unauthenticated):
    """The Authorization header is not of the form "Bearer <token>"."""


class InvalidToken(Unauthenticated):
    """Token failed structure, signature, algorithm or expiry checks.

    Deliberately a single class: callers must not learn which check failed.
    """

    default_message = "Invalid or expired token."


class BadCredentials(Unauthenticated):
    """Login failed. Same message for unknown username and wrong password."""

    code = "bad_credentials"
    default_message = "Invalid username or password."


# ---------------------------------------------------------------------------
# Domain errors (4xx)
# ---------------------------------------------------------------------------


class NotFound(BlogError):
    code = "not_found"
    http_status = 404
    default_message = "Resource not found."


class PermissionDenied(BlogError):
    code = "forbidden"
    http_status = 403
    default_message = "You do not have permission to modify this resource."


class ValidationFailed(BlogError):
    code = "validation_error"
    http_status = 422
    default_message = "Request validation failed."


class Conflict(BlogError):
    code = "conflict"
    http_status = 409
    default_message = "Resource already exists."


# ---------------------------------------------------------------------------
# Infrastructure (500)
# ---------------------------------------------------------------------------


class InternalError(BlogError):
    """Hashing, signing or persistence failure. Message is safe to return."""
