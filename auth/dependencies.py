"""
auth/dependencies.py -- FastAPI Depends() helpers that gate requests on a bearer token.

Only the Authorization header is consulted. It must read exactly
"Bearer <token>": case-sensitive scheme, one space, non-empty token.

optional_identity() is the soft variant: every failure (no header, bad
scheme, token that does not verify) yields None and the handler runs
anonymously.
require_identity() is the hard variant: the same failures abort the request
with HTTP 401 before the handler runs.

The acting identity reaches handlers as an explicit parameter:

    @router.post("/posts")
    def create_post(body: PostCreate, identity: Identity = Depends(require_identity)): ...

Neither gate touches the store. Identity comes from the token alone.

Layer rule: no imports from api/ or blog/.
  auth/dependencies.py may import from fastapi (for Request/HTTPException)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.models import Identity
from auth.tokens import verify_token
from core.errors import MalformedAuthorization, MissingCredentials, Unauthenticated

logger = logging.getLogger("blogapi.auth")

_SCHEME = "Bearer"

# Single external outcome for every gate rejection. Which check failed is
# visible in DEBUG logs only.
_UNAUTHORIZED_DETAIL = {"code": Unauthenticated.code, "message": Unauthenticated.default_message}


def extract_bearer_token(header: str | None) -> str:
    """Return the token from an Authorization header value.

    Raises MissingCredentials when the header is absent or empty and
    MalformedAuthorization when it is not exactly "Bearer <token>".
    """
    if not header:
        raise MissingCredentials()
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != _SCHEME or not parts[1]:
        raise MalformedAuthorization("Invalid authorization header format.")
    return parts[1]


def authenticate_request(request: Request) -> Identity:
    """Extract and verify the bearer token on a request.

    Raises one of MissingCredentials, MalformedAuthorization or InvalidToken.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    return verify_token(token)


def optional_identity(request: Request) -> Identity | None:
    """Return the caller's Identity when a valid token is present, else None.

    Never raises. Used on read endpoints whose response does not depend on
    who is asking, so identity-aware behaviour can be added later without
    changing the gate.
    """
    try:
        return authenticate_request(request)
    except Unauthenticated as exc:
        logger.debug("Optional auth fell through: %s", type(exc).__name__)
        return None


def require_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises HTTP 401 otherwise."""
    try:
        return authenticate_request(request)
    except Unauthenticated as exc:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, type(exc).__name__)
        raise HTTPException(
            status_code=401,
            detail=_UNAUTHORIZED_DETAIL,
            headers={"WWW-Authenticate": _SCHEME},
        ) from None
