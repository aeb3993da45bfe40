"""
auth/tokens.py -- Bearer token issuance/verification and password hashing.

Security design decisions:
  JWT: python-jose, signed HS256 with SECRET_KEY. Tokens carry the user id,
       username, issue time and expiry. verify_token() raises InvalidToken on
       any failure -- the gate in auth/dependencies.py turns that into a 401.

       Only the HMAC family (HS256/HS384/HS512) is accepted on decode. A token
       whose header declares "none" or an asymmetric algorithm is rejected
       before its signature is even considered, which closes the classic
       algorithm-substitution forgery.

       Every verification failure (bad structure, bad signature, wrong
       algorithm, expired, wrong claim types) surfaces as the same
       InvalidToken. The specific cause is logged at DEBUG and nowhere else.

  Passwords: bcrypt with a fresh salt per call. The digest is self-describing
       ($2b$<cost>$<salt><hash>), so verification needs nothing but the stored
       string. The _DUMMY_HASH constant enables timing equalization in
       authenticate_user() so response time does not reveal whether a username
       exists.

  SECRET_KEY and the TTL are sourced from core.config.get_settings() once at
       module load and never change for the life of the process.

Layer rule: no imports from api/ or blog/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JOSEError, jwt
from jose.constants import ALGORITHMS

from auth.models import Identity
from core.config import get_settings
from core.errors import BadCredentials, InternalError, InvalidToken

if TYPE_CHECKING:
    from auth.models import User
    from blog.store import BlogStore

logger = logging.getLogger("blogapi.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = ALGORITHMS.HS256

# Accepted on decode. Anything outside the symmetric HMAC family is refused.
_ALLOWED_ALGORITHMS = [ALGORITHMS.HS256, ALGORITHMS.HS384, ALGORITHMS.HS512]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt digest of the given plaintext password.

    bcrypt only looks at the first 72 bytes of input and recent releases
    refuse longer input outright. The request models cap passwords at 72
    UTF-8 bytes; anything that still fails here is an internal error.
    """
    try:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
    except (TypeError, ValueError) as exc:
        logger.error("Password hashing failed: %s", type(exc).__name__)
        raise InternalError("Password hashing failed.") from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    A wrong password is a normal negative result. A corrupt digest is
    treated the same way rather than raised.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (TypeError, ValueError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("blogapi_timing_dummy")


# ---------------------------------------------------------------------------
# Token issue / verify
# ---------------------------------------------------------------------------


def issue_token(subject_id: int, display_name: str, now: datetime | None = None) -> str:
    """Encode a signed bearer token for the given user.

    Args:
        subject_id:   Numeric user id (claim "id").
        display_name: Username (claim "username").
        now:          Issue time; defaults to the current UTC time. Tests pass
                      a fixed value to exercise the expiry boundary.

    The "exp" claim is integer Unix seconds, now + TOKEN_EXPIRE_SECONDS.
    """
    issued = now or _utc_now()
    expires = issued + timedelta(seconds=_settings.token_expire_seconds)
    payload = {
        "id": subject_id,
        "username": display_name,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    try:
        return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)
    except JOSEError as exc:
        logger.error("Token signing failed: %s", type(exc).__name__)
        raise InternalError("Token signing failed.") from exc


def verify_token(token: str, now: datetime | None = None) -> Identity:
    """Verify a bearer token and return the identity it asserts.

    Raises InvalidToken for every kind of failure. Expiry is checked here
    against `now` rather than by python-jose so the boundary is exact and
    testable: the token is valid while now < exp.
    """
    try:
        claims = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=_ALLOWED_ALGORITHMS,
            options={"verify_exp": False},
        )
    except JOSEError as exc:
        logger.debug("Token rejected: %s", type(exc).__name__)
        raise InvalidToken() from None

    subject_id = claims.get("id")
    username = claims.get("username")
    exp = claims.get("exp")
    if not _is_int(subject_id) or subject_id < 1 or not isinstance(username, str) or not _is_int(exp):
        logger.debug("Token rejected: unexpected claim shape")
        raise InvalidToken()

    current = now or _utc_now()
    if current.timestamp() >= exp:
        logger.debug("Token rejected: expired")
        raise InvalidToken()

    iat = claims.get("iat")
    return Identity(
        subject_id=subject_id,
        display_name=username,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc) if _is_int(iat) else None,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


def _is_int(value: object) -> bool:
    # bool is an int subclass; a claim of `true` is not a user id.
    return isinstance(value, int) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: BlogStore, username: str, password: str) -> User:
    """Authenticate a username/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success. Raises BadCredentials on any failure, with
    the same message for both cases.
    """
    user = store.get_user_by_username(username)
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, _DUMMY_HASH)
        raise BadCredentials()
    if not verify_password(password, user.password_hash):
        raise BadCredentials()
    return user
