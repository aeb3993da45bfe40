"""
api/routes/v1/auth.py -- Registration and login endpoints.

Routes:
  POST /api/v1/auth/register   -- create an account; 201
  POST /api/v1/auth/login      -- password login; returns a bearer token

Both endpoints are public. Login returns the same "bad_credentials" error for
an unknown username and a wrong password so the response does not reveal
which usernames exist.

Security:
  authenticate_user() (via UserService.login) provides timing equalization --
  never inline get_user_by_username() + verify_password().
  Cache-Control: no-store on login responses so tokens are not cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from blog.service import UserService
from blog.store import BlogStore
from core.config import get_settings
from core.errors import BadCredentials

router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> UserResponse:
    """Create a new account. 409 if the username or email is already taken."""
    store: BlogStore = request.app.state.store
    user = UserService(store).register(body.username, body.email, body.password)
    return UserResponse.from_user(user)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return a signed bearer token."""
    store: BlogStore = request.app.state.store
    try:
        user, token = UserService(store).login(body.username, body.password)
    except BadCredentials as exc:
        resp = JSONResponse(status_code=exc.http_status, content=exc.to_response())
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=get_settings().token_expire_seconds,
            user=UserResponse.from_user(user),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
