"""
api/routes/v1/users.py -- Endpoints about the authenticated user.

Routes:
  GET /api/v1/user/profile   -- current user's account (requires auth)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import UserResponse
from auth.dependencies import require_identity
from auth.models import Identity
from blog.service import UserService
from blog.store import BlogStore

router = APIRouter()


@router.get("/user/profile", response_model=UserResponse)
def get_profile(request: Request, identity: Identity = Depends(require_identity)) -> UserResponse:
    """Return the account behind the bearer token.

    404 if the account no longer exists even though its token still verifies.
    """
    store: BlogStore = request.app.state.store
    return UserResponse.from_user(UserService(store).get_profile(identity.subject_id))
