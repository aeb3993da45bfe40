"""
API request and response models for the blog REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
blog/models.py, which own the internal domain representation. Route handlers
map between the two.

No response model has a password or password_hash field, so a digest cannot
leak through serialization.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from auth.models import User
from blog.models import Comment, Post

# bcrypt ignores (and recent releases reject) input past 72 bytes.
_MAX_PASSWORD_BYTES = 72


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        """Reject passwords bcrypt would truncate. Counted in bytes, not characters."""
        if len(value.encode("utf-8")) > _MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {_MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=255)


class PostWrite(BaseModel):
    """Request body for POST /api/v1/posts and PUT /api/v1/posts/{post_id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)


class CommentWrite(BaseModel):
    """Request body for creating or editing a comment."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, username=user.username, email=user.email, created_at=user.created_at)


class AuthorSummary(BaseModel):
    """Public identity of a post or comment author."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class CommentResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    content: str
    author_id: int
    post_id: int
    author: Optional[AuthorSummary] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_comment(cls, comment: Comment, authors: dict[int, User]) -> "CommentResponse":
        """Build a response, embedding the author summary when the author is known."""
        return cls(
            id=comment.id,
            content=comment.content,
            author_id=comment.author_id,
            post_id=comment.post_id,
            author=_author_summary(authors.get(comment.author_id)),
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class PostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    content: str
    author_id: int
    author: Optional[AuthorSummary] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_post(cls, post: Post, authors: dict[int, User]) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            author_id=post.author_id,
            author=_author_summary(authors.get(post.author_id)),
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostDetailResponse(PostResponse):
    """GET /api/v1/posts/{post_id} -- the post plus its comments, newest first."""

    comments: list[CommentResponse] = Field(default_factory=list)


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    page_size: int
    total: int
    total_pages: int


class PostListResponse(BaseModel):
    """GET /api/v1/posts -- one page of posts, newest first."""

    model_config = ConfigDict(frozen=True)

    posts: list[PostResponse]
    pagination: Pagination


class CommentListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    comments: list[CommentResponse]
    total: int


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    timestamp: int


def _author_summary(user: Optional[User]) -> Optional[AuthorSummary]:
    if user is None:
        return None
    return AuthorSummary(id=user.id, username=user.username)
