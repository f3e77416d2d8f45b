"""Request/response schemas and entity to DTO mapping functions."""

from datetime import datetime
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import Member, MemberRole, Post

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    """Uniform success envelope."""

    data: T
    message: str


class ErrorResponse(BaseModel):
    """Uniform error envelope."""

    error: str
    message: str


class AuthenticatedIdentity(BaseModel):
    """Caller identity bound to a single request."""

    member_id: int
    username: str
    role: MemberRole


class MemberCreateRequest(CamelModel):
    """Request body for registering a new member."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class MemberUpdateRequest(CamelModel):
    """Partial profile update; blank fields are left untouched."""

    name: str | None = Field(None, max_length=100)
    password: str | None = None


class MemberResponse(CamelModel):
    """Member data returned to clients (no password)."""

    id: int
    username: str
    name: str
    role: MemberRole
    created_at: datetime


class LoginRequest(BaseModel):
    """Request body for member login."""

    username: str
    password: str


class RefreshRequest(BaseModel):
    """Request body for exchanging a refresh token."""

    refresh_token: str


class TokenResponse(BaseModel):
    """JWT access and refresh tokens."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class PostCreateRequest(CamelModel):
    """Request body for creating a post. The author comes from the token."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


class PostListItem(CamelModel):
    """Post summary used in listings."""

    id: int
    title: str
    author_name: str
    created_at: datetime


class PostDetail(CamelModel):
    """Full post including author information."""

    id: int
    title: str
    content: str
    author_id: int
    author_username: str
    author_name: str
    created_at: datetime


class AdminInfo(BaseModel):
    """Payload of the administrator landing endpoint."""

    username: str
    roles: List[MemberRole]
    message: str


def member_to_response(member: Member) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        username=member.username,
        name=member.name,
        role=member.role,
        created_at=member.created_at,
    )


def member_to_identity(member: Member) -> AuthenticatedIdentity:
    return AuthenticatedIdentity(
        member_id=member.id, username=member.username, role=member.role
    )


def post_to_list_item(post: Post) -> PostListItem:
    """Map a post with its author loaded to a listing entry."""
    return PostListItem(
        id=post.id,
        title=post.title,
        author_name=post.author.name,
        created_at=post.created_at,
    )


def post_to_detail(post: Post) -> PostDetail:
    author = post.author
    return PostDetail(
        id=post.id,
        title=post.title,
        content=post.content,
        author_id=author.id,
        author_username=author.username,
        author_name=author.name,
        created_at=post.created_at,
    )
