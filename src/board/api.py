"""FastAPI application exposing member, post and admin endpoints."""

import logging
from typing import List

from fastapi import Depends, FastAPI, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from prometheus_client import Counter

from . import services
from .auth import get_current_identity, require_admin, resolve_member
from .config import settings
from .database import init_db
from .errors import AuthenticationError, NotFoundError, register_exception_handlers
from .schemas import (
    AdminInfo,
    ApiResponse,
    AuthenticatedIdentity,
    ErrorResponse,
    LoginRequest,
    MemberCreateRequest,
    MemberResponse,
    MemberUpdateRequest,
    PostCreateRequest,
    PostDetail,
    PostListItem,
    RefreshRequest,
    TokenResponse,
)
from .tokens import REFRESH_TOKEN, decode_token, issue_token_pair


limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
app = FastAPI(
    title=settings.api_title,
    description="REST API for a community board: members, posts and administration.",
    version=settings.api_version,
    contact={"name": "Board development team"},
)
app.state.limiter = limiter
register_exception_handlers(app)
init_db()

logger = logging.getLogger(__name__)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _endpoint_label(request: Request) -> str:
    """Route template for metrics labels, so path ids do not add series."""
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and their outcomes while updating metrics."""
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=_endpoint_label(request),
            status=str(response.status_code),
        ).inc()
        logger.info(
            "response %s %s status %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response
    except Exception:
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=_endpoint_label(request),
            status="500",
        ).inc()
        logger.exception(
            "error handling %s %s", request.method, request.url.path
        )
        raise


@app.post(
    "/api/members",
    response_model=ApiResponse[MemberResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["members"],
)
@limiter.limit(settings.auth_rate_limit)
def register(request: Request, payload: MemberCreateRequest):
    """Register a new member with the ordinary user role."""
    member = services.register(payload.username, payload.password, payload.name)
    return ApiResponse(data=member, message="Registration completed")


@app.get(
    "/api/members/me",
    response_model=ApiResponse[MemberResponse],
    responses=ERROR_RESPONSES,
    tags=["members"],
)
def get_my_info(identity: AuthenticatedIdentity = Depends(get_current_identity)):
    """Return the authenticated member's own profile."""
    member = services.get_my_info(identity.username)
    return ApiResponse(data=member, message="Member info loaded")


@app.patch(
    "/api/members/me",
    response_model=ApiResponse[MemberResponse],
    responses=ERROR_RESPONSES,
    tags=["members"],
)
def update_my_info(
    payload: MemberUpdateRequest,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
):
    """Update the caller's name and/or password. Blank fields are ignored."""
    member = services.update_member(identity.username, payload.name, payload.password)
    return ApiResponse(data=member, message="Member info updated")


@app.get(
    "/api/members/{member_id}",
    response_model=ApiResponse[MemberResponse],
    responses=ERROR_RESPONSES,
    tags=["members"],
)
def get_member(member_id: int, identity: AuthenticatedIdentity = Depends(require_admin)):
    """Return any member's profile. Administrators only."""
    member = services.find_by_id(member_id)
    return ApiResponse(data=member, message="Member info loaded")


@app.post(
    "/api/auth/login",
    response_model=ApiResponse[TokenResponse],
    responses=ERROR_RESPONSES,
    tags=["auth"],
)
@limiter.limit(settings.auth_rate_limit)
def login(request: Request, payload: LoginRequest):
    """Exchange username and password for an access/refresh token pair."""
    identity = services.authenticate(payload.username, payload.password)
    return ApiResponse(data=issue_token_pair(identity), message="Login succeeded")


@app.post(
    "/api/auth/refresh",
    response_model=ApiResponse[TokenResponse],
    responses=ERROR_RESPONSES,
    tags=["auth"],
)
def refresh(payload: RefreshRequest):
    """Issue a new token pair from a refresh token, picking up role changes."""
    claims = decode_token(payload.refresh_token, expected_type=REFRESH_TOKEN)
    try:
        identity = resolve_member(member_id=claims.member_id)
    except NotFoundError:
        raise AuthenticationError("Member not found")
    return ApiResponse(data=issue_token_pair(identity), message="Token refreshed")


@app.get(
    "/api/posts",
    response_model=ApiResponse[List[PostListItem]],
    tags=["posts"],
)
def list_posts():
    """Return all posts, newest first."""
    posts = services.get_all_posts()
    return ApiResponse(data=posts, message="Posts loaded")


@app.get(
    "/api/posts/{post_id}",
    response_model=ApiResponse[PostDetail],
    responses=ERROR_RESPONSES,
    tags=["posts"],
)
def get_post(post_id: int, identity: AuthenticatedIdentity = Depends(get_current_identity)):
    """Return a single post with its author."""
    post = services.get_post_by_id(post_id)
    return ApiResponse(data=post, message="Post loaded")


@app.post(
    "/api/posts",
    response_model=ApiResponse[PostDetail],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["posts"],
)
def create_post(
    payload: PostCreateRequest,
    identity: AuthenticatedIdentity = Depends(get_current_identity),
):
    """Create a post authored by the caller."""
    post = services.create_post(payload.title, payload.content, identity.username)
    return ApiResponse(data=post, message="Post created")


@app.get(
    "/admin",
    response_model=ApiResponse[AdminInfo],
    responses=ERROR_RESPONSES,
    tags=["admin"],
)
def get_admin_info(identity: AuthenticatedIdentity = Depends(require_admin)):
    """Administrator landing endpoint echoing the caller's identity."""
    logger.info("admin page accessed username=%s roles=%s", identity.username, identity.role)
    info = AdminInfo(
        username=identity.username,
        roles=[identity.role],
        message="Administrator page accessed",
    )
    return ApiResponse(data=info, message="Admin info loaded")
