"""Issuing and verifying the JWT bearer tokens used by the API."""

import logging
from datetime import datetime, timedelta, timezone

import jwt

from .config import settings
from .errors import AuthenticationError
from .models import MemberRole
from .schemas import AuthenticatedIdentity, TokenResponse

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def _create_token(identity: AuthenticatedIdentity, expires: timedelta, token_type: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(identity.member_id),
        "username": identity.username,
        "role": identity.role.value,
        "type": token_type,
        "iat": now,
        "exp": now + expires,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(identity: AuthenticatedIdentity, expires: timedelta | None = None) -> str:
    if expires is None:
        expires = timedelta(minutes=settings.access_token_expire_minutes)
    return _create_token(identity, expires, ACCESS_TOKEN)


def create_refresh_token(identity: AuthenticatedIdentity, expires: timedelta | None = None) -> str:
    if expires is None:
        expires = timedelta(minutes=settings.refresh_token_expire_minutes)
    return _create_token(identity, expires, REFRESH_TOKEN)


def issue_token_pair(identity: AuthenticatedIdentity) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(identity),
        refresh_token=create_refresh_token(identity),
        expires_in=settings.access_token_expire_minutes * 60,
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> AuthenticatedIdentity:
    """Validate a token and return the identity its claims describe.

    Raises :class:`AuthenticationError` for a bad signature, an expired token,
    the wrong token type or missing/unknown claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid token")

    if payload.get("type") != expected_type:
        logger.warning("rejected %s token where %s was expected", payload.get("type"), expected_type)
        raise AuthenticationError("Invalid token")

    username = payload.get("username")
    try:
        member_id = int(payload["sub"])
        role = MemberRole(payload.get("role"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")
    if not username:
        raise AuthenticationError("Invalid token")

    return AuthenticatedIdentity(member_id=member_id, username=username, role=role)
