"""Authentication resolver and the access control gate for API routes."""

import logging
from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .database import session_scope
from .errors import AuthenticationError, AuthorizationError, NotFoundError
from .models import Member, MemberRole
from .schemas import AuthenticatedIdentity, member_to_identity
from .tokens import decode_token

logger = logging.getLogger(__name__)

# Missing credentials are reported through AuthenticationError, not FastAPI's default
security = HTTPBearer(auto_error=False, description="JWT access token")


def resolve_member(
    username: str | None = None, member_id: int | None = None
) -> AuthenticatedIdentity:
    """Load a member by username or by id and return it as an identity.

    Exactly one of ``username`` and ``member_id`` must be given. Raises
    :class:`NotFoundError` when no such member exists.
    """
    if (username is None) == (member_id is None):
        raise ValueError("resolve_member needs exactly one of username or member_id")

    with session_scope() as session:
        query = session.query(Member)
        if username is not None:
            member = query.filter(Member.username == username).first()
        else:
            member = query.filter(Member.id == member_id).first()
        if member is None:
            logger.warning("member lookup failed username=%s id=%s", username, member_id)
            raise NotFoundError("Member not found")
        logger.debug("resolved member username=%s role=%s", member.username, member.role)
        return member_to_identity(member)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedIdentity:
    """Validate the bearer token and bind its identity to the request."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    identity = decode_token(credentials.credentials)

    if settings.token_identity_lookup:
        try:
            resolve_member(member_id=identity.member_id)
        except NotFoundError:
            raise AuthenticationError("Member not found")

    logger.debug("authenticated username=%s role=%s", identity.username, identity.role)
    return identity


def require_role(role: MemberRole) -> Callable[..., AuthenticatedIdentity]:
    """Build a dependency admitting only identities carrying exactly ``role``."""

    def dependency(
        identity: AuthenticatedIdentity = Depends(get_current_identity),
    ) -> AuthenticatedIdentity:
        if identity.role != role:
            logger.warning(
                "access denied username=%s role=%s required=%s",
                identity.username,
                identity.role,
                role,
            )
            raise AuthorizationError("Insufficient role")
        return identity

    return dependency


require_admin = require_role(MemberRole.ROLE_ADMIN)
