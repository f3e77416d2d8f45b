"""Service layer for member accounts and board posts."""

import logging
from typing import List

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from .database import session_scope
from .errors import AuthenticationError, NotFoundError, ValidationError
from .models import Member, MemberRole, Post
from .schemas import (
    AuthenticatedIdentity,
    MemberResponse,
    PostDetail,
    PostListItem,
    member_to_identity,
    member_to_response,
    post_to_detail,
    post_to_list_item,
)
from .security import hash_password, verify_password


logger = logging.getLogger(__name__)

REGISTRATION_COUNTER = Counter(
    "member_registrations_total", "Total members registered"
)
LOGIN_FAILURE_COUNTER = Counter(
    "login_failures_total", "Total rejected login attempts"
)
POST_COUNTER = Counter("posts_created_total", "Total posts created")

DUPLICATE_USERNAME = "Username is already in use"


def _get_member(session: Session, username: str) -> Member:
    member = session.query(Member).filter(Member.username == username).first()
    if member is None:
        logger.warning("member not found username=%s", username)
        raise NotFoundError("Member not found")
    return member


def _username_taken(session: Session, username: str) -> bool:
    return session.query(Member.id).filter(Member.username == username).first() is not None


def register(username: str, password: str, name: str) -> MemberResponse:
    """Create a member with the default role.

    Raises :class:`ValidationError` when the username is taken, including the
    case where a concurrent registration wins the unique constraint, or when
    the name is blank. The name is stored trimmed.
    """
    logger.info("registration attempt username=%s", username)
    name = name.strip()
    if not name:
        raise ValidationError("Name must not be blank")
    password_hash = hash_password(password)
    try:
        with session_scope() as session:
            if _username_taken(session, username):
                logger.warning("registration rejected, duplicate username=%s", username)
                raise ValidationError(DUPLICATE_USERNAME)
            member = Member(
                username=username,
                password_hash=password_hash,
                name=name,
                role=MemberRole.ROLE_USER,
            )
            session.add(member)
            session.flush()
            response = member_to_response(member)
    except IntegrityError as exc:
        logger.warning("registration lost unique constraint race username=%s", username)
        raise ValidationError(DUPLICATE_USERNAME) from exc

    REGISTRATION_COUNTER.inc()
    logger.info("registered member id=%s username=%s", response.id, response.username)
    return response


def find_by_username(username: str) -> MemberResponse:
    logger.debug("member lookup username=%s", username)
    with session_scope() as session:
        return member_to_response(_get_member(session, username))


def find_by_id(member_id: int) -> MemberResponse:
    logger.debug("member lookup id=%s", member_id)
    with session_scope() as session:
        member = session.get(Member, member_id)
        if member is None:
            logger.warning("member not found id=%s", member_id)
            raise NotFoundError("Member not found")
        return member_to_response(member)


def get_my_info(username: str) -> MemberResponse:
    return find_by_username(username)


def validate_password(username: str, password: str) -> bool:
    """Check a login password for ``username``. Never exposed to clients."""
    with session_scope() as session:
        member = _get_member(session, username)
        password_hash = member.password_hash
    valid = verify_password(password, password_hash)
    if valid:
        logger.info("password check passed username=%s", username)
    else:
        logger.warning("password check failed username=%s", username)
    return valid


def authenticate(username: str, password: str) -> AuthenticatedIdentity:
    """Verify login credentials and return the member's identity.

    Unknown usernames and wrong passwords fail the same way.
    """
    with session_scope() as session:
        member = session.query(Member).filter(Member.username == username).first()
        identity = member_to_identity(member) if member else None
        password_hash = member.password_hash if member else None

    if identity is None or not verify_password(password, password_hash):
        LOGIN_FAILURE_COUNTER.inc()
        logger.warning("login failed username=%s", username)
        raise AuthenticationError("Invalid credentials")
    logger.info("login succeeded username=%s", username)
    return identity


def update_member(
    username: str, new_name: str | None = None, new_password: str | None = None
) -> MemberResponse:
    """Apply a partial profile update.

    Blank or missing values are ignored, the name is trimmed and a new
    password is re-hashed before it is stored.
    """
    logger.info("member update username=%s", username)
    password_hash = None
    if new_password is not None and new_password.strip():
        password_hash = hash_password(new_password)
    with session_scope() as session:
        member = _get_member(session, username)
        member.update_info(new_name, password_hash)
        session.flush()
        response = member_to_response(member)
    logger.info("member updated username=%s", username)
    return response


def change_member_role(username: str, role: MemberRole) -> MemberResponse:
    logger.info("role change username=%s role=%s", username, role)
    with session_scope() as session:
        member = _get_member(session, username)
        member.change_role(role)
        session.flush()
        return member_to_response(member)


def list_members() -> List[MemberResponse]:
    with session_scope() as session:
        members = session.query(Member).order_by(Member.id).all()
        return [member_to_response(m) for m in members]


def get_all_posts() -> List[PostListItem]:
    """Return post summaries, newest first, with author names fetched in one query."""
    with session_scope() as session:
        posts = (
            session.query(Post)
            .options(joinedload(Post.author))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )
        logger.info("listed %d posts", len(posts))
        return [post_to_list_item(p) for p in posts]


def _get_post(session: Session, post_id: int) -> Post:
    post = (
        session.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.id == post_id)
        .first()
    )
    if post is None:
        logger.warning("post not found id=%s", post_id)
        raise NotFoundError("Post not found")
    return post


def get_post_by_id(post_id: int) -> PostDetail:
    with session_scope() as session:
        post = _get_post(session, post_id)
        logger.info("loaded post id=%s title=%s", post.id, post.title)
        return post_to_detail(post)


def create_post(title: str, content: str, author_username: str) -> PostDetail:
    """Persist a post authored by ``author_username`` and return its detail."""
    logger.info("creating post author=%s", author_username)
    with session_scope() as session:
        author = _get_member(session, author_username)
        post = Post(title=title, content=content, author=author)
        session.add(post)
        session.flush()
        detail = post_to_detail(post)
    POST_COUNTER.inc()
    logger.info("created post id=%s title=%s", detail.id, detail.title)
    return detail


def is_author(post_id: int, username: str) -> bool:
    with session_scope() as session:
        post = _get_post(session, post_id)
        return post.author.username == username
