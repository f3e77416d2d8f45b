import pytest

from board import services
from board.auth import resolve_member
from board.errors import AuthenticationError, NotFoundError, ValidationError
from board.models import Member, MemberRole, Post


def test_register_defaults_to_user_role(session_local):
    member = services.register("user1", "1234", "Son")
    assert member.role == MemberRole.ROLE_USER
    assert member.id is not None

    session = session_local()
    stored = session.query(Member).filter_by(username="user1").one()
    assert stored.password_hash != "1234"
    session.close()


def test_register_duplicate(session_local):
    services.register("user1", "1234", "Son")
    with pytest.raises(ValidationError):
        services.register("user1", "abcd", "Other")


def test_lookups(session_local):
    created = services.register("user1", "1234", "Son")
    assert services.find_by_username("user1") == created
    assert services.find_by_id(created.id) == created
    with pytest.raises(NotFoundError):
        services.find_by_username("ghost")
    with pytest.raises(NotFoundError):
        services.find_by_id(999)


def test_validate_password(session_local):
    services.register("user1", "1234", "Son")
    assert services.validate_password("user1", "1234") is True
    assert services.validate_password("user1", "4321") is False
    with pytest.raises(NotFoundError):
        services.validate_password("ghost", "1234")


def test_authenticate(session_local):
    created = services.register("user1", "1234", "Son")
    identity = services.authenticate("user1", "1234")
    assert identity.member_id == created.id
    assert identity.role == MemberRole.ROLE_USER
    with pytest.raises(AuthenticationError):
        services.authenticate("user1", "nope")


def test_resolver_parity(session_local):
    created = services.register("user1", "1234", "Son")
    by_name = resolve_member(username="user1")
    by_id = resolve_member(member_id=created.id)
    assert by_name == by_id
    with pytest.raises(NotFoundError):
        resolve_member(username="ghost")
    with pytest.raises(ValueError):
        resolve_member()
    with pytest.raises(ValueError):
        resolve_member(username="user1", member_id=created.id)


def test_update_member_partial(session_local):
    services.register("user1", "1234", "Son")
    updated = services.update_member("user1", new_name=" Park ")
    assert updated.name == "Park"
    assert services.validate_password("user1", "1234")

    updated = services.update_member("user1", new_name="", new_password="5678")
    assert updated.name == "Park"
    assert services.validate_password("user1", "5678")


def test_change_member_role(session_local):
    services.register("user1", "1234", "Son")
    assert services.change_member_role("user1", MemberRole.ROLE_ADMIN).role == MemberRole.ROLE_ADMIN
    assert services.find_by_username("user1").role == MemberRole.ROLE_ADMIN


def test_change_role_ignores_none():
    member = Member(username="u", password_hash="h", name="n", role=MemberRole.ROLE_ADMIN)
    member.change_role(None)
    assert member.role == MemberRole.ROLE_ADMIN
    member.change_role(MemberRole.ROLE_USER)
    assert member.role == MemberRole.ROLE_USER


def test_create_post_for_unknown_author(session_local):
    with pytest.raises(NotFoundError):
        services.create_post("t", "c", "ghost")


def test_is_author_missing_post(session_local):
    with pytest.raises(NotFoundError):
        services.is_author(1, "user1")


def test_deleting_author_deletes_posts(session_local):
    services.register("user1", "1234", "Son")
    services.create_post("t", "c", "user1")

    session = session_local()
    session.delete(session.query(Member).filter_by(username="user1").one())
    session.commit()
    assert session.query(Post).count() == 0
    session.close()


def test_register_lost_race_is_validation_error(session_local, monkeypatch):
    services.register("user1", "1234", "Son")
    # Simulate a concurrent insert landing after the existence check
    monkeypatch.setattr(services, "_username_taken", lambda session, username: False)
    with pytest.raises(ValidationError):
        services.register("user1", "abcd", "Other")
    assert [m.username for m in services.list_members()] == ["user1"]


def test_register_trims_and_rejects_blank_name(session_local):
    assert services.register("user1", "1234", "  Son ").name == "Son"
    with pytest.raises(ValidationError):
        services.register("user2", "1234", "   ")
