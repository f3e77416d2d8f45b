"""Command line tool for inspecting members and changing their roles."""

import argparse
import logging
import sys
from typing import List

from . import services
from .database import init_db
from .errors import NotFoundError
from .models import MemberRole

logger = logging.getLogger(__name__)


def list_members() -> None:
    """Print all members with their roles."""
    members = services.list_members()
    print("All members:")
    for member in members:
        print(f"  ID: {member.id}, Username: {member.username}, Name: {member.name}, Role: {member.role.value}")


def set_role(username: str, role_name: str) -> int:
    try:
        role = MemberRole(role_name)
    except ValueError:
        choices = ", ".join(r.value for r in MemberRole)
        print(f"Unknown role {role_name!r}; expected one of {choices}")
        return 1
    try:
        member = services.change_member_role(username, role)
    except NotFoundError:
        print(f"Member {username!r} not found")
        return 1
    print(f"Member {member.username} now has role {member.role.value}")
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="board-admin", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="list all members")
    role_parser = sub.add_parser("role", help="change a member's role")
    role_parser.add_argument("username")
    role_parser.add_argument("role", help="ROLE_USER or ROLE_ADMIN")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    init_db()

    if args.command == "list":
        list_members()
        return 0
    return set_role(args.username, args.role)


if __name__ == "__main__":
    sys.exit(main())
