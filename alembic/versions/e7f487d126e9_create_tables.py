"""create members and posts tables

Revision ID: e7f487d126e9
Revises: 
Create Date: 2025-08-05 03:33:49.922192

"""
from typing import Sequence, Union

from alembic import op
from board.models import Member, Post


# revision identifiers, used by Alembic.
revision: str = 'e7f487d126e9'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the members table, then posts with its cascading author key."""
    bind = op.get_bind()
    Member.__table__.create(bind, checkfirst=True)
    Post.__table__.create(bind, checkfirst=True)


def downgrade() -> None:
    """Drop posts before the members they reference."""
    bind = op.get_bind()
    Post.__table__.drop(bind, checkfirst=True)
    Member.__table__.drop(bind, checkfirst=True)
