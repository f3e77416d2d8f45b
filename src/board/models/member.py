import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from ..database import Base


class MemberRole(str, enum.Enum):
    """Authorization tag attached to every member."""

    ROLE_USER = "ROLE_USER"
    ROLE_ADMIN = "ROLE_ADMIN"


class Member(Base):
    """SQLAlchemy model for registered board members."""

    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(
        Enum(MemberRole, native_enum=False, length=20),
        default=MemberRole.ROLE_USER,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    posts = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
    )

    def update_info(self, name: str | None = None, password_hash: str | None = None) -> None:
        """Apply a partial profile update; blank values leave fields untouched."""
        if name is not None and name.strip():
            self.name = name.strip()
        if password_hash is not None and password_hash.strip():
            self.password_hash = password_hash

    def change_role(self, new_role: MemberRole | None) -> None:
        if new_role is not None:
            self.role = new_role

    def __repr__(self) -> str:
        return f"<Member id={self.id} username={self.username!r} role={self.role}>"
