from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


class Post(Base):
    """SQLAlchemy model for a board post owned by a single member."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    author_id = Column(
        Integer,
        ForeignKey("members.id", ondelete="CASCADE", name="fk_post_author"),
        nullable=False,
        index=True,
    )

    author = relationship("Member", back_populates="posts")

    def __repr__(self) -> str:
        return f"<Post id={self.id} title={self.title!r} author_id={self.author_id}>"
