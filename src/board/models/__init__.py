from .member import Member, MemberRole
from .post import Post

__all__ = ["Member", "MemberRole", "Post"]
