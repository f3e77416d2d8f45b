"""Community board backend: members, posts and token based access control."""

from .api import app

__all__ = ["app"]
