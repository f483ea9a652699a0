"""SQLAlchemy models."""

from ipgeo_api.models.user import User

__all__ = ["User"]
