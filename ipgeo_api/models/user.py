"""User model."""

from sqlalchemy import Column, Integer, String

from ipgeo_api.database import Base
from ipgeo_api.models.mixins import CreatedAtMixin


class User(Base, CreatedAtMixin):
    """User model for authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
