"""User model."""

from sqlalchemy import Column, Integer, String

from reading_api.database import Base
from reading_api.models.enums import UserRole
from reading_api.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Reader account. Credentials live with the auth service."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=True, index=True)
    role = Column(String(20), nullable=False, default="USER")  # "ADMIN" | "EDITOR" | "USER"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
