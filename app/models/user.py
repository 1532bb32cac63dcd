"""ORM model for blog accounts (auth and RBAC)."""

from enum import StrEnum

from sqlalchemy import Column, Integer, String

from app.models.base import Base


class Role(StrEnum):
    """The two account roles; ADMIN may manage posts and comments."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """
    Blog account for JWT authentication and role-based access control.

    role: 'USER' or 'ADMIN'
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    firstname = Column(String(255), nullable=False)
    lastname = Column(String(255), nullable=False)
    username = Column(String(20), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}"
