"""
Authentication and authorization.

Identity is established first (username lookup, then bcrypt comparison) and
only then is the role checked, so an account's role is never disclosed to a
caller who does not hold its password.
"""

import logging
from enum import StrEnum

import jwt
from sqlalchemy.orm import Session

from app.core.security import create_access_token, decode_access_token, verify_password
from app.models import Role, User
from app.services.users import get_user, get_user_by_username

logger = logging.getLogger(__name__)


class AuthFailure(StrEnum):
    UNKNOWN_USER = "unknown user"
    INCORRECT_PASSWORD = "incorrect password"


class AuthenticationError(Exception):
    """Raised when username/password do not identify an account."""

    def __init__(self, reason: AuthFailure) -> None:
        self.reason = reason
        super().__init__(reason.value)


class PermissionDeniedError(Exception):
    """Raised when an authenticated account lacks the role an action requires."""

    def __init__(self, required_role: Role) -> None:
        self.required_role = required_role
        self.message = "Your account does not meet the required permissions"
        super().__init__(self.message)


class InvalidTokenError(Exception):
    """Raised for any token that cannot be trusted (bad signature, expired, malformed)."""


def authenticate(db: Session, username: str, password: str) -> User:
    user = get_user_by_username(db, username)
    if user is None:
        raise AuthenticationError(AuthFailure.UNKNOWN_USER)
    if not verify_password(password, user.password_hash):
        raise AuthenticationError(AuthFailure.INCORRECT_PASSWORD)
    return user


def authorize(user: User, required_role: Role) -> None:
    if user.role != required_role:
        raise PermissionDeniedError(required_role)


def issue_token(user_id: int) -> str:
    return create_access_token(user_id)


def verify_token(token: str) -> int:
    """Return the user id carried by a valid token; raise InvalidTokenError otherwise."""
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        raise InvalidTokenError() from e
    user_id = payload.get("id")
    # bool is an int subclass; a token carrying true/false is not a user id.
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise InvalidTokenError()
    return user_id


def login(
    db: Session,
    username: str,
    password: str,
    required_role: Role | None = None,
) -> tuple[User, str]:
    """
    Authenticate, then authorize when a role is required, then mint a token.
    Raises AuthenticationError or PermissionDeniedError.
    """
    try:
        user = authenticate(db, username, password)
    except AuthenticationError as e:
        logger.info("Login rejected", extra={"reason": e.reason.value})
        raise
    if required_role is not None:
        authorize(user, required_role)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return user, issue_token(user.id)


def require_role(db: Session, user_id: int, role: Role) -> bool:
    """Re-read the account on every call so role changes apply immediately."""
    user = get_user(db, user_id)
    return user is not None and user.role == role
