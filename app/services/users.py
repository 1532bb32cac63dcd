"""Credential store: persistence of user accounts."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Role, User
from app.services.store import store_operation

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown"


class DuplicateUsernameError(Exception):
    """Raised when a username is already taken (unique index violation)."""

    def __init__(self, username: str) -> None:
        self.username = username
        self.message = "Username already exists"
        super().__init__(self.message)


def _is_unique_violation(e: IntegrityError) -> bool:
    """True for a unique-constraint violation (PostgreSQL SQLSTATE 23505 or SQLite's message)."""
    if getattr(e.orig, "pgcode", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(e.orig)


@dataclass(frozen=True)
class Profile:
    """Editable identity fields of an account."""

    firstname: str
    lastname: str
    username: str


def get_user_by_username(db: Session, username: str) -> User | None:
    with store_operation(db, "get user by username"):
        return db.query(User).filter(User.username == username).first()


def get_user(db: Session, user_id: int) -> User | None:
    with store_operation(db, "get user by id"):
        return db.get(User, user_id)


def create_user(db: Session, profile: Profile, password_hash: str, role: Role) -> User:
    """Insert a new account. Raises DuplicateUsernameError if the username is taken."""
    user = User(
        firstname=profile.firstname,
        lastname=profile.lastname,
        username=profile.username,
        password_hash=password_hash,
        role=role.value,
    )
    with store_operation(db, "create user"):
        try:
            db.add(user)
            db.commit()
        except IntegrityError as e:
            if not _is_unique_violation(e):
                raise
            db.rollback()
            raise DuplicateUsernameError(profile.username) from e
        db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": user.role})
    return user


def update_user(
    db: Session,
    user_id: int,
    profile: Profile,
    password_hash: str | None = None,
) -> bool:
    """Update profile (and optionally password). Returns False if the user does not exist."""
    values: dict = {
        User.firstname: profile.firstname,
        User.lastname: profile.lastname,
        User.username: profile.username,
    }
    if password_hash is not None:
        values[User.password_hash] = password_hash
    with store_operation(db, "update user"):
        try:
            updated = (
                db.query(User)
                .filter(User.id == user_id)
                .update(values, synchronize_session=False)
            )
            db.commit()
        except IntegrityError as e:
            if not _is_unique_violation(e):
                raise
            db.rollback()
            raise DuplicateUsernameError(profile.username) from e
    return updated > 0


def delete_user(db: Session, user_id: int) -> bool:
    """Delete an account. Returns False if the user does not exist."""
    with store_operation(db, "delete user"):
        deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db.commit()
    if deleted:
        logger.info("User deleted", extra={"user_id": user_id})
    return deleted > 0


def get_author_names(db: Session, user_ids: Iterable[int | None]) -> dict[int, str]:
    """Map each existing user id to 'firstname lastname' in a single query."""
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    with store_operation(db, "get author names"):
        rows = db.query(User.id, User.firstname, User.lastname).filter(User.id.in_(ids)).all()
    return {row.id: f"{row.firstname} {row.lastname}" for row in rows}


def author_name(names: dict[int, str], author_id: int | None) -> str:
    """Display name for author_id, or 'Unknown' when the account is gone."""
    if author_id is None:
        return UNKNOWN_AUTHOR
    return names.get(author_id, UNKNOWN_AUTHOR)
