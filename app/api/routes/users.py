"""Account endpoints: own profile and admin deletion."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.errors import field_error
from app.api.routes.auth import get_current_user, require_admin
from app.core.database import get_db
from app.core.security import hash_password
from app.schemas.auth import CurrentUser, ProfileUpdateRequest, UserPublic
from app.schemas.common import MessageResponse
from app.services.users import (
    DuplicateUsernameError,
    Profile,
    delete_user,
    get_user,
    get_user_by_username,
    update_user,
)

router = APIRouter()

_USER_NOT_FOUND = "User not found"


@router.get("/me", response_model=UserPublic)
def read_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserPublic:
    user = get_user(db, current_user.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_USER_NOT_FOUND)
    return UserPublic.model_validate(user)


@router.put("/me", response_model=MessageResponse)
def update_me(
    body: ProfileUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Update first/last name and username; the password changes only when supplied."""
    taken = [field_error("Username already exists", "username")]
    existing = get_user_by_username(db, body.username)
    if existing is not None and existing.id != current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=taken)
    profile = Profile(firstname=body.firstname, lastname=body.lastname, username=body.username)
    password_hash = hash_password(body.password) if body.password is not None else None
    try:
        updated = update_user(db, current_user.id, profile, password_hash)
    except DuplicateUsernameError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=taken)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_USER_NOT_FOUND)
    return MessageResponse(message="Profile updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
def remove_user(
    user_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete an account (admin only). Its posts and comments remain with an unknown author."""
    if not delete_user(db, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_USER_NOT_FOUND)
    return MessageResponse(message="User deleted successfully")
