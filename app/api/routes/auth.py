"""Signup/login endpoints and auth dependencies (get_current_user, require_admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.api.errors import field_error
from app.core.database import get_db
from app.core.security import hash_password
from app.models import Role
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    UserPublic,
)
from app.schemas.common import MessageResponse
from app.services.auth import (
    AuthenticationError,
    InvalidTokenError,
    PermissionDeniedError,
    login,
    require_role,
    verify_token,
)
from app.services.users import (
    DuplicateUsernameError,
    Profile,
    create_user,
    get_user,
    get_user_by_username,
)

router = APIRouter()
security = HTTPBearer(auto_error=False)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=_BEARER_CHALLENGE,
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        user_id = verify_token(credentials.credentials)
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired token")
    user = get_user(db, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return CurrentUser.model_validate(user)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require an authenticated ADMIN. Raises 403 otherwise."""
    if not require_role(db, current_user.id, Role.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No permission for this route",
        )
    return current_user


def _signup(db: Session, body: SignupRequest, role: Role) -> None:
    taken = [field_error("Username already exists", "username")]
    if get_user_by_username(db, body.username) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=taken)
    profile = Profile(firstname=body.firstname, lastname=body.lastname, username=body.username)
    try:
        create_user(db, profile, hash_password(body.password), role)
    except DuplicateUsernameError:
        # Lost a race with a concurrent signup for the same username.
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=taken)


def _login(db: Session, body: LoginRequest, required_role: Role | None) -> LoginResponse:
    try:
        user, token = login(db, body.username, body.password, required_role)
    except AuthenticationError:
        raise _unauthorized("Invalid username or password.")
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    return LoginResponse(user=UserPublic.model_validate(user), token=token)


@router.post("/admin/signup", response_model=MessageResponse, status_code=201)
def admin_signup(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Create an ADMIN account."""
    _signup(db, body, Role.ADMIN)
    return MessageResponse(message="Admin created successfully")


@router.post("/admin/login", response_model=LoginResponse)
def admin_login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate an ADMIN with username and password; returns the account and a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    return _login(db, body, Role.ADMIN)


@router.post("/signup", response_model=MessageResponse, status_code=201)
def signup(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Create a reader (USER) account that may comment on posts."""
    _signup(db, body, Role.USER)
    return MessageResponse(message="User created successfully")


@router.post("/login", response_model=LoginResponse)
def user_login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """Authenticate any account; returns the account and a JWT."""
    return _login(db, body, None)
