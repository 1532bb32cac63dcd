"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    SignupRequest,
    UserPublic,
)
from app.schemas.common import CreatedResponse, ErrorItem, ErrorResponse, MessageResponse
from app.schemas.health import HealthResponse
from app.schemas.post import (
    CommentCreate,
    CommentRead,
    PostCreate,
    PostDetailResponse,
    PostRead,
    PostUpdate,
    ToggleResponse,
)

__all__ = [
    "CommentCreate",
    "CommentRead",
    "CreatedResponse",
    "CurrentUser",
    "ErrorItem",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "PostCreate",
    "PostDetailResponse",
    "PostRead",
    "PostUpdate",
    "ProfileUpdateRequest",
    "SignupRequest",
    "ToggleResponse",
    "UserPublic",
]
