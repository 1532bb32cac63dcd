"""Request/response schemas for signup, login and profile endpoints."""

import re

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 20
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 64
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.]+$")


def _required(value: str, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(message)
    return value


def validate_username(value: str) -> str:
    value = _required(value, "Username is required")
    if not (USERNAME_MIN_LEN <= len(value) <= USERNAME_MAX_LEN):
        raise ValueError(
            f"Username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters long"
        )
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username must contain only letters, numbers, underscores, or periods")
    return value


def validate_password(value: str) -> str:
    if not value:
        raise ValueError("Password is required")
    if not (PASSWORD_MIN_LEN <= len(value) <= PASSWORD_MAX_LEN):
        raise ValueError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters long"
        )
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", value):
        raise ValueError("Password must contain at least one number")
    return value


class ProfileFields(BaseModel):
    """Name and username rules shared by signup and profile update."""

    model_config = ConfigDict(validate_default=True)

    firstname: str = Field(default="", description="First name")
    lastname: str = Field(default="", description="Last name")
    username: str = Field(default="", description="Login handle (letters, digits, _ and .)")

    @field_validator("firstname")
    @classmethod
    def check_firstname(cls, v: str) -> str:
        return _required(v, "First name is required")

    @field_validator("lastname")
    @classmethod
    def check_lastname(cls, v: str) -> str:
        return _required(v, "Last name is required")

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v)


class SignupRequest(ProfileFields):
    """New account details; password must be confirmed."""

    password: str = Field(default="", description="Password")
    confirmpassword: str = Field(default="", description="Repeat of password")

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("confirmpassword")
    @classmethod
    def check_passwords_match(cls, v: str, info: ValidationInfo) -> str:
        # password is absent from info.data when it failed its own rules.
        if "password" not in info.data:
            return v
        if v != info.data["password"]:
            raise ValueError("Passwords do not match")
        return v


class ProfileUpdateRequest(ProfileFields):
    """Profile edit; password is changed only when given."""

    password: str | None = Field(default=None, description="New password")

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return validate_password(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    model_config = ConfigDict(validate_default=True)

    username: str = Field(default="", description="Username")
    password: str = Field(default="", description="Password")

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return _required(v, "Username is required")

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserPublic(BaseModel):
    """Account as returned to clients (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    firstname: str
    lastname: str
    username: str
    role: str


class LoginResponse(BaseModel):
    """Authenticated account and its bearer token."""

    user: UserPublic
    token: str = Field(..., description="JWT; send as 'Authorization: Bearer <token>'")


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str
