"""Envelopes shared by every endpoint."""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Confirmation of a successful mutation."""

    message: str


class CreatedResponse(MessageResponse):
    """Confirmation of a created resource with its id."""

    id: int


class ErrorItem(BaseModel):
    """One failure; field errors also carry path and location."""

    msg: str
    type: str | None = None
    path: str | None = None
    location: str | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    errors: list[ErrorItem] = Field(default_factory=list)
    detail: str | None = Field(default=None, description="Underlying error; DEBUG only")
