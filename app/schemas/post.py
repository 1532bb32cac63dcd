"""Request/response schemas for posts and comments."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TITLE_MIN_LEN = 1
CONTENT_MIN_LEN = 3


def _min_length(value: str, minimum: int, message: str) -> str:
    value = (value or "").strip()
    if len(value) < minimum:
        raise ValueError(message)
    return value


class PostFields(BaseModel):
    """Title and body rules shared by create and update."""

    model_config = ConfigDict(validate_default=True)

    title: str = Field(default="", max_length=255)
    content: str = ""

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _min_length(v, TITLE_MIN_LEN, "Title must not be empty.")

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        return _min_length(v, CONTENT_MIN_LEN, "Blog body must be a minimum of 3 characters")


class PostCreate(PostFields):
    published: bool = False


class PostUpdate(PostFields):
    pass


class CommentCreate(BaseModel):
    model_config = ConfigDict(validate_default=True)

    content: str = ""

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        return _min_length(v, CONTENT_MIN_LEN, "Comment must be a minimum of 3 characters")


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PostRead(_CamelModel):
    """Post with its author's display name attached."""

    id: int
    title: str
    content: str
    author_id: int | None
    published: bool
    image: str | None
    created_at: datetime
    author_name: str


class CommentRead(_CamelModel):
    """Comment with its author's display name attached."""

    id: int
    content: str
    post_id: int
    author_id: int | None
    created_at: datetime
    author_name: str


class PostDetailResponse(BaseModel):
    """GET /posts/{post_id}: the post and its comments."""

    post: PostRead
    comments: list[CommentRead]


class ToggleResponse(BaseModel):
    message: str
    published: bool
