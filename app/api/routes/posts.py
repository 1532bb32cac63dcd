"""Post endpoints: public reads, admin writes, image upload and comment creation."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.errors import field_error
from app.api.routes.auth import get_current_user, require_admin
from app.core.config import get_settings
from app.core.database import get_db
from app.models import Comment, Post
from app.schemas.auth import CurrentUser
from app.schemas.common import CreatedResponse, MessageResponse
from app.schemas.post import (
    CommentCreate,
    CommentRead,
    PostCreate,
    PostDetailResponse,
    PostRead,
    PostUpdate,
    ToggleResponse,
)
from app.services import comments as comment_store
from app.services import posts as post_store
from app.services.storage import (
    StorageApiError,
    StorageNotConfiguredError,
    build_object_path,
    upload_object,
)
from app.services.store import StoreError
from app.services.users import author_name, get_author_names

logger = logging.getLogger(__name__)
router = APIRouter()

_POST_NOT_FOUND = "Post not found"


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_POST_NOT_FOUND)


def _bad_request(msg: str, path: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=[field_error(msg, path)])


def _post_read(post: Post, names: dict[int, str]) -> PostRead:
    return PostRead(
        id=post.id,
        title=post.title,
        content=post.content,
        author_id=post.author_id,
        published=post.published,
        image=post.image,
        created_at=post.created_at,
        author_name=author_name(names, post.author_id),
    )


def _comment_read(comment: Comment, names: dict[int, str]) -> CommentRead:
    return CommentRead(
        id=comment.id,
        content=comment.content,
        post_id=comment.post_id,
        author_id=comment.author_id,
        created_at=comment.created_at,
        author_name=author_name(names, comment.author_id),
    )


@router.get("", response_model=list[PostRead])
def list_posts(db: Annotated[Session, Depends(get_db)]) -> list[PostRead]:
    """All posts, each with its author's display name."""
    posts = post_store.list_posts(db)
    names = get_author_names(db, (p.author_id for p in posts))
    return [_post_read(p, names) for p in posts]


@router.get("/{post_id}", response_model=PostDetailResponse)
def get_post(
    post_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> PostDetailResponse:
    """One post with its comments; author names attached to both."""
    post = post_store.get_post(db, post_id)
    if post is None:
        raise _not_found()
    comments = comment_store.list_comments_by_post(db, post_id)
    names = get_author_names(db, [post.author_id, *(c.author_id for c in comments)])
    return PostDetailResponse(
        post=_post_read(post, names),
        comments=[_comment_read(c, names) for c in comments],
    )


async def _store_image(image: UploadFile) -> str:
    """Validate and upload the image; return its public URL."""
    settings = get_settings()
    content_type = (image.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise _bad_request("Uploaded file must be an image.", "image")
    content = await image.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise _bad_request(
            f"Image must not exceed {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB.",
            "image",
        )
    path = build_object_path(image.filename or "")
    try:
        return await upload_object(path, content, content_type, settings)
    except StorageNotConfiguredError as e:
        logger.error("Image upload skipped", extra={"reason": e.message})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Image storage is not available.",
        ) from e
    except StorageApiError as e:
        logger.error(
            "Image upload failed",
            extra={"reason": e.message[:500], "storage_status": e.status_code},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="An error occurred while uploading the image. Please try again.",
        ) from e


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_post(
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    title: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
    published: Annotated[bool, Form()] = False,
    image: Annotated[UploadFile | None, File()] = None,
) -> CreatedResponse:
    """
    Create a post from a multipart form.

    Fields: `title`, `content`, `published` and an `image` file. The image is
    uploaded to object storage and its public URL is stored on the post.
    """
    try:
        fields = PostCreate(title=title, content=content, published=published)
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        ) from e
    if image is None or not image.filename:
        raise _bad_request("Please upload a photo.", "image")

    image_url = await _store_image(image)
    try:
        post = post_store.create_post(
            db,
            author_id=current_user.id,
            title=fields.title,
            content=fields.content,
            published=fields.published,
            image=image_url,
        )
    except StoreError:
        logger.error("Post insert failed; uploaded image is orphaned", extra={"image": image_url})
        raise
    return CreatedResponse(message="Post created successfully", id=post.id)


@router.put("/{post_id}", response_model=MessageResponse)
def update_post(
    post_id: int,
    body: PostUpdate,
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Replace title and content; the editing admin becomes the author."""
    if not post_store.update_post(db, post_id, current_user.id, body.title, body.content):
        raise _not_found()
    return MessageResponse(message="Post updated successfully")


@router.patch("/{post_id}", response_model=ToggleResponse)
def toggle_published(
    post_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> ToggleResponse:
    """Flip the post between published and draft."""
    if not post_store.toggle_published(db, post_id):
        raise _not_found()
    post = post_store.get_post(db, post_id)
    if post is None:
        raise _not_found()
    return ToggleResponse(message="Status changed successfully", published=post.published)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete a post together with its comments."""
    if not post_store.delete_post(db, post_id):
        raise _not_found()
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/comments", response_model=CreatedResponse, status_code=201)
def create_comment(
    post_id: int,
    body: CommentCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CreatedResponse:
    """Comment on a post as the authenticated user."""
    comment = comment_store.add_comment(db, current_user.id, post_id, body.content)
    if comment is None:
        raise _not_found()
    return CreatedResponse(message="Comment created successfully", id=comment.id)
