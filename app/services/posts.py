"""Content store: posts."""

import logging

from sqlalchemy import not_
from sqlalchemy.orm import Session

from app.models import Post
from app.services.store import store_operation

logger = logging.getLogger(__name__)


def list_posts(db: Session) -> list[Post]:
    with store_operation(db, "list posts"):
        return db.query(Post).order_by(Post.id).all()


def get_post(db: Session, post_id: int) -> Post | None:
    with store_operation(db, "get post"):
        return db.get(Post, post_id)


def create_post(
    db: Session,
    author_id: int,
    title: str,
    content: str,
    published: bool,
    image: str | None = None,
) -> Post:
    post = Post(
        author_id=author_id,
        title=title,
        content=content,
        published=published,
        image=image,
    )
    with store_operation(db, "create post"):
        db.add(post)
        db.commit()
        db.refresh(post)
    logger.info("Post created", extra={"post_id": post.id, "author_id": author_id})
    return post


def update_post(db: Session, post_id: int, author_id: int, title: str, content: str) -> bool:
    """Replace title and content; the editor becomes the author. False if the post does not exist."""
    with store_operation(db, "update post"):
        updated = (
            db.query(Post)
            .filter(Post.id == post_id)
            .update(
                {Post.author_id: author_id, Post.title: title, Post.content: content},
                synchronize_session=False,
            )
        )
        db.commit()
    return updated > 0


def toggle_published(db: Session, post_id: int) -> bool:
    """
    Flip the published flag with a single UPDATE ... SET published = NOT published,
    so concurrent toggles each act on the value the database holds at that moment.
    Returns False if the post does not exist.
    """
    with store_operation(db, "toggle post published"):
        updated = (
            db.query(Post)
            .filter(Post.id == post_id)
            .update({Post.published: not_(Post.published)}, synchronize_session=False)
        )
        db.commit()
    return updated > 0


def delete_post(db: Session, post_id: int) -> bool:
    """Delete a post (its comments go with it). False if the post does not exist."""
    with store_operation(db, "delete post"):
        deleted = db.query(Post).filter(Post.id == post_id).delete(synchronize_session=False)
        db.commit()
    if deleted:
        logger.info("Post deleted", extra={"post_id": post_id})
    return deleted > 0
