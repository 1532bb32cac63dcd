"""Content store: comments."""

import logging

from sqlalchemy.orm import Session

from app.models import Comment, Post
from app.services.store import store_operation

logger = logging.getLogger(__name__)


def add_comment(db: Session, author_id: int, post_id: int, content: str) -> Comment | None:
    """Add a comment to a post. Returns None if the post does not exist."""
    with store_operation(db, "add comment"):
        if db.get(Post, post_id) is None:
            return None
        comment = Comment(author_id=author_id, post_id=post_id, content=content)
        db.add(comment)
        db.commit()
        db.refresh(comment)
    logger.info("Comment added", extra={"comment_id": comment.id, "post_id": post_id})
    return comment


def list_comments_by_post(db: Session, post_id: int) -> list[Comment]:
    with store_operation(db, "list comments"):
        return (
            db.query(Comment)
            .filter(Comment.post_id == post_id)
            .order_by(Comment.id)
            .all()
        )


def delete_comment(db: Session, comment_id: int) -> bool:
    """Returns False if the comment does not exist."""
    with store_operation(db, "delete comment"):
        deleted = (
            db.query(Comment)
            .filter(Comment.id == comment_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    if deleted:
        logger.info("Comment deleted", extra={"comment_id": comment_id})
    return deleted > 0
