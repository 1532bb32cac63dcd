"""Comment moderation endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.routes.auth import require_admin
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.common import MessageResponse
from app.services.comments import delete_comment

router = APIRouter()


@router.delete("/{comment_id}", response_model=MessageResponse)
def remove_comment(
    comment_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    if not delete_comment(db, comment_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return MessageResponse(message="Comment deleted successfully")
