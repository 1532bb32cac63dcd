"""HTTP routes, mounted under settings.API_PREFIX."""

from fastapi import APIRouter

from app.api.routes import auth, comments, health, posts, users
from app.schemas.common import ErrorResponse

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    }
)
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
