# routers/comments.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.database import get_db_connection
from app.services import comments as comment_service

router = APIRouter()


@router.get("/{video_id}", response_model=schemas.ApiResponse)
async def get_video_comments(
    video_id: str,
    page: int = 1,
    limit: Optional[int] = None,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: Optional[dict] = Depends(auth_utils.get_optional_user)
):
    """List comments for a video, newest first."""
    actor_id = current_user["id"] if current_user else None
    comments = await comment_service.get_video_comments(conn, video_id, actor_id, page=page, limit=limit)
    return schemas.ApiResponse(data=comments, message="Comments fetched successfully")


@router.post("/{video_id}", response_model=schemas.ApiResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    video_id: str,
    comment: schemas.CommentCreate,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_comment = await comment_service.add_comment(conn, video_id, current_user["id"], comment.content)
    return schemas.ApiResponse(
        statusCode=status.HTTP_201_CREATED,
        data=schemas.Comment(**db_comment),
        message="Comment added successfully",
    )


@router.patch("/c/{comment_id}", response_model=schemas.ApiResponse)
async def update_comment(
    comment_id: str,
    comment: schemas.CommentCreate,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_comment = await comment_service.update_comment(conn, comment_id, current_user["id"], comment.content)
    return schemas.ApiResponse(data=schemas.Comment(**db_comment), message="Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=schemas.ApiResponse)
async def delete_comment(
    comment_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    result = await comment_service.delete_comment(conn, comment_id, current_user["id"])
    return schemas.ApiResponse(data=result, message="Comment deleted successfully")
