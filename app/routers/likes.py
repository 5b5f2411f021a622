# routers/likes.py
from typing import Optional

from fastapi import APIRouter, Depends
from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.database import get_db_connection
from app.services import likes as like_service

router = APIRouter()


def _toggled(result: dict) -> schemas.ApiResponse:
    message = "Liked successfully" if result["is_liked"] else "Like removed successfully"
    return schemas.ApiResponse(data=result, message=message)


@router.post("/toggle/v/{video_id}", response_model=schemas.ApiResponse)
async def toggle_video_like(
    video_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    return _toggled(await like_service.toggle_video_like(conn, video_id, current_user["id"]))


@router.post("/toggle/c/{comment_id}", response_model=schemas.ApiResponse)
async def toggle_comment_like(
    comment_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    return _toggled(await like_service.toggle_comment_like(conn, comment_id, current_user["id"]))


@router.post("/toggle/t/{tweet_id}", response_model=schemas.ApiResponse)
async def toggle_tweet_like(
    tweet_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    return _toggled(await like_service.toggle_tweet_like(conn, tweet_id, current_user["id"]))


@router.get("/videos", response_model=schemas.ApiResponse)
async def get_liked_videos(
    page: int = 1,
    limit: Optional[int] = None,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    videos = await like_service.get_liked_videos(conn, current_user["id"], page=page, limit=limit)
    return schemas.ApiResponse(data=videos, message="Liked videos fetched successfully")
