# routers/videos.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.database import get_db_connection
from app.services import videos as video_service

router = APIRouter()


def _actor_id(user: Optional[dict]):
    return user["id"] if user else None


@router.get("", response_model=schemas.ApiResponse)
async def get_all_videos(
    page: int = 1,
    limit: Optional[int] = None,
    query: Optional[str] = None,
    sort_by: str = "created_at",
    sort_type: str = "desc",
    user_id: Optional[str] = None,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: Optional[dict] = Depends(auth_utils.get_optional_user)
):
    """List published videos with optional search, sorting and owner filter."""
    videos = await video_service.get_all_videos(
        conn, _actor_id(current_user), page=page, limit=limit, query=query,
        sort_by=sort_by, sort_type=sort_type, user_id=user_id,
    )
    return schemas.ApiResponse(data=videos, message="Videos fetched successfully")


@router.post("", response_model=schemas.ApiResponse, status_code=status.HTTP_201_CREATED)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    duration: Optional[float] = Form(None),
    video_file: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    """Upload a video file with its thumbnail and publish it."""
    video = await video_service.publish_video(
        conn, current_user["id"], title, description, video_file, thumbnail, duration=duration
    )
    return schemas.ApiResponse(
        statusCode=status.HTTP_201_CREATED,
        data=schemas.Video(**video),
        message="Video uploaded successfully",
    )


@router.get("/{video_id}", response_model=schemas.ApiResponse)
async def get_video_by_id(
    video_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: Optional[dict] = Depends(auth_utils.get_optional_user)
):
    """Fetch a video with its like and channel stats. Counts as a view."""
    video = await video_service.get_video_by_id(conn, video_id, _actor_id(current_user))
    return schemas.ApiResponse(data=video, message="Video details fetched successfully")


@router.patch("/{video_id}", response_model=schemas.ApiResponse)
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    video = await video_service.update_video(
        conn, video_id, current_user["id"], title, description, thumbnail=thumbnail
    )
    return schemas.ApiResponse(data=schemas.Video(**video), message="Video updated successfully")


@router.delete("/{video_id}", response_model=schemas.ApiResponse)
async def delete_video(
    video_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    result = await video_service.delete_video(conn, video_id, current_user["id"])
    return schemas.ApiResponse(data=result, message="Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=schemas.ApiResponse)
async def toggle_publish_status(
    video_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    result = await video_service.toggle_publish_status(conn, video_id, current_user["id"])
    return schemas.ApiResponse(data=result, message="Video publish status toggled successfully")
