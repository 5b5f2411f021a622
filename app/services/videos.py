# services/videos.py
import logging
from typing import Optional
from uuid import UUID

from fastapi import UploadFile
from psycopg import AsyncConnection

from app import blob_storage
from app.crud import users as user_crud
from app.crud import videos as video_crud
from app.errors import NotFoundError, PersistenceError, ValidationError
from app.validators import ensure_found, ensure_owner, paginate, parse_id, require_text

logger = logging.getLogger(__name__)


def _check_media_type(file: Optional[UploadFile], expected: str, label: str) -> UploadFile:
    if file is None or not file.filename:
        raise ValidationError(f"{label} is required")
    if file.content_type is None or not file.content_type.startswith(f"{expected}/"):
        raise ValidationError(f"{label} must be a {expected} file")
    return file


async def get_all_videos(conn: AsyncConnection, actor_id: Optional[UUID], page: int = 1,
                         limit: Optional[int] = None, query: Optional[str] = None,
                         sort_by: str = "created_at", sort_type: str = "desc",
                         user_id: Optional[str] = None):
    limit, offset = paginate(page, limit)
    if sort_by not in video_crud.SORT_FIELDS:
        raise ValidationError(f"sort_by must be one of: {', '.join(video_crud.SORT_FIELDS)}")
    if sort_type not in ("asc", "desc"):
        raise ValidationError("sort_type must be 'asc' or 'desc'")

    owner_id = parse_id(user_id, "user id") if user_id else None
    # Owners also see their own unpublished uploads
    include_unpublished = owner_id is not None and actor_id is not None and str(owner_id) == str(actor_id)

    return await video_crud.list_videos(
        conn, limit=limit, offset=offset, query=query.strip() if query else None,
        sort_by=sort_by, sort_type=sort_type, owner_id=owner_id,
        include_unpublished=include_unpublished,
    )


async def publish_video(conn: AsyncConnection, owner_id: UUID, title: Optional[str], description: Optional[str],
                        video_file: Optional[UploadFile], thumbnail: Optional[UploadFile],
                        duration: Optional[float] = None):
    require_text(title, description, message="Both title and description are required to publish a video")
    _check_media_type(video_file, "video", "Video file")
    _check_media_type(thumbnail, "image", "Thumbnail")

    uploaded = []
    try:
        video_asset = await blob_storage.upload_media(video_file, kind="video")
        uploaded.append(video_asset)
        thumbnail_asset = await blob_storage.upload_media(thumbnail, kind="thumbnail")
        uploaded.append(thumbnail_asset)

        video = await video_crud.create_video(
            conn,
            title=title.strip(),
            description=description.strip(),
            duration=video_asset.duration or duration or 0,
            video_file_url=video_asset.url,
            video_file_id=video_asset.storage_id,
            thumbnail_url=thumbnail_asset.url,
            thumbnail_id=thumbnail_asset.storage_id,
            owner_id=owner_id,
        )
        if not video:
            raise PersistenceError("Video upload failed, please try again")
    except Exception:
        # No row references the uploaded blobs
        for asset in uploaded:
            await _discard_media(asset.storage_id)
        raise
    return video


async def get_video_by_id(conn: AsyncConnection, video_id: str, actor_id: Optional[UUID]):
    """Video read model. Counts the view and records it in the caller's watch history."""
    video_uuid = parse_id(video_id, "video id")

    video = ensure_found(await video_crud.get_video_view(conn, video_uuid, actor_id), "Video")
    if not video["is_published"] and (actor_id is None or str(video["owner"]["id"]) != str(actor_id)):
        raise NotFoundError("Video not found")

    views = await video_crud.increment_views(conn, video_uuid)
    if views is None:
        raise NotFoundError("Video not found")
    video["views"] = views

    if actor_id is not None:
        await user_crud.add_to_watch_history(conn, actor_id, video_uuid)
    return video


async def update_video(conn: AsyncConnection, video_id: str, actor_id: UUID, title: Optional[str],
                       description: Optional[str], thumbnail: Optional[UploadFile] = None):
    video_uuid = parse_id(video_id, "video id")
    require_text(title, description, message="Both title and description are required")

    video = ensure_found(await video_crud.get_video(conn, video_uuid), "Video")
    ensure_owner(video, actor_id, "Only the owner can edit this video")

    new_thumbnail = None
    if thumbnail is not None and thumbnail.filename:
        _check_media_type(thumbnail, "image", "Thumbnail")
        new_thumbnail = await blob_storage.upload_media(thumbnail, kind="thumbnail")

    updated = await video_crud.update_video(
        conn, video_uuid, title=title.strip(), description=description.strip(),
        thumbnail_url=new_thumbnail.url if new_thumbnail else None,
        thumbnail_id=new_thumbnail.storage_id if new_thumbnail else None,
    )
    if not updated:
        raise PersistenceError("Failed to update video, please try again")

    if new_thumbnail:
        await _discard_media(video["thumbnail_id"])
    return updated


async def delete_video(conn: AsyncConnection, video_id: str, actor_id: UUID):
    video_uuid = parse_id(video_id, "video id")

    video = ensure_found(await video_crud.get_video(conn, video_uuid), "Video")
    ensure_owner(video, actor_id, "Only the owner can delete this video")

    if not await video_crud.delete_video(conn, video_uuid):
        raise PersistenceError("Failed to delete the video, please try again")

    await _discard_media(video["video_file_id"])
    await _discard_media(video["thumbnail_id"])
    return {"video_id": video_uuid}


async def toggle_publish_status(conn: AsyncConnection, video_id: str, actor_id: UUID):
    video_uuid = parse_id(video_id, "video id")

    video = ensure_found(await video_crud.get_video(conn, video_uuid), "Video")
    ensure_owner(video, actor_id, "Only the owner can change the publish status of this video")

    updated = await video_crud.set_published(conn, video_uuid, not video["is_published"])
    if not updated:
        raise PersistenceError("Failed to toggle video publish status, please try again")
    return {"is_published": updated["is_published"]}


async def _discard_media(storage_id: str) -> None:
    # Rows are already committed; orphaned media is logged, not rolled back.
    try:
        await blob_storage.delete_media(storage_id)
    except Exception:
        logger.warning("Failed to delete media %s", storage_id, exc_info=True)
