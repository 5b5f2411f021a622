# services/likes.py
from typing import Optional
from uuid import UUID

from psycopg import AsyncConnection

from app.crud import comments as comment_crud
from app.crud import likes as like_crud
from app.crud import tweets as tweet_crud
from app.crud import videos as video_crud
from app.errors import NotFoundError
from app.validators import paginate, parse_id

_TARGET_LOOKUPS = {
    "video": (lambda conn, target_id, actor_id: video_crud.video_visible(conn, target_id, actor_id), "Video"),
    "comment": (lambda conn, target_id, actor_id: comment_crud.comment_exists(conn, target_id), "Comment"),
    "tweet": (lambda conn, target_id, actor_id: tweet_crud.tweet_exists(conn, target_id), "Tweet"),
}


async def toggle_like(conn: AsyncConnection, target: str, target_id: str, actor_id: UUID):
    exists, label = _TARGET_LOOKUPS[target]
    target_uuid = parse_id(target_id, f"{target} id")

    if not await exists(conn, target_uuid, actor_id):
        raise NotFoundError(f"{label} not found")

    is_liked = await like_crud.toggle_like(conn, target, target_uuid, actor_id)
    return {"is_liked": is_liked}


async def toggle_video_like(conn: AsyncConnection, video_id: str, actor_id: UUID):
    return await toggle_like(conn, "video", video_id, actor_id)


async def toggle_comment_like(conn: AsyncConnection, comment_id: str, actor_id: UUID):
    return await toggle_like(conn, "comment", comment_id, actor_id)


async def toggle_tweet_like(conn: AsyncConnection, tweet_id: str, actor_id: UUID):
    return await toggle_like(conn, "tweet", tweet_id, actor_id)


async def get_liked_videos(conn: AsyncConnection, actor_id: UUID, page: int = 1, limit: Optional[int] = None):
    limit, offset = paginate(page, limit)
    return await like_crud.get_liked_videos(conn, actor_id, limit, offset)
