# crud/likes.py
import logging
from typing import Any, Dict, List
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from app.crud.common import columns, nest_all, wrap

logger = logging.getLogger(__name__)

LIKE_TARGETS = {
    "video": "video_id",
    "comment": "comment_id",
    "tweet": "tweet_id",
}

_UNLIKE_SQL = {
    target: f"DELETE FROM likes WHERE {column} = %s AND liked_by = %s RETURNING id"
    for target, column in LIKE_TARGETS.items()
}

_LIKE_SQL = {
    target: f"INSERT INTO likes ({column}, liked_by) VALUES (%s, %s) ON CONFLICT DO NOTHING"
    for target, column in LIKE_TARGETS.items()
}


async def toggle_like(conn: AsyncConnection, target: str, target_id: UUID, user_id: UUID) -> bool:
    """Remove the user's like on the target if present, otherwise add it.

    Returns the new state (True = liked). Runs in one transaction; the
    partial unique indexes on likes turn a concurrent duplicate insert
    into a no-op.
    """
    async with conn.transaction():
        async with conn.cursor() as cursor:
            await cursor.execute(_UNLIKE_SQL[target], (target_id, user_id))
            if await cursor.fetchone() is not None:
                logger.info("User %s unliked %s %s", user_id, target, target_id)
                return False
            await cursor.execute(_LIKE_SQL[target], (target_id, user_id))
    logger.info("User %s liked %s %s", user_id, target, target_id)
    return True


async def get_liked_videos(conn: AsyncConnection, user_id: UUID, limit: int, offset: int) -> List[Dict[str, Any]]:
    query = f"""
        SELECT
            v.id, v.video_file_url, v.thumbnail_url, v.owner_id, v.title, v.description,
            v.views, v.duration, v.created_at, v.is_published,
            {columns("u", ("username", "full_name", "avatar_url"), "owner_details")}
        FROM likes l
        JOIN videos v ON v.id = l.video_id
        JOIN users u ON u.id = v.owner_id
        WHERE l.liked_by = %s AND v.is_published
        ORDER BY l.created_at DESC, l.id
        LIMIT %s OFFSET %s
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (user_id, limit, offset))
        rows = await cursor.fetchall()
    return wrap(nest_all(rows, "owner_details"), "liked_video")
