# crud/videos.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from app.crud.common import USER_SUMMARY_FIELDS, columns, nest, nest_all

logger = logging.getLogger(__name__)

VIDEO_COLUMNS = """id, title, description, duration, views, is_published, video_file_url,
        thumbnail_url, owner_id, created_at, updated_at"""

SORT_FIELDS = {
    "created_at": "v.created_at",
    "views": "v.views",
    "duration": "v.duration",
    "title": "v.title",
}


async def create_video(conn: AsyncConnection, title: str, description: str, duration: float,
                       video_file_url: str, video_file_id: str, thumbnail_url: str, thumbnail_id: str,
                       owner_id: UUID) -> Optional[Dict[str, Any]]:
    query = f"""
        INSERT INTO videos (title, description, duration, video_file_url, video_file_id,
                            thumbnail_url, thumbnail_id, owner_id, is_published)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, TRUE)
        RETURNING {VIDEO_COLUMNS}
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (title, description, duration, video_file_url, video_file_id,
                                     thumbnail_url, thumbnail_id, owner_id))
        row = await cursor.fetchone()
    if row:
        logger.info("Created video %s for user %s", row["id"], owner_id)
    return row


async def get_video(conn: AsyncConnection, video_id: UUID) -> Optional[Dict[str, Any]]:
    """Stored row, including media storage ids"""
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute("SELECT * FROM videos WHERE id = %s", (video_id,))
        return await cursor.fetchone()


async def video_visible(conn: AsyncConnection, video_id: UUID, actor_id: Optional[UUID]) -> bool:
    """Video exists and is published, or is owned by the caller"""
    async with conn.cursor() as cursor:
        await cursor.execute(
            "SELECT 1 FROM videos WHERE id = %s AND (is_published OR owner_id = %s)",
            (video_id, actor_id),
        )
        return await cursor.fetchone() is not None


async def get_video_view(conn: AsyncConnection, video_id: UUID, actor_id: Optional[UUID]) -> Optional[Dict[str, Any]]:
    """Video with its like count, the caller's like flag and the owner's channel stats"""
    query = """
        SELECT
            v.id, v.title, v.description, v.duration, v.views, v.is_published,
            v.video_file_url, v.thumbnail_url, v.created_at,
            (SELECT COUNT(*) FROM likes l WHERE l.video_id = v.id) AS likes_count,
            EXISTS (
                SELECT 1 FROM likes l WHERE l.video_id = v.id AND l.liked_by = %(actor)s
            ) AS is_liked,
            u.id AS owner__id,
            u.username AS owner__username,
            u.avatar_url AS owner__avatar_url,
            (SELECT COUNT(*) FROM subscriptions s WHERE s.channel_id = u.id) AS owner__subscribers_count,
            EXISTS (
                SELECT 1 FROM subscriptions s WHERE s.channel_id = u.id AND s.subscriber_id = %(actor)s
            ) AS owner__is_subscribed
        FROM videos v
        JOIN users u ON u.id = v.owner_id
        WHERE v.id = %(video_id)s
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, {"video_id": video_id, "actor": actor_id})
        row = await cursor.fetchone()
    return nest(row, "owner") if row else None


async def increment_views(conn: AsyncConnection, video_id: UUID) -> Optional[int]:
    async with conn.cursor() as cursor:
        await cursor.execute("UPDATE videos SET views = views + 1 WHERE id = %s RETURNING views", (video_id,))
        row = await cursor.fetchone()
    return row[0] if row else None


async def list_videos(conn: AsyncConnection, limit: int, offset: int, query: Optional[str] = None,
                      sort_by: str = "created_at", sort_type: str = "desc", owner_id: Optional[UUID] = None,
                      include_unpublished: bool = False) -> List[Dict[str, Any]]:
    conditions = []
    params: List[Any] = []
    if not include_unpublished:
        conditions.append("v.is_published")
    if owner_id is not None:
        conditions.append("v.owner_id = %s")
        params.append(owner_id)
    if query:
        conditions.append("(v.title ILIKE %s OR v.description ILIKE %s)")
        params.extend([f"%{query}%", f"%{query}%"])

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    direction = "ASC" if sort_type == "asc" else "DESC"
    sql = f"""
        SELECT
            v.id, v.title, v.description, v.duration, v.views, v.is_published,
            v.video_file_url, v.thumbnail_url, v.created_at,
            {columns("u", USER_SUMMARY_FIELDS, "owner")}
        FROM videos v
        JOIN users u ON u.id = v.owner_id
        {where}
        ORDER BY {SORT_FIELDS[sort_by]} {direction}, v.id
        LIMIT %s OFFSET %s
    """
    params.extend([limit, offset])
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(sql, params)
        return nest_all(await cursor.fetchall(), "owner")


async def update_video(conn: AsyncConnection, video_id: UUID, title: str, description: str,
                       thumbnail_url: Optional[str] = None, thumbnail_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    query = f"""
        UPDATE videos
        SET title = %s,
            description = %s,
            thumbnail_url = COALESCE(%s, thumbnail_url),
            thumbnail_id = COALESCE(%s, thumbnail_id),
            updated_at = now()
        WHERE id = %s
        RETURNING {VIDEO_COLUMNS}
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (title, description, thumbnail_url, thumbnail_id, video_id))
        return await cursor.fetchone()


async def set_published(conn: AsyncConnection, video_id: UUID, is_published: bool) -> Optional[Dict[str, Any]]:
    query = f"UPDATE videos SET is_published = %s, updated_at = now() WHERE id = %s RETURNING {VIDEO_COLUMNS}"
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (is_published, video_id))
        return await cursor.fetchone()


async def delete_video(conn: AsyncConnection, video_id: UUID) -> bool:
    """Delete a video with its comments and every like pointing at either, in one transaction"""
    async with conn.transaction():
        async with conn.cursor() as cursor:
            await cursor.execute(
                "DELETE FROM likes WHERE comment_id IN (SELECT id FROM comments WHERE video_id = %s)",
                (video_id,),
            )
            await cursor.execute("DELETE FROM comments WHERE video_id = %s", (video_id,))
            await cursor.execute("DELETE FROM likes WHERE video_id = %s", (video_id,))
            await cursor.execute("DELETE FROM videos WHERE id = %s", (video_id,))
            deleted_rows = cursor.rowcount
    if deleted_rows > 0:
        logger.info("Deleted video %s", video_id)
        return True
    return False
