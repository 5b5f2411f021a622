# crud/comments.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from app.crud.common import USER_SUMMARY_FIELDS, columns, nest_all

logger = logging.getLogger(__name__)

COMMENT_COLUMNS = "id, content, video_id, owner_id, created_at, updated_at"


async def create_comment(conn: AsyncConnection, content: str, owner_id: UUID, video_id: UUID) -> Optional[Dict[str, Any]]:
    query = f"""
        INSERT INTO comments (content, owner_id, video_id)
        VALUES (%s, %s, %s)
        RETURNING {COMMENT_COLUMNS}
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (content, owner_id, video_id))
        return await cursor.fetchone()


async def get_comment(conn: AsyncConnection, comment_id: UUID) -> Optional[Dict[str, Any]]:
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(f"SELECT {COMMENT_COLUMNS} FROM comments WHERE id = %s", (comment_id,))
        return await cursor.fetchone()


async def comment_exists(conn: AsyncConnection, comment_id: UUID) -> bool:
    async with conn.cursor() as cursor:
        await cursor.execute("SELECT 1 FROM comments WHERE id = %s", (comment_id,))
        return await cursor.fetchone() is not None


async def get_video_comments(conn: AsyncConnection, video_id: UUID, actor_id: Optional[UUID],
                             limit: int, offset: int) -> List[Dict[str, Any]]:
    query = f"""
        SELECT
            c.id, c.content, c.created_at, c.updated_at,
            (SELECT COUNT(*) FROM likes l WHERE l.comment_id = c.id) AS likes_count,
            EXISTS (
                SELECT 1 FROM likes l WHERE l.comment_id = c.id AND l.liked_by = %(actor)s
            ) AS is_liked,
            {columns("u", USER_SUMMARY_FIELDS, "owner")}
        FROM comments c
        JOIN users u ON u.id = c.owner_id
        WHERE c.video_id = %(video_id)s
        ORDER BY c.created_at DESC, c.id
        LIMIT %(limit)s OFFSET %(offset)s
    """
    params = {"video_id": video_id, "actor": actor_id, "limit": limit, "offset": offset}
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, params)
        return nest_all(await cursor.fetchall(), "owner")


async def update_comment(conn: AsyncConnection, comment_id: UUID, content: str) -> Optional[Dict[str, Any]]:
    query = f"UPDATE comments SET content = %s, updated_at = now() WHERE id = %s RETURNING {COMMENT_COLUMNS}"
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (content, comment_id))
        return await cursor.fetchone()


async def delete_comment(conn: AsyncConnection, comment_id: UUID) -> bool:
    """Delete a comment and its likes in one transaction"""
    async with conn.transaction():
        async with conn.cursor() as cursor:
            await cursor.execute("DELETE FROM likes WHERE comment_id = %s", (comment_id,))
            await cursor.execute("DELETE FROM comments WHERE id = %s", (comment_id,))
            deleted_rows = cursor.rowcount
    if deleted_rows > 0:
        logger.info("Deleted comment %s", comment_id)
        return True
    return False
