# crud/tweets.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from app.crud.common import columns, nest_all

logger = logging.getLogger(__name__)

TWEET_COLUMNS = "id, content, owner_id, created_at, updated_at"


async def create_tweet(conn: AsyncConnection, content: str, owner_id: UUID) -> Optional[Dict[str, Any]]:
    query = f"INSERT INTO tweets (content, owner_id) VALUES (%s, %s) RETURNING {TWEET_COLUMNS}"
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (content, owner_id))
        row = await cursor.fetchone()
    if row:
        logger.info("Created tweet %s for user %s", row["id"], owner_id)
    return row


async def get_tweet(conn: AsyncConnection, tweet_id: UUID) -> Optional[Dict[str, Any]]:
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(f"SELECT {TWEET_COLUMNS} FROM tweets WHERE id = %s", (tweet_id,))
        return await cursor.fetchone()


async def tweet_exists(conn: AsyncConnection, tweet_id: UUID) -> bool:
    async with conn.cursor() as cursor:
        await cursor.execute("SELECT 1 FROM tweets WHERE id = %s", (tweet_id,))
        return await cursor.fetchone() is not None


async def get_user_tweets(conn: AsyncConnection, owner_id: UUID, actor_id: Optional[UUID],
                          limit: int, offset: int) -> List[Dict[str, Any]]:
    query = f"""
        SELECT
            t.id, t.content, t.created_at,
            (SELECT COUNT(*) FROM likes l WHERE l.tweet_id = t.id) AS likes_count,
            EXISTS (
                SELECT 1 FROM likes l WHERE l.tweet_id = t.id AND l.liked_by = %(actor)s
            ) AS is_liked,
            {columns("u", ("username", "avatar_url"), "owner_details")}
        FROM tweets t
        JOIN users u ON u.id = t.owner_id
        WHERE t.owner_id = %(owner_id)s
        ORDER BY t.created_at DESC, t.id
        LIMIT %(limit)s OFFSET %(offset)s
    """
    params = {"owner_id": owner_id, "actor": actor_id, "limit": limit, "offset": offset}
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, params)
        return nest_all(await cursor.fetchall(), "owner_details")


async def update_tweet(conn: AsyncConnection, tweet_id: UUID, content: str) -> Optional[Dict[str, Any]]:
    query = f"UPDATE tweets SET content = %s, updated_at = now() WHERE id = %s RETURNING {TWEET_COLUMNS}"
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (content, tweet_id))
        return await cursor.fetchone()


async def delete_tweet(conn: AsyncConnection, tweet_id: UUID) -> bool:
    """Delete a tweet and its likes in one transaction"""
    async with conn.transaction():
        async with conn.cursor() as cursor:
            await cursor.execute("DELETE FROM likes WHERE tweet_id = %s", (tweet_id,))
            await cursor.execute("DELETE FROM tweets WHERE id = %s", (tweet_id,))
            deleted_rows = cursor.rowcount
    if deleted_rows > 0:
        logger.info("Deleted tweet %s", tweet_id)
        return True
    return False
