# crud/subscriptions.py
import logging
from typing import Any, Dict, List
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from app.crud.common import USER_SUMMARY_FIELDS, VIDEO_CARD_FIELDS, columns, nest_all, wrap

logger = logging.getLogger(__name__)


async def toggle_subscription(conn: AsyncConnection, subscriber_id: UUID, channel_id: UUID) -> bool:
    """Unsubscribe if subscribed, otherwise subscribe. Returns the new state."""
    async with conn.transaction():
        async with conn.cursor() as cursor:
            await cursor.execute(
                "DELETE FROM subscriptions WHERE subscriber_id = %s AND channel_id = %s RETURNING id",
                (subscriber_id, channel_id),
            )
            if await cursor.fetchone() is not None:
                logger.info("User %s unsubscribed from %s", subscriber_id, channel_id)
                return False
            await cursor.execute(
                "INSERT INTO subscriptions (subscriber_id, channel_id) VALUES (%s, %s) ON CONFLICT DO NOTHING",
                (subscriber_id, channel_id),
            )
    logger.info("User %s subscribed to %s", subscriber_id, channel_id)
    return True


async def get_channel_subscribers(conn: AsyncConnection, channel_id: UUID, limit: int, offset: int) -> List[Dict[str, Any]]:
    """Subscribers of a channel, each flagged with whether the channel subscribes back"""
    query = f"""
        SELECT
            {", ".join(f"u.{field}" for field in USER_SUMMARY_FIELDS)},
            EXISTS (
                SELECT 1 FROM subscriptions back
                WHERE back.subscriber_id = %(channel_id)s AND back.channel_id = u.id
            ) AS subscribed_to_subscriber,
            (SELECT COUNT(*) FROM subscriptions c WHERE c.channel_id = u.id) AS subscribers_count
        FROM subscriptions s
        JOIN users u ON u.id = s.subscriber_id
        WHERE s.channel_id = %(channel_id)s
        ORDER BY s.created_at DESC, s.id
        LIMIT %(limit)s OFFSET %(offset)s
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, {"channel_id": channel_id, "limit": limit, "offset": offset})
        return wrap(await cursor.fetchall(), "subscriber")


async def get_subscribed_channels(conn: AsyncConnection, subscriber_id: UUID, limit: int, offset: int) -> List[Dict[str, Any]]:
    """Channels a user subscribes to, each with its most recent published video"""
    query = f"""
        SELECT
            {", ".join(f"u.{field}" for field in USER_SUMMARY_FIELDS)},
            {columns("lv", VIDEO_CARD_FIELDS, "latest_video")}
        FROM subscriptions s
        JOIN users u ON u.id = s.channel_id
        LEFT JOIN LATERAL (
            SELECT * FROM videos v
            WHERE v.owner_id = u.id AND v.is_published
            ORDER BY v.created_at DESC
            LIMIT 1
        ) lv ON TRUE
        WHERE s.subscriber_id = %s
        ORDER BY s.created_at DESC, s.id
        LIMIT %s OFFSET %s
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (subscriber_id, limit, offset))
        return wrap(nest_all(await cursor.fetchall(), "latest_video"), "subscribed_channel")
