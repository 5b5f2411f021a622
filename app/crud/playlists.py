# crud/playlists.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from app.crud.common import VIDEO_CARD_FIELDS, columns, nest

logger = logging.getLogger(__name__)

PLAYLIST_COLUMNS = """p.id, p.name, p.description, p.owner_id, p.created_at, p.updated_at,
            COALESCE(
                (SELECT array_agg(pv.video_id ORDER BY pv.added_at)
                 FROM playlist_videos pv WHERE pv.playlist_id = p.id),
                '{}'
            ) AS videos"""


async def create_playlist(conn: AsyncConnection, name: str, description: str, owner_id: UUID) -> Optional[Dict[str, Any]]:
    query = """
        INSERT INTO playlists (name, description, owner_id)
        VALUES (%s, %s, %s)
        RETURNING id, name, description, owner_id, created_at, updated_at
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (name, description, owner_id))
        row = await cursor.fetchone()
    if row:
        row["videos"] = []
        logger.info("Created playlist %s for user %s", row["id"], owner_id)
    return row


async def get_playlist(conn: AsyncConnection, playlist_id: UUID) -> Optional[Dict[str, Any]]:
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(f"SELECT {PLAYLIST_COLUMNS} FROM playlists p WHERE p.id = %s", (playlist_id,))
        return await cursor.fetchone()


async def update_playlist(conn: AsyncConnection, playlist_id: UUID, name: str, description: str) -> Optional[Dict[str, Any]]:
    async with conn.cursor() as cursor:
        await cursor.execute(
            "UPDATE playlists SET name = %s, description = %s, updated_at = now() WHERE id = %s",
            (name, description, playlist_id),
        )
        if cursor.rowcount == 0:
            return None
    return await get_playlist(conn, playlist_id)


async def delete_playlist(conn: AsyncConnection, playlist_id: UUID) -> bool:
    async with conn.cursor() as cursor:
        await cursor.execute("DELETE FROM playlists WHERE id = %s", (playlist_id,))
        deleted_rows = cursor.rowcount
    if deleted_rows > 0:
        logger.info("Deleted playlist %s", playlist_id)
        return True
    return False


async def add_video(conn: AsyncConnection, playlist_id: UUID, video_id: UUID) -> Optional[Dict[str, Any]]:
    """Set-add: adding a video already in the playlist changes nothing"""
    async with conn.transaction():
        async with conn.cursor() as cursor:
            await cursor.execute(
                "INSERT INTO playlist_videos (playlist_id, video_id) VALUES (%s, %s) ON CONFLICT DO NOTHING",
                (playlist_id, video_id),
            )
            if cursor.rowcount > 0:
                await cursor.execute("UPDATE playlists SET updated_at = now() WHERE id = %s", (playlist_id,))
    return await get_playlist(conn, playlist_id)


async def remove_video(conn: AsyncConnection, playlist_id: UUID, video_id: UUID) -> Optional[Dict[str, Any]]:
    """Set-remove: removing a video that is not in the playlist changes nothing"""
    async with conn.transaction():
        async with conn.cursor() as cursor:
            await cursor.execute(
                "DELETE FROM playlist_videos WHERE playlist_id = %s AND video_id = %s",
                (playlist_id, video_id),
            )
            if cursor.rowcount > 0:
                await cursor.execute("UPDATE playlists SET updated_at = now() WHERE id = %s", (playlist_id,))
    return await get_playlist(conn, playlist_id)


async def get_playlist_view(conn: AsyncConnection, playlist_id: UUID) -> Optional[Dict[str, Any]]:
    """Playlist with totals over its published videos, the videos themselves and the owner"""
    query = f"""
        SELECT
            p.id, p.name, p.description, p.created_at, p.updated_at,
            (SELECT COUNT(*) FROM playlist_videos pv JOIN videos v ON v.id = pv.video_id
             WHERE pv.playlist_id = p.id AND v.is_published) AS total_videos,
            (SELECT COALESCE(SUM(v.views), 0) FROM playlist_videos pv JOIN videos v ON v.id = pv.video_id
             WHERE pv.playlist_id = p.id AND v.is_published) AS total_views,
            {columns("u", ("username", "full_name", "avatar_url"), "owner")}
        FROM playlists p
        JOIN users u ON u.id = p.owner_id
        WHERE p.id = %s
    """
    videos_query = f"""
        SELECT {", ".join(f"v.{field}" for field in VIDEO_CARD_FIELDS)}
        FROM playlist_videos pv
        JOIN videos v ON v.id = pv.video_id
        WHERE pv.playlist_id = %s AND v.is_published
        ORDER BY pv.added_at, v.id
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (playlist_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        await cursor.execute(videos_query, (playlist_id,))
        row["videos"] = await cursor.fetchall()
    return nest(row, "owner")


async def get_user_playlists(conn: AsyncConnection, owner_id: UUID, limit: int, offset: int) -> List[Dict[str, Any]]:
    query = """
        SELECT
            p.id, p.name, p.description, p.updated_at,
            COUNT(v.id) AS total_videos,
            COALESCE(SUM(v.views), 0) AS total_views
        FROM playlists p
        LEFT JOIN playlist_videos pv ON pv.playlist_id = p.id
        LEFT JOIN videos v ON v.id = pv.video_id AND v.is_published
        WHERE p.owner_id = %s
        GROUP BY p.id
        ORDER BY p.updated_at DESC, p.id
        LIMIT %s OFFSET %s
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (owner_id, limit, offset))
        return await cursor.fetchall()
