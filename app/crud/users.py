# crud/users.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import psycopg
from psycopg import AsyncConnection
from psycopg.rows import dict_row

from app.crud.common import USER_SUMMARY_FIELDS, columns, nest_all
from app.errors import ConflictError

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = "id, username, email, full_name, avatar_url, created_at"


async def get_user(conn: AsyncConnection, user_id: UUID) -> Optional[Dict[str, Any]]:
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(f"SELECT {PUBLIC_COLUMNS} FROM users WHERE id = %s", (user_id,))
        return await cursor.fetchone()


async def get_user_by_username(conn: AsyncConnection, username: str) -> Optional[Dict[str, Any]]:
    """Full row, including the password hash, for authentication"""
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute("SELECT * FROM users WHERE username = %s", (username,))
        return await cursor.fetchone()


async def user_exists(conn: AsyncConnection, user_id: UUID) -> bool:
    async with conn.cursor() as cursor:
        await cursor.execute("SELECT 1 FROM users WHERE id = %s", (user_id,))
        return await cursor.fetchone() is not None


async def create_user(conn: AsyncConnection, username: str, email: str, full_name: str,
                      hashed_password: str) -> Dict[str, Any]:
    query = f"""
        INSERT INTO users (username, email, full_name, hashed_password)
        VALUES (%s, %s, %s, %s)
        RETURNING {PUBLIC_COLUMNS}
    """
    try:
        async with conn.cursor(row_factory=dict_row) as cursor:
            await cursor.execute(query, (username, email, full_name, hashed_password))
            row = await cursor.fetchone()
    except psycopg.errors.UniqueViolation as e:
        if "username" in str(e):
            raise ConflictError("Username already exists")
        elif "email" in str(e):
            raise ConflictError("Email already exists")
        raise ConflictError("User already exists")
    logger.info("Created user %s", username)
    return row


# --- Watch history ---
async def add_to_watch_history(conn: AsyncConnection, user_id: UUID, video_id: UUID) -> None:
    """Set-add: a video appears once, re-watching only refreshes its timestamp"""
    query = """
        INSERT INTO watch_history (user_id, video_id)
        VALUES (%s, %s)
        ON CONFLICT (user_id, video_id) DO UPDATE SET watched_at = now()
    """
    async with conn.cursor() as cursor:
        await cursor.execute(query, (user_id, video_id))


async def get_watch_history(conn: AsyncConnection, user_id: UUID, limit: int, offset: int) -> List[Dict[str, Any]]:
    query = f"""
        SELECT
            v.id, v.title, v.description, v.duration, v.views,
            v.video_file_url, v.thumbnail_url, v.created_at,
            h.watched_at,
            {columns("u", USER_SUMMARY_FIELDS, "owner")}
        FROM watch_history h
        JOIN videos v ON v.id = h.video_id
        JOIN users u ON u.id = v.owner_id
        WHERE h.user_id = %s
        ORDER BY h.watched_at DESC
        LIMIT %s OFFSET %s
    """
    async with conn.cursor(row_factory=dict_row) as cursor:
        await cursor.execute(query, (user_id, limit, offset))
        return nest_all(await cursor.fetchall(), "owner")
