# database.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import psycopg
from psycopg_pool import AsyncConnectionPool

from app.config import DATABASE_URL, settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self):
        self.pool: AsyncConnectionPool | None = None

    async def create_pool(self):
        """Create a connection pool to PostgreSQL using psycopg (async)"""
        if self.pool is not None:
            return self.pool

        try:
            # Autocommit: single statements commit on their own, multi-step
            # mutations open conn.transaction() explicitly.
            self.pool = AsyncConnectionPool(
                conninfo=DATABASE_URL,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                kwargs={"autocommit": True},
                open=False,
            )
            await self.pool.open()
            logger.info("Database connection pool created")
            return self.pool
        except Exception:
            logger.exception("Failed to create database pool")
            raise

    async def close_pool(self):
        """Close the connection pool"""
        if self.pool:
            await self.pool.close()
            logger.info("Database connection pool closed")
            self.pool = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Get a database connection from the pool"""
        if not self.pool:
            await self.create_pool()

        async with self.pool.connection() as conn:
            yield conn


# Global database manager instance
db_manager = DatabaseManager()


# Dependency function for FastAPI
async def get_db_connection():
    async with db_manager.get_connection() as conn:
        yield conn


SCHEMA_STATEMENTS = [
    '''
    CREATE TABLE IF NOT EXISTS users (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        username VARCHAR(255) UNIQUE NOT NULL,
        email VARCHAR(255) UNIQUE NOT NULL,
        full_name VARCHAR(255) NOT NULL,
        avatar_url VARCHAR(500),
        hashed_password VARCHAR(255) NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS videos (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        title VARCHAR(255) NOT NULL,
        description TEXT NOT NULL,
        duration DOUBLE PRECISION NOT NULL DEFAULT 0,
        views INTEGER NOT NULL DEFAULT 0,
        is_published BOOLEAN NOT NULL DEFAULT TRUE,
        video_file_url VARCHAR(500) NOT NULL,
        video_file_id VARCHAR(500) NOT NULL,
        thumbnail_url VARCHAR(500) NOT NULL,
        thumbnail_id VARCHAR(500) NOT NULL,
        owner_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS comments (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        content TEXT NOT NULL,
        video_id UUID NOT NULL REFERENCES videos(id) ON DELETE CASCADE,
        owner_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS tweets (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        content TEXT NOT NULL,
        owner_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS likes (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        video_id UUID REFERENCES videos(id) ON DELETE CASCADE,
        comment_id UUID REFERENCES comments(id) ON DELETE CASCADE,
        tweet_id UUID REFERENCES tweets(id) ON DELETE CASCADE,
        liked_by UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        CHECK (num_nonnulls(video_id, comment_id, tweet_id) = 1)
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS playlists (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        name VARCHAR(255) NOT NULL,
        description TEXT NOT NULL,
        owner_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS playlist_videos (
        playlist_id UUID NOT NULL REFERENCES playlists(id) ON DELETE CASCADE,
        video_id UUID NOT NULL REFERENCES videos(id) ON DELETE CASCADE,
        added_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (playlist_id, video_id)
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS subscriptions (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        subscriber_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        channel_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        UNIQUE (subscriber_id, channel_id),
        CHECK (subscriber_id <> channel_id)
    );
    ''',
    '''
    CREATE TABLE IF NOT EXISTS watch_history (
        user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        video_id UUID NOT NULL REFERENCES videos(id) ON DELETE CASCADE,
        watched_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (user_id, video_id)
    );
    ''',
    # (target, liked_by) is unique per kind of like target
    'CREATE UNIQUE INDEX IF NOT EXISTS uq_likes_video ON likes(video_id, liked_by) WHERE video_id IS NOT NULL;',
    'CREATE UNIQUE INDEX IF NOT EXISTS uq_likes_comment ON likes(comment_id, liked_by) WHERE comment_id IS NOT NULL;',
    'CREATE UNIQUE INDEX IF NOT EXISTS uq_likes_tweet ON likes(tweet_id, liked_by) WHERE tweet_id IS NOT NULL;',
    'CREATE INDEX IF NOT EXISTS idx_likes_liked_by ON likes(liked_by, created_at DESC);',
    'CREATE INDEX IF NOT EXISTS idx_videos_owner_id ON videos(owner_id, created_at DESC);',
    'CREATE INDEX IF NOT EXISTS idx_comments_video_id ON comments(video_id, created_at DESC);',
    'CREATE INDEX IF NOT EXISTS idx_tweets_owner_id ON tweets(owner_id, created_at DESC);',
    'CREATE INDEX IF NOT EXISTS idx_playlists_owner_id ON playlists(owner_id);',
    'CREATE INDEX IF NOT EXISTS idx_subscriptions_channel_id ON subscriptions(channel_id);',
]


# Initialize database tables
async def create_tables():
    """Create all necessary tables"""
    async with db_manager.get_connection() as conn:
        async with conn.transaction():
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)

        logger.info("Database tables created/verified successfully")


# Startup and shutdown events
async def startup_database():
    """Initialize database on startup"""
    await db_manager.create_pool()
    await create_tables()


async def shutdown_database():
    """Cleanup database connections on shutdown"""
    await db_manager.close_pool()
