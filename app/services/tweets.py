# services/tweets.py
from typing import Optional
from uuid import UUID

from psycopg import AsyncConnection

from app.crud import tweets as tweet_crud
from app.crud import users as user_crud
from app.errors import NotFoundError, PersistenceError
from app.validators import ensure_found, ensure_owner, paginate, parse_id, require_text


async def create_tweet(conn: AsyncConnection, actor_id: UUID, content: Optional[str]):
    require_text(content, message="Content is required")

    tweet = await tweet_crud.create_tweet(conn, content=content.strip(), owner_id=actor_id)
    if not tweet:
        raise PersistenceError("Failed to create tweet, please try again")
    return tweet


async def get_user_tweets(conn: AsyncConnection, user_id: str, actor_id: Optional[UUID],
                          page: int = 1, limit: Optional[int] = None):
    owner_uuid = parse_id(user_id, "user id")
    limit, offset = paginate(page, limit)

    if not await user_crud.user_exists(conn, owner_uuid):
        raise NotFoundError("User not found")
    return await tweet_crud.get_user_tweets(conn, owner_uuid, actor_id, limit, offset)


async def update_tweet(conn: AsyncConnection, tweet_id: str, actor_id: UUID, content: Optional[str]):
    tweet_uuid = parse_id(tweet_id, "tweet id")
    require_text(content, message="Content is required")

    tweet = ensure_found(await tweet_crud.get_tweet(conn, tweet_uuid), "Tweet")
    ensure_owner(tweet, actor_id, "Only the owner can edit their tweet")

    updated = await tweet_crud.update_tweet(conn, tweet_uuid, content.strip())
    if not updated:
        raise PersistenceError("Failed to edit the tweet, please try again")
    return updated


async def delete_tweet(conn: AsyncConnection, tweet_id: str, actor_id: UUID):
    tweet_uuid = parse_id(tweet_id, "tweet id")

    tweet = ensure_found(await tweet_crud.get_tweet(conn, tweet_uuid), "Tweet")
    ensure_owner(tweet, actor_id, "Only the owner can delete their tweet")

    if not await tweet_crud.delete_tweet(conn, tweet_uuid):
        raise PersistenceError("Failed to delete the tweet, please try again")
    return {"tweet_id": tweet_uuid}
