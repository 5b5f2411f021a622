# services/subscriptions.py
from typing import Optional
from uuid import UUID

from psycopg import AsyncConnection

from app.crud import subscriptions as subscription_crud
from app.crud import users as user_crud
from app.errors import NotFoundError, ValidationError
from app.validators import paginate, parse_id


async def toggle_subscription(conn: AsyncConnection, channel_id: str, actor_id: UUID):
    channel_uuid = parse_id(channel_id, "channel id")
    if str(channel_uuid) == str(actor_id):
        raise ValidationError("You cannot subscribe to your own channel")

    if not await user_crud.user_exists(conn, channel_uuid):
        raise NotFoundError("Channel not found")

    subscribed = await subscription_crud.toggle_subscription(conn, actor_id, channel_uuid)
    return {"subscribed": subscribed}


async def get_channel_subscribers(conn: AsyncConnection, channel_id: str, page: int = 1, limit: Optional[int] = None):
    channel_uuid = parse_id(channel_id, "channel id")
    limit, offset = paginate(page, limit)

    if not await user_crud.user_exists(conn, channel_uuid):
        raise NotFoundError("Channel not found")
    return await subscription_crud.get_channel_subscribers(conn, channel_uuid, limit, offset)


async def get_subscribed_channels(conn: AsyncConnection, subscriber_id: str, page: int = 1, limit: Optional[int] = None):
    subscriber_uuid = parse_id(subscriber_id, "subscriber id")
    limit, offset = paginate(page, limit)

    if not await user_crud.user_exists(conn, subscriber_uuid):
        raise NotFoundError("User not found")
    return await subscription_crud.get_subscribed_channels(conn, subscriber_uuid, limit, offset)
