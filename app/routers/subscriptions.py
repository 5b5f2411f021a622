# routers/subscriptions.py
from typing import Optional

from fastapi import APIRouter, Depends
from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.database import get_db_connection
from app.services import subscriptions as subscription_service

router = APIRouter()


@router.post("/c/{channel_id}", response_model=schemas.ApiResponse)
async def toggle_subscription(
    channel_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    result = await subscription_service.toggle_subscription(conn, channel_id, current_user["id"])
    message = "Subscribed successfully" if result["subscribed"] else "Unsubscribed successfully"
    return schemas.ApiResponse(data=result, message=message)


@router.get("/c/{channel_id}", response_model=schemas.ApiResponse)
async def get_channel_subscribers(
    channel_id: str,
    page: int = 1,
    limit: Optional[int] = None,
    conn: AsyncConnection = Depends(get_db_connection)
):
    """Subscribers of a channel."""
    subscribers = await subscription_service.get_channel_subscribers(conn, channel_id, page=page, limit=limit)
    return schemas.ApiResponse(data=subscribers, message="Subscribers fetched successfully")


@router.get("/u/{subscriber_id}", response_model=schemas.ApiResponse)
async def get_subscribed_channels(
    subscriber_id: str,
    page: int = 1,
    limit: Optional[int] = None,
    conn: AsyncConnection = Depends(get_db_connection)
):
    """Channels a user is subscribed to."""
    channels = await subscription_service.get_subscribed_channels(conn, subscriber_id, page=page, limit=limit)
    return schemas.ApiResponse(data=channels, message="Subscribed channels fetched successfully")
