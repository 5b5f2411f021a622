# routers/tweets.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.database import get_db_connection
from app.services import tweets as tweet_service

router = APIRouter()


@router.post("", response_model=schemas.ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_tweet(
    tweet: schemas.TweetCreate,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_tweet = await tweet_service.create_tweet(conn, current_user["id"], tweet.content)
    return schemas.ApiResponse(
        statusCode=status.HTTP_201_CREATED,
        data=schemas.Tweet(**db_tweet),
        message="Tweet created successfully",
    )


@router.get("/user/{user_id}", response_model=schemas.ApiResponse)
async def get_user_tweets(
    user_id: str,
    page: int = 1,
    limit: Optional[int] = None,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: Optional[dict] = Depends(auth_utils.get_optional_user)
):
    actor_id = current_user["id"] if current_user else None
    tweets = await tweet_service.get_user_tweets(conn, user_id, actor_id, page=page, limit=limit)
    return schemas.ApiResponse(data=tweets, message="Tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=schemas.ApiResponse)
async def update_tweet(
    tweet_id: str,
    tweet: schemas.TweetCreate,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_tweet = await tweet_service.update_tweet(conn, tweet_id, current_user["id"], tweet.content)
    return schemas.ApiResponse(data=schemas.Tweet(**db_tweet), message="Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=schemas.ApiResponse)
async def delete_tweet(
    tweet_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    result = await tweet_service.delete_tweet(conn, tweet_id, current_user["id"])
    return schemas.ApiResponse(data=result, message="Tweet deleted successfully")
