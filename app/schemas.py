# schemas.py
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr


# --- Envelope ---
class ApiResponse(BaseModel):
    status: str = "success"
    statusCode: int = 200
    data: Any = None
    message: str = "Success"


# --- User Schemas ---
class UserBase(BaseModel):
    username: str
    email: EmailStr
    full_name: str


class UserCreate(UserBase):
    password: str


class User(UserBase):
    id: UUID
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


# --- Video Schemas ---
class Video(BaseModel):
    id: UUID
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    video_file_url: str
    thumbnail_url: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


# --- Comment Schemas ---
class CommentCreate(BaseModel):
    content: str


class Comment(BaseModel):
    id: UUID
    content: str
    video_id: UUID
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


# --- Tweet Schemas ---
class TweetCreate(BaseModel):
    content: str


class Tweet(BaseModel):
    id: UUID
    content: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


# --- Playlist Schemas ---
class PlaylistCreate(BaseModel):
    name: str
    description: str


class Playlist(BaseModel):
    id: UUID
    name: str
    description: str
    owner_id: UUID
    videos: list[UUID] = []
    created_at: datetime
    updated_at: datetime


# --- Auth Schemas ---
class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    username: Optional[str] = None
