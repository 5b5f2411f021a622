# routers/playlists.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.database import get_db_connection
from app.services import playlists as playlist_service

router = APIRouter()


@router.post("", response_model=schemas.ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_playlist(
    playlist: schemas.PlaylistCreate,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_playlist = await playlist_service.create_playlist(
        conn, current_user["id"], playlist.name, playlist.description
    )
    return schemas.ApiResponse(
        statusCode=status.HTTP_201_CREATED,
        data=schemas.Playlist(**db_playlist),
        message="Playlist created successfully",
    )


@router.get("/user/{user_id}", response_model=schemas.ApiResponse)
async def get_user_playlists(
    user_id: str,
    page: int = 1,
    limit: Optional[int] = None,
    conn: AsyncConnection = Depends(get_db_connection)
):
    playlists = await playlist_service.get_user_playlists(conn, user_id, page=page, limit=limit)
    return schemas.ApiResponse(data=playlists, message="User playlists fetched successfully")


@router.get("/{playlist_id}", response_model=schemas.ApiResponse)
async def get_playlist_by_id(
    playlist_id: str,
    conn: AsyncConnection = Depends(get_db_connection)
):
    playlist = await playlist_service.get_playlist_by_id(conn, playlist_id)
    return schemas.ApiResponse(data=playlist, message="Playlist fetched successfully")


@router.patch("/{playlist_id}", response_model=schemas.ApiResponse)
async def update_playlist(
    playlist_id: str,
    playlist: schemas.PlaylistCreate,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_playlist = await playlist_service.update_playlist(
        conn, playlist_id, current_user["id"], playlist.name, playlist.description
    )
    return schemas.ApiResponse(data=schemas.Playlist(**db_playlist), message="Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=schemas.ApiResponse)
async def delete_playlist(
    playlist_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    result = await playlist_service.delete_playlist(conn, playlist_id, current_user["id"])
    return schemas.ApiResponse(data=result, message="Playlist deleted successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=schemas.ApiResponse)
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_playlist = await playlist_service.add_video_to_playlist(conn, playlist_id, video_id, current_user["id"])
    return schemas.ApiResponse(data=schemas.Playlist(**db_playlist), message="Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=schemas.ApiResponse)
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    db_playlist = await playlist_service.remove_video_from_playlist(conn, playlist_id, video_id, current_user["id"])
    return schemas.ApiResponse(
        data=schemas.Playlist(**db_playlist), message="Video removed from playlist successfully"
    )
