# services/playlists.py
from typing import Optional
from uuid import UUID

from psycopg import AsyncConnection

from app.crud import playlists as playlist_crud
from app.crud import users as user_crud
from app.crud import videos as video_crud
from app.errors import NotFoundError, PersistenceError
from app.validators import ensure_found, ensure_owner, paginate, parse_id, require_text


async def create_playlist(conn: AsyncConnection, actor_id: UUID, name: Optional[str], description: Optional[str]):
    require_text(name, description, message="Both name and description are required")

    playlist = await playlist_crud.create_playlist(conn, name.strip(), description.strip(), actor_id)
    if not playlist:
        raise PersistenceError("Failed to create playlist, please try again")
    return playlist


async def get_playlist_by_id(conn: AsyncConnection, playlist_id: str):
    playlist_uuid = parse_id(playlist_id, "playlist id")
    return ensure_found(await playlist_crud.get_playlist_view(conn, playlist_uuid), "Playlist")


async def get_user_playlists(conn: AsyncConnection, user_id: str, page: int = 1, limit: Optional[int] = None):
    owner_uuid = parse_id(user_id, "user id")
    limit, offset = paginate(page, limit)

    if not await user_crud.user_exists(conn, owner_uuid):
        raise NotFoundError("User not found")
    return await playlist_crud.get_user_playlists(conn, owner_uuid, limit, offset)


async def update_playlist(conn: AsyncConnection, playlist_id: str, actor_id: UUID,
                          name: Optional[str], description: Optional[str]):
    playlist_uuid = parse_id(playlist_id, "playlist id")
    require_text(name, description, message="Both name and description are required to update")

    playlist = ensure_found(await playlist_crud.get_playlist(conn, playlist_uuid), "Playlist")
    ensure_owner(playlist, actor_id, "Only the owner can update their playlist")

    updated = await playlist_crud.update_playlist(conn, playlist_uuid, name.strip(), description.strip())
    if not updated:
        raise PersistenceError("Failed to update playlist, please try again")
    return updated


async def delete_playlist(conn: AsyncConnection, playlist_id: str, actor_id: UUID):
    playlist_uuid = parse_id(playlist_id, "playlist id")

    playlist = ensure_found(await playlist_crud.get_playlist(conn, playlist_uuid), "Playlist")
    ensure_owner(playlist, actor_id, "Only the owner can delete their playlist")

    if not await playlist_crud.delete_playlist(conn, playlist_uuid):
        raise PersistenceError("Failed to delete playlist, please try again")
    return {"playlist_id": playlist_uuid}


async def _gated_playlist(conn: AsyncConnection, playlist_id: str, video_id: str, actor_id: UUID, message: str):
    playlist_uuid = parse_id(playlist_id, "playlist id")
    video_uuid = parse_id(video_id, "video id")

    playlist = ensure_found(await playlist_crud.get_playlist(conn, playlist_uuid), "Playlist")
    ensure_owner(playlist, actor_id, message)
    return playlist_uuid, video_uuid


async def add_video_to_playlist(conn: AsyncConnection, playlist_id: str, video_id: str, actor_id: UUID):
    playlist_uuid, video_uuid = await _gated_playlist(
        conn, playlist_id, video_id, actor_id, "Only the owner can add videos to their playlist"
    )
    if not await video_crud.video_visible(conn, video_uuid, actor_id):
        raise NotFoundError("Video not found")

    updated = await playlist_crud.add_video(conn, playlist_uuid, video_uuid)
    if not updated:
        raise PersistenceError("Failed to add video to playlist, please try again")
    return updated


async def remove_video_from_playlist(conn: AsyncConnection, playlist_id: str, video_id: str, actor_id: UUID):
    playlist_uuid, video_uuid = await _gated_playlist(
        conn, playlist_id, video_id, actor_id, "Only the owner can remove videos from their playlist"
    )
    updated = await playlist_crud.remove_video(conn, playlist_uuid, video_uuid)
    if not updated:
        raise PersistenceError("Failed to remove video from playlist, please try again")
    return updated
