# services/comments.py
from typing import Optional
from uuid import UUID

from psycopg import AsyncConnection

from app.crud import comments as comment_crud
from app.crud import videos as video_crud
from app.errors import NotFoundError, PersistenceError
from app.validators import ensure_found, ensure_owner, paginate, parse_id, require_text


async def get_video_comments(conn: AsyncConnection, video_id: str, actor_id: Optional[UUID],
                             page: int = 1, limit: Optional[int] = None):
    video_uuid = parse_id(video_id, "video id")
    limit, offset = paginate(page, limit)

    if not await video_crud.video_visible(conn, video_uuid, actor_id):
        raise NotFoundError("Video not found")
    return await comment_crud.get_video_comments(conn, video_uuid, actor_id, limit, offset)


async def add_comment(conn: AsyncConnection, video_id: str, actor_id: UUID, content: Optional[str]):
    video_uuid = parse_id(video_id, "video id")
    require_text(content, message="Content is required")

    if not await video_crud.video_visible(conn, video_uuid, actor_id):
        raise NotFoundError("Video not found")

    comment = await comment_crud.create_comment(conn, content=content.strip(), owner_id=actor_id, video_id=video_uuid)
    if not comment:
        raise PersistenceError("Failed to add comment, please try again")
    return comment


async def update_comment(conn: AsyncConnection, comment_id: str, actor_id: UUID, content: Optional[str]):
    comment_uuid = parse_id(comment_id, "comment id")
    require_text(content, message="Content is required")

    comment = ensure_found(await comment_crud.get_comment(conn, comment_uuid), "Comment")
    ensure_owner(comment, actor_id, "Only the comment owner can edit their comment")

    updated = await comment_crud.update_comment(conn, comment_uuid, content.strip())
    if not updated:
        raise PersistenceError("Unable to edit the comment, please try again")
    return updated


async def delete_comment(conn: AsyncConnection, comment_id: str, actor_id: UUID):
    comment_uuid = parse_id(comment_id, "comment id")

    comment = ensure_found(await comment_crud.get_comment(conn, comment_uuid), "Comment")
    ensure_owner(comment, actor_id, "Only the comment owner can delete their comment")

    if not await comment_crud.delete_comment(conn, comment_uuid):
        raise PersistenceError("Unable to delete the comment, please try again")
    return {"comment_id": comment_uuid}
