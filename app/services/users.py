# services/users.py
from typing import Optional
from uuid import UUID

from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.crud import users as user_crud
from app.errors import PersistenceError, UnauthorizedError
from app.validators import paginate, require_text


async def register_user(conn: AsyncConnection, user: schemas.UserCreate):
    require_text(user.username, user.full_name, user.password, message="All fields are required")

    db_user = await user_crud.create_user(
        conn,
        username=user.username.strip().lower(),
        email=str(user.email).lower(),
        full_name=user.full_name.strip(),
        hashed_password=auth_utils.get_password_hash(user.password),
    )
    if not db_user:
        raise PersistenceError("Something went wrong while registering the user")
    return db_user


async def login(conn: AsyncConnection, username: str, password: str) -> str:
    user = await user_crud.get_user_by_username(conn, username=username.strip().lower())
    if not user or not auth_utils.verify_password(password, user["hashed_password"]):
        raise UnauthorizedError("Incorrect username or password")
    return auth_utils.create_access_token(data={"sub": user["username"]})


async def get_watch_history(conn: AsyncConnection, actor_id: UUID, page: int = 1, limit: Optional[int] = None):
    limit, offset = paginate(page, limit)
    return await user_crud.get_watch_history(conn, actor_id, limit, offset)
