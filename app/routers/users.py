# routers/users.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from psycopg import AsyncConnection

from app import auth_utils, schemas
from app.database import get_db_connection
from app.services import users as user_service

router = APIRouter()


@router.post("/register", response_model=schemas.ApiResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user: schemas.UserCreate,
    conn: AsyncConnection = Depends(get_db_connection)
):
    db_user = await user_service.register_user(conn, user)
    return schemas.ApiResponse(
        statusCode=status.HTTP_201_CREATED,
        data=schemas.User(**db_user),
        message="User registered successfully",
    )


@router.post("/login", response_model=schemas.Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    conn: AsyncConnection = Depends(get_db_connection)
):
    access_token = await user_service.login(conn, form_data.username, form_data.password)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/current-user", response_model=schemas.ApiResponse)
async def read_users_me(
    current_user: dict = Depends(auth_utils.get_current_user)
):
    return schemas.ApiResponse(data=schemas.User(**current_user), message="Current user fetched successfully")


@router.get("/history", response_model=schemas.ApiResponse)
async def get_watch_history(
    page: int = 1,
    limit: Optional[int] = None,
    conn: AsyncConnection = Depends(get_db_connection),
    current_user: dict = Depends(auth_utils.get_current_user)
):
    history = await user_service.get_watch_history(conn, current_user["id"], page=page, limit=limit)
    return schemas.ApiResponse(data=history, message="Watch history fetched successfully")
