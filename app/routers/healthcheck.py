# routers/healthcheck.py
from fastapi import APIRouter

from app import schemas

router = APIRouter()


@router.get("", response_model=schemas.ApiResponse)
async def healthcheck():
    return schemas.ApiResponse(data={"message": "Everything is O.K"}, message="OK")
