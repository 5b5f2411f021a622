# main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import shutdown_database, startup_database
from app.errors import register_exception_handlers
from app.routers import comments, healthcheck, likes, playlists, subscriptions, tweets, users, videos

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await startup_database()
    yield

    await shutdown_database()

app = FastAPI(
    title="Video Platform API",
    description="Videos, comments, likes, playlists, subscriptions and tweets on PostgreSQL",
    version="3.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
prefix = settings.api_prefix
app.include_router(healthcheck.router, prefix=f"{prefix}/healthcheck", tags=["Healthcheck"])
app.include_router(users.router, prefix=f"{prefix}/users", tags=["Users"])
app.include_router(videos.router, prefix=f"{prefix}/videos", tags=["Videos"])
app.include_router(comments.router, prefix=f"{prefix}/comments", tags=["Comments"])
app.include_router(likes.router, prefix=f"{prefix}/likes", tags=["Likes"])
app.include_router(playlists.router, prefix=f"{prefix}/playlist", tags=["Playlists"])
app.include_router(subscriptions.router, prefix=f"{prefix}/subscriptions", tags=["Subscriptions"])
app.include_router(tweets.router, prefix=f"{prefix}/tweets", tags=["Tweets"])


# You can run this file using: uvicorn main:app --reload
if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
