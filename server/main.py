# server/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from server.api import users
from server.api.errors import register_error_handlers
from server.config import CORS_ORIGINS, LOG_LEVEL
from server.core.logging import LoggingMiddleware, setup_logging
from server.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    init_db()
    yield


app = FastAPI(title="User Directory", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

register_error_handlers(app)

app.include_router(users.router, prefix="/api/users", tags=["users"])
