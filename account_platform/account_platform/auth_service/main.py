"""
Account authentication service: login, session verification and password reset.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from .config import settings
from .db import init_db
from .errors import register_exception_handlers
from .routes import account, auth, health

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize database on startup"""
    init_db()
    yield


app = FastAPI(
    title="Account Auth Service",
    description="Login, session verification and password reset",
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(account.router)
app.include_router(health.router)
