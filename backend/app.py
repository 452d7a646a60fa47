"""
FastAPI application -- M-etod Hub API server.

Run locally:
    uvicorn backend.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend import database
from backend.auth import seed_role_grants
from backend.config import ADMIN_EMAILS, LOG_LEVEL, SITE_NAME
from backend.errors import PortalError
from backend.routes import admin, admin_forum, assist, auth, content, forum, public

logger = logging.getLogger(__name__)


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # transport chatter
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialise database schema
    await database.init_db()

    async with database.async_session() as session:
        await seed_role_grants(session, ADMIN_EMAILS)
    logger.info(f"✅ {SITE_NAME} запущен (БД: {database.engine.url.get_backend_name()})")

    yield

    await assist.close_clients()
    await database.engine.dispose()


setup_logging()

app = FastAPI(
    title="M-etod Hub API",
    version="1.0.0",
    description="Финансовый портал: офферы, статьи, новости, форум, курсы валют",
    lifespan=lifespan,
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # unknown pages go back to the home page
    if exc.status_code == 404 and request.method == "GET":
        return RedirectResponse("/", status_code=302)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


app.include_router(public.router)
app.include_router(content.router)
app.include_router(forum.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(admin_forum.router)
app.include_router(assist.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "database": database.engine.url.get_backend_name()}
