"""Chronalog — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chronalog import __version__
from chronalog.auth.middleware import AuthMiddleware
from chronalog.config import settings
from chronalog.exceptions import ChangelogError
from chronalog.models.common import ErrorResponse

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(
        "Chronalog ready (backend=%s, dir=%s, mode=%s)",
        settings.storage_backend, settings.changelog_dir, settings.deployment_mode,
    )
    yield
    logger.info("Chronalog stopped")


app = FastAPI(
    title="Chronalog",
    description="Git-backed changelog authoring",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuthMiddleware)


@app.exception_handler(ChangelogError)
async def changelog_error_handler(request: Request, exc: ChangelogError):
    status = exc.status_code or 500
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content=ErrorResponse.of(exc.code, exc.message),
    )


# Import and register routers
from chronalog.auth.github_oauth import router as auth_router
from chronalog.api.admin import router as admin_router
from chronalog.api.changelog import router as changelog_router

app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(changelog_router)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "chronalog", "version": __version__}
