"""
Roadmap Timeline FastAPI application.

Lifespan closes open timeline views (cancelling in-flight task fetches) on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roadmap_timeline.config import get_settings
from roadmap_timeline.api.v1.timeline import router as timeline_router
from roadmap_timeline.services.view_registry import get_view_registry

settings = get_settings()

# Ensure roadmap_timeline loggers show in uvicorn output
_rt_log = logging.getLogger("roadmap_timeline")
_rt_log.setLevel(settings.log_level.upper())
if not _rt_log.handlers:
    _h = logging.StreamHandler()
    _h.setFormatter(logging.Formatter("%(levelname)s:     %(name)s - %(message)s"))
    _rt_log.addHandler(_h)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """SQLite DB is initialized on first use; views are closed on shutdown."""
    yield
    await get_view_registry().close_all()


app = FastAPI(
    title="Roadmap Timeline API",
    description="Gantt timeline layout and lazy project task expansion",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure error responses include proper JSON and CORS headers (avoids CORS errors in browser)."""
    _rt_log.exception("Unhandled error on %s %s", request.method, request.url.path)
    origin = request.headers.get("origin", "*")
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": type(exc).__name__},
        headers={
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
            "Access-Control-Allow-Headers": "*",
        },
    )


if settings.cors_allow_all:
    origins: list[str] = ["*"]
    credentials = False
else:
    origins = list(settings.cors_origins_list)
    credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(timeline_router, prefix="/api/v1/timeline", tags=["timeline"])


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "service": "roadmap-timeline"}
