"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from caption_studio.api.routes import router
from caption_studio.api.uploads import remove_session_uploads
from caption_studio.config import get_upload_dir, settings

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(level: str = "INFO") -> None:
    """Render structlog events as key=value lines, dropping those below *level*."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[level.upper()]
        ),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# CORS configuration
# ---------------------------------------------------------------------------

_DEFAULT_ORIGINS = {
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
}


def _get_allowed_origins() -> set[str]:
    origins = set(_DEFAULT_ORIGINS)
    if settings.allowed_origins:
        origins.update(o.strip() for o in settings.allowed_origins.split(",") if o.strip())
    return origins


_ALLOWED_ORIGINS = _get_allowed_origins()


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "app.startup",
        allowed_origins=sorted(_ALLOWED_ORIGINS),
        caption_provider=settings.caption_provider,
        upload_dir=settings.upload_dir,
    )
    yield
    removed = remove_session_uploads()
    logger.info("app.shutdown", uploads_removed=removed)


configure_logging(settings.log_level)

app = FastAPI(
    title="Caption Studio",
    description="AI caption generation for uploaded images and video",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_ALLOWED_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)

# Uploaded originals, referenced by Asset.preview_url
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=str(get_upload_dir())),
    name="uploads",
)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
