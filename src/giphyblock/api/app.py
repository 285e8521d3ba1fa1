import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from giphyblock.db.engine import dispose_engine, get_engine, get_session_factory, init_engine
from giphyblock.db.models import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///giphyblock.db"


def _configure_logging() -> None:
    """Configure structured JSON logging (or plain text for dev)."""
    log_format = os.environ.get("GIPHYBLOCK_LOG_FORMAT", "json")
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for h in root.handlers[:]:
        root.removeHandler(h)
    handler = logging.StreamHandler()
    if log_format == "json":
        import json as _json

        class JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                d = {
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                }
                if record.exc_info:
                    d["exception"] = self.formatException(record.exc_info)
                return _json.dumps(d)

        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


async def _periodic_cleanup(db_factory):
    """Background task: drop expired sessions hourly."""
    from giphyblock.auth.service import cleanup_expired_sessions

    while True:
        await asyncio.sleep(3600)
        try:
            async with db_factory() as db:
                await cleanup_expired_sessions(db)
        except Exception:
            logger.error("Periodic cleanup: session cleanup failed", exc_info=True)


# --- Health and readiness endpoints ---
_health_router = APIRouter(tags=["health"])


@_health_router.get("/health")
async def health():
    return {"status": "ok"}


@_health_router.get("/ready")
async def ready():
    from sqlalchemy import text
    try:
        engine = get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception:
        return JSONResponse(status_code=503, content={"status": "unavailable"})


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        if request.method in ("POST", "PUT", "PATCH"):
            from giphyblock.config import config
            cl = int(request.headers.get("content-length", 0))
            if cl > config.limits.max_request_body:
                return JSONResponse(
                    status_code=413,
                    content={"error": {"code": "PAYLOAD_TOO_LARGE", "message": f"Request body exceeds maximum of {config.limits.max_request_body} bytes."}},
                )
        return await call_next(request)


def create_app(database_url: str | None = None) -> FastAPI:
    if database_url is None:
        database_url = os.environ.get("GIPHYBLOCK_DATABASE_URL", DEFAULT_DATABASE_URL)
    init_engine(database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _configure_logging()

        engine = get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        from giphyblock.config import load_config
        async with get_session_factory()() as db:
            await load_config(db)

        cleanup_task = asyncio.create_task(_periodic_cleanup(get_session_factory()))
        yield
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
        await dispose_engine()

    from giphyblock.models.errors import ErrorEnvelope

    app = FastAPI(
        title="Giphy Block",
        version="0.1.0",
        description="Giphy block API key exchange and editor accounts",
        lifespan=lifespan,
        responses={
            401: {"model": ErrorEnvelope},
            403: {"model": ErrorEnvelope},
            404: {"model": ErrorEnvelope},
            422: {"model": ErrorEnvelope},
        },
    )

    app.add_middleware(BodySizeLimitMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        return JSONResponse(
            status_code=422,
            content={"error": {"code": "VALIDATION_ERROR", "message": str(exc)}},
        )

    from giphyblock.api.api_key import router as api_key_router
    from giphyblock.api.auth import router as auth_router
    from giphyblock.api.users import router as users_router

    app.include_router(_health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(api_key_router)

    return app
