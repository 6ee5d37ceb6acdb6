import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dashsync.api import api_router
from dashsync.config import settings
from dashsync.core.error_handlers import register_error_handlers
from dashsync.core.locks import DomainLockRegistry
from dashsync.core.middleware import RequestIDMiddleware
from dashsync.core.rate_limit import SlidingWindowLimiter
from dashsync.database import build_engine
from dashsync.services.fallback import FallbackStore
from dashsync.services.registry import DOMAINS
from dashsync.services.store import SqlRecordStore

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    engine = None
    app.state.store = None
    if settings.DATABASE_URL:
        engine = build_engine(settings.DATABASE_URL, settings.DATABASE_POOL_SIZE)
        app.state.store = SqlRecordStore(engine, settings.DELETE_CHUNK_SIZE)
    else:
        logger.warning(
            "DATABASE_URL is not set; serving reads from %s", settings.FALLBACK_DATA_DIR
        )
    app.state.fallback = FallbackStore(settings.FALLBACK_DATA_DIR, settings.FALLBACK_BACKUP_COUNT)
    app.state.domain_locks = DomainLockRegistry(DOMAINS)
    app.state.rate_limiter = SlidingWindowLimiter(max_keys=settings.RATE_LIMIT_MAX_KEYS)
    yield
    # Shutdown: cleanup connections
    if engine is not None:
        await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# --- Middleware (outermost first) ---

# Request ID injection and access log
app.add_middleware(RequestIDMiddleware)

# CORS - tighten in production via CORS_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

# --- Error handlers ---
register_error_handlers(app)

# --- Routes ---
app.include_router(api_router)


@app.get("/api/health")
async def health_check():
    """Deep health check: verifies database connectivity."""
    checks: dict = {"version": settings.APP_VERSION}
    healthy = True

    store = app.state.store
    if store is None:
        checks["database"] = {"status": "not_configured"}
    else:
        start = time.monotonic()
        try:
            await store.ping()
            checks["database"] = {"status": "ok", "latency_ms": round((time.monotonic() - start) * 1000, 1)}
        except Exception as exc:
            healthy = False
            checks["database"] = {"status": "error", "detail": str(exc)[:200]}

    checks["status"] = "healthy" if healthy else "degraded"
    status_code = 200 if healthy else 503
    return JSONResponse(content=checks, status_code=status_code)
