import re
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import structlog
from prometheus_fastapi_instrumentator import Instrumentator

from locallist.api import builder
from locallist.api.schemas import HealthRead
from locallist.core.settings import Settings
from locallist.db.session import db_manager
from locallist.middleware.logging import RequestLoggingMiddleware

VERSION = "0.1.0"

settings = Settings()

_KEY_PARAM_RE = re.compile(r'([?&]key=)[^&\s]+')
_GOOGLE_KEY_RE = re.compile(r'AIza[0-9A-Za-z\-_]{35}')


# Redaction processor to scrub API keys from any string values in the event dict.
# Gemini is called with ?key=..., and requests puts the full URL in its errors.
def redact_api_keys(logger, method_name, event_dict):
    def scrub(v):
        if isinstance(v, str):
            v = _KEY_PARAM_RE.sub(r'\1REDACTED', v)
            return _GOOGLE_KEY_RE.sub('REDACTED', v)
        if isinstance(v, list):
            return [scrub(x) for x in v]
        if isinstance(v, dict):
            return {k: scrub(vv) for k, vv in v.items()}
        return v

    for k, v in list(event_dict.items()):
        event_dict[k] = scrub(v)
    return event_dict


# Configure structured logging with JSON output
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_api_keys,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

handlers = [logging.StreamHandler()]
if settings.LOG_FILE:
    handlers.append(logging.FileHandler(settings.LOG_FILE))

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(message)s',  # structlog handles formatting
    handlers=handlers
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    try:
        await db_manager.initialize()
        if settings.DB_CREATE_TABLES:
            await db_manager.create_tables()
    except Exception:
        logger.exception("Failed to initialize database manager")
        raise

    yield

    logger.info("Shutting down application...")
    await db_manager.close()

app = FastAPI(
    title="LocalList Plan Builder API",
    description="Turns a chat message into a day-by-day plan of curated places",
    version=VERSION,
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = builder.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Instrumentator().instrument(app).expose(app, endpoint="/metrics")

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

@app.get("/health", response_model=HealthRead)
async def health_check():
    return {"status": "ok", "version": VERSION, "timestamp": datetime.now(timezone.utc)}

prefix = "/api/v1"

app.include_router(builder.router, prefix=prefix, tags=["builder"])
