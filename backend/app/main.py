from fastapi import FastAPI, Request
import logging
import time

from fastapi.middleware.cors import CORSMiddleware

from evalconf.settings import extra_cors_origins
from evalconf.version import __version__

from .exceptions import register_exception_handlers


class _SkipHealthAccessLogs(logging.Filter):
    """Hide uvicorn access logs for health probes."""
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return "/healthz" not in msg and "/api/v1/ping" not in msg


_access_logger = logging.getLogger("uvicorn.access")
# Avoid duplicate filters on reload
if not any(isinstance(f, _SkipHealthAccessLogs) for f in _access_logger.filters):
    _access_logger.addFilter(_SkipHealthAccessLogs())

# Routers
from .routers.health import router as health_router
from .routers.schema import router as schema_router
from .routers.config import router as config_router

logger = logging.getLogger("evalconf.backend")

app = FastAPI(
    title="evalconf API",
    version=__version__,
    description="Validate, normalize and encode model evaluation configs",
)

# CORS for dev (Vite @ 5173) + optional env override
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
extra = extra_cors_origins()
if extra:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=extra,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)


# Request logging (won't crash on exceptions)
@app.middleware("http")
async def log_requests(request: Request, call_next):
    t0 = time.time()
    try:
        return await call_next(request)
    except Exception as e:
        dt = (time.time() - t0) * 1000
        logger.error("%s %s -> ERR in %.1fms: %s: %s", request.method, request.url.path, dt, type(e).__name__, e)
        raise


# Routers
app.include_router(health_router, prefix="/api/v1",        tags=["health"])
app.include_router(config_router, prefix="/api/v1/config", tags=["config"])
app.include_router(schema_router, prefix="/api/v1/schema", tags=["schema"])


@app.get("/healthz")
def healthz():
    return {"ok": True}
