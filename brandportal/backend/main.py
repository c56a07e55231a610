"""FastAPI entry point."""
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from brandportal.backend.config import get_settings
from brandportal.backend.middleware.trace_id import TraceIdMiddleware
from brandportal.backend.routers import activities, auth, content, health, settings
from brandportal.backend.utils.api_errors import error_envelope
from brandportal.errors import PortalError, TransientStoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # shutdown


app = FastAPI(
    title="Brand Portal",
    description="Company site settings, branding assets and public content",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(TraceIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in get_settings().cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["System"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(settings.router, prefix="/api/settings", tags=["Settings"])
app.include_router(content.router, prefix="/api/content", tags=["Content"])
app.include_router(activities.router, prefix="/api/activities", tags=["Activities"])

app.mount(
    get_settings().upload_url_prefix,
    StaticFiles(directory=get_settings().upload_dir, check_dir=False),
    name="uploads",
)


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or str(uuid.uuid4())[:16]


def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    trace_id = _trace_id(request)
    resp = JSONResponse(
        content=error_envelope(code=code, message=message, trace_id=trace_id),
        status_code=status_code,
    )
    resp.headers["X-Trace-Id"] = trace_id
    return resp


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.warning("store error trace_id=%s path=%s: %s", _trace_id(request), request.url.path, exc.message)
    return _error_response(request, exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error_response(request, 400, "validation_error", "; ".join(parts) or "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if not isinstance(detail, str):
        detail = str(detail) if detail else "Error"
    return _error_response(request, exc.status_code, "http_error", detail)


@app.exception_handler(OperationalError)
async def operational_error_handler(request: Request, exc: OperationalError):
    logger.warning("database unavailable trace_id=%s path=%s: %s", _trace_id(request), request.url.path, exc)
    err = TransientStoreError("Storage temporarily unavailable")
    return _error_response(request, err.status_code, err.code, err.message)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure trace_id=%s path=%s", _trace_id(request), request.url.path)
    return _error_response(request, 500, "store_error", "Unexpected storage failure")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception trace_id=%s path=%s", _trace_id(request), request.url.path)
    return _error_response(request, 500, "internal_error", "Internal server error")
