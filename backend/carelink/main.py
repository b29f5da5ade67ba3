"""
CareLink — FastAPI application entry-point.

Run with:
    uvicorn carelink.main:app --reload --host 0.0.0.0 --port 3000

The module exposes ``app`` — the FastAPI instance serving the REST API.
"""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text as sa_text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from carelink.core.config import settings
from carelink.core.database import Base, engine, get_db
from carelink.core.exceptions import AppError
from carelink import models  # noqa: F401  (registers tables on Base)

# ── server start timestamp (for uptime calculation) ───────────────────
_SERVER_START_TIME = time.time()

logger = logging.getLogger(__name__)

# ── configure root logger (dev convenience) ───────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)

if settings.JWT_SECRET == "change-me-in-production":
    logger.warning("JWT_SECRET is set to the default value; change it before deploying!")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # create tables (dev convenience — use migrations in production)
    Base.metadata.create_all(bind=engine)
    yield
    engine.dispose()


# ── FastAPI app ───────────────────────────────────────────────────────
app = FastAPI(
    title="CareLink API",
    version="1.0.0",
    description="Patient / doctor coordination backend",
    lifespan=lifespan,
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


# ── Security Headers Middleware ───────────────────────────────────────
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject hardening headers into every response."""

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "camera=(self), microphone=(), geolocation=()"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "frame-ancestors 'none';"
        )
        return response


# ── XSS Protection Middleware ─────────────────────────────────────────
# markup only; plain text containing "=" is accepted
_XSS_PATTERN = re.compile(
    r"<\s*script|javascript\s*:",
    re.IGNORECASE,
)


class XSSProtectionMiddleware(BaseHTTPMiddleware):
    """Reject requests whose JSON body contains script-injection patterns."""

    async def dispatch(self, request: Request, call_next):
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if "application/json" in content_type:
                body_bytes = await request.body()
                if _XSS_PATTERN.search(body_bytes.decode("utf-8", errors="ignore")):
                    logger.warning(
                        "XSS attempt blocked from %s on %s",
                        request.client.host if request.client else "unknown",
                        request.url.path,
                    )
                    return _error(400, "Request rejected: potentially unsafe content detected.")
        return await call_next(request)


# Register middleware (order matters — outermost runs first)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(XSSProtectionMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── uniform error bodies: {"success": false, "message": ...} ──────────
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors or any(e.get("type") == "missing" for e in errors):
        return _error(400, "Please provide all required fields")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return _error(400, f"{field}: {message}" if field else message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store error on %s %s", request.method, request.url.path)
    return _error(500, "Server error. Please try again.")


# ── register REST routers ─────────────────────────────────────────────
from carelink.routes.auth import router as auth_router
from carelink.routes.dashboard import router as dashboard_router
from carelink.routes.requests import router as requests_router
from carelink.routes.sessions import router as sessions_router
from carelink.routes.documents import router as documents_router

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(requests_router)
app.include_router(sessions_router)
app.include_router(documents_router)


# ── system health check ───────────────────────────────────────────────
@app.get("/health")
def health(db: DBSession = Depends(get_db)):
    """Health check: database probe and uptime."""
    db_status = "connected"
    overall = "healthy"

    try:
        db.execute(sa_text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health-check DB probe failed: %s", exc)
        db_status = "error"
        overall = "degraded"

    return {
        "status": overall,
        "database": db_status,
        "uptime_seconds": round(time.time() - _SERVER_START_TIME, 1),
    }
