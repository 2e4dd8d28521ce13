# app/main.py
"""
FastAPI application entry point.
Includes middleware, domain-error mapping, global error handlers, all routers,
and the expiry sweeper lifecycle.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import DBAPIError
from app.routers import admin, auth, health, trips, vehicles
from app.database import create_tables
from app.config import settings
from app.services.errors import BookingError, InvalidInput, TooManyRequests, Unavailable
from app.services.expiry_sweeper import start_expiry_sweeper, stop_expiry_sweeper
from app.utils.logger import get_logger
from app.utils.rate_limiter import rate_limiter
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Booking API",
    description="Shared vehicle pool — claim, hand over, return, report.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (the web dashboard is served from another origin) ───────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Rate Limiting (per client address) ───────────────────────────────────────
@app.middleware("http")
async def limit_requests(request: Request, call_next):
    if settings.RATE_LIMIT_ENABLED:
        client = request.client.host if request.client else "unknown"
        allowed, retry_after = rate_limiter.hit(client)
        if not allowed:
            logger.warning(f"[RATE] {client} over limit on {request.url.path}, retry in {retry_after}s")
            return JSONResponse(
                status_code=TooManyRequests.status_code,
                content={"detail": TooManyRequests.default_message},
                headers={"Retry-After": str(retry_after)},
            )
    return await call_next(request)


# ── Security Headers ─────────────────────────────────────────────────────────
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
}
API_CONTENT_SECURITY_POLICY = "default-src 'none'; frame-ancestors 'none'"


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    # Swagger UI and ReDoc pull their assets from a CDN
    if request.url.path.startswith("/api/"):
        response.headers.setdefault("Content-Security-Policy", API_CONTENT_SECURITY_POLICY)
    return response


# ── Domain Error Mapping ─────────────────────────────────────────────────────
@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected malformed request on {request.url.path}: {[e['loc'] for e in exc.errors()]}")
    return JSONResponse(
        status_code=InvalidInput.status_code,
        content={"detail": InvalidInput.default_message},
    )


@app.exception_handler(DBAPIError)
async def store_error_handler(request: Request, exc: DBAPIError):
    logger.error(f"Store error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": Unavailable.default_message},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,     prefix="/api/v1", tags=["🔑 Auth"])
app.include_router(vehicles.router, prefix="/api/v1", tags=["🚗 Vehicles"])
app.include_router(trips.router,    prefix="/api/v1", tags=["🧭 Trips"])
app.include_router(admin.router,    prefix="/api/v1", tags=["🛠  Admin"])
app.include_router(health.router,   prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Fleet Booking backend starting up...")
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not set — refusing to start")
    create_tables()
    logger.info("✅ Database tables ready")

    app.state.expiry_sweeper = None
    if settings.SWEEPER_ENABLED:
        app.state.expiry_sweeper = start_expiry_sweeper()
    else:
        logger.warning("Expiry sweeper disabled (SWEEPER_ENABLED=false)")

    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Fleet Booking backend shutting down...")
    await stop_expiry_sweeper(getattr(app.state, "expiry_sweeper", None))
