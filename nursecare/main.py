import logging
import os
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
# This is needed for relationships between models in different files
from . import (
    models,  # noqa: F401
    models_appointment,  # noqa: F401
    models_care,  # noqa: F401
    models_invitation,  # noqa: F401
    models_invoice,  # noqa: F401
    models_messaging,  # noqa: F401
    models_shift,  # noqa: F401
)
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.appointments.router import router as appointments_router
from .domain.care.router import router as care_router
from .domain.clients.router import router as clients_router
from .domain.invitations.router import router as invitations_router
from .domain.invoices.router import router as invoices_router
from .domain.shifts.router import router as shifts_router
from .domain.shifts.router import swap_router as shift_swaps_router
from .domain.staff.router import router as staff_router
from .routes.auth import router as auth_router
from .routes.messages import router as messages_router
from .routes.notifications import router as notifications_router
from .routes.organizations import router as organizations_router
from .routes.realtime import router as realtime_router
from .routes.reports import router as reports_router
from .routes.uploads import router as uploads_router
from .security_headers import SecurityHeadersMiddleware
from .services.realtime import get_redis_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    client = get_redis_client()
    if client is None:
        logger.info("REDIS_URL not set - real-time change feed disabled")
    else:
        try:
            client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed - change feed will operate in fail-open mode: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="NurseCare API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-serializable ctx values (raised ValueErrors) stringified"""
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware,
        exclude_paths=["/health", "/docs", "/openapi.json", "/realtime/stream"],
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")


# CORS Configuration
CORS_ORIGINS = [origin.strip() for origin in ALLOWED_ORIGINS.split(",") if origin.strip()]
logger.info(f"CORS allowed origins: {CORS_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Routes
app.include_router(auth_router)
app.include_router(organizations_router)
app.include_router(staff_router)
app.include_router(clients_router)
app.include_router(shifts_router)
app.include_router(shift_swaps_router)
app.include_router(invoices_router)
app.include_router(invitations_router)
app.include_router(care_router)
app.include_router(appointments_router)
app.include_router(messages_router)
app.include_router(notifications_router)
app.include_router(uploads_router)
app.include_router(reports_router)
app.include_router(realtime_router)


@app.get("/")
def root():
    return {"message": "NurseCare API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


def main():
    """Run the API server"""
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
