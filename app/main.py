from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import RealEstError, StorageError, Unauthorized, ValidationError
from app.core.logging import get_logger, setup_logging
from app.routers import admin, admin_auth, auth, inquiries, properties

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s started", settings.APP_NAME)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Property listings, search, verification and analytics for the Nigerian market",
    version="1.0.0",
    lifespan=lifespan,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Error responses ──────────────────────────────────────────────────────────

@app.exception_handler(RealEstError)
async def realest_error_handler(request: Request, exc: RealEstError):
    body = {"error": exc.message}
    headers = None

    if isinstance(exc, ValidationError):
        body["details"] = exc.details
    elif isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)

    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc) or "body", "message": error["msg"]})

    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request parameters", "details": details},
    )


# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(properties.router, prefix="/api")
app.include_router(inquiries.router, prefix="/api")
app.include_router(admin_auth.router, prefix="/api/admin")
app.include_router(admin.router, prefix="/api/admin")

@app.get("/")
def root():
    return {
        "message": settings.APP_NAME,
        "version": "1.0.0",
        "status": "active",
        "documentation": "/docs"
    }

@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "timestamp": datetime.now(timezone.utc)
    }
