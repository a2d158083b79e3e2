"""
Galeri Backend - FastAPI Application Entry Point

Registration, WhatsApp OTP verification, admin approval and session gating
for the community photo gallery.
"""

from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException

from api.deps import clear_session_cookie
from api.v1 import admin, authentication, pages, photos, profiles
from api.v1 import settings as app_settings
from core.config import settings
from core.database import init_models
from core.exceptions import (
    CodeMismatch,
    Forbidden,
    GaleriError,
    GateRedirect,
    MessagingDeliveryFailure,
    PersistenceFailure,
    RateLimited,
)
from core.logging import log_request_middleware, setup_logging
from services.session_gate import HOME_ROUTE

# Setup logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Galeri Backend application...", env=settings.ENV)

    # Create database tables (for development)
    if settings.ENV == "development":
        await init_models()
        logger.info("Database tables created (development mode)")

    yield

    logger.info("Shutting down Galeri Backend application...")


# Create FastAPI application
app = FastAPI(
    title="Galeri Backend API",
    description="Membership gate for the community photo gallery",
    version=settings.VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.ENABLE_REQUEST_LOGGING:
    app.middleware("http")(log_request_middleware)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "-"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation exceptions."""
    errors = exc.errors()
    logger.warning(
        "Validation exception",
        path=request.url.path,
        method=request.method,
        client=_client_host(request),
        errors=len(errors),
    )
    user_message = errors[0].get("msg", "Invalid input data") if errors else "Invalid input data"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "message": user_message,
            "error": "validation_failed",
            "detail": jsonable_errors(errors),
        },
    )


def jsonable_errors(errors):
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors]


@app.exception_handler(GaleriError)
async def galeri_exception_handler(request: Request, exc: GaleriError):
    log = logger.error if isinstance(exc, (PersistenceFailure, MessagingDeliveryFailure)) else logger.info
    log(
        "Request failed",
        error=exc.code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
        client=_client_host(request),
    )
    content = {"success": False, "message": exc.message, "error": exc.code, "detail": exc.detail}
    headers = None
    if isinstance(exc, CodeMismatch):
        content["detail"] = {"attempts_remaining": exc.attempts_remaining}
    elif isinstance(exc, RateLimited) and exc.retry_after is not None:
        content["detail"] = {"retry_after": exc.retry_after}
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden):
    logger.warning("Forbidden", path=request.url.path, method=request.method, client=_client_host(request))
    return RedirectResponse(HOME_ROUTE, status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(GateRedirect)
async def gate_redirect_handler(request: Request, exc: GateRedirect):
    response = RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)
    if exc.clear_session:
        clear_session_cookie(response)
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(
        "HTTP exception",
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
        client=_client_host(request),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "error": "http_error"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Server exception",
        path=request.url.path,
        method=request.method,
        client=_client_host(request),
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "error": "internal_error"},
    )


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "app": settings.APP_NAME, "version": settings.VERSION}


# Include API routers
app.include_router(authentication.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(profiles.router, prefix="/api/v1/profile", tags=["Profiles"])
app.include_router(photos.router, prefix="/api/v1/photos", tags=["Photos"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])
app.include_router(app_settings.router, prefix="/api/v1/settings", tags=["Settings"])
app.include_router(pages.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
