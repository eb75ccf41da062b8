"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, security headers, CORS)
- Exception handlers that turn errors into safe JSON bodies
- Startup/shutdown of the links table engine
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortbox import __version__
from shortbox.api import endpoints
from shortbox.core.auth import MIN_SECRET_LENGTH
from shortbox.core.exceptions import APIError, DatabaseError
from shortbox.core.setting import EnvSettingsOptions, settings
from shortbox.db.session import engine, init_models
from shortbox.middleware.headers import SecurityHeadersMiddleware
from shortbox.middleware.logging import add_logging_middleware, setup_logging

setup_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)
logger = logging.getLogger(__name__)

# Interactive docs are not served in production
SHOW_DOCS = settings.ENV_SETTING is not EnvSettingsOptions.production

app = FastAPI(
    title="shortbox",
    description="A minimal public link-shortening service",
    version=__version__,
    docs_url="/docs" if SHOW_DOCS else None,
    redoc_url="/redoc" if SHOW_DOCS else None,
    openapi_url="/openapi.json" if SHOW_DOCS else None,
)

add_logging_middleware(app)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, **exc.extra},
        headers=exc.headers,
    )


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error(f"Storage failure on {request.url.path}: {exc}", exc_info=exc.original_error)
    return JSONResponse(status_code=500, content={"error": "Storage is temporarily unavailable."})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


# Health endpoints defined before router to match before the catch-all slug route
@app.get("/", tags=["Health"])
async def root():
    """Service banner."""
    return {
        "message": "shortbox link shortener",
        "version": __version__,
        "docs": "/docs" if SHOW_DOCS else None,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


app.include_router(endpoints.router, tags=["Links"])


@app.on_event("startup")
async def startup_event():
    """Create the links table if configured to."""
    if settings.CREATE_TABLES:
        await init_models()
    secret = settings.admin_secret()
    if not secret or len(secret) < MIN_SECRET_LENGTH:
        logger.warning(f"ADMIN_KEY is unset or shorter than {MIN_SECRET_LENGTH} characters; admin routes are disabled")


@app.on_event("shutdown")
async def shutdown_event():
    await engine.dispose()
