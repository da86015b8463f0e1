"""Main FastAPI application module.

This module initializes the FastAPI application, maps domain errors to HTTP
responses and registers all route handlers.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.logging_config import setup_logging
from config import get_settings
from core.database import SessionLocal, init_db
from core.exceptions import MagazineError
from api.routes import academic, admin, auth, contribution, reports, upload, users
from utils.academic_manager import AcademicManager

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

settings = get_settings()

# Initialize FastAPI application
app = FastAPI(
    title="Faculty Magazine API",
    description="Backend API service for the university magazine contribution system.",
    version="1.0.0",
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MagazineError)
def magazine_error_handler(request: Request, exc: MagazineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Register route handlers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(academic.router)
app.include_router(admin.router)
app.include_router(contribution.router)
app.include_router(reports.router)
app.include_router(upload.router)


@app.on_event("startup")
def startup_tasks() -> None:
    """Create tables and seed the default faculties on an empty database."""
    init_db()
    db = SessionLocal()
    try:
        AcademicManager(db).seed_default_faculties(settings.default_faculties)
    finally:
        db.close()


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returns API information and documentation links.

    Returns:
        Dictionary with API information and documentation links.
    """
    return {
        "name": "Faculty Magazine API",
        "version": "1.0.0",
        "description": "Backend API service for the university magazine contribution system.",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{settings.api_host}:{settings.api_port}"
    logger.info("Starting Faculty Magazine API at %s (docs: %s/docs)", server_url, server_url)
    uvicorn.run("app:app", host=settings.api_host, port=settings.api_port, reload=True)
