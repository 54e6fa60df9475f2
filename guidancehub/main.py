"""
GuidanceHub - Main Application

FastAPI backend with:
- MongoDB for every record (users, quizzes, colleges, applications, ...)
- Adaptive quiz scoring and career matching
- Cutoff prediction from historical admissions
- JWT authentication

Run: uvicorn guidancehub.main:app --reload
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError

from guidancehub import __version__
from guidancehub.api.routes import api_router
from guidancehub.core.config import get_settings
from guidancehub.db.mongodb import init_mongo_indexes, test_mongo_connection
from guidancehub.services.segmentation_service import ensure_default_segments

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="GuidanceHub",
    description="""
    Career guidance backend for students.

    ## Features
    - **Users**: Registration, JWT login, profile, avatar, privacy, data export
    - **Quiz**: Adaptive assessments with category scoring and analytics
    - **Careers**: Career path matching from quiz results
    - **Colleges**: Directory search, nearby colleges, reviews
    - **Admissions**: Events, applications, cutoff prediction
    - **Notifications**: Deadline and application status alerts
    - **Segmentation & Analytics**: Student segments and progress reports
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")

# Serve uploaded avatars
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes and default segments on startup."""
    try:
        init_mongo_indexes()
        ensure_default_segments()
    except PyMongoError as e:
        logger.warning("MongoDB initialization failed: %s", e)


@app.get("/api/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "app": "GuidanceHub",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
