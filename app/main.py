"""
HireMind Interview Prep - Backend
FastAPI application entry point

Serves resume analysis, voice interview call sessions and interview feedback
"""

import sys
import logging
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Add project root to Python path to fix imports when running directly
# This allows the script to work whether run as: python app/main.py or python -m app.main
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.config.settings import get_cors_origins, settings
from app.routers import auth, calls, interview, resume
from app.utils.exceptions import AppException

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration on startup"""
    logger.info("[STARTUP] Validating configuration...")

    from app.db.client import validate_supabase_config
    if not validate_supabase_config(raise_on_missing=False):
        logger.warning("[STARTUP] Supabase configuration incomplete - sign-in and feedback storage will fail")

    if not settings.vapi_api_key:
        logger.warning("[STARTUP] VAPI_API_KEY not set - voice calls cannot be started")
    if not settings.vapi_workflow_id:
        logger.warning("[STARTUP] VAPI_WORKFLOW_ID not set - question-generation calls cannot be started")
    if not settings.openai_api_key:
        logger.warning("[STARTUP] OPENAI_API_KEY not set - feedback falls back to transcript statistics")

    logger.info("[STARTUP] Application startup complete.")

    yield  # Application runs here

    logger.info("[SHUTDOWN] Application shutting down...")


app = FastAPI(
    title="HireMind Interview Prep",
    description="Backend API for resume analysis and AI voice interview practice",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Standardize HTTPException responses to {'error': 'message'}
    instead of FastAPI's default {'detail': 'message'}
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail}
    )


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Render application errors as {'error': 'message'} with their status code"""
    if exc.status_code >= 500:
        logger.error(f"[ERROR] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message}
    )


@app.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "HireMind Interview Prep Backend",
        "database": "configured" if settings.supabase_url and settings.supabase_service_key else "not_configured",
        "voice": "configured" if settings.vapi_api_key else "not_configured",
        "ai_feedback": "configured" if settings.openai_api_key else "not_configured",
    }


cors_origins = get_cors_origins()
use_wildcard = "*" in cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if use_wildcard else cors_origins,
    allow_credentials=not use_wildcard,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(auth.router)
app.include_router(resume.router)
app.include_router(calls.router)
app.include_router(interview.router)


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {
        "message": "HireMind Interview Prep API",
        "status": "running",
        "version": "1.0.0",
        "docs": "/docs",
        "api_base": "/api",
    }


if __name__ == "__main__":
    import uvicorn

    server_host = "127.0.0.1" if settings.environment == "development" else "0.0.0.0"
    logger.info(f"Server binding to: {server_host}:{settings.backend_port}")

    if settings.environment == "development":
        uvicorn.run(
            "app.main:app",  # Import string so reload works
            host=server_host,
            port=settings.backend_port,
            reload=True,
            log_level="info"
        )
    else:
        uvicorn.run(
            app,
            host=server_host,
            port=settings.backend_port,
            reload=False,
            log_level="info"
        )
