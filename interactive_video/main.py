"""FastAPI application: video authoring, previews, viewer progress and exports."""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
import subprocess
from datetime import datetime
from pathlib import Path

from . import __version__
from .routers import export, health, preview, progress, templates, videos

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

APP_NAME = "Interactive Video API"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

app = FastAPI(
    title=APP_NAME,
    description="Timestamped interactive elements over video: authoring, playback progress and SCORM 1.2 export.",
    version=__version__,
)

cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def _error_body(request: Request, message) -> dict:
    return {
        "success": False,
        "error": message,
        "timestamp": datetime.utcnow().isoformat(),
        "path": str(request.url),
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content=_error_body(request, "Internal server error"))


for module in (health, videos, preview, progress, templates, export):
    app.include_router(module.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": APP_NAME,
        "version": __version__,
        "status": "running",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


def run_migrations() -> bool:
    """``alembic upgrade head`` against ``DATABASE_URL``; False when it fails."""
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.error("AUTO_MIGRATE is set but the alembic command is not installed")
        return False
    if result.returncode != 0:
        logger.error("alembic upgrade failed (code %s): %s", result.returncode, result.stderr)
        return False
    return True


@app.on_event("startup")
async def startup_event():
    logger.info("Starting %s v%s (%s)", APP_NAME, __version__, os.getenv("ENVIRONMENT", "development"))
    if os.getenv("AUTO_MIGRATE", "false").lower() in {"1", "true", "yes"}:
        run_migrations()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "interactive_video.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
        reload=True,
    )
