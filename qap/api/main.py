"""
QAP FastAPI Application
=======================

REST API driving QAP editing sessions.

Endpoints:
    GET  /api/health  - Health check
    /api/qap/...      - Workflow routes (see qap_routes)

Usage:
    uvicorn qap.api.main:app --reload --port 8000

    Or:
    python -m qap.api.main
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import os

from ..orchestrator.config import get_settings
from ..orchestrator.logging_config import setup_logging
from .models import HealthResponse
from .qap_routes import router as qap_router
from .services import registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_logs,
        log_file=settings.logging.log_file,
    )
    logger.info(f"Starting QAP API ({settings.environment})...")

    yield

    registry.clear()
    logger.info("QAP API stopped")


app = FastAPI(
    title="QAP Workflow API",
    description="Specification reconciliation and mismatch assignment for QAPs",
    version=get_settings().app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(qap_router)


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        active_sessions=len(registry),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "qap.api.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
        reload=not get_settings().is_production(),
    )
