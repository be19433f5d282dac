"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from app.core.settings import settings
from app.routes.dependencies import get_orchestrator, get_store
from app.services.classification_orchestrator import ClassificationOrchestrator
from app.store.base import ReportStore
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(orchestrator: ClassificationOrchestrator = Depends(get_orchestrator)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "classifier": orchestrator.classifier.model_name,
        "classification_workers": orchestrator.running,
        "timestamp": utc_now().isoformat()
    }


@router.get("/db")
async def database_health(store: ReportStore = Depends(get_store)):
    """
    Database connectivity check.
    Performs a lightweight read against the configured store.
    """
    try:
        info = await asyncio.to_thread(store.ping)
    except Exception as e:
        logger.error(f"❌ Database health check failed: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )

    return {"status": "healthy", **info, "timestamp": utc_now().isoformat()}
