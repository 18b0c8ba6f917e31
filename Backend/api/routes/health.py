from fastapi import APIRouter
from models.api_models import HealthResponse
from models.enums import LifecycleStage
from api import app_state
from datetime import datetime
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Resource and subscription health"""
    orchestrator = app_state.orchestrator

    if orchestrator is None:
        return HealthResponse(
            status="unavailable",
            timestamp=datetime.now().isoformat(),
            stage=LifecycleStage.UNINITIALIZED.value,
            resources={},
            subscriptions=[]
        )

    stage = orchestrator.stage
    return HealthResponse(
        status="healthy" if stage is LifecycleStage.RUNNING else "degraded",
        timestamp=datetime.now().isoformat(),
        stage=stage.value,
        resources=orchestrator.health(),
        subscriptions=orchestrator.subscriptions()
    )

@router.get("/readiness")
async def readiness_check():
    """Kubernetes readiness probe"""
    orchestrator = app_state.orchestrator
    ready = orchestrator is not None and orchestrator.stage is LifecycleStage.RUNNING
    return {"status": "ready" if ready else "not_ready"}

@router.get("/liveness")
async def liveness_check():
    """Kubernetes liveness probe"""
    return {"status": "alive"}
