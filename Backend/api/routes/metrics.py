from fastapi import APIRouter
from models.api_models import MetricsResponse, ExchangeMetrics
from utils.metrics import message_metrics
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics():
    """Get message processing metrics"""

    metrics = await message_metrics.get_current_metrics()

    return MetricsResponse(
        uptime_seconds=round(metrics['uptime_seconds'], 2),
        messages_processed=metrics['messages_processed'],
        messages_failed=metrics['messages_failed'],
        exchanges={
            name: ExchangeMetrics(**counts)
            for name, counts in metrics['exchanges'].items()
        }
    )

@router.post("/metrics/reset")
async def reset_metrics():
    """Reset metrics (admin only)"""

    await message_metrics.reset()
    return {"status": "metrics reset"}
