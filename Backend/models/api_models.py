from pydantic import BaseModel
from typing import Dict, List

class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: str
    stage: str
    resources: Dict[str, bool]
    subscriptions: List[str]

class ExchangeMetrics(BaseModel):
    processed: int
    failed: int

class MetricsResponse(BaseModel):
    """Message processing metrics response"""
    uptime_seconds: float
    messages_processed: int
    messages_failed: int
    exchanges: Dict[str, ExchangeMetrics]
