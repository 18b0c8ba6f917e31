from .enums import ExchangeCategory, LifecycleStage
from .results import AbsorbedError, TeardownReport, RegistrationReport
from .api_models import HealthResponse, MetricsResponse, ExchangeMetrics

__all__ = [
    # Enums
    "ExchangeCategory",
    "LifecycleStage",

    # Lifecycle reports
    "AbsorbedError",
    "TeardownReport",
    "RegistrationReport",

    # API models
    "HealthResponse",
    "MetricsResponse",
    "ExchangeMetrics",
]
