from typing import Optional


class AnalyzerError(Exception):
    """Base exception for the analyzer service"""
    pass

class ConfigurationError(AnalyzerError):
    """Required configuration input was not found"""
    pass

class ResourceConstructionError(AnalyzerError):
    """A long-lived resource could not be constructed"""

    resource = "resource"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{self.resource}: {message}")
        self.cause = cause

class DatabaseConnectionError(ResourceConstructionError):
    """Graph database driver could not be constructed"""
    resource = "database"

class MessageBusError(ResourceConstructionError):
    """Message broker manager could not be constructed"""
    resource = "message_bus"

class AnalyticsClientError(ResourceConstructionError):
    """Analytics client could not be constructed"""
    resource = "analytics_client"

class SubscriptionError(AnalyzerError):
    """Broker subscription could not be created, started or removed"""
    pass

class HandlerError(AnalyzerError):
    """A message handler could not process a payload"""
    pass
