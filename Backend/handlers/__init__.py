"""Message handlers that persist conversation intelligence events to the graph."""
from .base import GraphMessageHandler
from .conversation import ConversationHandler
from .entity import EntityHandler
from .insight import InsightHandler
from .message import MessageHandler
from .topic import TopicHandler
from .tracker import TrackerHandler
from .registry import HANDLER_REGISTRY, registry_entries

__all__ = [
    "GraphMessageHandler",
    "ConversationHandler",
    "EntityHandler",
    "InsightHandler",
    "MessageHandler",
    "TopicHandler",
    "TrackerHandler",
    "HANDLER_REGISTRY",
    "registry_entries",
]
