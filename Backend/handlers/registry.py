from typing import Dict, Iterator, Tuple, Type
from handlers.base import GraphMessageHandler
from handlers.conversation import ConversationHandler
from handlers.entity import EntityHandler
from handlers.insight import InsightHandler
from handlers.message import MessageHandler
from handlers.topic import TopicHandler
from handlers.tracker import TrackerHandler
from models.enums import ExchangeCategory

HANDLER_REGISTRY: Dict[ExchangeCategory, Type[GraphMessageHandler]] = {
    ExchangeCategory.CONVERSATION: ConversationHandler,
    ExchangeCategory.ENTITY: EntityHandler,
    ExchangeCategory.INSIGHT: InsightHandler,
    ExchangeCategory.MESSAGE: MessageHandler,
    ExchangeCategory.TOPIC: TopicHandler,
    ExchangeCategory.TRACKER: TrackerHandler,
}


def check_registry(registry: Dict[ExchangeCategory, Type[GraphMessageHandler]]):
    """Every category needs exactly one handler whose category matches its key"""
    missing = [category.name for category in ExchangeCategory if category not in registry]
    if missing:
        raise RuntimeError(f"No handler registered for: {', '.join(missing)}")

    mismatched = [
        category.name for category, handler_cls in registry.items()
        if handler_cls.category is not category
    ]
    if mismatched:
        raise RuntimeError(f"Handler category mismatch for: {', '.join(mismatched)}")


def registry_entries(
    registry: Dict[ExchangeCategory, Type[GraphMessageHandler]] = HANDLER_REGISTRY
) -> Iterator[Tuple[str, Type[GraphMessageHandler]]]:
    """Yield (exchange name, handler class) pairs in category order"""
    for category in ExchangeCategory:
        if category in registry:
            yield category.exchange_name, registry[category]


check_registry(HANDLER_REGISTRY)
