from enum import Enum

class ExchangeCategory(Enum):
    """Conversation intelligence message categories, one broker exchange each"""
    CONVERSATION = "conversation"
    ENTITY = "entity"
    INSIGHT = "insight"
    MESSAGE = "message"
    TOPIC = "topic"
    TRACKER = "tracker"

    @property
    def exchange_name(self) -> str:
        return self.value

class LifecycleStage(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"
