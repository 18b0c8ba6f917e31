from typing import Dict, Any
from handlers.base import GraphMessageHandler
from models.enums import ExchangeCategory

class ConversationHandler(GraphMessageHandler):
    """Tracks conversation start and end events"""

    category = ExchangeCategory.CONVERSATION

    QUERY = """
    MERGE (c:Conversation {conversationId: $conversation_id})
    ON CREATE SET c.createdAt = datetime()
    SET c.lastEvent = $event,
        c.updatedAt = datetime(),
        c.endedAt = CASE WHEN $ended THEN datetime() ELSE c.endedAt END
    """

    def build_parameters(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        event = payload.get("type") or "conversation_init"
        return {
            "conversation_id": payload["conversation_id"],
            "event": event,
            "ended": event == "conversation_teardown",
        }
