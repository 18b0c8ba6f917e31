from typing import Dict, Any
from handlers.base import GraphMessageHandler
from models.enums import ExchangeCategory

class MessageHandler(GraphMessageHandler):
    """Stores transcript messages and their speakers"""

    category = ExchangeCategory.MESSAGE

    QUERY = """
    MERGE (c:Conversation {conversationId: $conversation_id})
    WITH c
    UNWIND $messages AS m
    MERGE (msg:Message {messageId: m.id})
    SET msg.text = m.text,
        msg.speaker = m.speaker,
        msg.startTime = m.start_time
    MERGE (c)-[:HAS_MESSAGE]->(msg)
    """

    def build_parameters(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        messages = [
            {
                "id": item["id"],
                "text": item["text"],
                "speaker": (item.get("from") or {}).get("name"),
                "start_time": item.get("start_time"),
            }
            for item in self._items(payload, "messages", ["id", "text"])
        ]
        return {"conversation_id": payload["conversation_id"], "messages": messages}
