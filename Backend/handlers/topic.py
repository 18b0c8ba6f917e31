from typing import Dict, Any
from handlers.base import GraphMessageHandler
from models.enums import ExchangeCategory

class TopicHandler(GraphMessageHandler):
    category = ExchangeCategory.TOPIC

    QUERY = """
    MERGE (c:Conversation {conversationId: $conversation_id})
    WITH c
    UNWIND $topics AS tp
    MERGE (t:Topic {topicId: tp.id})
    SET t.value = tp.value, t.score = tp.score
    MERGE (c)-[:DISCUSSED]->(t)
    WITH t, tp
    UNWIND tp.message_ids AS message_id
    MERGE (msg:Message {messageId: message_id})
    MERGE (t)-[:MENTIONED_IN]->(msg)
    """

    def build_parameters(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        topics = [
            {
                "id": item["id"],
                "value": item["value"],
                "score": item.get("score"),
                "message_ids": list(item.get("message_ids") or []),
            }
            for item in self._items(payload, "topics", ["id", "value"])
        ]
        return {"conversation_id": payload["conversation_id"], "topics": topics}
