from typing import Dict, Any
from handlers.base import GraphMessageHandler
from models.enums import ExchangeCategory

class InsightHandler(GraphMessageHandler):
    """Stores questions, action items and follow-ups"""

    category = ExchangeCategory.INSIGHT

    QUERY = """
    MERGE (c:Conversation {conversationId: $conversation_id})
    WITH c
    UNWIND $insights AS ins
    MERGE (i:Insight {insightId: ins.id})
    SET i.type = ins.type, i.text = ins.text, i.assignee = ins.assignee
    MERGE (c)-[:HAS_INSIGHT]->(i)
    """

    def build_parameters(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        insights = [
            {
                "id": item["id"],
                "type": item["type"],
                "text": item["text"],
                "assignee": (item.get("assignee") or {}).get("name"),
            }
            for item in self._items(payload, "insights", ["id", "type", "text"])
        ]
        return {"conversation_id": payload["conversation_id"], "insights": insights}
