from typing import Dict, Any
from handlers.base import GraphMessageHandler
from models.enums import ExchangeCategory

class TrackerHandler(GraphMessageHandler):
    category = ExchangeCategory.TRACKER

    QUERY = """
    MERGE (c:Conversation {conversationId: $conversation_id})
    WITH c
    UNWIND $trackers AS tr
    MERGE (t:Tracker {name: tr.name})
    MERGE (c)-[r:TRACKED]->(t)
    SET r.matches = tr.matches, r.updatedAt = datetime()
    """

    def build_parameters(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        trackers = [
            {
                "name": item["name"],
                "matches": [
                    match.get("value")
                    for match in item.get("matches") or []
                    if isinstance(match, dict) and match.get("value")
                ],
            }
            for item in self._items(payload, "trackers", ["name"])
        ]
        return {"conversation_id": payload["conversation_id"], "trackers": trackers}
