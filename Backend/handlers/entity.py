from typing import Dict, Any
from handlers.base import GraphMessageHandler
from models.enums import ExchangeCategory

class EntityHandler(GraphMessageHandler):
    category = ExchangeCategory.ENTITY

    # entities are shared across conversations, keyed by type and value
    QUERY = """
    MERGE (c:Conversation {conversationId: $conversation_id})
    WITH c
    UNWIND $entities AS ent
    MERGE (e:Entity {type: ent.type, value: ent.value})
    SET e.subType = ent.sub_type, e.category = ent.category
    MERGE (c)-[:HAS_ENTITY]->(e)
    """

    def build_parameters(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        entities = [
            {
                "type": item["type"],
                "value": item["value"],
                "sub_type": item.get("sub_type"),
                "category": item.get("category"),
            }
            for item in self._items(payload, "entities", ["type", "value"])
        ]
        return {"conversation_id": payload["conversation_id"], "entities": entities}
