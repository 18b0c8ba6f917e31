from abc import ABC, abstractmethod
import asyncio
import json
import logging
import time
from typing import Dict, Any, List, Optional
from neo4j import AsyncSession, AsyncManagedTransaction
from core.exceptions import HandlerError
from models.enums import ExchangeCategory
from utils.metrics import MessageMetrics, message_metrics

class GraphMessageHandler(ABC):
    """Consumes one exchange's messages and writes them to the graph

    Each instance owns a dedicated database session. Writes are serialised
    per handler because a session must not be used concurrently.
    """

    category: ExchangeCategory
    QUERY: str = ""

    def __init__(self, session: AsyncSession, metrics: Optional[MessageMetrics] = None):
        self.session = session
        self.metrics = metrics or message_metrics
        self.name = self.category.exchange_name
        self.logger = logging.getLogger(f"{__name__}.{self.name}")
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def decode(self, body: bytes) -> Dict[str, Any]:
        """Decode a message body into a payload carrying a conversation_id"""
        try:
            payload = json.loads(body)
        except ValueError as e:
            raise HandlerError(f"{self.name}: invalid JSON payload: {e}") from e

        if not isinstance(payload, dict):
            raise HandlerError(f"{self.name}: payload must be a JSON object")
        if not payload.get("conversation_id"):
            raise HandlerError(f"{self.name}: payload is missing conversation_id")
        return payload

    async def process_message(self, body: bytes):
        start_time = time.time()
        try:
            payload = self.decode(body)
            parameters = self.build_parameters(payload)
            async with self._lock:
                if self._closed:
                    raise HandlerError(f"{self.name}: handler is closed")
                await self.session.execute_write(self._write, parameters)
        except Exception:
            await self.metrics.record_message(self.name, False, time.time() - start_time)
            raise

        await self.metrics.record_message(self.name, True, time.time() - start_time)
        self.logger.debug(f"Stored {self.name} message for conversation {parameters['conversation_id']}")

    async def _write(self, tx: AsyncManagedTransaction, parameters: Dict[str, Any]):
        result = await tx.run(self.QUERY, parameters)
        await result.consume()

    @abstractmethod
    def build_parameters(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Map a decoded payload to the query parameters of QUERY"""
        pass

    def _items(self, payload: Dict[str, Any], key: str, required: List[str]) -> List[Dict[str, Any]]:
        items = payload.get(key) or []
        if not isinstance(items, list):
            raise HandlerError(f"{self.name}: '{key}' must be a list")
        for item in items:
            missing = [field for field in required if not isinstance(item, dict) or item.get(field) in (None, "")]
            if missing:
                raise HandlerError(f"{self.name}: {key} item is missing {', '.join(missing)}")
        return items

    async def close(self):
        """Release the session; safe to call more than once"""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            await self.session.close()
            self.logger.debug(f"Session for {self.name} handler closed")
