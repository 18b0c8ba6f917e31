import asyncio
import logging
from typing import Dict, Optional, Tuple, Type
from neo4j import AsyncSession
from database.neo4j_client import Neo4jClient
from handlers.base import GraphMessageHandler
from handlers.registry import HANDLER_REGISTRY, registry_entries
from messaging.rabbit_manager import RabbitManager
from models.enums import ExchangeCategory
from models.results import RegistrationReport

logger = logging.getLogger(__name__)

class NotificationCoordinator:
    """
    Registers the graph message handlers against their broker exchanges.

    Bound to a live driver handle and a live broker manager; it does not
    repair either. Each handler gets its own database session so unrelated
    message categories never share a transaction scope.
    """

    def __init__(
        self,
        database: Neo4jClient,
        message_bus: RabbitManager,
        registry: Optional[Dict[ExchangeCategory, Type[GraphMessageHandler]]] = None
    ):
        self.database = database
        self.message_bus = message_bus
        self.registry = registry if registry is not None else HANDLER_REGISTRY
        self.report: Optional[RegistrationReport] = None

    async def init(self) -> RegistrationReport:
        """
        Subscribe every registry entry to its exchange.

        Entries register concurrently and init returns once all of them have
        finished. A failing entry is logged and skipped; it never fails init.
        """
        logger.debug("NotificationCoordinator.init ENTER")

        entries = list(registry_entries(self.registry))
        outcomes = await asyncio.gather(
            *(self._register(name, handler_cls) for name, handler_cls in entries)
        )

        report = RegistrationReport()
        for name, error in outcomes:
            if error is None:
                report.registered.append(name)
            else:
                report.failures[name] = error
        self.report = report

        if report.failures:
            logger.warning(
                f"Registered {len(report.registered)}/{len(entries)} handlers, "
                f"skipped: {', '.join(sorted(report.failures))}"
            )
        else:
            logger.info(f"Registered {len(report.registered)} handlers")
        logger.debug("NotificationCoordinator.init LEAVE")
        return report

    async def _register(self, name: str, handler_cls: Type[GraphMessageHandler]) -> Tuple[str, Optional[str]]:
        session = None
        try:
            session = self.database.new_session()
            handler = handler_cls(session)
            await self.message_bus.create_subscription(name, handler)
        except Exception as e:
            logger.error(f"CreateSubscription failed for '{name}': {e}")
            if session is not None:
                await self._release_session(name, session)
            return name, str(e)
        return name, None

    async def _release_session(self, name: str, session: AsyncSession):
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Failed to close session for '{name}': {e}")

    async def start(self):
        """Begin consumption across all subscriptions"""
        logger.debug("NotificationCoordinator.start ENTER")
        await self.message_bus.start()
        logger.info("NotificationCoordinator started")

    async def stop(self):
        """Halt consumption; subscriptions stay in place"""
        logger.debug("NotificationCoordinator.stop ENTER")
        await self.message_bus.stop()
        logger.info("NotificationCoordinator stopped")

    async def teardown(self):
        """Remove every subscription created by init"""
        logger.debug("NotificationCoordinator.teardown ENTER")
        await self.message_bus.delete()
        self.report = None
        logger.info("NotificationCoordinator torn down")
