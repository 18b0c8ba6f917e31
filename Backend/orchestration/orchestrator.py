# Backend/orchestration/orchestrator.py
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from analytics.symbl_client import SymblClient
from config.settings import Settings, ServerOptions, Credentials, load_credentials
from core.constants import ResourceKind
from core.exceptions import MessageBusError
from database.neo4j_client import Neo4jClient
from messaging.rabbit_manager import RabbitManager
from models.enums import LifecycleStage
from models.results import AbsorbedError, RegistrationReport, TeardownReport
from orchestration.notification_manager import NotificationCoordinator

logger = logging.getLogger(__name__)

@dataclass
class ServerState:
    """Resource handles owned by one orchestrator

    A handle is either None or refers to a live resource.
    """
    analytics_client: Optional[SymblClient] = None
    database: Optional[Neo4jClient] = None
    message_bus: Optional[RabbitManager] = None
    notifications: Optional[NotificationCoordinator] = None

class AnalyzerOrchestrator:
    """
    Owns the lifecycle of the analyzer's long-lived resources:
    1. Analytics client (Symbl REST API)
    2. Graph database driver (Neo4j)
    3. Message bus manager (RabbitMQ)
    4. Notification coordinator (handler subscriptions, built on start)

    Resources are built in that order and torn down in reverse. A failed
    init or rebuild leaves a partial state that later calls repair.
    """

    def __init__(self, options: Optional[ServerOptions] = None, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.options = (options or self.settings.server_options()).with_defaults()
        self.credentials: Credentials = load_credentials()
        self.state = ServerState()
        self.absorbed_errors: List[AbsorbedError] = []

    @property
    def stage(self) -> LifecycleStage:
        if self.state.notifications is not None:
            return LifecycleStage.RUNNING
        if (self.state.analytics_client is not None
                and self.state.database is not None
                and self.state.message_bus is not None):
            return LifecycleStage.READY
        return LifecycleStage.UNINITIALIZED

    def health(self) -> Dict[str, bool]:
        return {
            ResourceKind.ANALYTICS_CLIENT.value: self.state.analytics_client is not None,
            ResourceKind.DATABASE.value: self.state.database is not None,
            ResourceKind.MESSAGE_BUS.value: self.state.message_bus is not None,
            ResourceKind.NOTIFICATIONS.value: self.state.notifications is not None,
        }

    def subscriptions(self) -> List[str]:
        if self.state.message_bus is None:
            return []
        return self.state.message_bus.subscriptions

    async def init(self):
        """Build analytics client, database and message bus; stop at the first failure"""
        logger.debug("Orchestrator.init ENTER")

        await self.rebuild_analytics_client()
        await self.rebuild_database()
        await self.rebuild_message_bus()

        logger.info("Orchestrator initialized")
        logger.debug("Orchestrator.init LEAVE")

    async def start(self) -> RegistrationReport:
        """Repair missing handles, then register and start the notification handlers"""
        logger.debug("Orchestrator.start ENTER")

        if self.state.database is None:
            logger.info("Database handle missing, rebuilding")
            await self.rebuild_database()

        if self.state.analytics_client is None:
            logger.info("Analytics client handle missing, rebuilding")
            await self.rebuild_analytics_client()

        if self.state.message_bus is None:
            raise MessageBusError("broker manager is not initialized, call init() or rebuild_message_bus() first")

        if self.state.notifications is not None:
            logger.warning("Orchestrator already started, replacing the live notification coordinator")

        coordinator = NotificationCoordinator(self.state.database, self.state.message_bus)
        report = await coordinator.init()
        self.state.notifications = coordinator
        await coordinator.start()

        logger.info(f"Orchestrator started with {len(report.registered)} subscriptions")
        logger.debug("Orchestrator.start LEAVE")
        return report

    async def rebuild_analytics_client(self):
        """Replace the analytics client; the old one holds no connection"""
        logger.debug("Orchestrator.rebuild_analytics_client ENTER")
        self.state.analytics_client = await self._build_analytics_client()
        logger.info("Analytics client rebuilt")

    async def rebuild_database(self):
        """Close the current driver, then build a fresh one

        Registered handlers hold sessions from the current driver, so a live
        coordinator is torn down first and start() must run again.
        """
        logger.debug("Orchestrator.rebuild_database ENTER")

        if self.state.notifications is not None:
            await self._teardown_notifications()

        if self.state.database is not None:
            await self._close_database()

        self.state.database = await self._build_database()
        logger.info("Database driver rebuilt")

    async def rebuild_message_bus(self):
        """Tear down the current broker manager, then build a fresh one

        A live coordinator is bound to the current manager and goes first.
        """
        logger.debug("Orchestrator.rebuild_message_bus ENTER")

        if self.state.notifications is not None:
            await self._teardown_notifications()

        if self.state.message_bus is not None:
            await self._teardown_message_bus()

        self.state.message_bus = await self._build_message_bus()
        logger.info("Message bus rebuilt")

    async def stop(self) -> TeardownReport:
        """Tear down coordinator, message bus and database, in that order

        Every step is attempted and every handle is cleared. Failures are
        logged and returned in the report instead of raised.
        """
        logger.debug("Orchestrator.stop ENTER")
        report = TeardownReport()

        if self.state.notifications is not None:
            report.steps.append(ResourceKind.NOTIFICATIONS.value)
            await self._teardown_notifications(report)

        if self.state.message_bus is not None:
            report.steps.append(ResourceKind.MESSAGE_BUS.value)
            await self._teardown_message_bus(report)

        if self.state.database is not None:
            report.steps.append(ResourceKind.DATABASE.value)
            await self._close_database(report)

        self.state.analytics_client = None

        if report.errors:
            logger.warning(f"Orchestrator stopped with {len(report.errors)} teardown errors")
        else:
            logger.info("Orchestrator stopped")
        logger.debug("Orchestrator.stop LEAVE")
        return report

    async def _build_analytics_client(self) -> SymblClient:
        return await SymblClient.create(self.settings)

    async def _build_database(self) -> Neo4jClient:
        return await Neo4jClient.create(
            self.credentials,
            database=self.settings.neo4j_database,
            verify=self.settings.neo4j_verify_connectivity
        )

    async def _build_message_bus(self) -> RabbitManager:
        return await RabbitManager.create(
            self.options.rabbit_uri,
            prefetch_count=self.settings.rabbit_prefetch_count
        )

    async def _teardown_notifications(self, report: Optional[TeardownReport] = None):
        coordinator, self.state.notifications = self.state.notifications, None
        try:
            await coordinator.teardown()
        except Exception as e:
            self._absorb(ResourceKind.NOTIFICATIONS, "teardown", e, report)

    async def _teardown_message_bus(self, report: Optional[TeardownReport] = None):
        message_bus, self.state.message_bus = self.state.message_bus, None
        try:
            await message_bus.teardown()
        except Exception as e:
            self._absorb(ResourceKind.MESSAGE_BUS, "teardown", e, report)

    async def _close_database(self, report: Optional[TeardownReport] = None):
        database, self.state.database = self.state.database, None
        try:
            await database.close()
        except Exception as e:
            self._absorb(ResourceKind.DATABASE, "close", e, report)

    def _absorb(self, resource: ResourceKind, operation: str, error: Exception,
                report: Optional[TeardownReport] = None):
        logger.error(f"{resource.value} {operation} failed: {error}")
        absorbed = AbsorbedError.from_exception(resource.value, operation, error)
        self.absorbed_errors.append(absorbed)
        if report is not None:
            report.errors.append(absorbed)
