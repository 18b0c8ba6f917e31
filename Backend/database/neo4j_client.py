from typing import Optional
from neo4j import AsyncGraphDatabase, AsyncDriver, AsyncSession, basic_auth
from config.settings import Credentials
from core.constants import DEFAULT_DATABASE_NAME
from core.exceptions import DatabaseConnectionError
import logging

logger = logging.getLogger(__name__)

class Neo4jClient:
    """Neo4j driver handle for the conversation graph

    One client is shared by the whole service. The underlying driver keeps a
    pool of connections and is safe for concurrent use; each message handler
    gets its own session from new_session().
    """

    def __init__(self, credentials: Credentials, database: str = DEFAULT_DATABASE_NAME):
        self.credentials = credentials
        self.database = database
        self.driver: Optional[AsyncDriver] = None

    @classmethod
    async def create(
        cls,
        credentials: Credentials,
        database: str = DEFAULT_DATABASE_NAME,
        verify: bool = True
    ) -> "Neo4jClient":
        """Build a connected client, or raise DatabaseConnectionError"""
        client = cls(credentials, database)
        await client.connect(verify=verify)
        return client

    @property
    def is_open(self) -> bool:
        return self.driver is not None

    async def connect(self, verify: bool = True):
        """Initialize the driver with basic authentication"""
        try:
            self.driver = AsyncGraphDatabase.driver(
                self.credentials.connection_str,
                auth=basic_auth(self.credentials.username, self.credentials.password)
            )
            if verify:
                await self.verify_connectivity()
            logger.info(f"Neo4j driver created for {self.credentials.connection_str}")
        except DatabaseConnectionError:
            await self._discard_driver()
            raise
        except Exception as e:
            logger.error(f"Failed to connect to Neo4j: {e}")
            await self._discard_driver()
            raise DatabaseConnectionError(str(e), cause=e) from e

    async def verify_connectivity(self):
        """Verify database connectivity"""
        async with self.driver.session(database=self.database) as session:
            result = await session.run("RETURN 1 as test")
            record = await result.single()
            if record is None or record["test"] != 1:
                raise DatabaseConnectionError("connectivity check returned no result")

    def new_session(self) -> AsyncSession:
        """Open a dedicated session; the caller owns and closes it"""
        if not self.driver:
            raise DatabaseConnectionError("driver is closed")
        return self.driver.session(database=self.database)

    async def close(self):
        """Close the driver; the handle is cleared even if closing fails"""
        driver, self.driver = self.driver, None
        if driver:
            await driver.close()
            logger.info("Neo4j driver closed")

    async def _discard_driver(self):
        driver, self.driver = self.driver, None
        if driver is None:
            return
        try:
            await driver.close()
        except Exception as e:
            logger.warning(f"Failed to close partially constructed driver: {e}")
