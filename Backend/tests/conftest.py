"""
Shared fixtures for the analyzer test suite.

Fakes stand in for the three external resources so lifecycle behaviour can be
asserted without Neo4j, RabbitMQ or the Symbl API:
    - FakeDatabase: driver handle handing out mock sessions
    - FakeRabbitManager: in-memory subscription registry
    - resource_factories: patches the three `create` constructors used by the
      orchestrator and records every resource they build
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from config.settings import Settings
from tests.fakes import FakeDatabase, FakeRabbitManager


@pytest.fixture
def credentials_env(monkeypatch):
    monkeypatch.setenv("NEO4J_CONNECTION", "bolt://db:7687")
    monkeypatch.setenv("NEO4J_USERNAME", "neo4j")
    monkeypatch.setenv("NEO4J_PASSWORD", "secret")


@pytest.fixture
def settings():
    return Settings(
        bind_port=0,
        rabbit_uri="amqp://broker:5672",
        neo4j_verify_connectivity=False,
        symbl_app_id="app-id",
        symbl_app_secret="app-secret",
        log_file=None,
    )


@pytest.fixture
def journal():
    return []


@pytest.fixture
def resource_factories(journal):
    """Patch the resource constructors and record what they build"""
    built = SimpleNamespace(clients=[], databases=[], buses=[])

    def make_client(settings):
        client = MagicMock(name=f"SymblClient-{len(built.clients)}")
        built.clients.append(client)
        journal.append("analytics_client.create")
        return client

    def make_database(credentials, database="neo4j", verify=True):
        db = FakeDatabase(journal)
        built.databases.append(db)
        journal.append("database.create")
        return db

    def make_bus(rabbit_uri, prefetch_count=1):
        bus = FakeRabbitManager(journal)
        built.buses.append(bus)
        journal.append("message_bus.create")
        return bus

    with patch("orchestration.orchestrator.SymblClient.create",
               new=AsyncMock(side_effect=make_client)) as create_client, \
         patch("orchestration.orchestrator.Neo4jClient.create",
               new=AsyncMock(side_effect=make_database)) as create_database, \
         patch("orchestration.orchestrator.RabbitManager.create",
               new=AsyncMock(side_effect=make_bus)) as create_bus:
        built.create_client = create_client
        built.create_database = create_database
        built.create_bus = create_bus
        yield built
