"""
Tests for orchestration/notification_manager.py - handler registration.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.exceptions import SubscriptionError
from handlers import HANDLER_REGISTRY
from handlers.entity import EntityHandler
from models.enums import ExchangeCategory
from orchestration.notification_manager import NotificationCoordinator
from tests.fakes import FakeDatabase, FakeRabbitManager


class TestNotificationCoordinatorInit:

    @pytest.mark.asyncio
    async def test_registers_every_exchange(self):
        database = FakeDatabase()
        bus = FakeRabbitManager()
        coordinator = NotificationCoordinator(database, bus)

        report = await coordinator.init()

        assert report.ok
        assert sorted(report.registered) == sorted(c.exchange_name for c in ExchangeCategory)
        for category in ExchangeCategory:
            assert isinstance(bus.handlers[category.exchange_name], HANDLER_REGISTRY[category])

    @pytest.mark.asyncio
    async def test_each_handler_gets_its_own_session(self):
        database = FakeDatabase()
        bus = FakeRabbitManager()

        await NotificationCoordinator(database, bus).init()

        sessions = [handler.session for handler in bus.handlers.values()]
        assert len(sessions) == 6
        assert len({id(session) for session in sessions}) == 6

    @pytest.mark.asyncio
    async def test_entity_failure_does_not_block_others(self):
        database = FakeDatabase()
        bus = FakeRabbitManager(fail_names={"entity"})
        coordinator = NotificationCoordinator(database, bus)

        report = await coordinator.init()

        assert "entity" in report.failures
        assert len(report.registered) == 5
        assert bus.subscriptions == ["conversation", "insight", "message", "topic", "tracker"]

    @pytest.mark.asyncio
    async def test_failed_entry_releases_its_session(self):
        database = FakeDatabase()
        bus = FakeRabbitManager(fail_names={"entity"})

        await NotificationCoordinator(database, bus).init()

        registered = {id(handler.session) for handler in bus.handlers.values()}
        orphaned = [s for s in database.sessions if id(s) not in registered]
        assert len(orphaned) == 1
        orphaned[0].close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_failure_is_skipped(self):
        database = FakeDatabase()
        database.new_session = MagicMock(side_effect=RuntimeError("pool exhausted"))
        bus = FakeRabbitManager()

        report = await NotificationCoordinator(database, bus).init()

        assert report.registered == []
        assert len(report.failures) == 6
        assert all("pool exhausted" in message for message in report.failures.values())

    @pytest.mark.asyncio
    async def test_registrations_run_concurrently(self):
        database = FakeDatabase()
        bus = FakeRabbitManager()
        in_flight = 0
        peak = 0

        async def slow_create(name, handler):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            bus.handlers[name] = handler

        bus.create_subscription = slow_create

        report = await NotificationCoordinator(database, bus).init()

        assert peak == 6
        assert len(report.registered) == 6

    @pytest.mark.asyncio
    async def test_custom_registry(self):
        bus = FakeRabbitManager()
        registry = {ExchangeCategory.ENTITY: EntityHandler}

        report = await NotificationCoordinator(FakeDatabase(), bus, registry).init()

        assert report.registered == ["entity"]


class TestNotificationCoordinatorDelegation:

    @pytest.mark.asyncio
    async def test_start_stop_teardown_delegate(self):
        bus = FakeRabbitManager()
        coordinator = NotificationCoordinator(FakeDatabase(), bus)
        await coordinator.init()

        await coordinator.start()
        await coordinator.stop()
        await coordinator.teardown()

        assert bus.journal == ["message_bus.start", "message_bus.stop", "message_bus.delete"]
        assert bus.subscriptions == []
        assert coordinator.report is None

    @pytest.mark.asyncio
    async def test_start_error_propagates(self):
        bus = FakeRabbitManager()
        error = SubscriptionError("start failed")
        bus.start = AsyncMock(side_effect=error)
        coordinator = NotificationCoordinator(FakeDatabase(), bus)

        with pytest.raises(SubscriptionError) as excinfo:
            await coordinator.start()

        assert excinfo.value is error

    @pytest.mark.asyncio
    async def test_teardown_error_propagates(self):
        bus = FakeRabbitManager()
        bus.delete = AsyncMock(side_effect=SubscriptionError("delete failed"))
        coordinator = NotificationCoordinator(FakeDatabase(), bus)

        with pytest.raises(SubscriptionError):
            await coordinator.teardown()
