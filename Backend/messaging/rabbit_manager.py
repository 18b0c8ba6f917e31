"""RabbitMQ subscription management on top of aio-pika.

A subscription binds one named fanout exchange to one message handler:
- create_subscription() declares the exchange and a private queue
- start() / stop() begin and halt consumption on every subscription
- delete() removes every subscription and releases its handler
- teardown() deletes everything and closes the connection
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Set

import aio_pika
from aio_pika.abc import (
    AbstractChannel,
    AbstractIncomingMessage,
    AbstractQueue,
    AbstractRobustConnection,
)

from core.constants import RABBIT_CONNECT_TIMEOUT, RABBIT_EXCHANGE_TYPE
from core.exceptions import MessageBusError, SubscriptionError

logger = logging.getLogger(__name__)


class MessageHandler(Protocol):
    async def process_message(self, body: bytes) -> None: ...

    async def close(self) -> None: ...


@dataclass
class Subscription:
    name: str
    handler: MessageHandler
    channel: AbstractChannel
    queue: AbstractQueue
    consumer_tag: Optional[str] = None

    @property
    def consuming(self) -> bool:
        return self.consumer_tag is not None


class RabbitManager:
    """Owns one robust connection and the subscriptions made over it"""

    def __init__(self, connection: AbstractRobustConnection, prefetch_count: int = 1):
        self.connection = connection
        self.prefetch_count = prefetch_count
        self._subscriptions: Dict[str, Subscription] = {}
        self._pending: Set[str] = set()
        self._lock = asyncio.Lock()
        self._started = False

    @classmethod
    async def create(
        cls,
        rabbit_uri: str,
        prefetch_count: int = 1,
        timeout: float = RABBIT_CONNECT_TIMEOUT
    ) -> "RabbitManager":
        """Connect to the broker, or raise MessageBusError"""
        try:
            connection = await aio_pika.connect_robust(rabbit_uri, timeout=timeout)
        except Exception as e:
            logger.error(f"Failed to connect to RabbitMQ: {e}")
            raise MessageBusError(str(e), cause=e) from e

        logger.info("RabbitMQ connection established")
        return cls(connection, prefetch_count=prefetch_count)

    @property
    def subscriptions(self) -> List[str]:
        return sorted(self._subscriptions)

    @property
    def started(self) -> bool:
        return self._started

    async def create_subscription(self, name: str, handler: MessageHandler) -> Subscription:
        """Bind exchange `name` to `handler`

        Safe to call concurrently. A name can only be subscribed once;
        a second attempt raises SubscriptionError.
        """
        async with self._lock:
            if name in self._subscriptions or name in self._pending:
                raise SubscriptionError(f"subscription '{name}' already exists")
            self._pending.add(name)

        channel = None
        try:
            channel = await self.connection.channel()
            await channel.set_qos(prefetch_count=self.prefetch_count)
            exchange = await channel.declare_exchange(
                name, aio_pika.ExchangeType(RABBIT_EXCHANGE_TYPE), durable=True
            )
            queue = await channel.declare_queue(exclusive=True)
            await queue.bind(exchange)

            subscription = Subscription(name=name, handler=handler, channel=channel, queue=queue)
            if self._started:
                await self._consume(subscription)

            async with self._lock:
                self._subscriptions[name] = subscription
        except Exception as e:
            if channel is not None:
                await self._close_channel(name, channel)
            logger.error(f"Failed to create subscription '{name}': {e}")
            raise SubscriptionError(f"failed to create subscription '{name}': {e}") from e
        finally:
            async with self._lock:
                self._pending.discard(name)

        logger.info(f"Subscription '{name}' created")
        return subscription

    async def start(self):
        """Begin consuming on every subscription"""
        self._started = True
        failures = []
        for subscription in list(self._subscriptions.values()):
            if subscription.consuming:
                continue
            try:
                await self._consume(subscription)
            except Exception as e:
                logger.error(f"Failed to start consuming '{subscription.name}': {e}")
                failures.append(f"{subscription.name}: {e}")

        if failures:
            raise SubscriptionError(f"start failed for {'; '.join(failures)}")
        logger.info(f"Consuming on {len(self._subscriptions)} subscriptions")

    async def stop(self):
        """Halt consumption; subscriptions stay registered"""
        self._started = False
        failures = []
        for subscription in list(self._subscriptions.values()):
            try:
                await self._cancel(subscription)
            except Exception as e:
                logger.error(f"Failed to stop consuming '{subscription.name}': {e}")
                failures.append(f"{subscription.name}: {e}")

        if failures:
            raise SubscriptionError(f"stop failed for {'; '.join(failures)}")
        logger.info("Consumption stopped")

    async def delete(self):
        """Remove every subscription and release its handler"""
        self._started = False
        async with self._lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()

        failures = []
        for subscription in subscriptions:
            try:
                await self._cancel(subscription)
                await subscription.queue.delete(if_unused=False, if_empty=False)
            except Exception as e:
                logger.error(f"Failed to delete subscription '{subscription.name}': {e}")
                failures.append(f"{subscription.name}: {e}")
            await self._close_channel(subscription.name, subscription.channel)
            try:
                await subscription.handler.close()
            except Exception as e:
                logger.error(f"Failed to close handler for '{subscription.name}': {e}")
                failures.append(f"{subscription.name}: {e}")

        if failures:
            raise SubscriptionError(f"delete failed for {'; '.join(failures)}")
        logger.info(f"Deleted {len(subscriptions)} subscriptions")

    async def teardown(self):
        """Delete all subscriptions and close the connection"""
        try:
            await self.delete()
        finally:
            if not self.connection.is_closed:
                await self.connection.close()
            logger.info("RabbitMQ connection closed")

    async def _consume(self, subscription: Subscription):
        name = subscription.name
        handler = subscription.handler

        async def on_message(message: AbstractIncomingMessage):
            try:
                async with message.process(requeue=False):
                    await handler.process_message(message.body)
            except Exception as e:
                logger.error(f"Handler for '{name}' rejected message: {e}")

        subscription.consumer_tag = await subscription.queue.consume(on_message)

    async def _cancel(self, subscription: Subscription):
        if subscription.consumer_tag is None:
            return
        tag, subscription.consumer_tag = subscription.consumer_tag, None
        await subscription.queue.cancel(tag)

    async def _close_channel(self, name: str, channel: AbstractChannel):
        try:
            if not channel.is_closed:
                await channel.close()
        except Exception as e:
            logger.warning(f"Failed to close channel for '{name}': {e}")
