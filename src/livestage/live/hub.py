"""Live reload subscriber hub.

Tracks connected live reload clients and fans change events out to them
as server-sent event frames (``data: <json>\\n\\n``).
"""

import asyncio
import json
import logging
import threading
from typing import Any, Protocol

from livestage.core.types import ChangeEvent
from livestage.errors import DeliveryError

logger = logging.getLogger(__name__)

CONNECTED_MESSAGE = {"type": "connected"}


class Channel(Protocol):
    """Writable byte stream, e.g. a prepared ``web.StreamResponse``."""

    async def write(self, data: bytes) -> None: ...


def encode_frame(message: dict[str, Any]) -> bytes:
    """Encode a message as a server-sent event frame."""
    return f"data: {json.dumps(message)}\n\n".encode()


class Subscriber:
    """One connected live reload client.

    Compared and hashed by identity, so two clients never collide even if
    they share a channel type.
    """

    __slots__ = ("_channel", "_closed")

    def __init__(self, channel: Channel) -> None:
        self._channel = channel
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send(self, frame: bytes) -> None:
        """Write a frame to the channel.

        Raises:
            DeliveryError: If the channel is closed or the write fails
        """
        if self.closed:
            raise DeliveryError("Subscriber is closed")
        try:
            await self._channel.write(frame)
        except (OSError, RuntimeError) as e:
            raise DeliveryError(f"Write to subscriber failed: {e}") from e

    def close(self) -> None:
        self._closed.set()

    async def wait_closed(self) -> None:
        """Wait until the hub drops this subscriber."""
        await self._closed.wait()


class NotificationHub:
    """Set of live reload subscribers with broadcast.

    The subscriber set is guarded by a lock; broadcasts iterate over a
    snapshot so clients may connect and disconnect while one is running.
    """

    def __init__(self) -> None:
        self._subscribers: set[Subscriber] = set()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    async def subscribe(self, channel: Channel) -> Subscriber:
        """Register a channel and send it the connected handshake.

        Args:
            channel: Output channel of the new client

        Returns:
            Subscriber handle. Already closed if the handshake failed.
        """
        subscriber = Subscriber(channel)

        # "connected" is the first frame a subscriber ever receives
        try:
            await subscriber.send(encode_frame(CONNECTED_MESSAGE))
        except DeliveryError as e:
            logger.warning(f"Dropping live reload client: {e}")
            subscriber.close()
            return subscriber

        with self._lock:
            if self._closed:
                subscriber.close()
                return subscriber
            self._subscribers.add(subscriber)
            total = len(self._subscribers)

        logger.debug(f"Live reload client connected ({total} total)")

        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove a subscriber. Removing an unknown subscriber is a no-op."""
        with self._lock:
            self._subscribers.discard(subscriber)
        subscriber.close()

    async def broadcast(self, event: ChangeEvent) -> int:
        """Send a change event to every subscriber.

        A failed write removes that subscriber only; it is never raised.

        Args:
            event: Change to announce

        Returns:
            Number of subscribers the event was delivered to
        """
        with self._lock:
            subscribers = list(self._subscribers)

        if not subscribers:
            return 0

        frame = encode_frame(event.to_message())
        results = await asyncio.gather(
            *(subscriber.send(frame) for subscriber in subscribers),
            return_exceptions=True,
        )

        delivered = 0
        for subscriber, result in zip(subscribers, results, strict=True):
            if result is None:
                delivered += 1
            elif isinstance(result, Exception):
                logger.warning(f"Dropping live reload client: {result}")
                self.unsubscribe(subscriber)
            else:
                raise result

        logger.info(f"Notified {delivered} client(s) about change: {event.route.path}")
        return delivered

    def close(self) -> None:
        """Drop all subscribers and refuse new ones."""
        with self._lock:
            self._closed = True
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscriber in subscribers:
            subscriber.close()
