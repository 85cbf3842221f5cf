"""
In-process broadcast channel.

publish() is fire-and-forget: no acknowledgment, no persistence, and only
subscriptions that exist at publish time see the event. Each subscription owns
a queue drained by one task on the subscriber's event loop, so a handler sees
events once each and in publish order for that subscription. Nothing is
ordered across independent publishers.

Topics are per owner (see owner_topic): events only reach the user whose
records they describe.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import Any

from studymate.core.config import settings
from studymate.realtime.events import DashboardEvent, parse_payload

logger = logging.getLogger(__name__)

Handler = Callable[[DashboardEvent], "Awaitable[None] | None"]
Unsubscribe = Callable[[], None]


def owner_topic(user_id: str, base: str | None = None) -> str:
    """Topic name scoped to one owner, e.g. "dashboard-updates:user-1"."""
    if not user_id:
        raise ValueError("user_id is required")
    return f"{base or settings.broadcast_topic}:{user_id}"


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class _Subscription:
    def __init__(self, topic: str, handler: Handler, loop: asyncio.AbstractEventLoop) -> None:
        self.topic = topic
        self.handler = handler
        self.loop = loop
        self.queue: asyncio.Queue[DashboardEvent] = asyncio.Queue()
        self.pending = 0
        self.closed = False
        self.task = loop.create_task(self._pump())

    def deliver(self, event: DashboardEvent) -> None:
        if self.closed:
            return
        if _running_loop() is self.loop:
            self._put(event)
            return
        try:
            self.loop.call_soon_threadsafe(self._put, event)
        except RuntimeError:
            # subscriber's loop is gone
            self.closed = True

    def _put(self, event: DashboardEvent) -> None:
        if self.closed:
            return
        self.pending += 1
        self.queue.put_nowait(event)

    async def _pump(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                if not self.closed:
                    result = self.handler(event)
                    if inspect.isawaitable(result):
                        await result
            except Exception:
                logger.error("Error in broadcast handler for %s on %s", event.kind, self.topic, exc_info=True)
            finally:
                self.pending -= 1
                self.queue.task_done()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if _running_loop() is self.loop:
            self._stop()
        else:
            try:
                self.loop.call_soon_threadsafe(self._stop)
            except RuntimeError:
                pass

    def _stop(self) -> None:
        while not self.queue.empty():
            self.queue.get_nowait()
            self.pending -= 1
            self.queue.task_done()
        self.task.cancel()


class BroadcastHub:
    def __init__(self) -> None:
        self._subs: dict[str, list[_Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, handler: Handler) -> Unsubscribe:
        """
        Register `handler` for every event published on `topic` from now on.

        Must be called from a running event loop; the handler runs on that loop.
        The returned callable deregisters the handler and must be called when
        the owner goes away.
        """
        loop = asyncio.get_running_loop()
        sub = _Subscription(topic, handler, loop)
        with self._lock:
            self._subs.setdefault(topic, []).append(sub)
        logger.debug("Subscribed handler to %s", topic)

        def unsubscribe() -> None:
            with self._lock:
                subs = self._subs.get(topic, [])
                if sub in subs:
                    subs.remove(sub)
            sub.close()
            logger.debug("Unsubscribed handler from %s", topic)

        return unsubscribe

    def publish(self, topic: str, kind: str, payload: Any) -> DashboardEvent:
        """
        Validate and fan out one event. Returns immediately; delivery happens on
        each subscriber's loop. Safe to call from any thread.
        """
        event = DashboardEvent(topic=topic, kind=kind, payload=parse_payload(kind, payload))
        with self._lock:
            subs = list(self._subs.get(topic, []))
        for sub in subs:
            sub.deliver(event)
        logger.debug("Published %s on %s to %d subscriber(s)", kind, topic, len(subs))
        return event

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subs.get(topic, []))

    async def flush(self) -> None:
        """Wait until every subscription on the current loop has handled what it was sent."""
        loop = asyncio.get_running_loop()
        while True:
            with self._lock:
                subs = [s for group in self._subs.values() for s in group if s.loop is loop and not s.closed]
            busy = [s for s in subs if s.pending]
            if not busy:
                return
            await asyncio.gather(*(s.queue.join() for s in busy))


# process-wide hub shared by routers, websocket bridge and view controllers
hub = BroadcastHub()
