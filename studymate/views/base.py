"""
Headless view controllers.

A controller owns one view's local state. It runs on the asyncio loop, awaits
every store and proxy call (blocking work goes to the threadpool) and turns
failures into notifications instead of raising.

Lifetime: mount() subscribes and loads, unmount() deregisters and cancels
in-flight calls. A call that resolves after unmount raises ViewDetached inside
the action, so a detached controller never mutates its state or publishes.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, TypeVar

from fastapi.concurrency import run_in_threadpool

from studymate.core.errors import GenerationError, StoreError
from studymate.realtime import BroadcastHub, DashboardEvent, hub as default_hub, owner_topic
from studymate.services.records import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

EventHandler = Callable[[Any], Awaitable[None]]


class ViewState(str, Enum):
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: str = "default"  # default|destructive

    @property
    def destructive(self) -> bool:
        return self.variant == "destructive"


class ViewDetached(Exception):
    """The view was unmounted while a call was outstanding."""


def action(error_title: str):
    """
    Wrap a user action: one at a time per view, failures become a destructive
    notification titled `error_title`. A rejected or failed action returns None.
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[Optional[T]]]:
        @functools.wraps(fn)
        async def wrapper(self: "ViewController", *args: Any, **kwargs: Any) -> Optional[T]:
            if not self.mounted:
                logger.debug("%s ignored: view is not mounted", fn.__name__)
                return None
            if self.busy:
                logger.debug("%s ignored: another action is running", fn.__name__)
                return None
            self.busy = True
            try:
                return await fn(self, *args, **kwargs)
            except ViewDetached:
                logger.debug("%s discarded after unmount", fn.__name__)
                return None
            except (StoreError, GenerationError) as e:
                self.notify_error(error_title, e)
                return None
            finally:
                self.busy = False

        return wrapper

    return decorator


class ViewController:
    def __init__(
        self,
        store: RecordStore,
        hub: BroadcastHub = default_hub,
        topic: str | None = None,
    ) -> None:
        self.store = store
        self.hub = hub
        # `topic` is the base channel name; subscriptions are always scoped to the store's owner
        self.topic = owner_topic(store.user_id, topic)
        self.state = ViewState.LOADING
        self.busy = False
        self.notifications: list[Notification] = []
        self._mounted = False
        self._unsubscribe: Callable[[], None] | None = None
        self._inflight: set[asyncio.Future] = set()

    # -----------------------
    # Lifetime
    # -----------------------
    @property
    def mounted(self) -> bool:
        return self._mounted

    async def mount(self) -> None:
        self.state = ViewState.LOADING
        self._mounted = True
        if self.event_handlers() and self._unsubscribe is None:
            self._unsubscribe = self.hub.subscribe(self.topic, self._on_event)
        try:
            await self.load()
        except ViewDetached:
            return
        except (StoreError, GenerationError) as e:
            self.notify_error(self.load_error_title, e)
        if self._mounted:
            self.state = ViewState.READY

    def unmount(self) -> None:
        self._mounted = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for fut in list(self._inflight):
            fut.cancel()

    # -----------------------
    # Subclass hooks
    # -----------------------
    load_error_title = "Error loading data"

    async def load(self) -> None:
        return None

    def event_handlers(self) -> dict[str, EventHandler]:
        """Event kind -> handler receiving the typed payload."""
        return {}

    # -----------------------
    # Helpers
    # -----------------------
    async def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking store/proxy call off the loop; tie it to this view's lifetime."""
        if not self._mounted:
            raise ViewDetached()
        fut = asyncio.ensure_future(run_in_threadpool(fn, *args, **kwargs))
        self._inflight.add(fut)
        try:
            result = await fut
        except asyncio.CancelledError:
            if fut.cancelled() and not self._mounted:
                raise ViewDetached() from None
            raise
        finally:
            self._inflight.discard(fut)
        if not self._mounted:
            raise ViewDetached()
        return result

    def publish(self, kind: str, payload: Any) -> None:
        if not self._mounted:
            raise ViewDetached()
        self.hub.publish(self.topic, kind, payload)

    def notify(self, title: str, description: str = "", variant: str = "default") -> Notification:
        n = Notification(title=title, description=description, variant=variant)
        self.notifications.append(n)
        if n.destructive:
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        return n

    def notify_error(self, title: str, error: Exception) -> Notification:
        message = getattr(error, "message", None) or str(error) or "An unexpected error occurred"
        return self.notify(title, message, variant="destructive")

    async def _on_event(self, event: DashboardEvent) -> None:
        if not self._mounted:
            return
        handler = self.event_handlers().get(event.kind)
        if handler is None:
            return
        try:
            await handler(event.payload)
        except ViewDetached:
            logger.debug("Dropped %s after unmount", event.kind)
        except StoreError as e:
            self.notify_error("Error refreshing data", e)
