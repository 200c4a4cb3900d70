"""
Event bus between the engine and its host.

Handlers subscribe to one EventKind (or to all with kind=None) and receive
EngineEvent objects. Sync and async handlers are both accepted; a failing
handler is logged and never affects the publisher or other handlers.
"""

from __future__ import annotations

import asyncio
import inspect
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Set, Union

from comoderator.core.logging import get_logger
from comoderator.models import EngineEvent, EventKind


logger = get_logger("events")

EventHandler = Callable[[EngineEvent], Union[None, Awaitable[None]]]


class EventBus:
    """Publish/subscribe over the fixed set of EventKind values."""

    def __init__(self) -> None:
        self._handlers: Dict[Optional[EventKind], List[EventHandler]] = defaultdict(list)
        self._tasks: Set[asyncio.Task] = set()

    def subscribe(
        self,
        kind: Optional[Union[EventKind, str]],
        handler: EventHandler,
    ) -> Callable[[], None]:
        """
        Register a handler.

        Args:
            kind: Event kind (enum or its string value), or None for every kind
            handler: Callable receiving the EngineEvent

        Returns:
            Function that removes the subscription.
        """
        key = EventKind(kind) if kind is not None else None
        self._handlers[key].append(handler)

        def unsubscribe() -> None:
            try:
                self._handlers[key].remove(handler)
            except ValueError:
                pass

        return unsubscribe

    def publish(
        self,
        kind: EventKind,
        payload: Dict[str, Any],
        session_id: Optional[str] = None,
    ) -> EngineEvent:
        """Deliver an event to every matching handler and return it."""
        event = EngineEvent(kind=kind, payload=payload, session_id=session_id)
        handlers = list(self._handlers.get(kind, [])) + list(self._handlers.get(None, []))

        for handler in handlers:
            try:
                result = handler(event)
            except Exception:
                logger.exception(f"Event handler failed for {kind.value}")
                continue
            if inspect.isawaitable(result):
                self._schedule(result, kind)

        return event

    def _schedule(self, awaitable: Awaitable[None], kind: EventKind) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if not t.cancelled() and t.exception() is not None:
                logger.error(f"Async event handler failed for {kind.value}: {t.exception()}")

        task.add_done_callback(_done)


class EventLog:
    """Bounded in-memory record of recent events for polling hosts."""

    def __init__(self, maxlen: int = 200) -> None:
        self._events: Deque[EngineEvent] = deque(maxlen=maxlen)

    def __call__(self, event: EngineEvent) -> None:
        self._events.append(event)

    def __len__(self) -> int:
        return len(self._events)

    def recent(self, limit: Optional[int] = None) -> List[EngineEvent]:
        """Most recent events, oldest first."""
        events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events
