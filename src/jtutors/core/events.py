from __future__ import annotations

import asyncio
import threading
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

_Subscriber = tuple[asyncio.AbstractEventLoop, "asyncio.Queue[dict[str, Any]]"]


class EventBus:
    """Best-effort, in-process broadcast of profile changes keyed by tutor id.

    ``publish`` is synchronous and may be called from request worker threads;
    each event is handed to the subscriber's own loop. Events published while
    nobody is subscribed are dropped.
    """

    def __init__(self) -> None:
        self._subscribers: dict[int, list[_Subscriber]] = defaultdict(list)
        self._lock = threading.Lock()

    def publish(self, tutor_id: int, event: dict[str, Any]) -> int:
        with self._lock:
            targets = list(self._subscribers.get(tutor_id, []))

        delivered = 0
        for loop, queue in targets:
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(queue.put_nowait, dict(event))
            delivered += 1
        return delivered

    def subscriber_count(self, tutor_id: int) -> int:
        with self._lock:
            return len(self._subscribers.get(tutor_id, []))

    async def subscribe(self, tutor_id: int) -> AsyncIterator[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        entry: _Subscriber = (asyncio.get_running_loop(), queue)
        with self._lock:
            self._subscribers[tutor_id].append(entry)

        try:
            while True:
                event = await queue.get()
                yield event
        finally:
            with self._lock:
                if entry in self._subscribers.get(tutor_id, []):
                    self._subscribers[tutor_id].remove(entry)
