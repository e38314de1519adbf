from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache

from jtutors.config import get_settings
from jtutors.core.events import EventBus


@lru_cache(maxsize=1)
def get_event_bus() -> EventBus:
    """Process-wide bus shared by HTTP mutators and profile streams."""
    return EventBus()


@lru_cache(maxsize=1)
def get_mail_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(
        max_workers=get_settings().mail_worker_threads,
        thread_name_prefix="jtutors-mail",
    )
