import asyncio
import logging
from typing import Any, Callable, Iterable, List, Optional, Set

import config

logger = logging.getLogger('uvicorn.error')


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip().lower()


def matches_query(text_parts: Iterable[Optional[str]], query: Optional[str]) -> bool:
    """Case-insensitive substring match over the joined parts. An empty query matches everything."""
    normalized = normalize_query(query)
    if not normalized:
        return True
    target = " ".join(part or "" for part in text_parts).lower()
    return normalized in target


class Debouncer:
    """
    Calls ``callback`` with the latest pushed value once no new value has
    arrived for ``delay`` seconds. Must be used from a running event loop.
    """

    def __init__(self, callback: Callable[[Any], Any], delay: Optional[float] = None):
        self.callback = callback
        self.delay = config.settings.search_debounce_seconds if delay is None else delay
        self._handle: Optional[asyncio.TimerHandle] = None

    def push(self, value: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def _fire(self, value: Any) -> None:
        self._handle = None
        try:
            self.callback(value)
        except Exception as e:
            logger.exception(f"Search callback failed for {value!r}: {e}")

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


async def live_search(websocket, items: List[Any], filter_items: Callable[[List[Any], str], List[dict]]) -> None:
    """
    Serves a search box over a websocket: every received text frame is a new
    query, and the filtered results are sent back once typing pauses.
    """
    loop = asyncio.get_running_loop()
    sending: Set[asyncio.Task] = set()

    def _sent(task: asyncio.Task) -> None:
        sending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Error sending search results: {task.exception()}")

    def _send(query: str) -> None:
        results = filter_items(items, query)
        task = loop.create_task(websocket.send_json({"query": query, "results": results}))
        sending.add(task)
        task.add_done_callback(_sent)

    debouncer = Debouncer(_send)
    try:
        while True:
            debouncer.push(await websocket.receive_text())
    finally:
        debouncer.cancel()
        for task in list(sending):
            task.cancel()
