import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger('uvicorn.error')


class ContentLoader:
    """
    Issues one asynchronous fetch when started and hands the result to
    ``on_loaded``. Once disposed, late results are dropped instead of being
    applied to a torn-down owner.
    """

    def __init__(self, fetch: Callable[[], Awaitable[Any]], on_loaded: Callable[[Any], None], name: str = "content"):
        self.fetch = fetch
        self.on_loaded = on_loaded
        self.name = name
        self.loading = False
        self.disposed = False
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        if self._task is None:
            self.loading = True
            self._task = asyncio.ensure_future(self._run())
        return self._task

    async def _run(self) -> None:
        try:
            result = await self.fetch()
        except Exception as e:
            logger.exception(f"Error fetching {self.name}: {e}")
            return
        finally:
            self.loading = False
        if self.disposed:
            logger.info(f"Discarding {self.name} result: loader was disposed")
            return
        self.on_loaded(result)

    def dispose(self) -> None:
        self.disposed = True
