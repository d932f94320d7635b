from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class TickScheduler:
    def __init__(
        self,
        interval: float,
        callback: Callable[[], object],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}.")
        self.interval = interval
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._generation = 0
        self._started_at = 0.0
        self._fired = 0
        self._closed = False

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise RuntimeError("TickScheduler needs an event loop; pass one or start it from a coroutine.") from exc

    def start(self) -> bool:
        if self._closed:
            raise RuntimeError("Cannot start a closed scheduler.")
        if self._handle is not None:
            return False
        loop = self._resolve_loop()
        self._loop = loop
        self._generation += 1
        self._started_at = loop.time()
        self._fired = 0
        self._schedule(loop, self._generation)
        return True

    def _schedule(self, loop: asyncio.AbstractEventLoop, generation: int) -> None:
        deadline = self._started_at + (self._fired + 1) * self.interval
        self._handle = loop.call_at(deadline, self._fire, generation)

    def _fire(self, generation: int) -> None:
        if generation != self._generation or self._handle is None:
            logger.debug("Dropping stale tick from generation %s", generation)
            return
        self._handle = None
        self._fired += 1
        self._callback()
        # The callback may have stopped or restarted the scheduler.
        if generation == self._generation and self._handle is None and not self._closed:
            loop = self._resolve_loop()
            if loop.time() > self._started_at + (self._fired + 1) * self.interval:
                # Fell behind by more than a full period; skip to the next slot.
                self._fired = int((loop.time() - self._started_at) // self.interval)
            self._schedule(loop, generation)

    def stop(self) -> bool:
        self._generation += 1
        handle, self._handle = self._handle, None
        if handle is None:
            return False
        handle.cancel()
        return True

    def close(self) -> None:
        self.stop()
        self._closed = True

    def __enter__(self) -> TickScheduler:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()
