"""HandoffQueue — the only path from network threads into the tick context.

Request handlers ``submit()`` a fully-formed callable and get back a
``concurrent.futures.Future``; async handlers await it through
``asyncio.wrap_future``.  The tick driver calls ``drain()`` at the start of
every tick, running each command on its own thread and resolving its
future with the return value or the raised exception.

Commands from concurrent requests run in whatever order they reached the
queue; nothing here promises arrival order across connections.
"""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable

from loguru import logger

from .errors import BridgeError, NotReadyError

Command = Callable[[], Any]


class HandoffQueue:
    def __init__(self) -> None:
        self._queue: queue.Queue[tuple[Command, Future]] = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()

    def submit(self, command: Command) -> Future:
        future: Future = Future()
        with self._lock:
            if not self._closed:
                self._queue.put((command, future))
                return future
        future.set_exception(NotReadyError("Game world is not ready"))
        return future

    def drain(self, limit: int | None = None) -> int:
        """Run queued commands on the calling (tick) thread.  Returns how many ran."""
        ran = 0
        while limit is None or ran < limit:
            try:
                command, future = self._queue.get_nowait()
            except queue.Empty:
                break
            ran += 1
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = command()
            except Exception as exc:
                if not isinstance(exc, BridgeError):
                    logger.exception("Handoff command failed")
                future.set_exception(exc)
            else:
                future.set_result(result)
        return ran

    def close(self) -> int:
        """Refuse new commands and fail every one still waiting."""
        with self._lock:
            self._closed = True
        failed = 0
        while True:
            try:
                _, future = self._queue.get_nowait()
            except queue.Empty:
                break
            if future.set_running_or_notify_cancel():
                future.set_exception(NotReadyError("Game world is not ready"))
                failed += 1
        return failed

    def reopen(self) -> None:
        with self._lock:
            self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return self._queue.qsize()
