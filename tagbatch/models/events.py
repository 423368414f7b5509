"""
Progress events and the one-directional channel a delegated engine reports on.
"""

import queue
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class EventStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressEvent:
    """Status of one unit of delegated work."""

    path: Path
    status: EventStatus
    platform: str | None = None
    message: str | None = None
    progress: float = 0.0


_CLOSED = object()


class ProgressChannel:
    """
    An unbounded, single-consumer channel of progress events.

    The producer calls `send` for every event and `close` exactly once when it is
    done. Closing is the only termination signal; iterating the channel blocks
    until the next event arrives or the channel is closed.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue()
        self._closed = False

    def send(self, event: ProgressEvent) -> None:
        if self._closed:
            raise RuntimeError("Cannot send on a closed progress channel.")
        self._queue.put_nowait(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[ProgressEvent]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item
