"""Tests for draining progress channels."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest
from rich.console import Console

from tagbatch.cli.progress_monitor import ProgressMonitor
from tagbatch.models.events import EventStatus, ProgressChannel, ProgressEvent


def _produce(channel: ProgressChannel, events: list[ProgressEvent]) -> None:
    for event in events:
        time.sleep(0.01)
        channel.send(event)
    channel.close()


def test_drains_every_event_in_order(console: Console) -> None:
    events = [
        ProgressEvent(path=Path(f"/music/{i}.mp3"), status=EventStatus.OK)
        for i in range(5)
    ]
    channel = ProgressChannel()
    producer = threading.Thread(target=_produce, args=(channel, events))
    producer.start()

    report = ProgressMonitor(console).drain(channel)
    producer.join()

    assert report.events == events
    assert report.count(EventStatus.OK) == 5
    assert report.finished is not None
    assert report.elapsed >= 0


def test_counts_statuses(console: Console) -> None:
    channel = ProgressChannel()
    statuses = [EventStatus.OK, EventStatus.ERROR, EventStatus.SKIPPED, EventStatus.OK]
    for i, status in enumerate(statuses):
        channel.send(
            ProgressEvent(path=Path(f"{i}.mp3"), status=status, message="no match")
        )
    channel.close()

    report = ProgressMonitor(console).drain(channel)

    assert report.count(EventStatus.OK) == 2
    assert report.count(EventStatus.SKIPPED) == 1
    assert report.count(EventStatus.ERROR) == 1


def test_closed_empty_channel(console: Console) -> None:
    channel = ProgressChannel()
    channel.close()

    report = ProgressMonitor(console).drain(channel)

    assert report.events == []


def test_send_after_close() -> None:
    channel = ProgressChannel()
    channel.close()
    channel.close()

    assert channel.closed
    with pytest.raises(RuntimeError):
        channel.send(ProgressEvent(path=Path("a.mp3"), status=EventStatus.OK))
