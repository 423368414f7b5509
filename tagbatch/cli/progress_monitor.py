"""
Drains the progress channel of a delegated engine while showing a live
summary of completed, skipped and failed files.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from tagbatch.models.events import EventStatus, ProgressChannel, ProgressEvent

log = logging.getLogger(__name__)


@dataclass
class MonitorReport:
    """Everything observed while draining one channel."""

    events: list[ProgressEvent] = field(default_factory=list)
    started: datetime | None = None
    finished: datetime | None = None
    elapsed: float = 0.0

    def count(self, status: EventStatus) -> int:
        return sum(1 for e in self.events if e.status == status)


class ProgressMonitor:
    """
    Consumes a progress channel until the producer closes it.

    The monitor never talks back to the producer and has no timeout: if the
    producer dies without closing the channel, `drain` blocks.
    """

    def __init__(
        self,
        console: Console,
        description: str = "Tagging",
        total: int | None = None,
        quiet: bool = False,
    ):
        self.console = console
        self.description = description
        self.total = total
        self.quiet = quiet or not console.is_terminal
        self._counts: Counter = Counter()

    def _describe(self) -> str:
        return (
            f"{self.description} "
            f"[green]✓ {self._counts[EventStatus.OK]}[/green] "
            f"[yellow]↷ {self._counts[EventStatus.SKIPPED]}[/yellow] "
            f"[red]✗ {self._counts[EventStatus.ERROR]}[/red]"
        )

    def drain(self, channel: ProgressChannel) -> MonitorReport:
        """Receives every event in arrival order until the channel is closed."""
        report = MonitorReport(started=datetime.now())
        start = time.monotonic()

        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
            disable=self.quiet,
        )
        with progress:
            task_id = progress.add_task(self._describe(), total=self.total)
            for event in channel:
                report.events.append(event)
                self._counts[event.status] += 1
                log.debug(f"{event!r}")
                if event.status == EventStatus.ERROR and event.message:
                    log.info(f"[red]✗[/red] {event.path}: {event.message}")
                progress.update(task_id, advance=1, description=self._describe())

        report.finished = datetime.now()
        report.elapsed = time.monotonic() - start
        return report
