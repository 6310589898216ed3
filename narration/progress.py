from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

__all__ = ["ProgressObserver", "NullProgress", "RichProgress"]


class ProgressObserver:
    """
    Receives the number of completed chunks while a run is in flight.

    Observers only render; the scheduler never waits on or reacts to them.
    """

    def start(self, total: int) -> None:
        pass

    def update(self, completed: int) -> None:
        pass

    def finish(self) -> None:
        pass


class NullProgress(ProgressObserver):
    pass


class RichProgress(ProgressObserver):
    def __init__(self, description: str = "Synthesizing", console: Optional[Console] = None) -> None:
        self.description = description
        self._progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("chunks"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=console,
        )
        self._task: Optional[TaskID] = None

    def start(self, total: int) -> None:
        self._progress.start()
        self._task = self._progress.add_task(self.description, total=total)

    def update(self, completed: int) -> None:
        if self._task is not None:
            self._progress.update(self._task, completed=completed)

    def finish(self) -> None:
        self._progress.stop()
        self._task = None
