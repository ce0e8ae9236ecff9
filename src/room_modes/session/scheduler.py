"""Coalescing recompute scheduler.

Rapid input changes (dragging a subwoofer, typing a dimension) must not
trigger one full recompute each. CoalescingScheduler is a single-slot work
queue: any number of requests made before the next tick collapse into one
run of the task. The task reads the latest state when it runs, so the
single run always sees every change made before the tick.

The tick is driven by the caller (a UI frame callback, an event loop, a
test), which keeps the primitive independent of any scheduling API:

    >>> runs = []
    >>> scheduler = CoalescingScheduler(lambda: runs.append(1))
    >>> scheduler.request(); scheduler.request()
    True
    False
    >>> scheduler.tick()
    >>> len(runs)
    1
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class CoalescingScheduler:
    """Single-slot work queue that coalesces repeated requests.

    Args:
        task: Zero-argument callable run once per tick with pending requests

    Attributes:
        run_count: Number of times the task has run
    """

    def __init__(self, task: Callable[[], Any]):
        self._task = task
        self._pending = False
        self.run_count = 0

    @property
    def pending(self) -> bool:
        """Whether a run is scheduled for the next tick."""
        return self._pending

    def request(self) -> bool:
        """Schedule a run for the next tick.

        Returns:
            True if this call scheduled the run, False if one was already
            pending
        """
        if self._pending:
            return False
        self._pending = True
        return True

    def cancel(self) -> None:
        """Drop a pending run."""
        self._pending = False

    def tick(self) -> Any:
        """Run the task if a request is pending.

        The pending flag is cleared before the task runs, so requests made
        by the task itself schedule the next tick rather than being lost.

        Returns:
            The task's return value, or None if nothing was pending
        """
        if not self._pending:
            return None
        self._pending = False
        self.run_count += 1
        return self._task()
