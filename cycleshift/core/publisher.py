"""
Progress publisher.

Broadcasts the current run to every subscriber after each state transition.
"""

from __future__ import annotations

import itertools
from typing import Callable

from cycleshift.models.cycle import CycleRun
from cycleshift.utils.logger import get_logger

ProgressCallback = Callable[[CycleRun | None], None]

logger = get_logger("cycleshift.publisher")


class ProgressPublisher:
    """
    Observer registry for run progress.

    Callbacks run synchronously in the publishing thread and each receives
    its own copy of the run. A failing callback is logged and skipped.

    Example:
        >>> publisher = ProgressPublisher()
        >>> unsubscribe = publisher.subscribe(lambda run: print(run.status))
        >>> publisher.publish(run)
        >>> unsubscribe()
    """

    def __init__(self) -> None:
        self._subscribers: dict[int, ProgressCallback] = {}
        self._handles = itertools.count(1)

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        """
        Register a callback.

        Args:
            callback: Called with a run snapshot (or None once the run is reset)

        Returns:
            Function removing this registration only
        """
        handle = next(self._handles)
        self._subscribers[handle] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(handle, None)

        return unsubscribe

    def publish(self, run: CycleRun | None) -> None:
        """Send a snapshot of the run to every subscriber."""
        for handle, callback in list(self._subscribers.items()):
            if handle not in self._subscribers:
                continue
            snapshot = run.model_copy(deep=True) if run is not None else None
            try:
                callback(snapshot)
            except Exception:
                logger.exception(f"Progress subscriber {callback!r} raised")

    @property
    def subscriber_count(self) -> int:
        """Number of active registrations."""
        return len(self._subscribers)
