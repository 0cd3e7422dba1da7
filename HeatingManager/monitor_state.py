"""Shared state between the temperature monitor and the weekly scheduler."""
import threading


class MonitorState:
    """
    Sticky "threshold exceeded" flag shared by the two worker threads.

    The monitor only ever sets the flag; the scheduler reads and clears it in
    one locked step, so an excursion recorded before the weekly decision is
    never lost and one recorded after it counts towards the next week.
    """

    def __init__(self, exceeded: bool = False):
        self._lock = threading.Lock()
        self._exceeded = exceeded

    @property
    def exceeded(self) -> bool:
        """Current flag value, for logging and diagnostics only."""
        with self._lock:
            return self._exceeded

    def mark_exceeded(self) -> None:
        """Record that a poll saw a temperature above the threshold."""
        with self._lock:
            self._exceeded = True

    def consume(self) -> bool:
        """Return the flag and reset it to False atomically."""
        with self._lock:
            exceeded = self._exceeded
            self._exceeded = False
            return exceeded

    def __repr__(self) -> str:
        return f"MonitorState(exceeded={self.exceeded})"
