"""
Recursive window bisection for windows whose pagination got stuck.
"""

from typing import Optional

from order_ingestion.core.cursor import PageCursor
from order_ingestion.core.stats import RunStats
from order_ingestion.core.windows import TimeWindow
from order_ingestion.utils.logging_utils import log_progress, log_warning

ABANDON_POLICIES = ("LOG", "RAISE")


class WindowAbandonedError(RuntimeError):
    """Raised under the RAISE policy when a window cannot be drained."""

    def __init__(self, window: TimeWindow, reason: str):
        super().__init__(f"Window {window} abandoned: {reason}")
        self.window = window
        self.reason = reason


class RangeBisector:
    """
    Drains a window, halving it while pagination keeps getting stuck.

    Args:
        cursor: Page cursor used to drain each (sub-)window
        max_depth: Deepest level that is still drained; deeper windows are abandoned
        abandon_policy: 'LOG' to record and continue, 'RAISE' to abort the run
        stats: Run counters; defaults to the cursor's
    """

    def __init__(
        self,
        cursor: PageCursor,
        max_depth: int = 10,
        abandon_policy: str = "LOG",
        stats: Optional[RunStats] = None,
    ):
        if abandon_policy not in ABANDON_POLICIES:
            raise ValueError(f"abandon_policy must be one of {', '.join(ABANDON_POLICIES)}")
        self.cursor = cursor
        self.max_depth = max_depth
        self.abandon_policy = abandon_policy
        self.stats = stats if stats is not None else cursor.stats

    def ingest(self, window: TimeWindow, depth: int = 0) -> None:
        if depth > self.max_depth:
            self._abandon(window, f"depth {depth} exceeds max depth {self.max_depth}")
            return

        outcome = self.cursor.drain(window)
        if not outcome.got_stuck:
            return

        if not window.can_bisect():
            self._abandon(window, "window too narrow to bisect")
            return

        left, right = window.bisect()
        self.stats.bisections += 1
        log_progress(
            f"Range {window}",
            f"Stuck at depth {depth}, splitting at {left.end.isoformat()}",
        )
        self.ingest(left, depth + 1)
        self.ingest(right, depth + 1)

    def _abandon(self, window: TimeWindow, reason: str) -> None:
        self.stats.abandoned_windows.append(window)
        log_warning(f"Range {window}", f"ABANDONED ({reason}); orders in this window may be missing")
        if self.abandon_policy == "RAISE":
            raise WindowAbandonedError(window, reason)
