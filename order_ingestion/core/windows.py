"""
Half-open time windows and the monthly window sequence.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Tuple

from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class TimeWindow:
    """
    A half-open interval [start, end) bounding one upstream query.

    Raises:
        ValueError: If start is not strictly before end
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise ValueError(
                f"Window start must be before end: {self.start.isoformat()} >= {self.end.isoformat()}"
            )

    def midpoint(self) -> datetime:
        """Linear midpoint, truncated to whole seconds."""
        mid = self.start + (self.end - self.start) / 2
        return mid.replace(microsecond=0)

    def can_bisect(self) -> bool:
        return self.start < self.midpoint() < self.end

    def bisect(self) -> Tuple["TimeWindow", "TimeWindow"]:
        """
        Split at the midpoint into [start, mid) and [mid, end).

        Raises:
            ValueError: If the window is too narrow to produce two non-empty halves
        """
        if not self.can_bisect():
            raise ValueError(f"Window {self} is too narrow to bisect")
        mid = self.midpoint()
        return TimeWindow(self.start, mid), TimeWindow(mid, self.end)

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}..{self.end.isoformat()})"


class MonthlyWindows:
    """
    Consecutive calendar-month windows covering [start, end).

    Iterating is lazy and can be restarted; the last window is clipped to end.
    """

    def __init__(self, start: datetime, end: datetime):
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[TimeWindow]:
        current_start = self.start
        months = 1
        while current_start < self.end:
            # Offset from the epoch so a day-31 start does not drift after February
            next_start = min(self.start + relativedelta(months=months), self.end)
            yield TimeWindow(current_start, next_start)
            current_start = next_start
            months += 1
