"""
In-memory registry of order ids already stored in the database.
"""

from typing import Iterable, Iterator


class KnownIdRegistry:
    """
    Ids of orders that are durably stored, mirrored for the current run.

    Seeded once from storage and only ever grows. It is not authoritative across
    runs, so the sink must stay idempotent regardless.
    """

    def __init__(self, seed_ids: Iterable[int] = ()):
        self._ids = set(seed_ids)
        self.seeded_count = len(self._ids)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def add(self, order_id: int) -> None:
        self._ids.add(order_id)

    @property
    def added_count(self) -> int:
        """Ids registered during this run."""
        return len(self._ids) - self.seeded_count
