"""
taskledger Kernel: Day-Partitioned Index

A sparse, persistent map keyed by DayID. Days are grouped into partitions of
PARTITION_SIZE consecutive ids. Every write returns a new DayMap that shares
all partitions except the one it touched, so editing one day costs one
partition copy no matter how many days the map spans.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from types import MappingProxyType
from typing import Generic, TypeVar

T = TypeVar("T")

PARTITION_SIZE = 30


def partition_id(day_id: int) -> int:
    """Partition a day belongs to. Floor division keeps negative days contiguous."""
    return day_id // PARTITION_SIZE


class DayMap(Generic[T]):
    """
    Immutable map DayID -> T.

    Partitions are plain dicts owned by exactly one DayMap lineage; a write
    copies the top-level partition table (small: one entry per 30 days) and
    the single partition being changed. Empty partitions are dropped.
    """

    __slots__ = ("_partitions",)

    def __init__(self, partitions: dict[int, dict[int, T]] | None = None) -> None:
        self._partitions: dict[int, dict[int, T]] = partitions if partitions is not None else {}

    # -- reads --

    def try_get(self, day_id: int) -> T | None:
        partition = self._partitions.get(partition_id(day_id))
        if partition is None:
            return None
        return partition.get(day_id)

    def get(self, day_id: int, default: T) -> T:
        value = self.try_get(day_id)
        return default if value is None else value

    def __contains__(self, day_id: object) -> bool:
        if not isinstance(day_id, int):
            return False
        partition = self._partitions.get(partition_id(day_id))
        return partition is not None and day_id in partition

    def __len__(self) -> int:
        return sum(len(p) for p in self._partitions.values())

    def __bool__(self) -> bool:
        return bool(self._partitions)

    def __iter__(self) -> Iterator[int]:
        for day_id, _ in self.items():
            yield day_id

    def items(self) -> list[tuple[int, T]]:
        """All (day_id, value) pairs in ascending day order."""
        result: list[tuple[int, T]] = []
        for pid in sorted(self._partitions):
            result.extend(sorted(self._partitions[pid].items()))
        return result

    def partition_count(self) -> int:
        return len(self._partitions)

    def partition(self, pid: int) -> MappingProxyType | None:
        """Read-only view of one partition (None if absent)."""
        p = self._partitions.get(pid)
        return MappingProxyType(p) if p is not None else None

    # -- writes (persistent) --

    def set(self, day_id: int, value: T) -> DayMap[T]:
        pid = partition_id(day_id)
        partitions = dict(self._partitions)
        partition = dict(partitions.get(pid, {}))
        partition[day_id] = value
        partitions[pid] = partition
        return DayMap(partitions)

    def remove(self, day_id: int) -> DayMap[T]:
        pid = partition_id(day_id)
        old = self._partitions.get(pid)
        if old is None or day_id not in old:
            return self
        partitions = dict(self._partitions)
        partition = dict(old)
        del partition[day_id]
        if partition:
            partitions[pid] = partition
        else:
            del partitions[pid]
        return DayMap(partitions)

    def update(self, day_id: int, fn: Callable[[T], T | None], default: T) -> DayMap[T]:
        """
        Read-modify-write one day. `fn` receives the current value (or
        `default`) and returns the new value; returning None removes the day.
        """
        new_value = fn(self.get(day_id, default))
        if new_value is None:
            return self.remove(day_id)
        return self.set(day_id, new_value)

    def __repr__(self) -> str:  # pragma: no cover
        return f"DayMap(days={len(self)}, partitions={len(self._partitions)})"
