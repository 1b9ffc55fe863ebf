"""
taskledger Kernel: Session Ledger

One DayData per day: session_type -> {item_id: count}. Counts are always
positive; a count that reaches zero is deleted. DayData is immutable and
edits copy only the session-type map they touch.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from taskledger.kernel.types import ADD, SET, ItemID, SessionModification, SessionType


def apply_session_modification(existing_count: int, modification: SessionModification, count: int) -> int:
    """New count for SET/ADD, clamped at zero."""
    if modification == SET:
        result = count
    elif modification == ADD:
        result = existing_count + count
    else:
        result = existing_count
    return max(0, result)


class DayData:
    """Session counts recorded for a single day."""

    __slots__ = ("_sessions",)

    def __init__(self, sessions: dict[SessionType, dict[ItemID, int]] | None = None) -> None:
        self._sessions: dict[SessionType, dict[ItemID, int]] = sessions if sessions is not None else {}

    # -- reads --

    def count(self, session_type: SessionType, item_id: ItemID) -> int:
        of_type = self._sessions.get(session_type)
        if of_type is None:
            return 0
        return of_type.get(item_id, 0)

    def sessions_of(self, session_type: SessionType) -> Mapping[ItemID, int]:
        return MappingProxyType(self._sessions.get(session_type, {}))

    @property
    def sessions(self) -> Mapping[SessionType, Mapping[ItemID, int]]:
        return MappingProxyType({t: MappingProxyType(m) for t, m in self._sessions.items()})

    def session_types(self) -> Iterator[SessionType]:
        return iter(self._sessions)

    def item_ids(self) -> set[ItemID]:
        result: set[ItemID] = set()
        for of_type in self._sessions.values():
            result.update(of_type)
        return result

    def is_empty(self) -> bool:
        return not self._sessions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DayData):
            return NotImplemented
        return self._sessions == other._sessions

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:  # pragma: no cover
        return f"DayData({self._sessions!r})"

    # -- writes (persistent) --

    def with_count(self, session_type: SessionType, item_id: ItemID, count: int) -> DayData:
        """Copy with one count replaced. Zero deletes; an emptied type map is dropped."""
        sessions = dict(self._sessions)
        of_type = dict(sessions.get(session_type, {}))
        if count == 0:
            of_type.pop(item_id, None)
        else:
            of_type[item_id] = count
        if of_type:
            sessions[session_type] = of_type
        else:
            sessions.pop(session_type, None)
        return DayData(sessions)

    def without_items(self, item_ids: set[ItemID]) -> DayData:
        """Copy with every count for the given ids removed. Returns self if none matched."""
        if not item_ids.intersection(self.item_ids()):
            return self
        sessions: dict[SessionType, dict[ItemID, int]] = {}
        for session_type, of_type in self._sessions.items():
            kept = {i: c for i, c in of_type.items() if i not in item_ids}
            if kept:
                sessions[session_type] = kept
        return DayData(sessions)


# Shared read-only default for days with no entry.
EMPTY_DAY_DATA = DayData()
