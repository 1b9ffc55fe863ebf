"""
taskledger Kernel: Undo/Redo History

Two bounded stacks of whole-store snapshots plus a reentrant freeze counter
used by batch edits. Snapshots are immutable, so pushing one is just keeping
a reference.
"""

from __future__ import annotations

from collections import deque

from taskledger.kernel.types import Snapshot


class UndoHistory:
    """
    Bounded undo/redo stacks. When a stack is full the oldest snapshot is
    dropped. While frozen, checkpoint/undo/redo do nothing.
    """

    def __init__(self, capacity: int = 50) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._undo: deque[Snapshot] = deque(maxlen=capacity)
        self._redo: deque[Snapshot] = deque(maxlen=capacity)
        self._freeze_count = 0

    # -- freeze --

    @property
    def frozen(self) -> bool:
        return self._freeze_count > 0

    def freeze(self) -> None:
        self._freeze_count += 1

    def thaw(self) -> None:
        if self._freeze_count == 0:
            raise RuntimeError("UndoHistory.thaw() called without a matching freeze()")
        self._freeze_count -= 1

    # -- stacks --

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def checkpoint(self, state: Snapshot) -> bool:
        """Record `state` as the undo target and invalidate redo. Returns False while frozen."""
        if self.frozen:
            return False
        self._undo.append(state)
        self._redo.clear()
        return True

    def can_undo(self) -> bool:
        return len(self._undo) > 0

    def can_redo(self) -> bool:
        return len(self._redo) > 0

    def undo(self, current: Snapshot) -> Snapshot | None:
        """Swap `current` onto the redo stack; return the snapshot to restore, or None."""
        if self.frozen or not self._undo:
            return None
        self._redo.append(current)
        return self._undo.pop()

    def redo(self, current: Snapshot) -> Snapshot | None:
        if self.frozen or not self._redo:
            return None
        self._undo.append(current)
        return self._redo.pop()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
