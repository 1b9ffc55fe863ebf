"""
taskledger Kernel: Data Store

Sits between callers and the pure functions (validation, reducer, queries).
Owns the current snapshot and the undo/redo history, and tells subscribers
when the state changed.

Every mutating call runs: validate → reduce → checkpoint → commit → notify.
The reducer runs before anything is recorded, so a call that raises leaves
both the current snapshot and the history exactly as they were.

Not thread-safe. Callers sharing a store across threads must serialize
access themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from taskledger.config import settings
from taskledger.kernel import queries, reducer
from taskledger.kernel.autocomplete import AutoCompleter
from taskledger.kernel.history import UndoHistory
from taskledger.kernel.renderer import render_outline
from taskledger.kernel.sessions import EMPTY_DAY_DATA, DayData
from taskledger.kernel.snapshot_hash import hash_snapshot
from taskledger.kernel.types import (
    ADD,
    SET,
    DayID,
    EditResult,
    Item,
    ItemDraft,
    ItemID,
    OutlineOptions,
    SessionModification,
    SessionType,
    Snapshot,
    UpdateItemOptions,
)
from taskledger.kernel.validation import can_be_parent_of, validate_item_draft

logger = logging.getLogger(__name__)

Subscriber = Callable[["DataStore"], None]
Clock = Callable[[], DayID]


class DataStore:
    """
    Transactional item store with undo/redo and change notification.

    Collaborators are passed in:
      clock                 zero-arg callable returning today's DayID
      max_undo_history      undo/redo capacity (default: settings)
      strict_parent_check   treat dangling ancestors as errors (default: settings)
    """

    default_day_data: DayData = EMPTY_DAY_DATA

    def __init__(
        self,
        clock: Clock | None = None,
        max_undo_history: int | None = None,
        strict_parent_check: bool | None = None,
        initial_state: Snapshot | None = None,
    ) -> None:
        self._state = initial_state or reducer.empty_snapshot()
        self._clock = clock
        self._history = UndoHistory(
            settings.MAX_UNDO_HISTORY if max_undo_history is None else max_undo_history
        )
        self._strict_parent_check = (
            settings.STRICT_PARENT_CHECK if strict_parent_check is None else strict_parent_check
        )
        self._subscribers: list[Subscriber] = []

    # -- state --

    @property
    def state(self) -> Snapshot:
        return self._state

    def today(self) -> DayID:
        if self._clock is None:
            raise RuntimeError("DataStore has no clock collaborator")
        return self._clock()

    # -- notification --

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        if self._history.frozen:
            return
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception:
                logger.exception("DataStore: subscriber %r failed", callback)
                raise

    def _commit(self, new_state: Snapshot, operation: str) -> None:
        """Record the pre-edit state for undo, install `new_state`, notify."""
        self._history.checkpoint(self._state)
        self._state = new_state
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("DataStore: %s committed (hash=%s)", operation, hash_snapshot(new_state))
        self._notify()

    # -- items --

    def validate_item_draft(self, draft: ItemDraft, is_new_item: bool):
        return validate_item_draft(
            self._state, draft, is_new_item, strict_parent_check=self._strict_parent_check
        )

    def add_item(self, draft: ItemDraft, skip_validation: bool = False) -> EditResult:
        if not skip_validation:
            result = self.validate_item_draft(draft, is_new_item=True)
            if not result.ok:
                logger.warning("DataStore: add_item rejected: %s", result.kind)
                return EditResult(accepted=False, error=result)
        new_state, item_id = reducer.add_item(self._state, draft)
        self._commit(new_state, "add_item")
        return EditResult(accepted=True, item_id=item_id)

    def update_item(
        self,
        draft: ItemDraft,
        options: UpdateItemOptions | None = None,
        skip_validation: bool = False,
    ) -> EditResult:
        if not skip_validation:
            result = self.validate_item_draft(draft, is_new_item=False)
            if not result.ok:
                logger.warning("DataStore: update_item %d rejected: %s", draft.id, result.kind)
                return EditResult(accepted=False, item_id=draft.id, error=result)
        new_state = reducer.update_item(self._state, draft, options)
        self._commit(new_state, "update_item")
        return EditResult(accepted=True, item_id=draft.id)

    def remove_item(self, item_id: ItemID) -> None:
        new_state = reducer.remove_item(self._state, item_id)
        self._commit(new_state, "remove_item")

    # -- sessions --

    def edit_session(
        self,
        day_id: DayID,
        session_type: SessionType,
        item_id: ItemID,
        modification: SessionModification,
        count: int = 1,
    ) -> None:
        new_state = reducer.edit_session(self._state, day_id, session_type, item_id, modification, count)
        self._commit(new_state, "edit_session")

    def add_session(self, day_id: DayID, session_type: SessionType, item_id: ItemID, count: int = 1) -> None:
        self.edit_session(day_id, session_type, item_id, ADD, count)

    def remove_session(self, day_id: DayID, session_type: SessionType, item_id: ItemID, count: int = 1) -> None:
        self.edit_session(day_id, session_type, item_id, ADD, -count)

    def set_session(self, day_id: DayID, session_type: SessionType, item_id: ItemID, count: int = 1) -> None:
        self.edit_session(day_id, session_type, item_id, SET, count)

    # -- queue --

    def queue_move_to_index(self, item_id: ItemID, index: int) -> None:
        """
        Move item to before the entry at `index`.
        The entry at `index` is looked up before the moved item is taken out.
        """
        new_state = reducer.queue_move(self._state, item_id, index)
        self._commit(new_state, "queue_move")

    def queue_move_to_before(self, item_id: ItemID, anchor_item_id: ItemID) -> None:
        if anchor_item_id not in self._state.queue:
            return
        self.queue_move_to_index(item_id, self._state.queue.index(anchor_item_id))

    def queue_move_to_after(self, item_id: ItemID, anchor_item_id: ItemID) -> None:
        if anchor_item_id not in self._state.queue:
            return
        self.queue_move_to_index(item_id, self._state.queue.index(anchor_item_id) + 1)

    # -- batching / history --

    def batch_edit(self, func: Callable[[DataStore], None]) -> None:
        """
        Run `func(self)` as one undo step with one notification.

        Nested mutations inside `func` neither checkpoint nor notify. Nested
        batch_edit calls fold into the outermost one. If `func` raises, the
        state is rolled back to what it was when this batch started, the
        undo history is left as it was, nothing is notified, and the
        exception propagates.
        """
        outermost = not self._history.frozen
        before = self._state
        self._history.freeze()
        try:
            func(self)
        except Exception:
            self._state = before
            logger.warning("DataStore: batch_edit failed, rolled back")
            raise
        finally:
            self._history.thaw()
        if outermost:
            self._history.checkpoint(before)
        self._notify()

    def undo(self) -> None:
        previous = self._history.undo(self._state)
        if previous is None:
            return
        self._state = previous
        logger.info("DataStore: undo (undo_depth=%d)", self._history.undo_depth)
        self._notify()

    def redo(self) -> None:
        following = self._history.redo(self._state)
        if following is None:
            return
        self._state = following
        logger.info("DataStore: redo (redo_depth=%d)", self._history.redo_depth)
        self._notify()

    def can_undo(self) -> bool:
        return self._history.can_undo()

    def can_redo(self) -> bool:
        return self._history.can_redo()

    def clear_undo(self) -> None:
        self._history.clear()
        logger.info("DataStore: undo history cleared")

    # -- reads --

    def get_item(self, item_id: ItemID) -> Item | None:
        return self._state.items.get(item_id)

    def get_children(self, item: Item) -> list[Item]:
        return queries.children_of(self._state, item)

    def get_root_items(self) -> list[Item]:
        return queries.root_items(self._state)

    def get_queue_items(self) -> list[Item]:
        return queries.queue_items(self._state)

    def get_day_data(self, day_id: DayID) -> DayData:
        return self._state.timeline.get(day_id, self.default_day_data)

    def get_item_color(self, item: Item) -> str:
        return queries.effective_color(self._state, item)

    def get_qualified_name(self, item: Item) -> str:
        return queries.qualified_name(self._state, item)

    def get_queue_predecessor(self, item_id: ItemID) -> ItemID | None:
        return queries.queue_predecessor(self._state, item_id)

    def can_be_parent_of(self, item_id: ItemID, parent_id: ItemID) -> bool:
        return can_be_parent_of(self._state, item_id, parent_id, strict=self._strict_parent_check)

    def create_auto_completer(self, filter: Callable[[Item], bool] | None = None) -> AutoCompleter:
        """Index of the current state. Rebuild after edits; it does not follow them."""
        return AutoCompleter(self._state, filter)

    def render_outline(self, options: OutlineOptions | None = None) -> str:
        return render_outline(self._state, options)
