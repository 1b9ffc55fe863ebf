"""
taskledger Kernel: Reducer

Pure functions: (snapshot, operation args) → snapshot

Every reducer returns a new Snapshot and leaves its input untouched. Only
the containers an operation touches are copied (the item dict, the root
tuple, the queue tuple, one timeline partition); everything else is shared
with the previous snapshot, so older snapshots held by the undo history stay
valid.

Reducers do not validate user input (see validation.py). They raise
InvariantViolation when a reference inside the snapshot does not resolve.
"""

from __future__ import annotations

from types import MappingProxyType

from taskledger.kernel.day_map import DayMap
from taskledger.kernel.sessions import EMPTY_DAY_DATA, DayData, apply_session_modification
from taskledger.kernel.types import (
    ACTIVE,
    MAX_ITEM_ID,
    DayID,
    IdCollision,
    IdOverflow,
    InvariantViolation,
    Item,
    ItemDraft,
    ItemID,
    ItemNotFound,
    SessionModification,
    SessionType,
    Snapshot,
    UpdateItemOptions,
)
from taskledger.kernel.validation import can_be_parent_of

# ---------------------------------------------------------------------------
# Snapshot structure
# ---------------------------------------------------------------------------


def empty_snapshot() -> Snapshot:
    """The initial snapshot: no items, empty queue, empty timeline, next id 1."""
    return Snapshot(
        items=MappingProxyType({}),
        root_item_ids=(),
        queue=(),
        timeline=DayMap(),
        next_id=1,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_item(items, item_id: ItemID, role: str = "Item") -> Item:
    item = items.get(item_id)
    if item is None:
        raise ItemNotFound(item_id, role=role)
    return item


def _without(ids: tuple[ItemID, ...], item_id: ItemID) -> tuple[ItemID, ...]:
    return tuple(i for i in ids if i != item_id)


def _insert_with_options(ids: tuple[ItemID, ...], item_id: ItemID, options: UpdateItemOptions) -> tuple[ItemID, ...]:
    """Insert next to options.anchor when it is in `ids`, else append."""
    if options.anchor is not None and options.anchor in ids:
        index = ids.index(options.anchor)
        if options.insert == "below":
            index += 1
        return ids[:index] + (item_id,) + ids[index:]
    return ids + (item_id,)


def _collect_subtree(items, item_id: ItemID) -> list[ItemID]:
    """Ids of item_id and all its descendants, depth-first, children before parents."""
    order: list[ItemID] = []
    # (id, expanded): an expanded entry is emitted once its children are done
    stack: list[tuple[ItemID, bool]] = [(item_id, False)]
    while stack:
        current_id, expanded = stack.pop()
        if expanded:
            order.append(current_id)
            continue
        item = _require_item(items, current_id, role="Child")
        stack.append((current_id, True))
        for child_id in reversed(item.children_ids):
            stack.append((child_id, False))
    return order


def _scrub_sessions(timeline: DayMap[DayData], item_ids: set[ItemID]) -> DayMap[DayData]:
    """Remove every session count for `item_ids` on every day. Empty days are dropped."""
    for day_id, day_data in timeline.items():
        cleaned = day_data.without_items(item_ids)
        if cleaned is day_data:
            continue
        timeline = timeline.remove(day_id) if cleaned.is_empty() else timeline.set(day_id, cleaned)
    return timeline


# ---------------------------------------------------------------------------
# Item reducers
# ---------------------------------------------------------------------------


def add_item(snap: Snapshot, draft: ItemDraft) -> tuple[Snapshot, ItemID]:
    """Create an item from `draft` with the next id. Returns (snapshot, new id)."""
    item_id = snap.next_id
    if item_id > MAX_ITEM_ID:
        raise IdOverflow("Item ID overflow")
    if item_id in snap.items:
        raise IdCollision(item_id)

    item = draft.to_new_item(item_id)
    items = dict(snap.items)
    items[item_id] = item
    root_item_ids = snap.root_item_ids

    if item.parent_id is None:
        root_item_ids = root_item_ids + (item_id,)
    else:
        parent = _require_item(items, item.parent_id, role="Parent")
        items[parent.id] = parent.with_children(parent.children_ids + (item_id,))

    queue = snap.queue
    if item.status == ACTIVE:
        queue = queue + (item_id,)

    return (
        snap.with_changes(items=items, root_item_ids=root_item_ids, queue=queue, next_id=item_id + 1),
        item_id,
    )


def update_item(snap: Snapshot, draft: ItemDraft, options: UpdateItemOptions | None = None) -> Snapshot:
    """
    Apply `draft` to the existing item with the same id.

    Re-links the item when its parent changes or an anchor is given, and
    keeps the queue in step with transitions into and out of ACTIVE.
    """
    options = options or UpdateItemOptions()
    item_id = draft.id
    old = _require_item(snap.items, item_id)
    new = draft.apply_to(old)

    items = dict(snap.items)
    items[item_id] = new
    root_item_ids = snap.root_item_ids

    if new.parent_id != old.parent_id or options.anchor is not None:
        if new.parent_id is not None:
            _require_item(items, new.parent_id, role="Parent")
            if not can_be_parent_of(snap, item_id, new.parent_id):
                raise InvariantViolation(f"Moving item {item_id} under {new.parent_id} would create a cycle")

        # Unlink from old siblings
        if old.parent_id is None:
            root_item_ids = _without(root_item_ids, item_id)
        else:
            old_parent = _require_item(items, old.parent_id, role="Parent")
            items[old_parent.id] = old_parent.with_children(_without(old_parent.children_ids, item_id))

        # Link into new siblings
        if new.parent_id is None:
            root_item_ids = _insert_with_options(root_item_ids, item_id, options)
        else:
            new_parent = items[new.parent_id]
            items[new_parent.id] = new_parent.with_children(
                _insert_with_options(new_parent.children_ids, item_id, options)
            )

    queue = snap.queue
    if old.status != new.status:
        if new.status == ACTIVE:
            queue = queue + (item_id,)
        elif old.status == ACTIVE:
            queue = _without(queue, item_id)

    return snap.with_changes(items=items, root_item_ids=root_item_ids, queue=queue)


def remove_item(snap: Snapshot, item_id: ItemID) -> Snapshot:
    """
    Remove an item and its whole subtree.

    Only the top item is unlinked from its parent (or the root list);
    descendants go away with it. Every removed id is dropped from the queue
    and from the session ledger on every day.
    """
    item = _require_item(snap.items, item_id)
    removed = _collect_subtree(snap.items, item_id)
    removed_set = set(removed)

    items = dict(snap.items)
    root_item_ids = snap.root_item_ids
    if item.parent_id is None:
        root_item_ids = _without(root_item_ids, item_id)
    else:
        parent = _require_item(items, item.parent_id, role="Parent")
        items[parent.id] = parent.with_children(_without(parent.children_ids, item_id))

    for removed_id in removed:
        del items[removed_id]

    queue = tuple(i for i in snap.queue if i not in removed_set)
    timeline = _scrub_sessions(snap.timeline, removed_set)

    return snap.with_changes(items=items, root_item_ids=root_item_ids, queue=queue, timeline=timeline)


# ---------------------------------------------------------------------------
# Session reducers
# ---------------------------------------------------------------------------


def edit_session(
    snap: Snapshot,
    day_id: DayID,
    session_type: SessionType,
    item_id: ItemID,
    modification: SessionModification,
    count: int,
) -> Snapshot:
    """SET or ADD a session count. A result of zero deletes the entry (and an emptied day)."""

    def edit(day_data: DayData) -> DayData | None:
        existing = day_data.count(session_type, item_id)
        new_count = apply_session_modification(existing, modification, count)
        updated = day_data.with_count(session_type, item_id, new_count)
        return None if updated.is_empty() else updated

    return snap.with_changes(timeline=snap.timeline.update(day_id, edit, EMPTY_DAY_DATA))


# ---------------------------------------------------------------------------
# Queue reducers
# ---------------------------------------------------------------------------


def queue_move(snap: Snapshot, item_id: ItemID, index: int) -> Snapshot:
    """
    Move item_id so it sits before the entry currently at `index`.

    `index` refers to positions before the move; `len(queue)` means the end.
    Out-of-range indexes are clamped. No-op if item_id is not queued.
    """
    queue = snap.queue
    if item_id not in queue:
        return snap
    old_index = queue.index(item_id)
    target = max(0, min(index, len(queue)))
    if target > old_index:
        target -= 1
    rest = queue[:old_index] + queue[old_index + 1 :]
    new_queue = rest[:target] + (item_id,) + rest[target:]
    if new_queue == queue:
        return snap
    return snap.with_changes(queue=new_queue)
