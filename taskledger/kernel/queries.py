"""
taskledger Kernel: Snapshot Queries

Read-only helpers over a Snapshot. Pure functions: no IO, no mutation.
The store's read accessors delegate here so that renderers and the
autocomplete index can work from any snapshot, not just the current one.
"""

from __future__ import annotations

from taskledger.kernel.types import InvariantViolation, Item, ItemID, Snapshot

QUALIFIED_NAME_SEPARATOR = " : "


def children_of(snapshot: Snapshot, item: Item) -> list[Item]:
    """Direct children in display order. Always a new list."""
    children: list[Item] = []
    for child_id in item.children_ids:
        child = snapshot.items.get(child_id)
        if child is None:
            raise InvariantViolation(f"Child {child_id} not found")
        children.append(child)
    return children


def root_items(snapshot: Snapshot) -> list[Item]:
    result: list[Item] = []
    for item_id in snapshot.root_item_ids:
        item = snapshot.items.get(item_id)
        if item is None:
            raise InvariantViolation(f"Root item {item_id} not found")
        result.append(item)
    return result


def ancestors_of(snapshot: Snapshot, item: Item) -> list[Item]:
    """Parent first, root last."""
    result: list[Item] = []
    current = item
    while current.parent_id is not None:
        parent = snapshot.items.get(current.parent_id)
        if parent is None:
            raise InvariantViolation(f"Parent ID {current.parent_id} not found")
        result.append(parent)
        current = parent
    return result


def qualified_name(snapshot: Snapshot, item: Item) -> str:
    """Ancestor names from the root down to `item`, joined by ' : '."""
    names = [a.name for a in reversed(ancestors_of(snapshot, item))]
    names.append(item.name)
    return QUALIFIED_NAME_SEPARATOR.join(names)


def effective_color(snapshot: Snapshot, item: Item) -> str:
    """
    Colour to display for `item`: follow parents while try_use_parent_color
    is set, taking the nearest ancestor's own colour.
    """
    current: Item | None = item
    result = item.color
    while current is not None and current.try_use_parent_color and current.parent_id is not None:
        current = snapshot.items.get(current.parent_id)
        if current is not None:
            result = current.color
    return result


def queue_items(snapshot: Snapshot) -> list[Item]:
    """Items of the Active Queue in work order. Always a new list."""
    result: list[Item] = []
    for item_id in snapshot.queue:
        item = snapshot.items.get(item_id)
        if item is None:
            raise InvariantViolation(f"Queued item {item_id} not found")
        result.append(item)
    return result


def queue_predecessor(snapshot: Snapshot, item_id: ItemID) -> ItemID | None:
    """Id right before item_id in the Active Queue; None if first or not queued."""
    if item_id not in snapshot.queue:
        return None
    index = snapshot.queue.index(item_id)
    if index == 0:
        return None
    return snapshot.queue[index - 1]


def iter_depth_first(snapshot: Snapshot, start_ids: tuple[ItemID, ...] | list[ItemID] | None = None):
    """Yield (item, depth) in display order, parents before children."""
    stack: list[tuple[ItemID, int]] = [
        (item_id, 0) for item_id in reversed(start_ids if start_ids is not None else snapshot.root_item_ids)
    ]
    while stack:
        item_id, depth = stack.pop()
        item = snapshot.items.get(item_id)
        if item is None:
            raise InvariantViolation(f"Item {item_id} not found")
        yield item, depth
        for child_id in reversed(item.children_ids):
            stack.append((child_id, depth + 1))
