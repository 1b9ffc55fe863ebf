"""
taskledger Kernel: Draft Validation

Validates an ItemDraft before it reaches the reducer.
Returns a ValidationResult; nothing here raises for bad user input and
nothing here touches state.

The reducer handles structural checks (does the parent exist? etc.) and
raises InvariantViolation when they fail.
"""

from __future__ import annotations

from taskledger.kernel.types import (
    RESERVED_NAME_CHARS,
    ItemDraft,
    ItemID,
    ItemNotFound,
    Snapshot,
    ValidationResult,
)

INVALID_PARENT = "invalid_parent"
INVALID_NAME = "invalid_name"
INVALID_COST = "invalid_cost"
INVALID_REPEAT = "invalid_repeat"
INVALID_DATE_ORDER = "invalid_date_order"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_item_draft(
    snapshot: Snapshot,
    draft: ItemDraft,
    is_new_item: bool,
    *,
    strict_parent_check: bool = False,
) -> ValidationResult:
    """
    Check a draft against the user-facing rules. First failure wins:

    - invalid_parent:     (updates only) new parent is the item or inside its
                          subtree, or, with strict_parent_check, its ancestor
                          chain does not resolve
    - invalid_name:       empty, or contains ':', '#' or '['
    - invalid_cost:       negative cost
    - invalid_repeat:     repeat set with interval <= 0
    - invalid_date_order: defer date after due date
    """
    if not is_new_item and draft.parent_id is not None:
        try:
            parent_ok = can_be_parent_of(snapshot, draft.id, draft.parent_id, strict=strict_parent_check)
        except ItemNotFound:
            parent_ok = False
        if not parent_ok:
            return ValidationResult.failure(INVALID_PARENT, "Error: Invalid parent")

    if not is_valid_name(draft.name):
        return ValidationResult.failure(INVALID_NAME, "Error: Invalid item name")

    if draft.cost < 0:
        return ValidationResult.failure(INVALID_COST, "Error: Invalid cost")

    if draft.repeat is not None and draft.repeat_interval <= 0:
        return ValidationResult.failure(INVALID_REPEAT, "Error: Invalid repeat interval")

    if draft.defer_date is not None and draft.due_date is not None and draft.defer_date > draft.due_date:
        return ValidationResult.failure(INVALID_DATE_ORDER, "Error: Defer date cannot be after due date")

    return ValidationResult.success()


def is_valid_name(name: str) -> bool:
    return name != "" and not any(c in name for c in RESERVED_NAME_CHARS)


def can_be_parent_of(
    snapshot: Snapshot,
    item_id: ItemID,
    parent_id: ItemID,
    *,
    strict: bool = False,
) -> bool:
    """
    False if `item_id` is `parent_id` or one of its ancestors (a cycle).

    A chain that runs into an id with no item is accepted unless `strict`,
    in which case ItemNotFound is raised.
    """
    current: ItemID | None = parent_id
    while current is not None:
        if current == item_id:
            return False
        parent = snapshot.items.get(current)
        if parent is None:
            if strict:
                raise ItemNotFound(current, role="Ancestor")
            break
        current = parent.parent_id
    return True
