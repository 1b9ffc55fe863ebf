"""
taskledger Kernel: Shared Types

Data classes used across validation, reducer, store, and autocomplete.
These are the contracts that bind the kernel together.

- `Item` is immutable; reducers replace items, they never edit them.
- `ItemDraft` is the editable form callers hand to the store.
- `Snapshot` is the unit of undo/redo.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

from taskledger.config import settings

if TYPE_CHECKING:
    from taskledger.kernel.day_map import DayMap
    from taskledger.kernel.sessions import DayData

ItemID = int
DayID = int

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

ItemStatus = Literal["active", "inactive", "completed"]
ACTIVE: ItemStatus = "active"
INACTIVE: ItemStatus = "inactive"
COMPLETED: ItemStatus = "completed"

SessionType = Literal["completed", "projected", "scheduled"]
SESSION_TYPES: tuple[SessionType, ...] = ("completed", "projected", "scheduled")

SessionModification = Literal["set", "add"]
SET: SessionModification = "set"
ADD: SessionModification = "add"

RepeatType = Literal["day", "week", "month", "year"]

InsertPosition = Literal["above", "below"]

# Largest id the counter may hand out (signed 64-bit).
MAX_ITEM_ID = 2**63 - 1

# Characters reserved by the qualified-name and autocomplete key format.
RESERVED_NAME_CHARS: tuple[str, ...] = (":", "#", "[")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TaskLedgerError(Exception):
    """Base class for store errors."""


class InvariantViolation(TaskLedgerError):
    """A cross-reference inside the snapshot is broken. Not recoverable by retrying."""


class ItemNotFound(InvariantViolation):
    """A referenced item id does not resolve."""

    def __init__(self, item_id: ItemID, role: str = "Item") -> None:
        super().__init__(f"{role} ID {item_id} does not exist")
        self.item_id = item_id
        self.role = role


class IdOverflow(InvariantViolation):
    """The id counter ran past MAX_ITEM_ID."""


class IdCollision(InvariantViolation):
    """The id counter produced an id that is already in use."""

    def __init__(self, item_id: ItemID) -> None:
        super().__init__(f"Item with ID {item_id} already exists")
        self.item_id = item_id


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Item:
    """
    A node in the task tree.

    `children_ids` order is the display order. `parent_id is None` means the
    item is listed in the snapshot's root list.
    """

    id: ItemID
    name: str
    parent_id: ItemID | None = None
    children_ids: tuple[ItemID, ...] = ()
    status: ItemStatus = ACTIVE
    color: str = settings.DEFAULT_COLOR
    try_use_parent_color: bool = True
    cost: float = 1
    repeat: RepeatType | None = None
    repeat_interval: int = 1
    defer_date: DayID | None = None
    due_date: DayID | None = None

    def with_children(self, children_ids: tuple[ItemID, ...]) -> Item:
        return dataclasses.replace(self, children_ids=children_ids)

    def to_dict(self) -> dict:
        d = dataclasses.asdict(self)
        d["children_ids"] = list(self.children_ids)
        return d


class ItemDraft(BaseModel):
    """
    Editable form of an Item.

    Pydantic checks field types only. Domain rules (names, cost, repeat,
    dates, parent cycles) are checked by validation.validate_item_draft so
    that they come back as a result instead of an exception.
    """

    model_config = {"extra": "forbid", "validate_assignment": True}

    id: ItemID = -1
    name: str = ""
    parent_id: ItemID | None = None
    status: ItemStatus = ACTIVE
    color: str = Field(default_factory=lambda: settings.DEFAULT_COLOR)
    try_use_parent_color: bool = True
    cost: float = 1
    repeat: RepeatType | None = None
    repeat_interval: int = 1
    defer_date: DayID | None = None
    due_date: DayID | None = None

    @classmethod
    def from_item(cls, item: Item) -> ItemDraft:
        """Seed a draft with an existing item's fields for editing."""
        return cls(
            id=item.id,
            name=item.name,
            parent_id=item.parent_id,
            status=item.status,
            color=item.color,
            try_use_parent_color=item.try_use_parent_color,
            cost=item.cost,
            repeat=item.repeat,
            repeat_interval=item.repeat_interval,
            defer_date=item.defer_date,
            due_date=item.due_date,
        )

    def to_new_item(self, item_id: ItemID) -> Item:
        return Item(
            id=item_id,
            name=self.name,
            parent_id=self.parent_id,
            children_ids=(),
            status=self.status,
            color=self.color,
            try_use_parent_color=self.try_use_parent_color,
            cost=self.cost,
            repeat=self.repeat,
            repeat_interval=self.repeat_interval,
            defer_date=self.defer_date,
            due_date=self.due_date,
        )

    def apply_to(self, item: Item) -> Item:
        """Return `item` with this draft's fields. Keeps id and children."""
        return dataclasses.replace(
            item,
            name=self.name,
            parent_id=self.parent_id,
            status=self.status,
            color=self.color,
            try_use_parent_color=self.try_use_parent_color,
            cost=self.cost,
            repeat=self.repeat,
            repeat_interval=self.repeat_interval,
            defer_date=self.defer_date,
            due_date=self.due_date,
        )


@dataclass(frozen=True)
class Snapshot:
    """
    Whole-store state. Immutable: reducers return a new Snapshot and share
    every container they did not touch with the previous one.

    - items:          {item_id: Item}  (read-only mapping)
    - root_item_ids:  ids with no parent, in display order
    - queue:          the Active Queue, in work order
    - timeline:       DayMap[DayData] of session counts
    - next_id:        id the next add_item will assign
    """

    items: Mapping[ItemID, Item]
    root_item_ids: tuple[ItemID, ...]
    queue: tuple[ItemID, ...]
    timeline: DayMap[DayData]
    next_id: int = 1

    def with_changes(self, **changes) -> Snapshot:
        if "items" in changes and not isinstance(changes["items"], MappingProxyType):
            changes["items"] = MappingProxyType(changes["items"])
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class UpdateItemOptions:
    """Where to re-insert an item whose parent changed (or that is being reordered)."""

    anchor: ItemID | None = None
    insert: InsertPosition = "above"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating a draft. Never raised; callers check `ok`.
    """

    ok: bool
    kind: str | None = None
    message: str | None = None

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, kind: str, message: str) -> ValidationResult:
        return cls(ok=False, kind=kind, message=message)


@dataclass(frozen=True)
class EditResult:
    """
    Result of a store add/update call.
    `error` is set when validation rejected the draft; state is untouched then.
    """

    accepted: bool
    item_id: ItemID | None = None
    error: ValidationResult | None = None


@dataclass(frozen=True)
class AutoCompleteResult:
    key: str
    id: ItemID
    score: float


@dataclass
class OutlineOptions:
    """Options controlling the text outline renderer."""

    template: str = "{{{indent}}}{{#done}}[DONE] {{/done}}{{{name}}} (#{{id}})"
    indent: str = "  "
    root_ids: list[ItemID] = field(default_factory=list)  # empty = whole tree
