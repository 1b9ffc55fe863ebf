"""
taskledger Kernel: the in-memory item store.

Components:
  day_map      DayMap, the day-partitioned persistent index
  sessions     DayData session ledger for one day
  validation   validate_item_draft, can_be_parent_of
  reducer      (snapshot, args) → snapshot  (pure, copy-on-write)
  history      bounded undo/redo stacks with batch freezing
  store        DataStore, the transactional driver callers talk to
  autocomplete AutoCompleter, fuzzy lookup over qualified names
  snapshot_hash  hash_snapshot, canonical fingerprint of a snapshot

Query helpers (from queries / renderer):
  qualified_name, effective_color, render_outline, render_queue
"""

from taskledger.kernel.autocomplete import AutoCompleter
from taskledger.kernel.day_map import PARTITION_SIZE, DayMap
from taskledger.kernel.history import UndoHistory
from taskledger.kernel.queries import effective_color, qualified_name
from taskledger.kernel.reducer import empty_snapshot
from taskledger.kernel.renderer import render_outline, render_queue
from taskledger.kernel.sessions import EMPTY_DAY_DATA, DayData
from taskledger.kernel.snapshot_hash import hash_snapshot
from taskledger.kernel.store import DataStore
from taskledger.kernel.types import (
    ACTIVE,
    COMPLETED,
    INACTIVE,
    AutoCompleteResult,
    EditResult,
    InvariantViolation,
    Item,
    ItemDraft,
    ItemNotFound,
    Snapshot,
    TaskLedgerError,
    UpdateItemOptions,
    ValidationResult,
)
from taskledger.kernel.validation import can_be_parent_of, validate_item_draft

__all__ = [
    "ACTIVE",
    "INACTIVE",
    "COMPLETED",
    "DataStore",
    "UndoHistory",
    "AutoCompleter",
    "AutoCompleteResult",
    "DayMap",
    "DayData",
    "EMPTY_DAY_DATA",
    "PARTITION_SIZE",
    "Item",
    "ItemDraft",
    "Snapshot",
    "UpdateItemOptions",
    "EditResult",
    "ValidationResult",
    "TaskLedgerError",
    "InvariantViolation",
    "ItemNotFound",
    "empty_snapshot",
    "validate_item_draft",
    "can_be_parent_of",
    "qualified_name",
    "effective_color",
    "render_outline",
    "render_queue",
    "hash_snapshot",
]
