"""
taskledger Kernel: Fuzzy Autocomplete

A point-in-time index over qualified item names. Build it from a snapshot,
query it with a pattern; it does not follow later edits.

Keys:
  "Work : Reports : Q3"           qualified name
  "[DONE] Work : Reports : Q2"    completed items are prefixed
  "Alpha (#3)", "Alpha (#7)"      duplicate keys all get their id appended

Scoring (case-insensitive):
  A key matches when the pattern is a subsequence of it. The key is scanned
  greedily left-to-right and again right-to-left; in each pass the first
  matched character scores 1 and every later one scores 1 / (distance to the
  previously matched key position). The best pass plus
  len(pattern) / len(key) is the score. Results sort by score descending,
  then by key ascending.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from taskledger.kernel.queries import qualified_name
from taskledger.kernel.types import COMPLETED, AutoCompleteResult, Item, ItemID, Snapshot

logger = logging.getLogger(__name__)

DONE_PREFIX = "[DONE] "


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def forward_score(pattern: str, key: str) -> float | None:
    """Greedy left-to-right subsequence score, or None if pattern is not a subsequence."""
    score = 0.0
    a = 0
    last_matched = -1
    for b, ch in enumerate(key):
        if a == len(pattern):
            break
        if pattern[a] == ch:
            a += 1
            if last_matched == -1:
                score += 1
            else:
                score += 1.0 / (b - last_matched)
            last_matched = b
    if a != len(pattern):
        return None
    return score


def backward_score(pattern: str, key: str) -> float:
    """Same as forward_score scanning both strings right-to-left."""
    score = 0.0
    a = len(pattern) - 1
    last_matched = -1
    b = len(key) - 1
    while a >= 0 and b >= 0:
        if pattern[a] == key[b]:
            a -= 1
            if last_matched == -1:
                score += 1
            else:
                score += 1.0 / (last_matched - b)
            last_matched = b
        b -= 1
    return score


def score_key(pattern: str, key: str) -> float | None:
    """Full score of an already lower-cased pattern against a lower-cased key."""
    forward = forward_score(pattern, key)
    if forward is None:
        return None
    backward = backward_score(pattern, key)
    length_score = len(pattern) / len(key) if key else 0.0
    return max(forward, backward) + length_score


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


class AutoCompleter:
    """
    Ranked subsequence lookup over item keys.

    `num_candidates` of 0 means no limit on the number of results.
    """

    def __init__(self, snapshot: Snapshot, filter: Callable[[Item], bool] | None = None) -> None:
        self._entries: list[tuple[str, ItemID]] = []
        self._key_to_id: dict[str, ItemID] = {}
        self._id_to_key: dict[ItemID, str] = {}

        raw: list[tuple[str, ItemID]] = []
        key_count: dict[str, int] = {}
        for item_id in sorted(snapshot.items):
            item = snapshot.items[item_id]
            if filter is not None and not filter(item):
                continue
            key = self.key_for(snapshot, item)
            raw.append((key, item_id))
            key_count[key] = key_count.get(key, 0) + 1

        for key, item_id in raw:
            if key_count[key] > 1:
                key = f"{key} (#{item_id})"
            self._entries.append((key, item_id))
            self._key_to_id[key] = item_id
            self._id_to_key[item_id] = key

        logger.debug("AutoCompleter: indexed %d items", len(self._entries))

    @staticmethod
    def key_for(snapshot: Snapshot, item: Item) -> str:
        name = qualified_name(snapshot, item)
        if item.status == COMPLETED:
            return DONE_PREFIX + name
        return name

    def __len__(self) -> int:
        return len(self._entries)

    def query(self, pattern: str, num_candidates: int = 0) -> list[AutoCompleteResult]:
        pattern = pattern.lower()
        results: list[AutoCompleteResult] = []
        for key, item_id in self._entries:
            score = score_key(pattern, key.lower())
            if score is None:
                continue
            results.append(AutoCompleteResult(key=key, id=item_id, score=score))

        results.sort(key=lambda r: (-r.score, r.key))

        if num_candidates > 0:
            results = results[:num_candidates]
        return results

    def query_keys(self, pattern: str, num_candidates: int = 0) -> list[str]:
        return [r.key for r in self.query(pattern, num_candidates)]

    def query_ids(self, pattern: str, num_candidates: int = 0) -> list[ItemID]:
        return [r.id for r in self.query(pattern, num_candidates)]

    def key_to_id(self, key: str) -> ItemID | None:
        return self._key_to_id.get(key)

    def id_to_key(self, item_id: ItemID) -> str | None:
        return self._id_to_key.get(item_id)
