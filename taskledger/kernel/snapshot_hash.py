"""Snapshot serialization and hashing for equality checks and debug logs."""

import hashlib
import json
from typing import Any

from taskledger.kernel.types import Snapshot


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """
    Plain JSON-serializable view of a snapshot.

    Item ids and day ids become string keys; day entries come out in day order.
    """
    timeline: dict[str, Any] = {}
    for day_id, day_data in snapshot.timeline.items():
        timeline[str(day_id)] = {
            session_type: {str(item_id): count for item_id, count in sorted(counts.items())}
            for session_type, counts in day_data.sessions.items()
        }
    return {
        "items": {str(item_id): item.to_dict() for item_id, item in sorted(snapshot.items.items())},
        "root_item_ids": list(snapshot.root_item_ids),
        "queue": list(snapshot.queue),
        "timeline": timeline,
        "next_id": snapshot.next_id,
    }


def hash_snapshot(snapshot: Snapshot) -> str:
    """
    Compute a deterministic hash of a snapshot.

    Two snapshots with the same hash are observationally equal: same items,
    same orderings, same session counts, same id counter.

    Returns:
        Hexadecimal hash string (first 16 characters of SHA-256)
    """
    serialized = json.dumps(snapshot_to_dict(snapshot), sort_keys=True, separators=(",", ":"))
    hash_obj = hashlib.sha256(serialized.encode("utf-8"))
    return hash_obj.hexdigest()[:16]
