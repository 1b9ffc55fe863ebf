"""
taskledger Kernel: Outline Renderer

Pure function: (snapshot, options?) → text outline
No IO. Deterministic: same snapshot in, same text out.

Each item becomes one line rendered through a Mustache template, walking the
tree depth-first in display order. Context available to the template:

  id, name, qualified_name, status, depth, indent,
  done, active (booleans for sections), queue_position (1-based, or "")
"""

from __future__ import annotations

from typing import Any

import chevron

from taskledger.kernel.queries import iter_depth_first, qualified_name, queue_items
from taskledger.kernel.types import ACTIVE, COMPLETED, Item, OutlineOptions, Snapshot

QUEUE_TEMPLATE = "{{position}}. {{{qualified_name}}}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_outline(snapshot: Snapshot, options: OutlineOptions | None = None) -> str:
    """
    Render the item tree (or the subtrees under options.root_ids) as text.
    Returns "" for an empty tree.
    """
    opts = options or OutlineOptions()
    start_ids = opts.root_ids or None
    queue_positions = {item_id: i for i, item_id in enumerate(snapshot.queue, start=1)}

    lines: list[str] = []
    for item, depth in iter_depth_first(snapshot, start_ids):
        context = _build_item_context(snapshot, item, depth, opts, queue_positions)
        lines.append(chevron.render(opts.template, context))
    return "\n".join(lines)


def render_queue(snapshot: Snapshot, template: str = QUEUE_TEMPLATE) -> str:
    """Render the Active Queue as numbered qualified names."""
    lines: list[str] = []
    for position, item in enumerate(queue_items(snapshot), start=1):
        lines.append(
            chevron.render(
                template,
                {
                    "position": position,
                    "id": item.id,
                    "name": item.name,
                    "qualified_name": qualified_name(snapshot, item),
                },
            )
        )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def _build_item_context(
    snapshot: Snapshot,
    item: Item,
    depth: int,
    opts: OutlineOptions,
    queue_positions: dict[int, int],
) -> dict[str, Any]:
    """Build Mustache context dict for one outline line."""
    return {
        "id": item.id,
        "name": item.name,
        "qualified_name": qualified_name(snapshot, item),
        "status": item.status,
        "depth": depth,
        "indent": opts.indent * depth,
        "done": item.status == COMPLETED,
        "active": item.status == ACTIVE,
        "queue_position": queue_positions.get(item.id, ""),
    }
