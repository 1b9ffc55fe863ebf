"""
taskledger Reducer: Item Tests

Tests for add_item, update_item, remove_item on bare snapshots.

Covers:
  - add: id assignment, root vs child linking, queue membership, errors
  - update: field changes, re-parenting, anchors above/below, queue transitions
  - remove: subtree removal, unlinking, queue and ledger scrubbing
"""

import pytest

from taskledger.kernel import reducer
from taskledger.kernel.types import (
    ACTIVE,
    COMPLETED,
    INACTIVE,
    MAX_ITEM_ID,
    IdCollision,
    IdOverflow,
    InvariantViolation,
    ItemDraft,
    ItemNotFound,
    UpdateItemOptions,
)

# ============================================================================
# Helpers
# ============================================================================


def build(*drafts):
    snap = reducer.empty_snapshot()
    for d in drafts:
        snap, _ = reducer.add_item(snap, d)
    return snap


def edit(snap, item_id, **changes):
    draft = ItemDraft.from_item(snap.items[item_id])
    for key, value in changes.items():
        setattr(draft, key, value)
    return draft


@pytest.fixture
def family():
    """P (1) with children a (2), b (3), c (4); Q (5) at the root with child x (6)."""
    return build(
        ItemDraft(name="P"),
        ItemDraft(name="a", parent_id=1),
        ItemDraft(name="b", parent_id=1),
        ItemDraft(name="c", parent_id=1),
        ItemDraft(name="Q"),
        ItemDraft(name="x", parent_id=5),
    )


# ============================================================================
# add_item
# ============================================================================


class TestAddItem:
    def test_first_id_is_one(self):
        snap, item_id = reducer.add_item(reducer.empty_snapshot(), ItemDraft(name="A"))
        assert item_id == 1
        assert snap.next_id == 2
        assert snap.items[1].name == "A"

    def test_root_item_appended_to_root_list(self):
        snap = build(ItemDraft(name="A"), ItemDraft(name="B"))
        assert snap.root_item_ids == (1, 2)

    def test_child_appended_to_parent(self, family):
        assert family.items[1].children_ids == (2, 3, 4)
        assert family.items[2].parent_id == 1
        assert family.root_item_ids == (1, 5)

    def test_active_item_queued(self):
        snap = build(ItemDraft(name="A"), ItemDraft(name="B", status=INACTIVE), ItemDraft(name="C"))
        assert snap.queue == (1, 3)

    def test_completed_item_not_queued(self):
        snap = build(ItemDraft(name="A", status=COMPLETED))
        assert snap.queue == ()

    def test_missing_parent_raises(self):
        with pytest.raises(ItemNotFound):
            reducer.add_item(reducer.empty_snapshot(), ItemDraft(name="A", parent_id=42))

    def test_overflow_raises(self):
        snap = reducer.empty_snapshot().with_changes(next_id=MAX_ITEM_ID + 1)
        with pytest.raises(IdOverflow):
            reducer.add_item(snap, ItemDraft(name="A"))

    def test_collision_raises(self):
        snap = build(ItemDraft(name="A")).with_changes(next_id=1)
        with pytest.raises(IdCollision):
            reducer.add_item(snap, ItemDraft(name="B"))

    def test_ids_never_reused(self):
        snap = build(ItemDraft(name="A"), ItemDraft(name="B"))
        snap = reducer.remove_item(snap, 2)
        snap, item_id = reducer.add_item(snap, ItemDraft(name="C"))
        assert item_id == 3

    def test_input_snapshot_untouched(self):
        before = reducer.empty_snapshot()
        reducer.add_item(before, ItemDraft(name="A"))
        assert len(before.items) == 0
        assert before.root_item_ids == ()
        assert before.next_id == 1


# ============================================================================
# update_item
# ============================================================================


class TestUpdateItem:
    def test_field_change(self, family):
        snap = reducer.update_item(family, edit(family, 2, name="renamed", cost=3))
        assert snap.items[2].name == "renamed"
        assert snap.items[2].cost == 3
        assert snap.items[1].children_ids == (2, 3, 4)

    def test_keeps_children(self, family):
        snap = reducer.update_item(family, edit(family, 1, name="P2"))
        assert snap.items[1].children_ids == (2, 3, 4)

    def test_missing_item_raises(self, family):
        with pytest.raises(ItemNotFound):
            reducer.update_item(family, ItemDraft(id=99, name="nope"))

    def test_reparent_appends_to_new_parent(self, family):
        snap = reducer.update_item(family, edit(family, 3, parent_id=5))
        assert snap.items[1].children_ids == (2, 4)
        assert snap.items[5].children_ids == (6, 3)
        assert snap.items[3].parent_id == 5

    def test_reparent_to_root(self, family):
        snap = reducer.update_item(family, edit(family, 6, parent_id=None))
        assert snap.items[5].children_ids == ()
        assert snap.root_item_ids == (1, 5, 6)

    def test_root_to_child(self, family):
        snap = reducer.update_item(family, edit(family, 5, parent_id=1))
        assert snap.root_item_ids == (1,)
        assert snap.items[1].children_ids == (2, 3, 4, 5)

    def test_anchor_above(self, family):
        snap = reducer.update_item(family, edit(family, 6, parent_id=1), UpdateItemOptions(anchor=3))
        assert snap.items[1].children_ids == (2, 6, 3, 4)

    def test_anchor_below(self, family):
        snap = reducer.update_item(
            family, edit(family, 6, parent_id=1), UpdateItemOptions(anchor=3, insert="below")
        )
        assert snap.items[1].children_ids == (2, 3, 6, 4)

    def test_anchor_reorders_within_same_parent(self, family):
        snap = reducer.update_item(family, edit(family, 4), UpdateItemOptions(anchor=2))
        assert snap.items[1].children_ids == (4, 2, 3)

    def test_anchor_below_last_sibling(self, family):
        snap = reducer.update_item(family, edit(family, 2), UpdateItemOptions(anchor=4, insert="below"))
        assert snap.items[1].children_ids == (3, 4, 2)

    def test_anchor_not_a_sibling_appends(self, family):
        snap = reducer.update_item(family, edit(family, 2), UpdateItemOptions(anchor=6))
        assert snap.items[1].children_ids == (3, 4, 2)

    def test_anchor_in_root_list(self, family):
        snap = reducer.update_item(family, edit(family, 6, parent_id=None), UpdateItemOptions(anchor=1))
        assert snap.root_item_ids == (6, 1, 5)

    def test_missing_new_parent_raises(self, family):
        with pytest.raises(ItemNotFound):
            reducer.update_item(family, edit(family, 2, parent_id=77))

    def test_cycle_raises_even_without_validation(self, family):
        with pytest.raises(InvariantViolation):
            reducer.update_item(family, edit(family, 5, parent_id=6))

    def test_deactivate_removes_from_queue(self, family):
        snap = reducer.update_item(family, edit(family, 3, status=COMPLETED))
        assert 3 not in snap.queue
        assert snap.queue == (1, 2, 4, 5, 6)

    def test_activate_appends_to_queue_tail(self, family):
        snap = reducer.update_item(family, edit(family, 3, status=INACTIVE))
        snap = reducer.update_item(snap, edit(snap, 3, status=ACTIVE))
        assert snap.queue == (1, 2, 4, 5, 6, 3)

    def test_non_active_transition_leaves_queue(self, family):
        snap = reducer.update_item(family, edit(family, 3, status=INACTIVE))
        after = reducer.update_item(snap, edit(snap, 3, status=COMPLETED))
        assert after.queue == snap.queue

    def test_same_status_keeps_queue_position(self, family):
        snap = reducer.update_item(family, edit(family, 1, name="P2"))
        assert snap.queue == family.queue


# ============================================================================
# remove_item
# ============================================================================


class TestRemoveItem:
    def test_remove_leaf(self, family):
        snap = reducer.remove_item(family, 3)
        assert 3 not in snap.items
        assert snap.items[1].children_ids == (2, 4)
        assert 3 not in snap.queue

    def test_remove_subtree(self, family):
        snap = reducer.remove_item(family, 1)
        assert set(snap.items) == {5, 6}
        assert snap.root_item_ids == (5,)
        assert snap.queue == (5, 6)

    def test_remove_deep_subtree(self):
        snap = build(
            ItemDraft(name="a"),
            ItemDraft(name="b", parent_id=1),
            ItemDraft(name="c", parent_id=2),
            ItemDraft(name="d", parent_id=3),
        )
        snap = reducer.remove_item(snap, 2)
        assert set(snap.items) == {1}
        assert snap.items[1].children_ids == ()
        assert snap.queue == (1,)

    def test_remove_very_deep_chain(self):
        depth = 1200
        snap = build(
            ItemDraft(name="n1"),
            *(ItemDraft(name=f"n{i}", parent_id=i - 1) for i in range(2, depth + 1)),
        )
        snap = reducer.edit_session(snap, 7, "completed", depth, "add", 1)
        snap = reducer.remove_item(snap, 1)
        assert len(snap.items) == 0
        assert snap.root_item_ids == ()
        assert snap.queue == ()
        assert len(snap.timeline) == 0

    def test_subtree_order_children_before_parents(self, family):
        assert reducer._collect_subtree(family.items, 1) == [2, 3, 4, 1]

    def test_remove_scrubs_sessions_everywhere(self, family):
        snap = family
        for day in (3, 40, 400):
            snap = reducer.edit_session(snap, day, "completed", 2, "add", 2)
            snap = reducer.edit_session(snap, day, "projected", 1, "add", 1)
            snap = reducer.edit_session(snap, day, "scheduled", 6, "add", 1)
        snap = reducer.remove_item(snap, 1)
        for day in (3, 40, 400):
            day_data = snap.timeline.try_get(day)
            assert day_data is not None
            assert day_data.item_ids() == {6}

    def test_remove_prunes_days_left_empty(self, family):
        snap = reducer.edit_session(family, 5, "completed", 2, "add", 1)
        snap = reducer.edit_session(snap, 40, "completed", 3, "add", 1)
        snap = reducer.remove_item(snap, 1)
        assert len(snap.timeline) == 0
        assert snap.timeline.partition_count() == 0

    def test_remove_missing_raises(self, family):
        with pytest.raises(ItemNotFound):
            reducer.remove_item(family, 99)

    def test_next_id_unchanged(self, family):
        assert reducer.remove_item(family, 1).next_id == family.next_id
