"""
Kernel test configuration and shared fixtures.

Stores are built with a fixed clock so tests never depend on the real date.
"""

import pytest

from taskledger.kernel.store import DataStore
from taskledger.kernel.types import ItemDraft

TODAY = 19000


@pytest.fixture
def store():
    return DataStore(clock=lambda: TODAY)


@pytest.fixture
def tree_store(store):
    """
    Store with:
      Work (1)
        Reports (2)
          Q3 (3)
        Email (4)
      Home (5)
    History is cleared so the seed is not undoable.
    """

    def seed(s):
        s.add_item(ItemDraft(name="Work"))
        s.add_item(ItemDraft(name="Reports", parent_id=1))
        s.add_item(ItemDraft(name="Q3", parent_id=2))
        s.add_item(ItemDraft(name="Email", parent_id=1))
        s.add_item(ItemDraft(name="Home"))

    store.batch_edit(seed)
    store.clear_undo()
    return store
