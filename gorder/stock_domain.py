"""Stock errors and the in-memory stock repository."""

from __future__ import annotations

import copy
import threading

from gorder.entity import Item


class NotFoundError(LookupError):
    """Raised when some requested items are not in stock."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"not found in stock:{','.join(self.missing)}")

    def __str__(self) -> str:
        return self.args[0]


_STUB = {
    "item_id": Item(id="foo_item", name="stub item", quantity=1000, price_id="stub_item_price_id"),
    "item1": Item(id="item1", name="stub item", quantity=1000, price_id="stub_item_price_id"),
    "item2": Item(id="item2", name="stub item", quantity=1000, price_id="stub_item_price_id"),
    "item3": Item(id="item3", name="stub item", quantity=1000, price_id="stub_item_price_id"),
}


class MemoryStockRepository:
    """Stock kept in memory, seeded with stub items."""

    def __init__(self, store: dict[str, Item] | None = None):
        self._lock = threading.RLock()
        self._store = copy.deepcopy(_STUB) if store is None else store

    def get_items(self, ids) -> list[Item]:
        """Return the items for the given IDs, or raise NotFoundError for missing ones."""
        with self._lock:
            found = [self._store[item_id] for item_id in ids if item_id in self._store]
            missing = [item_id for item_id in ids if item_id not in self._store]
        if missing:
            raise NotFoundError(missing)
        return found