import logging

import pytest

from gorder.entity import ItemWithQuantity
from gorder.stock_app import (
    CheckIfItemsInStock,
    GetItems,
    StockServer,
    new_application,
    new_check_if_items_in_stock_handler,
    new_get_items_handler,
)
from gorder.stock_domain import MemoryStockRepository, NotFoundError


class RecordingMetrics:
    def __init__(self):
        self.calls = []

    def inc(self, key, value):
        self.calls.append((key, value))


def make_server():
    return StockServer(new_application())


def test_known_ids_get_their_price():
    handler = new_check_if_items_in_stock_handler(MemoryStockRepository(), logging.getLogger("t"), None)
    items = handler.handle(CheckIfItemsInStock(items=[ItemWithQuantity("1", 3), ItemWithQuantity("2", 5)]))
    assert [item.price_id for item in items] == [
        "price_1RE3xECQIkU5HEs5mCwUNKQ5",
        "price_1RE3wRCQIkU5HEs5mtvBQE7U",
    ]
    assert [(item.id, item.quantity) for item in items] == [("1", 3), ("2", 5)]


def test_unknown_id_falls_back_to_first_price():
    items = make_server().check_if_items_in_stock([ItemWithQuantity("other", 7)])
    assert len(items) == 1
    assert items[0].id == "other"
    assert items[0].quantity == 7
    assert items[0].price_id == "price_1RE3xECQIkU5HEs5mCwUNKQ5"


def test_check_with_no_items_returns_empty():
    assert make_server().check_if_items_in_stock([]) == []


def test_get_items_returns_stub_items():
    items = make_server().get_items(["item1", "item3"])
    assert [item.id for item in items] == ["item1", "item3"]
    assert all(item.price_id == "stub_item_price_id" for item in items)
    assert all(item.name == "stub item" for item in items)


def test_get_items_reports_missing():
    with pytest.raises(NotFoundError) as info:
        make_server().get_items(["item1", "nope"])
    assert info.value.missing == ["nope"]
    assert str(info.value) == "not found in stock:nope"


def test_get_items_handler_records_metrics():
    metrics = RecordingMetrics()
    handler = new_get_items_handler(MemoryStockRepository(), logging.getLogger("t"), metrics)
    handler.handle(GetItems(item_ids=["item2"]))
    keys = [key for key, _ in metrics.calls]
    assert "querys.GetItems.success" in keys
    assert "querys.GetItems.failure" not in keys


def test_get_items_handler_records_failure():
    metrics = RecordingMetrics()
    handler = new_get_items_handler(MemoryStockRepository(), logging.getLogger("t"), metrics)
    with pytest.raises(NotFoundError):
        handler.handle(GetItems(item_ids=["missing"]))
    assert ("querys.GetItems.failure", 1) in metrics.calls


@pytest.mark.parametrize("factory", [new_check_if_items_in_stock_handler, new_get_items_handler])
def test_nil_repo_rejected(factory):
    with pytest.raises(ValueError, match="nil stockRepo"):
        factory(None, logging.getLogger("t"), None)