"""Stock service queries, the application that bundles them and its server."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from gorder.decorator import TodoMetrics, apply_query_decorators
from gorder.entity import Item, ItemWithQuantity
from gorder.stock_domain import MemoryStockRepository

_PRICE_IDS = {
    "1": "price_1RE3xECQIkU5HEs5mCwUNKQ5",
    "2": "price_1RE3wRCQIkU5HEs5mtvBQE7U",
}
_DEFAULT_PRICE_KEY = "1"


@dataclass
class CheckIfItemsInStock:
    items: list[ItemWithQuantity] = field(default_factory=list)


@dataclass
class CheckIfItemsInStockHandler:
    """Returns the requested items with the price identifier each one sells at."""

    stock_repo: Any

    def handle(self, query: CheckIfItemsInStock) -> list[Item]:
        return [
            Item(
                id=item.id,
                quantity=item.quantity,
                price_id=_PRICE_IDS.get(item.id, _PRICE_IDS[_DEFAULT_PRICE_KEY]),
            )
            for item in query.items
        ]


@dataclass
class GetItems:
    item_ids: list[str] = field(default_factory=list)


@dataclass
class GetItemsHandler:
    """Looks items up in the stock repository."""

    stock_repo: Any

    def handle(self, query: GetItems) -> list[Item]:
        return self.stock_repo.get_items(query.item_ids)


@dataclass
class Application:
    """The stock service's decorated query handlers."""

    check_if_items_in_stock: Any
    get_items: Any


class StockServer:
    """The stock service's remote interface."""

    def __init__(self, app: Application):
        self.app = app

    def get_items(self, item_ids: Sequence[str]) -> list[Item]:
        """Return the stocked items with the given IDs."""
        return self.app.get_items.handle(GetItems(item_ids=list(item_ids)))

    def check_if_items_in_stock(self, items: Sequence[ItemWithQuantity]) -> list[Item]:
        """Return the requested items with their price identifiers."""
        return self.app.check_if_items_in_stock.handle(CheckIfItemsInStock(items=list(items)))


def new_check_if_items_in_stock_handler(stock_repo, logger, metrics_client):
    """Build the in-stock check handler wrapped with logging and metrics."""
    if stock_repo is None:
        raise ValueError("nil stockRepo")
    return apply_query_decorators(CheckIfItemsInStockHandler(stock_repo=stock_repo), logger, metrics_client)


def new_get_items_handler(stock_repo, logger, metrics_client):
    """Build the get-items handler wrapped with logging and metrics."""
    if stock_repo is None:
        raise ValueError("nil stockRepo")
    return apply_query_decorators(GetItemsHandler(stock_repo=stock_repo), logger, metrics_client)


def new_application() -> Application:
    """Build the stock application over the in-memory repository."""
    stock_repo = MemoryStockRepository()
    logger = logging.getLogger("gorder.stock")
    metrics_client = TodoMetrics()
    return Application(
        check_if_items_in_stock=new_check_if_items_in_stock_handler(stock_repo, logger, metrics_client),
        get_items=new_get_items_handler(stock_repo, logger, metrics_client),
    )