"""Order service commands, queries and the application that bundles them."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

import pika

from gorder.broker import CONTENT_TYPE, EVENT_ORDER_CREATED, PERSISTENT_DELIVERY
from gorder.convertor import item_convertor, item_with_quantity_convertor
from gorder.decorator import apply_command_decorators, apply_query_decorators
from gorder.entity import Item, ItemWithQuantity
from gorder.order_domain import Order, Repository, new_pending_order

logger = logging.getLogger(__name__)


class StockService(ABC):
    """The stock service as the order service sees it."""

    @abstractmethod
    def check_if_items_in_stock(self, items: Sequence[ItemWithQuantity]) -> Sequence[Item]:
        """Return the requested items with their prices, raising if they are not in stock."""

    @abstractmethod
    def get_items(self, item_ids: Sequence[str]) -> list[Item]:
        """Return the items with the given IDs."""


@dataclass
class CreateOrder:
    customer_id: str
    items: list[ItemWithQuantity] = field(default_factory=list)


@dataclass
class CreateOrderResult:
    order_id: str


@dataclass
class CreateOrderResponse:
    customer_id: str
    order_id: str
    redirect_url: str

    def to_dict(self) -> dict[str, str]:
        return {
            "customer_id": self.customer_id,
            "order_id": self.order_id,
            "redirect_url": self.redirect_url,
        }


def pack_items(items: Sequence[ItemWithQuantity]) -> list[ItemWithQuantity]:
    """Merge requests for the same item, summing their quantities."""
    merged: dict[str, int] = {}
    for item in items:
        merged[item.id] = merged.get(item.id, 0) + item.quantity
    return [ItemWithQuantity(id=item_id, quantity=quantity) for item_id, quantity in merged.items()]


@dataclass
class CreateOrderHandler:
    """Validates the items, stores a pending order and announces it on the broker."""

    order_repo: Repository
    stock_service: StockService
    publisher: Any

    def handle(self, cmd: CreateOrder) -> CreateOrderResult:
        declared = self.publisher.queue_declare(queue=EVENT_ORDER_CREATED, durable=True)
        queue_name = declared.method.queue

        valid_items = self._validate(cmd.items)
        pending = new_pending_order(cmd.customer_id, valid_items)
        created = self.order_repo.create(pending)

        body = json.dumps(created.to_dict()).encode()
        self.publisher.basic_publish(
            exchange="",
            routing_key=queue_name,
            body=body,
            properties=pika.BasicProperties(
                headers={},
                content_type=CONTENT_TYPE,
                delivery_mode=PERSISTENT_DELIVERY,
            ),
        )
        return CreateOrderResult(order_id=created.id)

    def _validate(self, items: Sequence[ItemWithQuantity]) -> list[Item]:
        if not items:
            raise ValueError("no items, must have at least one item")
        packed = pack_items(items)
        in_stock = self.stock_service.check_if_items_in_stock(
            item_with_quantity_convertor().entities_to_protos(packed)
        )
        return item_convertor().protos_to_entities(in_stock)


@dataclass
class UpdateOrder:
    order: Order
    update_fn: Callable[[Order], Order] | None = None


@dataclass
class UpdateOrderHandler:
    """Applies an update function to a stored order."""

    order_repo: Repository

    def handle(self, cmd: UpdateOrder) -> None:
        update_fn = cmd.update_fn
        if update_fn is None:
            logger.warning("updateOrderHandler got nil UpdateFn, order=%r", cmd.order)

            def update_fn(order: Order) -> Order:
                return order

        self.order_repo.update(cmd.order, update_fn)
        return None


@dataclass
class GetCustomerOrder:
    customer_id: str
    order_id: str


@dataclass
class GetCustomerOrderHandler:
    """Looks up one order of a customer."""

    order_repo: Repository

    def handle(self, query: GetCustomerOrder) -> Order:
        return self.order_repo.get(query.order_id, query.customer_id)


@dataclass
class Application:
    """The order service's decorated command and query handlers."""

    create_order: Any
    update_order: Any
    get_customer_order: Any


def new_create_order_handler(order_repo, stock_service, publisher, logger, metrics_client):
    """Build the create-order handler wrapped with logging and metrics."""
    if order_repo is None:
        raise ValueError("orderRepo is nil")
    if stock_service is None:
        raise ValueError("stockGRPC is nil")
    if publisher is None:
        raise ValueError("channel is nil")
    return apply_command_decorators(
        CreateOrderHandler(order_repo=order_repo, stock_service=stock_service, publisher=publisher),
        logger,
        metrics_client,
    )


def new_update_order_handler(order_repo, logger, metrics_client):
    """Build the update-order handler wrapped with logging and metrics."""
    if order_repo is None:
        raise ValueError("nil orderRepo")
    return apply_command_decorators(UpdateOrderHandler(order_repo=order_repo), logger, metrics_client)


def new_get_customer_order_handler(order_repo, logger, metrics_client):
    """Build the get-customer-order handler wrapped with logging and metrics."""
    if order_repo is None:
        raise ValueError("orderRepo is nil")
    return apply_query_decorators(GetCustomerOrderHandler(order_repo=order_repo), logger, metrics_client)