"""Conversions between domain, wire and HTTP API representations of orders."""

from __future__ import annotations

from functools import cache
from typing import Iterable

from gorder.entity import (
    ClientItem,
    ClientItemWithQuantity,
    ClientOrder,
    Item,
    ItemWithQuantity,
    ProtoOrder,
)
from gorder.order_domain import Order


def _check(order) -> None:
    if order is None:
        raise ValueError("cannot convert nil order")


class ItemConvertor:
    """Converts items between the domain, wire and HTTP API forms."""

    def protos_to_entities(self, items: Iterable[Item] | None) -> list[Item]:
        return [self.proto_to_entity(item) for item in items or ()]

    def entities_to_protos(self, items: Iterable[Item] | None) -> list[Item]:
        return [self.entity_to_proto(item) for item in items or ()]

    def clients_to_entities(self, items: Iterable[ClientItem] | None) -> list[Item]:
        return [self.client_to_entity(item) for item in items or ()]

    def entities_to_clients(self, items: Iterable[Item] | None) -> list[ClientItem]:
        return [self.entity_to_client(item) for item in items or ()]

    def proto_to_entity(self, item: Item) -> Item:
        return Item(id=item.id, name=item.name, quantity=item.quantity, price_id=item.price_id)

    def entity_to_proto(self, item: Item) -> Item:
        return Item(id=item.id, name=item.name, quantity=item.quantity, price_id=item.price_id)

    def client_to_entity(self, item: ClientItem) -> Item:
        return Item(id=item.id, name=item.name, quantity=item.quantity, price_id=item.price_id)

    def entity_to_client(self, item: Item) -> ClientItem:
        return ClientItem(id=item.id, name=item.name, price_id=item.price_id, quantity=item.quantity)


class ItemWithQuantityConvertor:
    """Converts item requests between the domain, wire and HTTP API forms."""

    def entities_to_protos(self, items: Iterable[ItemWithQuantity] | None) -> list[ItemWithQuantity]:
        return [self.entity_to_proto(item) for item in items or ()]

    def protos_to_entities(self, items: Iterable[ItemWithQuantity] | None) -> list[ItemWithQuantity]:
        return [self.proto_to_entity(item) for item in items or ()]

    def entity_to_proto(self, item: ItemWithQuantity) -> ItemWithQuantity:
        return ItemWithQuantity(id=item.id, quantity=item.quantity)

    def proto_to_entity(self, item: ItemWithQuantity) -> ItemWithQuantity:
        return ItemWithQuantity(id=item.id, quantity=item.quantity)

    def clients_to_entities(
        self, items: Iterable[ClientItemWithQuantity] | None
    ) -> list[ItemWithQuantity]:
        return [self.client_to_entity(item) for item in items or ()]

    def client_to_entity(self, item: ClientItemWithQuantity) -> ItemWithQuantity:
        return ItemWithQuantity(id=item.id, quantity=item.quantity)


class OrderConvertor:
    """Converts orders between the domain, wire and HTTP API forms."""

    def entity_to_proto(self, order: Order) -> ProtoOrder:
        _check(order)
        return ProtoOrder(
            id=order.id,
            customer_id=order.customer_id,
            status=order.status,
            items=item_convertor().entities_to_protos(order.items),
            payment_link=order.payment_link,
        )

    def proto_to_entity(self, order: ProtoOrder) -> Order:
        _check(order)
        return Order(
            id=order.id,
            customer_id=order.customer_id,
            status=order.status,
            payment_link=order.payment_link,
            items=item_convertor().protos_to_entities(order.items),
        )

    def client_to_entity(self, order: ClientOrder) -> Order:
        _check(order)
        return Order(
            id=order.id,
            customer_id=order.customer_id,
            status=order.status,
            payment_link=order.payment_link,
            items=item_convertor().clients_to_entities(order.items),
        )

    def entity_to_client(self, order: Order) -> ClientOrder:
        _check(order)
        return ClientOrder(
            id=order.id,
            customer_id=order.customer_id,
            status=order.status,
            payment_link=order.payment_link,
            items=item_convertor().entities_to_clients(order.items),
        )


@cache
def order_convertor() -> OrderConvertor:
    """Return the shared order convertor."""
    return OrderConvertor()


@cache
def item_convertor() -> ItemConvertor:
    """Return the shared item convertor."""
    return ItemConvertor()


@cache
def item_with_quantity_convertor() -> ItemWithQuantityConvertor:
    """Return the shared item-with-quantity convertor."""
    return ItemWithQuantityConvertor()