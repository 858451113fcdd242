"""The order aggregate, its constructors, errors and repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from gorder.entity import Item, _field

PAID_STATUS = "paid"
PENDING_STATUS = "pending"


class OrderNotPaidError(Exception):
    """Raised when an order that must be paid is not."""

    def __init__(self, order_id: str, status: str):
        super().__init__(f"order status not paid, order id = {order_id}, status = {status}")
        self.order_id = order_id
        self.status = status


class NotFoundError(LookupError):
    """Raised when an order cannot be found."""

    def __init__(self, order_id: str):
        super().__init__(f"order '{order_id}' not found")
        self.order_id = order_id

    def __str__(self) -> str:
        return self.args[0]


@dataclass
class Order:
    """An order placed by a customer."""

    id: str = ""
    customer_id: str = ""
    status: str = ""
    payment_link: str = ""
    items: list[Item] | None = None

    def is_paid(self) -> None:
        """Raise OrderNotPaidError unless the order is paid."""
        if self.status != PAID_STATUS:
            raise OrderNotPaidError(self.id, self.status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ID": self.id,
            "CustomerID": self.customer_id,
            "Status": self.status,
            "PaymentLink": self.payment_link,
            "Items": None if self.items is None else [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data) -> Order:
        raw_items = _field(data, "Items", None)
        return cls(
            id=_field(data, "ID", "") or "",
            customer_id=_field(data, "CustomerID", "") or "",
            status=_field(data, "Status", "") or "",
            payment_link=_field(data, "PaymentLink", "") or "",
            items=None if raw_items is None else [Item.from_dict(item) for item in raw_items],
        )


UpdateFn = Callable[[Order], Order]


class Repository(ABC):
    """Storage for orders."""

    @abstractmethod
    def create(self, order: Order) -> Order:
        """Store a new order and return it with its assigned ID."""

    @abstractmethod
    def get(self, order_id: str, customer_id: str) -> Order:
        """Return the customer's order, or raise NotFoundError."""

    @abstractmethod
    def update(self, order: Order, update_fn: UpdateFn) -> None:
        """Replace the stored order with what update_fn returns."""


def new_order(order_id, customer_id, status, payment_link, items) -> Order:
    """Build an order, checking that the required fields are present."""
    if not order_id:
        raise ValueError("empty ID")
    if not customer_id:
        raise ValueError("empty customerID")
    if not status:
        raise ValueError("empty status")
    if items is None:
        raise ValueError("empty items")
    return Order(id=order_id, customer_id=customer_id, status=status, payment_link=payment_link, items=items)


def new_pending_order(customer_id, items) -> Order:
    """Build a pending order for a customer."""
    if not customer_id:
        raise ValueError("empty customerID")
    if items is None:
        raise ValueError("empty items")
    return Order(customer_id=customer_id, status=PENDING_STATUS, items=items)