"""An order repository kept in memory."""

from __future__ import annotations

import logging
import threading
import time

from gorder.order_domain import NotFoundError, Order, Repository, UpdateFn

logger = logging.getLogger(__name__)


class MemoryOrderRepository(Repository):
    """Orders kept in a list in memory, seeded with one fake order."""

    def __init__(self):
        self._lock = threading.RLock()
        self._store: list[Order] = [
            Order(
                id="fake-id",
                customer_id="fake-customer-id",
                status="fake-order-status",
                payment_link="fake-payment-link",
                items=None,
            )
        ]

    def create(self, order: Order) -> Order:
        """Store a copy of the order under an ID taken from the current time."""
        with self._lock:
            new_order = Order(
                id=str(int(time.time())),
                customer_id=order.customer_id,
                status=order.status,
                payment_link=order.payment_link,
                items=order.items,
            )
            self._store.append(new_order)
            logger.info("memory_order_repo_create: %r", new_order)
            return new_order

    def get(self, order_id: str, customer_id: str) -> Order:
        """Return the customer's order, or raise NotFoundError."""
        with self._lock:
            for order in self._store:
                if order.id == order_id and order.customer_id == customer_id:
                    logger.debug("memory_order_repo_get found id=%s customerID=%s", order_id, customer_id)
                    return order
        raise NotFoundError(order_id)

    def update(self, order: Order, update_fn: UpdateFn) -> None:
        """Replace every stored order matching the given one with update_fn's result."""
        with self._lock:
            found = False
            for index, stored in enumerate(self._store):
                if stored.id == order.id and stored.customer_id == order.customer_id:
                    found = True
                    self._store[index] = update_fn(order)
            if not found:
                raise NotFoundError(order.id)