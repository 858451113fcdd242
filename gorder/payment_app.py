"""Payment service command, its ports and the in-memory payment processor."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from gorder.decorator import apply_command_decorators
from gorder.entity import ProtoOrder

logger = logging.getLogger(__name__)

WAITING_FOR_PAYMENT = "waiting_for_payment"
INMEM_PAYMENT_LINK = "inmem_payment_link"


class OrderService(ABC):
    """The order service as the payment service sees it."""

    @abstractmethod
    def update_order(self, order: ProtoOrder) -> None:
        """Store the new state of an order."""


class Processor(ABC):
    """Something that creates payment links for orders."""

    @abstractmethod
    def create_payment_link(self, order: ProtoOrder) -> str:
        """Return a link where the order can be paid."""


class InmemProcessor(Processor):
    """A processor that hands out a fixed link."""

    def create_payment_link(self, order: ProtoOrder) -> str:
        if order is None:
            raise ValueError("cannot create payment link for nil order")
        logger.debug("inmem payment link for order %s", order.id)
        return INMEM_PAYMENT_LINK


@dataclass
class CreatePayment:
    order: ProtoOrder


@dataclass
class CreatePaymentHandler:
    """Creates a payment link and marks the order as waiting for payment."""

    processor: Processor
    order_service: OrderService

    def handle(self, cmd: CreatePayment) -> str:
        link = self.processor.create_payment_link(cmd.order)
        logger.info("create payment link for order: %s success, payment link: %s", cmd.order.id, link)
        updated = ProtoOrder(
            id=cmd.order.id,
            customer_id=cmd.order.customer_id,
            status=WAITING_FOR_PAYMENT,
            items=cmd.order.items,
            payment_link=link,
        )
        self.order_service.update_order(updated)
        return link


@dataclass
class Application:
    """The payment service's decorated command handlers."""

    create_payment: Any


def new_create_payment_handler(processor, order_service, logger, metrics_client):
    """Build the create-payment handler wrapped with logging and metrics."""
    return apply_command_decorators(
        CreatePaymentHandler(processor=processor, order_service=order_service),
        logger,
        metrics_client,
    )