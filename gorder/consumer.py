"""Broker consumers: orders learning they are paid, payments for new orders."""

from __future__ import annotations

import json
import logging
from typing import Any

from gorder.broker import EVENT_ORDER_CREATED, EVENT_ORDER_PAID, Delivery, handle_retry
from gorder.entity import ProtoOrder
from gorder.order_app import UpdateOrder
from gorder.order_domain import Order
from gorder.payment_app import CreatePayment

logger = logging.getLogger(__name__)


def _delivery_from(method: Any, properties: Any, body: bytes) -> Delivery:
    return Delivery(
        body=body,
        headers=getattr(properties, "headers", None),
        exchange=getattr(method, "exchange", "") or "",
        routing_key=getattr(method, "routing_key", "") or "",
        message_id=getattr(properties, "message_id", "") or "",
        delivery_tag=getattr(method, "delivery_tag", 0),
    )


def _ack(channel: Any, delivery: Delivery) -> None:
    channel.basic_ack(delivery_tag=delivery.delivery_tag)


def _nack(channel: Any, delivery: Delivery) -> None:
    channel.basic_nack(delivery_tag=delivery.delivery_tag, multiple=False, requeue=False)


def _retry(channel: Any, delivery: Delivery, max_retry_count: int) -> None:
    try:
        handle_retry(channel, delivery, max_retry_count)
    except Exception as exc:
        logger.warning(
            "retry_error, error handle retry, messageID = %s, err = %s", delivery.message_id, exc
        )


def _require_paid(order: Order) -> Order:
    order.is_paid()
    return order


class OrderPaidConsumer:
    """Marks orders as paid when the payment service announces it."""

    def __init__(self, app: Any, max_retry_count: int):
        self.app = app
        self.max_retry_count = max_retry_count

    def listen(self, channel) -> None:
        """Bind a queue to the paid-order exchange and consume it until stopped."""
        declared = channel.queue_declare(queue=EVENT_ORDER_PAID, durable=True, auto_delete=True)
        queue_name = declared.method.queue
        channel.queue_bind(queue=queue_name, exchange=EVENT_ORDER_PAID, routing_key="")

        def on_message(ch, method, properties, body):
            self.handle_message(ch, _delivery_from(method, properties, body))

        channel.basic_consume(queue=queue_name, on_message_callback=on_message, auto_ack=False)
        channel.start_consuming()

    def handle_message(self, channel, delivery) -> None:
        """Apply one paid-order message, retrying it when the update fails."""
        try:
            order = Order.from_dict(json.loads(delivery.body))
        except (ValueError, TypeError, AttributeError) as exc:
            logger.info("error unmarshal msg.body into domain.order, err = %s", exc)
            _ack(channel, delivery)
            return

        try:
            self.app.update_order.handle(UpdateOrder(order=order, update_fn=_require_paid))
        except Exception as exc:
            logger.info("error updating order, orderID = %s, err = %s", order.id, exc)
            _retry(channel, delivery, self.max_retry_count)
            _nack(channel, delivery)
            return

        _ack(channel, delivery)
        logger.info("order consume paid event success!")


class PaymentConsumer:
    """Creates a payment for every newly created order."""

    def __init__(self, app: Any, max_retry_count: int):
        self.app = app
        self.max_retry_count = max_retry_count

    def listen(self, channel) -> None:
        """Consume the created-order queue until stopped."""
        declared = channel.queue_declare(queue=EVENT_ORDER_CREATED, durable=True)
        queue_name = declared.method.queue

        def on_message(ch, method, properties, body):
            self.handle_message(ch, _delivery_from(method, properties, body))

        channel.basic_consume(queue=queue_name, on_message_callback=on_message, auto_ack=False)
        channel.start_consuming()

    def handle_message(self, channel, delivery) -> None:
        """Create a payment for one order message, retrying it when that fails."""
        logger.info("Payment receives a message: %r", delivery.body)
        try:
            order = ProtoOrder.from_dict(json.loads(delivery.body))
        except (ValueError, TypeError, AttributeError) as exc:
            logger.info("Failed to unmarshal msg:%r to order, err:%s", delivery.body, exc)
            _nack(channel, delivery)
            return

        try:
            self.app.create_payment.handle(CreatePayment(order=order))
        except Exception as exc:
            logger.info("Failed to create payment, err:%s", exc)
            _retry(channel, delivery, self.max_retry_count)
            _ack(channel, delivery)
            return

        _ack(channel, delivery)
        logger.info("consume successfully")