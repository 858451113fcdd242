"""Message broker wiring: exchanges, the dead-letter queue and retry handling."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import pika

EVENT_ORDER_CREATED = "order.created"
EVENT_ORDER_PAID = "order.paid"

DLX = "dlx"
DLQ = "dlq"
SHARE_QUEUE = "share_queue"
RETRY_HEADER_KEY = "x-retry-count"

CONTENT_TYPE = "application/json"
PERSISTENT_DELIVERY = 2

logger = logging.getLogger(__name__)


class RabbitMQHeaderCarrier(dict):
    """Message headers seen as a string-to-string carrier for trace propagation."""

    def get(self, key):
        """Return the header value, or an empty string when it is absent."""
        if key not in self:
            return ""
        value = self[key]
        if not isinstance(value, str):
            raise TypeError(f"header {key!r} holds a {type(value).__name__}, not a string")
        return value

    def set(self, key, value):
        """Store a header value."""
        self[key] = value

    def keys(self):
        """Return the header names as a list."""
        return list(super().keys())


@dataclass
class Delivery:
    """A message received from the broker."""

    body: bytes = b""
    headers: dict[str, Any] | None = None
    exchange: str = ""
    routing_key: str = ""
    message_id: str = ""
    delivery_tag: int = 0


def connect(user, password, host, port) -> tuple[Any, Callable[[], None]]:
    """Open a channel, declare the order exchanges and the dead-letter setup.

    Returns the channel and a function that closes the connection.
    """
    parameters = pika.URLParameters(f"amqp://{user}:{password}@{host}:{port}/")
    connection = pika.BlockingConnection(parameters)
    channel = connection.channel()
    channel.exchange_declare(exchange=EVENT_ORDER_CREATED, exchange_type="direct", durable=True)
    channel.exchange_declare(exchange=EVENT_ORDER_PAID, exchange_type="fanout", durable=True)
    create_dlx(channel)
    return channel, connection.close


def create_dlx(channel) -> None:
    """Declare the shared queue bound to the dead-letter exchange, and the DLQ."""
    result = channel.queue_declare(queue=SHARE_QUEUE, durable=True)
    channel.exchange_declare(exchange=DLX, exchange_type="fanout", durable=True)
    channel.queue_bind(queue=result.method.queue, exchange=DLX, routing_key="")
    channel.queue_declare(queue=DLQ, durable=True)


def _publish(channel, exchange: str, routing_key: str, delivery: Delivery) -> None:
    channel.basic_publish(
        exchange=exchange,
        routing_key=routing_key,
        body=delivery.body,
        properties=pika.BasicProperties(
            headers=delivery.headers,
            content_type=CONTENT_TYPE,
            delivery_mode=PERSISTENT_DELIVERY,
        ),
    )


def handle_retry(channel, delivery: Delivery, max_retry_count: int) -> None:
    """Republish a failed message, or move it to the DLQ once retries run out.

    The retry count travels in the message headers; each retry waits as many
    seconds as the attempt number before republishing.
    """
    if delivery.headers is None:
        delivery.headers = {}
    current = delivery.headers.get(RETRY_HEADER_KEY)
    retry_count = current if isinstance(current, int) and not isinstance(current, bool) else 0
    retry_count += 1
    delivery.headers[RETRY_HEADER_KEY] = retry_count
    logger.info("max_retry_count: %d", max_retry_count)

    if retry_count >= max_retry_count:
        logger.info("send message %s to dlq", delivery.message_id)
        _publish(channel, "", DLQ, delivery)
        return

    logger.info("retrying message %s, count=%d", delivery.message_id, retry_count)
    time.sleep(retry_count)
    _publish(channel, delivery.exchange, delivery.routing_key, delivery)