from unittest import mock

import pytest

from gorder import broker
from gorder.broker import Delivery, RabbitMQHeaderCarrier, create_dlx, handle_retry


class _RecordingChannel:
    def __init__(self):
        self.published = []

    def basic_publish(self, **kwargs):
        self.published.append(kwargs)


def test_carrier_missing_key_is_empty_string():
    carrier = RabbitMQHeaderCarrier()
    assert carrier.get("traceparent") == ""


def test_carrier_set_and_get_round_trip():
    carrier = RabbitMQHeaderCarrier()
    carrier.set("traceparent", "abc")
    carrier.set("baggage", "k=v")
    assert carrier.get("traceparent") == "abc"
    assert sorted(carrier.keys()) == ["baggage", "traceparent"]


def test_carrier_non_string_value_raises():
    carrier = RabbitMQHeaderCarrier({"x-retry-count": 3})
    with pytest.raises(TypeError):
        carrier.get("x-retry-count")


def test_handle_retry_republishes_below_limit():
    channel = _RecordingChannel()
    delivery = Delivery(body=b"{}", headers=None, exchange="ex", routing_key="rk", message_id="m1")
    with mock.patch("gorder.broker.time.sleep") as sleep:
        handle_retry(channel, delivery, max_retry_count=5)
    sleep.assert_called_once_with(1)
    assert len(channel.published) == 1
    published = channel.published[0]
    assert published["exchange"] == "ex"
    assert published["routing_key"] == "rk"
    assert published["body"] == b"{}"
    assert published["properties"].headers[broker.RETRY_HEADER_KEY] == 1
    assert published["properties"].content_type == "application/json"
    assert published["properties"].delivery_mode == broker.PERSISTENT_DELIVERY


def test_handle_retry_sends_to_dlq_when_limit_reached():
    channel = _RecordingChannel()
    delivery = Delivery(
        body=b"payload",
        headers={broker.RETRY_HEADER_KEY: 2},
        exchange="ex",
        routing_key="rk",
    )
    with mock.patch("gorder.broker.time.sleep") as sleep:
        handle_retry(channel, delivery, max_retry_count=3)
    sleep.assert_not_called()
    published = channel.published[0]
    assert published["exchange"] == ""
    assert published["routing_key"] == "dlq"
    assert delivery.headers[broker.RETRY_HEADER_KEY] == 3


def test_handle_retry_treats_non_integer_count_as_zero():
    channel = _RecordingChannel()
    delivery = Delivery(headers={broker.RETRY_HEADER_KEY: "7"}, exchange="ex", routing_key="rk")
    with mock.patch("gorder.broker.time.sleep"):
        handle_retry(channel, delivery, max_retry_count=10)
    assert delivery.headers[broker.RETRY_HEADER_KEY] == 1


def test_create_dlx_binds_share_queue_to_dlx():
    channel = mock.MagicMock()
    channel.queue_declare.return_value.method.queue = broker.SHARE_QUEUE
    create_dlx(channel)
    channel.exchange_declare.assert_called_once_with(exchange="dlx", exchange_type="fanout", durable=True)
    channel.queue_bind.assert_called_once_with(queue="share_queue", exchange="dlx", routing_key="")
    declared = [c.kwargs["queue"] for c in channel.queue_declare.call_args_list]
    assert declared == ["share_queue", "dlq"]


def test_connect_declares_order_exchanges():
    password = "password"
    with mock.patch("gorder.broker.pika.BlockingConnection") as connection_cls:
        connection = connection_cls.return_value
        channel, close = broker.connect("user", password, "localhost", "5672")
    assert channel is connection.channel.return_value
    assert close == connection.close
    parameters = connection_cls.call_args.args[0]
    assert parameters.credentials.username == "user"
    assert parameters.host == "localhost"
    exchanges = [
        (c.kwargs["exchange"], c.kwargs["exchange_type"])
        for c in channel.exchange_declare.call_args_list
    ]
    assert exchanges[:2] == [("order.created", "direct"), ("order.paid", "fanout")]