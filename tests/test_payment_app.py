import logging

import pytest

from gorder.entity import Item, ProtoOrder
from gorder.payment_app import (
    Application,
    CreatePayment,
    InmemProcessor,
    OrderService,
    Processor,
    new_create_payment_handler,
)


class RecordingOrderService(OrderService):
    def __init__(self, error=None):
        self.updated = []
        self.error = error

    def update_order(self, order):
        self.updated.append(order)
        if self.error is not None:
            raise self.error


class FailingProcessor(Processor):
    def create_payment_link(self, order):
        raise RuntimeError("processor down")


class RecordingMetrics:
    def __init__(self):
        self.calls = []

    def inc(self, key, value):
        self.calls.append((key, value))


def sample_order():
    return ProtoOrder(
        id="o1",
        customer_id="c1",
        status="pending",
        items=[Item(id="i1", name="n", quantity=2, price_id="p1")],
    )


def test_inmem_processor_link():
    assert InmemProcessor().create_payment_link(sample_order()) == "inmem_payment_link"


def test_create_payment_updates_order():
    service = RecordingOrderService()
    handler = new_create_payment_handler(InmemProcessor(), service, logging.getLogger("t"), None)
    order = sample_order()
    link = handler.handle(CreatePayment(order=order))
    assert link == "inmem_payment_link"
    assert len(service.updated) == 1
    updated = service.updated[0]
    assert updated.status == "waiting_for_payment"
    assert updated.payment_link == link
    assert (updated.id, updated.customer_id) == (order.id, order.customer_id)
    assert updated.items == order.items


def test_processor_failure_skips_update():
    service = RecordingOrderService()
    handler = new_create_payment_handler(FailingProcessor(), service, logging.getLogger("t"), None)
    with pytest.raises(RuntimeError, match="processor down"):
        handler.handle(CreatePayment(order=sample_order()))
    assert service.updated == []


def test_order_service_failure_propagates():
    service = RecordingOrderService(error=ConnectionError("order service down"))
    handler = new_create_payment_handler(InmemProcessor(), service, logging.getLogger("t"), None)
    with pytest.raises(ConnectionError):
        handler.handle(CreatePayment(order=sample_order()))
    assert len(service.updated) == 1


def test_metrics_counted_per_outcome():
    metrics = RecordingMetrics()
    app = Application(
        create_payment=new_create_payment_handler(
            InmemProcessor(), RecordingOrderService(), logging.getLogger("t"), metrics
        )
    )
    app.create_payment.handle(CreatePayment(order=sample_order()))
    assert ("querys.CreatePayment.success", 1) in metrics.calls
    assert all(not key.endswith(".failure") for key, _ in metrics.calls)