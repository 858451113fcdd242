"""The order service's HTTP handlers and their response envelope."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping

from gorder.convertor import item_with_quantity_convertor, order_convertor
from gorder.entity import ClientItemWithQuantity, ClientOrder
from gorder.order_app import Application, CreateOrder, CreateOrderResponse, GetCustomerOrder

logger = logging.getLogger(__name__)

HTTP_OK = 200
ERRNO_OK = 0
ERRNO_FAILED = 2
EMPTY_TRACE_ID = "0" * 32
SUCCESS_URL = "http://localhost:8282/success"


def make_response(error, data, trace_id) -> dict[str, Any]:
    """Build the JSON envelope every endpoint answers with."""
    if error is not None:
        return {"errno": ERRNO_FAILED, "message": str(error), "data": None, "trace_id": trace_id}
    return {"errno": ERRNO_OK, "message": "success", "data": data, "trace_id": trace_id}


def _client_order_to_dict(order: ClientOrder) -> dict[str, Any]:
    return {
        "id": order.id,
        "customer_id": order.customer_id,
        "status": order.status,
        "payment_link": order.payment_link,
        "items": [
            {"id": item.id, "name": item.name, "price_id": item.price_id, "quantity": item.quantity}
            for item in order.items
        ],
    }


def _parse_create_request(body) -> tuple[str, list[ClientItemWithQuantity]]:
    if isinstance(body, (bytes, str)):
        body = json.loads(body)
    if not isinstance(body, Mapping):
        raise ValueError("request body must be a JSON object")
    customer_id = body.get("customer_id") or ""
    if not isinstance(customer_id, str):
        raise ValueError("customer_id must be a string")
    raw_items = body.get("items") or []
    if not isinstance(raw_items, list):
        raise ValueError("items must be a list")
    items = []
    for raw in raw_items:
        if not isinstance(raw, Mapping):
            raise ValueError("each item must be a JSON object")
        items.append(ClientItemWithQuantity(id=str(raw.get("id") or ""), quantity=int(raw.get("quantity") or 0)))
    return customer_id, items


class OrderHTTPHandler:
    """Handles the order endpoints, always answering 200 with an errno envelope."""

    def __init__(self, app: Application, trace_id: Callable[[], str] | None = None):
        self.app = app
        self._trace_id = trace_id if trace_id is not None else (lambda: EMPTY_TRACE_ID)

    def post_customer_order(self, customer_id, body) -> tuple[int, dict[str, Any]]:
        """Create an order from a JSON body; the customer comes from the body."""
        try:
            request_customer, items = _parse_create_request(body)
            result = self.app.create_order.handle(
                CreateOrder(
                    customer_id=request_customer,
                    items=item_with_quantity_convertor().clients_to_entities(items),
                )
            )
            response = CreateOrderResponse(
                customer_id=request_customer,
                order_id=result.order_id,
                redirect_url=f"{SUCCESS_URL}?customerID={request_customer}&orderID={result.order_id}",
            )
        except Exception as exc:
            logger.info("create order failed: %s", exc)
            return HTTP_OK, make_response(exc, None, self._trace_id())
        return HTTP_OK, make_response(None, response.to_dict(), self._trace_id())

    def get_customer_order(self, customer_id, order_id) -> tuple[int, dict[str, Any]]:
        """Return one order of a customer."""
        try:
            order = self.app.get_customer_order.handle(
                GetCustomerOrder(customer_id=customer_id, order_id=order_id)
            )
            data = {"order": _client_order_to_dict(order_convertor().entity_to_client(order))}
        except Exception as exc:
            logger.info("get order failed: %s", exc)
            return HTTP_OK, make_response(exc, None, self._trace_id())
        return HTTP_OK, make_response(None, data, self._trace_id())