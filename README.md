# gorder

Building blocks for a small order-processing system made of three parts:

- **order**: takes orders from customers, prices the items through a stock
  service, stores a pending order and publishes it on the `order.created`
  queue.
- **stock**: looks items up and attaches a price identifier to each
  requested item.
- **payment**: creates a payment link for each new order and reports the
  order back as `waiting_for_payment`; orders announced on `order.paid` are
  stored once they are confirmed as paid.

Each part is a set of command and query handlers, each wrapped in a logging
decorator and a metrics decorator.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `gorder.broker` | `connect`, `create_dlx`, `handle_retry`, `Delivery`, `RabbitMQHeaderCarrier`, the event names `EVENT_ORDER_CREATED` and `EVENT_ORDER_PAID` |
| `gorder.decorator` | `LoggingDecorator`, `MetricsDecorator`, `apply_command_decorators`, `apply_query_decorators`, `generate_action_name`, `MetricsClient`, `TodoMetrics` |
| `gorder.entity` | `Item`, `ItemWithQuantity`, `ProtoOrder`, `ClientItem`, `ClientItemWithQuantity`, `ClientOrder`, `PaidOrder` |
| `gorder.order_domain` | `Order`, `new_order`, `new_pending_order`, `Repository`, `NotFoundError`, `OrderNotPaidError` |
| `gorder.stock_domain` | `MemoryStockRepository`, `NotFoundError` |
| `gorder.convertor` | `OrderConvertor`, `ItemConvertor`, `ItemWithQuantityConvertor` and the shared instances `order_convertor()`, `item_convertor()`, `item_with_quantity_convertor()` |
| `gorder.order_repository` | `MemoryOrderRepository` |
| `gorder.order_app` | `CreateOrderHandler`, `UpdateOrderHandler`, `GetCustomerOrderHandler`, their commands and queries, `pack_items`, `StockService`, `Application` and the `new_*_handler` builders |
| `gorder.stock_app` | `CheckIfItemsInStockHandler`, `GetItemsHandler`, `StockServer`, `Application`, `new_application` |
| `gorder.payment_app` | `CreatePaymentHandler`, `CreatePayment`, `Processor`, `InmemProcessor`, `OrderService`, `Application`, `new_create_payment_handler` |
| `gorder.order_http` | `OrderHTTPHandler` and the response envelope `make_response` |
| `gorder.discovery` | `ConsulRegistry`, `generate_instance_id`, `get_service_addr`, `wait_for` |
| `gorder.consumer` | `OrderPaidConsumer`, `PaymentConsumer` |

## Examples

Pricing items with the stock application:

```python
from gorder.entity import ItemWithQuantity
from gorder.stock_app import StockServer, new_application

server = StockServer(new_application())
items = server.check_if_items_in_stock([ItemWithQuantity(id="1", quantity=2)])
# [Item(id="1", name="", quantity=2, price_id="price_1RE3xECQIkU5HEs5mCwUNKQ5")]
```

Items other than `"1"` and `"2"` get the price identifier of `"1"`.
`StockServer.get_items` looks IDs up in `MemoryStockRepository`, which is
seeded with `item_id`, `item1`, `item2` and `item3`, and raises
`stock_domain.NotFoundError` naming the missing IDs.

Reading an order through the HTTP handler:

```python
from gorder.order_app import (
    Application,
    new_get_customer_order_handler,
    new_update_order_handler,
)
from gorder.order_http import OrderHTTPHandler
from gorder.order_repository import MemoryOrderRepository

repo = MemoryOrderRepository()
app = Application(
    create_order=None,
    update_order=new_update_order_handler(repo, None, None),
    get_customer_order=new_get_customer_order_handler(repo, None, None),
)
status, body = OrderHTTPHandler(app).get_customer_order("fake-customer-id", "fake-id")
# status == 200, body["errno"] == 0, body["data"]["order"]["id"] == "fake-id"
```

`MemoryOrderRepository` starts with one order, `fake-id` of customer
`fake-customer-id`. `create` stores a copy under an ID made from the current
Unix time in seconds.

## How an order moves

1. `CreateOrderHandler.handle` rejects an empty item list, merges repeated
   items with `pack_items`, prices them through the `StockService`, stores a
   pending order and publishes it as JSON on the `order.created` queue of the
   publisher it was given (a pika channel).
2. `PaymentConsumer` reads that queue and runs `CreatePaymentHandler`, which
   asks a `Processor` for a payment link and sends the order, now
   `waiting_for_payment` with that link, to its `OrderService`.
3. `OrderPaidConsumer` reads the `order.paid` exchange and runs
   `UpdateOrderHandler` with an update that calls `Order.is_paid`, so only
   orders whose status is `paid` are stored.

When a handler fails, the consumer calls `broker.handle_retry`. It counts
attempts in the `x-retry-count` header, waits as many seconds as the attempt
number and republishes the message to where it came from; once the count
reaches the limit given to the consumer, the message goes to the `dlq` queue
instead. `broker.connect` declares the `order.created` (direct) and
`order.paid` (fanout) exchanges and, through `create_dlx`, the `dlx` exchange
bound to `share_queue` and the `dlq` queue:

```python
from gorder.broker import connect

password = "password"
channel, close = connect("user", password, "localhost", "5672")
```

## Decorators and metrics

`apply_command_decorators` and `apply_query_decorators` wrap a handler in a
`LoggingDecorator` around a `MetricsDecorator`. The metrics decorator adds to
the counters `querys.<Name>.duration` (whole seconds) and either
`querys.<Name>.success` or `querys.<Name>.failure`, where `<Name>` is the
class name of the command or query. `TodoMetrics` keeps these counters in its
`counters` attribute and sends them nowhere. When no logger or metrics client
is given, the `gorder` logger and a fresh `TodoMetrics` are used.

## HTTP responses

`OrderHTTPHandler` always answers with status 200 and the envelope built by
`make_response`:

```json
{"errno": 0, "message": "success", "data": {}, "trace_id": "..."}
```

On failure `errno` is `2`, `message` holds the error text and `data` is
`null`. A created order answers with its `customer_id`, `order_id` and a
`redirect_url` on `http://localhost:8282/success`. The trace ID comes from a
callable given to the handler, and is 32 zeros otherwise.

## Service discovery

`ConsulRegistry` talks to a Consul agent's HTTP API: `register` adds an
instance with a 5-second TTL check, `health_check` marks it passing,
`deregister` removes it and `discover` lists the `host:port` of healthy
instances. `get_service_addr` picks one of them at random and raises
`LookupError` when there is none. `wait_for` polls a TCP address every 0.2
seconds until it accepts a connection or the timeout runs out.

## What this package does not do

- It starts no servers and has no command: `OrderHTTPHandler` and
  `StockServer` are plain objects to be mounted in whatever HTTP or RPC
  server you choose.
- Orders and stock are kept in memory only; there is no database-backed
  repository.
- The only payment processor is `InmemProcessor`, which returns the fixed
  link `inmem_payment_link`; there is no card-payment provider and no
  payment webhook.
- There is no configuration loading and no tracing setup; trace IDs and
  message headers are passed in by the caller.