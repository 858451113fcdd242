"""Order, stock and payment handlers with RabbitMQ messaging and Consul discovery."""

__version__ = "0.1.0"