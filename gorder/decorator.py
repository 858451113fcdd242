"""Logging and metrics decorators wrapped around command and query handlers."""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Protocol


class MetricsClient(Protocol):
    """Something that counts named measurements."""

    def inc(self, key, value):
        """Add value to the counter named key."""


class _Handler(Protocol):
    def handle(self, cmd: Any) -> Any:
        """Run the command or query and return its result."""


@dataclass
class TodoMetrics:
    """A metrics client that keeps its counters in memory and exports nothing."""

    counters: Counter = field(default_factory=Counter)

    def inc(self, key, value):
        """Add value to the in-memory counter named key."""
        self.counters[key] += value


def generate_action_name(cmd) -> str:
    """Return the type name of a command or query."""
    return type(cmd).__name__


@dataclass
class LoggingDecorator:
    """Logs each call of the wrapped handler and its outcome."""

    logger: logging.Logger
    base: _Handler

    def handle(self, cmd):
        fields = {"query": generate_action_name(cmd), "query_body": repr(cmd)}
        self.logger.debug("Executing query", extra=fields)
        try:
            result = self.base.handle(cmd)
        except Exception as exc:
            self.logger.error("Failed to execute query: %s", exc, extra=fields)
            raise
        self.logger.info("Query executed successfully", extra=fields)
        return result


@dataclass
class MetricsDecorator:
    """Counts duration, successes and failures of the wrapped handler."""

    base: _Handler
    client: MetricsClient

    def handle(self, cmd):
        start = time.monotonic()
        action_name = generate_action_name(cmd)
        succeeded = False
        try:
            result = self.base.handle(cmd)
            succeeded = True
            return result
        finally:
            elapsed = time.monotonic() - start
            self.client.inc(f"querys.{action_name}.duration", int(elapsed))
            outcome = "success" if succeeded else "failure"
            self.client.inc(f"querys.{action_name}.{outcome}", 1)


def _decorate(handler, logger, metrics_client) -> LoggingDecorator:
    return LoggingDecorator(
        logger=logger if logger is not None else logging.getLogger("gorder"),
        base=MetricsDecorator(
            base=handler,
            client=metrics_client if metrics_client is not None else TodoMetrics(),
        ),
    )


def apply_command_decorators(handler, logger, metrics_client) -> LoggingDecorator:
    """Wrap a command handler with logging and metrics."""
    return _decorate(handler, logger, metrics_client)


def apply_query_decorators(handler, logger, metrics_client) -> LoggingDecorator:
    """Wrap a query handler with logging and metrics."""
    return _decorate(handler, logger, metrics_client)