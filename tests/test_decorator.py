import logging
from dataclasses import dataclass

import pytest

from gorder.decorator import (
    LoggingDecorator,
    MetricsDecorator,
    TodoMetrics,
    apply_command_decorators,
    apply_query_decorators,
    generate_action_name,
)


@dataclass
class DoThing:
    value: int


class _Doubler:
    def handle(self, cmd):
        return cmd.value * 2


class _Failing:
    def handle(self, cmd):
        raise ValueError("boom")


class _RecordingMetrics:
    def __init__(self):
        self.calls = []

    def inc(self, key, value):
        self.calls.append((key, value))


def test_generate_action_name_uses_type_name():
    assert generate_action_name(DoThing(1)) == "DoThing"


def test_metrics_decorator_counts_success():
    metrics = _RecordingMetrics()
    decorated = MetricsDecorator(base=_Doubler(), client=metrics)
    assert decorated.handle(DoThing(4)) == 8
    assert metrics.calls == [("querys.DoThing.duration", 0), ("querys.DoThing.success", 1)]


def test_metrics_decorator_counts_failure_and_reraises():
    metrics = _RecordingMetrics()
    decorated = MetricsDecorator(base=_Failing(), client=metrics)
    with pytest.raises(ValueError, match="boom"):
        decorated.handle(DoThing(1))
    assert [key for key, _ in metrics.calls] == ["querys.DoThing.duration", "querys.DoThing.failure"]


def test_logging_decorator_logs_success(caplog):
    logger = logging.getLogger("tests.decorator")
    caplog.set_level(logging.DEBUG, logger="tests.decorator")
    decorated = LoggingDecorator(logger=logger, base=_Doubler())
    assert decorated.handle(DoThing(3)) == 6
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Executing query", "Query executed successfully"]
    assert all(r.query == "DoThing" for r in caplog.records)


def test_logging_decorator_logs_failure(caplog):
    logger = logging.getLogger("tests.decorator.fail")
    caplog.set_level(logging.DEBUG, logger="tests.decorator.fail")
    decorated = LoggingDecorator(logger=logger, base=_Failing())
    with pytest.raises(ValueError):
        decorated.handle(DoThing(3))
    assert caplog.records[-1].levelno == logging.ERROR
    assert caplog.records[-1].getMessage().startswith("Failed to execute query")


def test_apply_command_decorators_chain_passes_result():
    metrics = _RecordingMetrics()
    decorated = apply_command_decorators(_Doubler(), logging.getLogger("tests"), metrics)
    assert isinstance(decorated.base, MetricsDecorator)
    assert decorated.handle(DoThing(5)) == 10
    assert metrics.calls[-1] == ("querys.DoThing.success", 1)


def test_apply_query_decorators_with_todo_metrics():
    decorated = apply_query_decorators(_Doubler(), None, TodoMetrics())
    assert decorated.handle(DoThing(7)) == 14