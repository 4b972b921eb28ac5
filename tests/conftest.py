"""Shared pytest fixtures for cmdroute tests."""

import logging

import pytest
import structlog

from cmdroute import RouteTableConfig, build_table, compile_route
from cmdroute.routing.converters import ConverterRegistry


@pytest.fixture
def registry():
    """Create an isolated converter registry with the built-in types.

    Returns:
        ConverterRegistry: Fresh registry, safe to mutate
    """
    return ConverterRegistry()


@pytest.fixture
def build_routes():
    """Build a route table from pattern strings without validation logging.

    Returns:
        Callable taking patterns in declaration order and returning a RouteTable
    """

    def _build(*patterns: str, **config):
        options = {"validate_on_build": False, **config}
        return build_table(
            [compile_route(pattern) for pattern in patterns],
            RouteTableConfig(**options),
        )

    return _build


@pytest.fixture
def mock_table_logger(monkeypatch):
    """Mock the route table logger to capture build diagnostics.

    Returns:
        Mock: Mocked logger
    """
    from unittest.mock import Mock  # noqa: PLC0415

    mock_log = Mock()
    monkeypatch.setattr("cmdroute.routing.table.logger", mock_log)
    return mock_log


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration after each test.

    This prevents tests from interfering with each other's logging setup.
    """
    yield
    structlog.reset_defaults()
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)
