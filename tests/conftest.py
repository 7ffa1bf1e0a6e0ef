"""Pytest configuration for all tests."""

from datetime import date

import pytest
from prometheus_client import CollectorRegistry


@pytest.fixture
def registry():
    """Isolated Prometheus registry so metric names never collide across tests."""
    return CollectorRegistry()


@pytest.fixture
def fixed_today():
    return date(2025, 3, 15)
