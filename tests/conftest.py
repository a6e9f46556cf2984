# tests/conftest.py
"""Shared fixtures for conveyor tests."""

from __future__ import annotations

import os

import pytest
from hypothesis import settings

from conveyor.config import QueueWriterConfig
from tests.fakes import FakeConnection, FakeQueueClient

settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("nightly", max_examples=1000, deadline=None)
settings.register_profile("debug", max_examples=10, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def queue_client() -> FakeQueueClient:
    return FakeQueueClient()


@pytest.fixture
def connection(queue_client: FakeQueueClient) -> FakeConnection:
    return FakeConnection(queue_client)


@pytest.fixture
def config() -> QueueWriterConfig:
    """Small-batch config matching the orders example."""
    return QueueWriterConfig(
        queue_name="orders",
        batch_size=2,
        time_to_live_in_seconds=60,
        initial_visibility_delay_in_seconds=0,
        die_on_error=False,
        max_workers=4,
    )
