# tests/test_config.py
"""Tests for QueueWriterConfig validation."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from conveyor.config import DEFAULT_BATCH_SIZE, DEFAULT_SEND_TIMEOUT_SECONDS, QueueWriterConfig
from conveyor.errors import WriterConfigError


class TestQueueWriterConfigDefaults:
    def test_defaults(self) -> None:
        cfg = QueueWriterConfig(queue_name="orders")
        assert cfg.batch_size == DEFAULT_BATCH_SIZE == 1000
        assert cfg.send_timeout_seconds == DEFAULT_SEND_TIMEOUT_SECONDS == 30
        assert cfg.die_on_error is False
        assert cfg.initial_visibility_delay_in_seconds == 0
        assert cfg.time_to_live == timedelta(days=7)

    def test_camel_case_option_names(self) -> None:
        cfg = QueueWriterConfig.from_dict(
            {
                "queueName": "orders",
                "timeToLiveInSeconds": 60,
                "initialVisibilityDelayInSeconds": 10,
                "dieOnError": True,
                "batchSize": 2,
            }
        )
        assert cfg.queue_name == "orders"
        assert cfg.time_to_live == timedelta(seconds=60)
        assert cfg.visibility_delay == timedelta(seconds=10)
        assert cfg.die_on_error is True
        assert cfg.batch_size == 2

    def test_snake_case_option_names(self) -> None:
        cfg = QueueWriterConfig.from_dict({"queue_name": "orders", "die_on_error": True})
        assert cfg.die_on_error is True

    def test_never_expiring_ttl(self) -> None:
        cfg = QueueWriterConfig(queue_name="orders", time_to_live_in_seconds=-1, initial_visibility_delay_in_seconds=3600)
        assert cfg.time_to_live == timedelta(seconds=-1)


class TestQueueWriterConfigValidation:
    @pytest.mark.parametrize("name", ["ab", "Orders", "-orders", "orders-", "ord--ers", "ord_ers", "a" * 64])
    def test_invalid_queue_names(self, name: str) -> None:
        with pytest.raises(ValidationError, match="invalid queue name"):
            QueueWriterConfig(queue_name=name)

    @pytest.mark.parametrize("name", ["abc", "orders", "order-events-2", "a" * 63])
    def test_valid_queue_names(self, name: str) -> None:
        assert QueueWriterConfig(queue_name=name).queue_name == name

    def test_zero_ttl_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cannot be 0"):
            QueueWriterConfig(queue_name="orders", time_to_live_in_seconds=0)

    def test_delay_must_be_below_ttl(self) -> None:
        with pytest.raises(ValidationError, match="must be less than"):
            QueueWriterConfig(queue_name="orders", time_to_live_in_seconds=60, initial_visibility_delay_in_seconds=60)

    def test_batch_size_positive(self) -> None:
        with pytest.raises(ValidationError):
            QueueWriterConfig(queue_name="orders", batch_size=0)

    def test_from_dict_wraps_errors(self) -> None:
        with pytest.raises(WriterConfigError, match="QueueWriterConfig"):
            QueueWriterConfig.from_dict({"queueName": "orders", "unknownOption": 1})

    def test_from_dict_requires_queue_name(self) -> None:
        with pytest.raises(WriterConfigError, match="queueName"):
            QueueWriterConfig.from_dict({})

    def test_from_dict_rejects_non_dict(self) -> None:
        with pytest.raises(WriterConfigError, match="must be a dict"):
            QueueWriterConfig.from_dict(["orders"])  # type: ignore[arg-type]

    def test_config_is_frozen(self) -> None:
        cfg = QueueWriterConfig(queue_name="orders")
        with pytest.raises(ValidationError):
            cfg.batch_size = 5  # type: ignore[misc]
