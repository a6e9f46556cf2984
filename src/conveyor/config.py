# src/conveyor/config.py
"""Typed configuration for the queue writer.

Accepts both snake_case field names and the camelCase option names used in
pipeline definitions:

    cfg = QueueWriterConfig.from_dict(
        {
            "queueName": "orders",
            "timeToLiveInSeconds": 60,
            "initialVisibilityDelayInSeconds": 0,
            "dieOnError": False,
        }
    )
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from conveyor.errors import WriterConfigError

DEFAULT_BATCH_SIZE = 1000
DEFAULT_SEND_TIMEOUT_SECONDS = 30
DEFAULT_TIME_TO_LIVE_SECONDS = 7 * 24 * 60 * 60
MAX_VISIBILITY_DELAY_SECONDS = 7 * 24 * 60 * 60

# Azure queue names: lowercase alphanumerics and single hyphens, 3-63 chars.
_QUEUE_NAME_RE = re.compile(r"^[a-z0-9](?:[a-z0-9]|-(?=[a-z0-9])){2,62}$")


class QueueWriterConfig(BaseModel):
    """Configuration for QueueWriter.

    Attributes:
        queue_name: Target queue
        time_to_live_in_seconds: Message TTL; -1 keeps messages until consumed
        initial_visibility_delay_in_seconds: Delay before a message is visible
        die_on_error: Raise on recoverable errors instead of logging them
        batch_size: Buffered message count that triggers a dispatch
        send_timeout_seconds: Per-message request timeout
        max_workers: Threads used to fan out a batch
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    queue_name: str = Field(..., description="Azure Storage queue name")
    time_to_live_in_seconds: int = Field(
        DEFAULT_TIME_TO_LIVE_SECONDS,
        ge=-1,
        description="Message time-to-live in seconds (-1 for no expiry)",
    )
    initial_visibility_delay_in_seconds: int = Field(
        0,
        ge=0,
        le=MAX_VISIBILITY_DELAY_SECONDS,
        description="Seconds before an enqueued message becomes visible",
    )
    die_on_error: bool = Field(False, description="Fail the session on recoverable errors")
    batch_size: int = Field(DEFAULT_BATCH_SIZE, ge=1, description="Messages buffered before dispatch")
    send_timeout_seconds: float = Field(DEFAULT_SEND_TIMEOUT_SECONDS, gt=0, description="Per-request send timeout")
    max_workers: int = Field(16, ge=1, description="Concurrent sends per batch")

    @field_validator("queue_name")
    @classmethod
    def validate_queue_name(cls, v: str) -> str:
        if not _QUEUE_NAME_RE.match(v):
            raise ValueError(
                f"invalid queue name {v!r}: use 3-63 lowercase letters, digits or single hyphens, "
                "starting and ending with a letter or digit"
            )
        return v

    @field_validator("time_to_live_in_seconds")
    @classmethod
    def validate_ttl_not_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("time_to_live_in_seconds cannot be 0; use -1 for messages that never expire")
        return v

    @model_validator(mode="after")
    def _validate_delay_below_ttl(self) -> Self:
        ttl = self.time_to_live_in_seconds
        if ttl > 0 and self.initial_visibility_delay_in_seconds >= ttl:
            raise ValueError(
                f"initial_visibility_delay_in_seconds ({self.initial_visibility_delay_in_seconds}) "
                f"must be less than time_to_live_in_seconds ({ttl})"
            )
        return self

    @property
    def time_to_live(self) -> timedelta:
        return timedelta(seconds=self.time_to_live_in_seconds)

    @property
    def visibility_delay(self) -> timedelta:
        return timedelta(seconds=self.initial_visibility_delay_in_seconds)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create config from dict with clear error on validation failure.

        Raises:
            WriterConfigError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise WriterConfigError(f"Invalid configuration for {cls.__name__}: config must be a dict, got {type(config).__name__}.")
        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise WriterConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e
