# tests/test_buffer.py
"""Tests for MessageBuffer."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conveyor.buffer import MessageBuffer
from conveyor.contracts import PendingMessage


def msg(text: str) -> PendingMessage:
    return PendingMessage(
        text=text,
        time_to_live=timedelta(seconds=60),
        visibility_delay=timedelta(0),
        record={"messageContent": text},
    )


class TestMessageBuffer:
    def test_rejects_non_positive_threshold(self) -> None:
        with pytest.raises(ValueError, match="threshold"):
            MessageBuffer(threshold=0)

    def test_append_and_size(self) -> None:
        buffer = MessageBuffer(threshold=5)
        buffer.append(msg("a"))
        buffer.append(msg("b"))
        assert buffer.size() == 2
        assert len(buffer) == 2
        assert not buffer.is_full()

    def test_is_full_at_threshold(self) -> None:
        buffer = MessageBuffer(threshold=2)
        buffer.append(msg("a"))
        buffer.append(msg("b"))
        assert buffer.is_full()

    def test_drain_preserves_order_and_empties(self) -> None:
        buffer = MessageBuffer(threshold=10)
        for text in ("a", "b", "c"):
            buffer.append(msg(text))

        drained = buffer.drain()

        assert [m.text for m in drained] == ["a", "b", "c"]
        assert buffer.size() == 0
        buffer.append(msg("d"))
        assert [m.text for m in drained] == ["a", "b", "c"]

    def test_clear(self) -> None:
        buffer = MessageBuffer(threshold=10)
        buffer.append(msg("a"))
        buffer.clear()
        assert buffer.size() == 0
