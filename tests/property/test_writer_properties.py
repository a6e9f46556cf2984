# tests/property/test_writer_properties.py
"""Property-based tests for QueueWriter counting guarantees.

- Conservation: every accepted record ends up sent, rejected or skipped
- Retention: successful_writes holds exactly the sent records
- Threshold: the buffer never holds a full batch after write() returns
"""

from __future__ import annotations

from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from conveyor.config import QueueWriterConfig
from conveyor.contracts import MESSAGE_CONTENT_FIELD
from conveyor.writer import QueueWriter
from tests.fakes import FakeConnection, FakeQueueClient

text_st = st.text(alphabet="abcdefghij", min_size=1, max_size=4)

# A record is valid content, missing content, or empty (ignored).
record_st = st.one_of(
    text_st.map(lambda t: {MESSAGE_CONTENT_FIELD: t}),
    st.just({"other": "x"}),
    st.just({}),
)


def run_session(records: list[dict[str, Any]], fail_texts: set[str], batch_size: int) -> tuple[QueueWriter, list[int]]:
    client = FakeQueueClient(fail_texts=fail_texts)
    writer = QueueWriter(
        QueueWriterConfig(queue_name="orders", batch_size=batch_size, max_workers=4),
        FakeConnection(client),
    )
    writer.open("prop")
    sizes = []
    for record in records:
        writer.write(record)
        sizes.append(writer.buffered_count)
    writer.close()
    return writer, sizes


class TestWriterCountingProperties:
    @given(
        texts=st.lists(text_st, max_size=40),
        fail_texts=st.sets(text_st, max_size=5),
        batch_size=st.integers(min_value=1, max_value=10),
    )
    def test_valid_records_are_all_accounted_for(self, texts: list[str], fail_texts: set[str], batch_size: int) -> None:
        records = [{MESSAGE_CONTENT_FIELD: t} for t in texts]
        writer, _ = run_session(records, fail_texts, batch_size)
        result = writer.result

        expected_rejects = sum(1 for t in texts if t in fail_texts)
        assert result.total_count == len(texts)
        assert result.success_count + result.reject_count == len(texts)
        assert result.reject_count == expected_rejects
        assert len(writer.successful_writes) == result.success_count
        assert all(r[MESSAGE_CONTENT_FIELD] not in fail_texts for r in writer.successful_writes)

    @given(
        records=st.lists(record_st, max_size=40),
        batch_size=st.integers(min_value=1, max_value=10),
    )
    def test_mixed_records_conserve_counts(self, records: list[dict[str, Any]], batch_size: int) -> None:
        writer, sizes = run_session(records, set(), batch_size)
        result = writer.result

        non_empty = [r for r in records if r]
        missing = [r for r in non_empty if MESSAGE_CONTENT_FIELD not in r]
        assert result.total_count == len(non_empty)
        assert result.total_count == result.success_count + result.reject_count + writer.skipped_count
        assert writer.skipped_count == len(missing)
        assert all(size < batch_size for size in sizes)
