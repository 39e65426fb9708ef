"""Tests for core data models."""

from __future__ import annotations

import dataclasses

import pytest

from vaultmetrics.models import AggregateRecord, ChangeEvent, MetricsRecord, Region


NOTE = MetricsRecord(files=1, documents=1, size=120, links=5, words=40, tags=2, quality=5.0)
IMAGE = MetricsRecord(files=1, attachments=1, size=2048)


class TestMetricsRecord:
    """Test MetricsRecord dataclass."""

    def test_zero(self) -> None:
        record = MetricsRecord.zero()
        assert record == MetricsRecord()
        assert record.quality == 0.0
        assert record.files == 0

    def test_immutable(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            NOTE.words = 1  # type: ignore[misc]

    def test_to_dict(self) -> None:
        assert IMAGE.to_dict() == {
            "files": 1,
            "documents": 0,
            "attachments": 1,
            "size": 2048,
            "links": 0,
            "words": 0,
            "tags": 0,
            "quality": 0.0,
        }


class TestAggregateRecord:
    """Test running totals."""

    def test_inc_sums_fields(self) -> None:
        aggregate = AggregateRecord()
        aggregate.inc(NOTE)
        aggregate.inc(IMAGE)

        assert aggregate.files == 2
        assert aggregate.documents == 1
        assert aggregate.attachments == 1
        assert aggregate.size == 2168
        assert aggregate.links == 5
        assert aggregate.words == 40
        assert aggregate.tags == 2

    def test_quality_is_recomputed(self) -> None:
        """Should be links per document, not a sum of per-record values."""
        aggregate = AggregateRecord()
        aggregate.inc(NOTE)
        aggregate.inc(MetricsRecord(files=1, documents=1, links=1, quality=1.0))

        assert aggregate.quality == pytest.approx(3.0)

    def test_quality_without_documents(self) -> None:
        aggregate = AggregateRecord()
        aggregate.inc(IMAGE)
        assert aggregate.quality == 0.0

    def test_dec_reverses_inc(self) -> None:
        aggregate = AggregateRecord()
        aggregate.inc(NOTE)
        aggregate.inc(IMAGE)
        aggregate.dec(NOTE)

        assert aggregate.snapshot() == MetricsRecord(files=1, attachments=1, size=2048)

    def test_reset(self) -> None:
        aggregate = AggregateRecord()
        aggregate.inc(NOTE)
        aggregate.reset()
        assert aggregate.snapshot() == MetricsRecord.zero()

    def test_snapshot_is_detached(self) -> None:
        aggregate = AggregateRecord()
        aggregate.inc(NOTE)
        snapshot = aggregate.snapshot()
        aggregate.inc(NOTE)

        assert snapshot.words == 40
        assert aggregate.words == 80


class TestSmallModels:
    def test_region(self) -> None:
        region = Region(type="paragraph", start=0, end=12)
        assert region.end - region.start == 12

    def test_change_event_defaults(self) -> None:
        event = ChangeEvent(kind="modified", key="a.md")
        assert event.old_key is None
