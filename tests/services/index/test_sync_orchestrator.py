"""범위 동기화 테스트: 부분 실패, 원자성, 데드라인, 워터마크."""

from __future__ import annotations

import logging
import sqlite3

import pytest

from xkcdvault.services.index import SyncWatermark
from xkcdvault.services.index.operations import InsertOperations
from xkcdvault.services.index.sync import SyncOrchestrator, SyncSummary
from xkcdvault.shared.deadline import Deadline
from xkcdvault.shared.errors import (
    ApplicationError,
    ErrorCode,
    PersistenceError,
    SyncTimeoutError,
)


class TestValidateRange:
    @pytest.mark.parametrize(
        ("start", "end", "concurrency", "field"),
        [
            (0, 10, 5, "start"),
            (-1, 10, 5, "start"),
            (5, 4, 5, "end"),
            (1, 10, 0, "concurrency"),
        ],
    )
    def test_invalid_arguments(self, start, end, concurrency, field):
        with pytest.raises(ApplicationError) as exc_info:
            SyncOrchestrator.validate_range(start, end, concurrency)

        assert exc_info.value.code is ErrorCode.VALIDATION_ERROR
        assert exc_info.value.context.additional_data == {"field": field}

    def test_validation_happens_before_any_request(self, index, client, fake_session):
        with pytest.raises(ApplicationError):
            index.sync_range(client, 3, 1, 2)

        assert fake_session.calls == []


class TestSyncRange:
    def test_full_range(self, index, client):
        summary = index.sync_range(client, 1, 10, 5)

        assert summary.stored == 10
        assert summary.skipped_ids == []
        assert summary.last_id == 10
        assert summary.requested == 10
        assert index.count() == 10
        assert index.get_watermark().last_id == 10
        assert index.get_watermark().synced_at is not None

    def test_transient_failure_skips_only_that_item(self, index, client, fake_session, caplog):
        # Given: 7번 만화는 서버 오류를 반환
        fake_session.transient_ids.add(7)

        # When
        with caplog.at_level(logging.WARNING, logger="xkcdvault"):
            summary = index.sync_range(client, 1, 10, 5)

        # Then
        assert summary.stored == 9
        assert summary.skipped_ids == [7]
        assert summary.last_id == 10
        assert index.count() == 9
        assert index.get_watermark().last_id == 10
        assert any("Skipped 1 comics" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("concurrency", [1, 3, 32])
    def test_result_does_not_depend_on_concurrency(self, index, client, concurrency):
        summary = index.sync_range(client, 1, 10, concurrency)

        assert summary.stored == 10
        assert index.count() == 10

    def test_each_item_is_fetched_once(self, index, client, fake_session):
        index.sync_range(client, 1, 10, 4)

        assert sorted(fake_session.item_calls()) == sorted(
            f"https://xkcd.com/{i}/info.0.json" for i in range(1, 11)
        )

    def test_resync_is_idempotent(self, index, client):
        index.sync_range(client, 1, 10, 5)
        index.sync_range(client, 1, 10, 5)

        assert index.count() == 10

    def test_watermark_never_decreases(self, index, client):
        index.sync_range(client, 1, 10, 5)

        summary = index.sync_range(client, 2, 3, 2)

        assert summary.last_id == 10
        assert index.get_watermark().last_id == 10

    def test_backfill_of_skipped_item(self, index, client, fake_session):
        fake_session.transient_ids.add(7)
        index.sync_range(client, 1, 10, 5)
        fake_session.transient_ids.clear()

        summary = index.sync_range(client, 7, 7, 1)

        assert summary.stored == 1
        assert index.count() == 10

    def test_range_beyond_latest_skips_missing(self, index, client, fake_session):
        fake_session.latest = 5

        summary = index.sync_range(client, 4, 8, 2)

        assert summary.stored == 2
        assert summary.skipped_ids == [6, 7, 8]
        assert summary.last_id == 5

    def test_refetched_item_is_replaced(self, index, client, fake_session):
        index.sync_range(client, 1, 3, 1)
        fake_session.payload_overrides[2] = {"title": "Corrected title"}

        index.sync_range(client, 2, 2, 1)

        fake_session.offline = True
        assert index.get(client, 2).title == "Corrected title"


class TestAtomicity:
    def test_expired_deadline_rolls_back(self, index, client):
        with pytest.raises(SyncTimeoutError) as exc_info:
            index.sync_range(client, 1, 10, 5, Deadline(0))

        assert exc_info.value.code is ErrorCode.OPERATION_TIMEOUT
        assert index.count() == 0
        assert index.get_watermark().never_synced

    def test_cancelled_deadline_rolls_back(self, index, client):
        deadline = Deadline.never()
        deadline.cancel()

        with pytest.raises(SyncTimeoutError):
            index.sync_range(client, 1, 5, 2, deadline)

        assert index.count() == 0

    def test_earlier_batch_survives_failed_batch(self, index, client):
        index.sync_range(client, 1, 3, 2)

        with pytest.raises(SyncTimeoutError):
            index.sync_range(client, 4, 10, 2, Deadline(0))

        assert index.count() == 3
        assert index.get_watermark().last_id == 3

    def test_write_failure_rolls_back(self, index, client, mocker):
        # Given
        mocker.patch.object(
            InsertOperations,
            "upsert",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        )

        # When
        with pytest.raises(PersistenceError) as exc_info:
            index.sync_range(client, 1, 10, 3)

        # Then
        assert exc_info.value.code is ErrorCode.INDEX_SYNC_FAILED
        assert "disk I/O error" in exc_info.value.message
        assert index.count() == 0
        assert index.get_watermark().never_synced

    def test_write_failure_discards_rows_already_written(
        self, index, client, fake_session, mocker
    ):
        """앞서 기록된 행도 함께 롤백된다."""
        # Given: 8번 만화 기록 시 실패, 1..7은 실제로 기록됨
        real_upsert = InsertOperations.upsert

        def upsert(self, item, payload=None):
            if item.id == 8:
                raise sqlite3.OperationalError("disk I/O error")
            real_upsert(self, item, payload)

        spy = mocker.patch.object(InsertOperations, "upsert", autospec=True, side_effect=upsert)
        fake_session.latest = 20

        # When
        with pytest.raises(PersistenceError):
            index.sync_range(client, 1, 20, 1)

        # Then
        assert spy.call_count == 8
        assert index.count() == 0
        assert index.get_watermark() == SyncWatermark(None, 0)

    def test_deadline_expiring_mid_batch_discards_written_rows(
        self, index, client, fake_session
    ):
        # Given: 요청마다 50ms가 걸리는 원격 API
        fake_session.latest = 40
        fake_session.delay = 0.05

        # When
        with pytest.raises(SyncTimeoutError):
            index.sync_range(client, 1, 40, 2, Deadline(0.2))

        # Then
        assert 0 < len(fake_session.item_calls()) < 40
        assert index.count() == 0
        assert index.get_watermark() == SyncWatermark(None, 0)

    def test_index_is_usable_after_rollback(self, index, client):
        with pytest.raises(SyncTimeoutError):
            index.sync_range(client, 1, 10, 5, Deadline(0))

        summary = index.sync_range(client, 1, 10, 5)

        assert summary.stored == 10


class TestSyncSummary:
    def test_requested(self):
        summary = SyncSummary(start=5, end=9, stored=4, skipped_ids=[6])

        assert summary.requested == 5
