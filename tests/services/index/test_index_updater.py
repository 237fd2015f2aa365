"""update_index 테스트."""

from datetime import timedelta

import pytest

from xkcdvault.services.index import ComicIndex, UpdateStatus, update_index
from xkcdvault.shared.errors import IndexNotInitializedError, RemoteTransientError


class TestUpdateIndex:
    def test_fresh_index_is_synced_to_latest(self, index, client):
        result = update_index(index, client, workers=4)

        assert result.status is UpdateStatus.UPDATED
        assert result.latest_id == 10
        assert result.summary is not None
        assert result.summary.start == 1
        assert result.summary.stored == 10
        assert index.get_watermark().last_id == 10

    def test_recent_index_is_up_to_date(self, index, client, fake_session):
        update_index(index, client, workers=4)
        fake_session.calls.clear()

        result = update_index(index, client, workers=4)

        assert result.status is UpdateStatus.UP_TO_DATE
        assert fake_session.calls == []

    def test_force_fetches_only_new_comics(self, index, client, fake_session):
        # Given
        update_index(index, client, workers=4)
        fake_session.latest = 12
        fake_session.calls.clear()

        # When
        result = update_index(index, client, workers=4, force=True)

        # Then
        assert result.status is UpdateStatus.UPDATED
        assert result.summary.start == 11
        assert result.summary.stored == 2
        assert sorted(fake_session.item_calls()) == [
            "https://xkcd.com/11/info.0.json",
            "https://xkcd.com/12/info.0.json",
        ]

    def test_force_without_new_comics(self, index, client):
        update_index(index, client, workers=4)

        result = update_index(index, client, workers=4, force=True)

        assert result.status is UpdateStatus.UP_TO_DATE
        assert result.latest_id == 10

    def test_check_only_makes_no_request(self, index, client, fake_session):
        result = update_index(index, client, workers=4, check_only=True)

        assert result.status is UpdateStatus.OUTDATED
        assert fake_session.calls == []
        assert index.count() == 0

    def test_stale_index_is_updated(self, index, client, fake_session):
        update_index(index, client, workers=4)
        fake_session.latest = 11

        result = update_index(index, client, workers=4, max_age=timedelta(0))

        assert result.status is UpdateStatus.UPDATED
        assert index.count() == 11

    def test_latest_lookup_failure(self, index, client, fake_session):
        fake_session.offline = True

        with pytest.raises(RemoteTransientError):
            update_index(index, client, workers=4)

    def test_uninitialized_index(self, index_path, client):
        with pytest.raises(IndexNotInitializedError):
            update_index(ComicIndex.open(index_path), client, workers=2)
