"""
Typer CLI 통합 테스트.

The remote API is the in-memory FakeSession; the index is a real file in
a temporary directory.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from xkcdvault.cli.typer_app import app


def _flat(text: str) -> str:
    """Collapse rich line wrapping."""
    return " ".join(text.split())


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def patched_client(mocker, client):
    mocker.patch("xkcdvault.cli.common.services.XkcdClient", return_value=client)
    return client


@pytest.fixture
def invoke(runner, index_path):
    def _invoke(*args: str):
        return runner.invoke(app, ["--index", str(index_path), *args])

    return _invoke


class TestGlobalOptions:
    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "xkcdvault 0.1.0" in result.output

    def test_missing_config_file(self, invoke, tmp_path):
        result = invoke("--config", str(tmp_path / "missing.toml"), "index", "status")

        assert result.exit_code != 0

    def test_invalid_config_file(self, invoke, tmp_path):
        config = tmp_path / "config.toml"
        config.write_text("[index]\nworkers = 0\n", encoding="utf-8")

        result = invoke("--config", str(config), "index", "status")

        assert result.exit_code == 1
        assert "Invalid configuration" in _flat(result.output)


class TestIndexInit:
    def test_init(self, invoke, index_path):
        result = invoke("index", "init")

        assert result.exit_code == 0
        assert "Index initialized" in _flat(result.output)
        assert index_path.is_file()

    def test_init_twice(self, invoke):
        invoke("index", "init")

        result = invoke("index", "init")

        assert result.exit_code == 1
        assert "use --force to reinitialize" in _flat(result.output)

    def test_force_reinitializes(self, invoke):
        invoke("index", "init")
        invoke("index", "update")

        result = invoke("index", "init", "--force")

        assert result.exit_code == 0
        status = json.loads(invoke("--json", "index", "status").stdout)
        assert status["data"]["items"] == 0

    def test_broken_index_suggests_reinitialization(self, invoke, index_path):
        index_path.write_bytes(b"garbage" * 1000)

        result = invoke("index", "status")

        assert result.exit_code == 1
        assert "index init -f" in _flat(result.output)

    def test_force_recovers_broken_index(self, invoke, index_path):
        index_path.write_bytes(b"garbage" * 1000)

        result = invoke("index", "init", "-f")

        assert result.exit_code == 0


class TestIndexUpdate:
    def test_update_requires_init(self, invoke):
        result = invoke("index", "update")

        assert result.exit_code == 1
        assert "run 'xkcdvault index init' first" in _flat(result.output)

    def test_update(self, invoke):
        invoke("index", "init")

        result = invoke("index", "update")

        assert result.exit_code == 0
        assert "Indexed 10 comics (1..10), last comic is #10" in _flat(result.output)

    def test_second_update_is_up_to_date(self, invoke):
        invoke("index", "init")
        invoke("index", "update")

        result = invoke("index", "update")

        assert result.exit_code == 0
        assert "Index is up to date" in result.output

    def test_check_reports_outdated_index(self, invoke, fake_session):
        invoke("index", "init")

        result = invoke("index", "update", "--check")

        assert result.exit_code == 1
        assert "index is outdated" in result.output
        assert fake_session.calls == []

    def test_check_after_update(self, invoke):
        invoke("index", "init")
        invoke("index", "update")

        result = invoke("index", "update", "--check")

        assert result.exit_code == 0

    def test_skipped_comics_are_reported(self, invoke, fake_session):
        # Given
        fake_session.transient_ids.add(7)
        invoke("index", "init")

        # When
        result = invoke("--json", "--log-level", "ERROR", "index", "update", "--workers", "3")

        # Then
        assert result.exit_code == 0
        document = json.loads(result.stdout)
        assert document["success"] is True
        assert document["data"]["summary"]["stored"] == 9
        assert document["data"]["summary"]["skipped_ids"] == [7]
        assert "Skipped 1 comics" in document["warnings"][0]

    def test_json_error_document(self, invoke):
        result = invoke("--json", "index", "update")

        assert result.exit_code == 1
        document = json.loads(result.stdout)
        assert document["success"] is False
        assert document["data"]["error_code"] == "INDEX_NOT_INITIALIZED"


class TestIndexSync:
    def test_backfill_range(self, invoke, fake_session):
        fake_session.transient_ids.add(7)
        invoke("index", "init")
        invoke("index", "update")
        fake_session.transient_ids.clear()

        result = invoke("index", "sync", "7", "7")

        assert result.exit_code == 0
        assert "Indexed 1 comics (7..7)" in _flat(result.output)

    def test_reversed_range(self, invoke):
        invoke("index", "init")

        result = invoke("index", "sync", "5", "2")

        assert result.exit_code == 1


class TestIndexStatusAndSearch:
    def test_status_json(self, invoke, index_path):
        invoke("index", "init", "--offline")
        invoke("index", "update")

        result = invoke("--json", "index", "status")

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["path"] == str(index_path)
        assert data["initialized"] is True
        assert data["offline"] is True
        assert data["items"] == 10
        assert data["last_id"] == 10
        assert data["last_sync"] is not None

    def test_status_of_missing_index(self, invoke):
        result = invoke("--json", "index", "status")

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["initialized"] is False
        assert data["last_sync"] is None

    def test_search(self, invoke, fake_session):
        fake_session.payload_overrides[3] = {"title": "Bobby Tables"}
        invoke("index", "init")
        invoke("index", "update")

        result = invoke("index", "search", "bobby")

        assert result.exit_code == 0
        assert "Bobby Tables" in result.output

    def test_search_json_limit(self, invoke):
        invoke("index", "init")
        invoke("index", "update")

        result = invoke("--json", "index", "search", "Comic", "--limit", "2")

        items = json.loads(result.stdout)["data"]["items"]
        assert [item["id"] for item in items] == [10, 9]

    def test_search_without_results(self, invoke):
        invoke("index", "init")

        result = invoke("index", "search", "velociraptor")

        assert result.exit_code == 0
        assert "No comic matches 'velociraptor'" in _flat(result.output)


class TestInfos:
    def test_infos_json(self, invoke):
        result = invoke("--json", "infos", "5")

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["id"] == 5
        assert data["title"] == "Comic 5"

    def test_infos_latest(self, invoke):
        result = invoke("infos")

        assert result.exit_code == 0
        assert "Comic 10" in result.output

    def test_latest_falls_back_to_index(self, invoke, fake_session):
        # Given: 인덱스가 최신 상태이고 네트워크가 끊김
        invoke("index", "init")
        invoke("index", "update")
        fake_session.offline = True

        # When
        result = invoke("infos", "latest")

        # Then
        assert result.exit_code == 0
        assert "Comic 10" in result.output

    def test_latest_without_index_or_network(self, invoke, fake_session):
        fake_session.offline = True

        result = invoke("infos", "latest")

        assert result.exit_code == 1

    @pytest.mark.parametrize("value", ["abc", "0", "-4"])
    def test_invalid_number(self, invoke, value):
        result = invoke("infos", "--", value)

        assert result.exit_code == 2
        assert f"invalid comic number: {value}" in _flat(result.output)

    def test_unknown_comic(self, invoke, fake_session):
        fake_session.missing_ids.add(404)
        fake_session.latest = 500

        result = invoke("infos", "404")

        assert result.exit_code == 1
        assert "failed to fetch comic 404 from API" in _flat(result.output)


class TestShow:
    def test_show_writes_image(self, invoke, tmp_path, make_image):
        target = tmp_path / "comic.png"

        result = invoke("--output", str(target), "show", "3")

        assert result.exit_code == 0
        assert target.read_bytes() == make_image(3)

    def test_show_from_offline_index(self, invoke, tmp_path, fake_session, make_image):
        # Given
        invoke("index", "init", "--offline")
        invoke("index", "sync", "1", "3")
        fake_session.offline = True
        target = tmp_path / "comic.png"

        # When
        result = invoke("-o", str(target), "show", "2")

        # Then
        assert result.exit_code == 0
        assert target.read_bytes() == make_image(2)

    def test_show_broken_image(self, invoke, tmp_path, fake_session):
        fake_session.broken_content_ids.add(3)

        result = invoke("-o", str(tmp_path / "comic.png"), "show", "3")

        assert result.exit_code == 1
