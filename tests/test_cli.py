"""Tests for configuration checks and the command-line entry point."""

import json
import os
from unittest.mock import patch

import pytest

from ghstars.application import cli
from ghstars.config import Config, ConfigurationError
from ghstars.domain.repository import StarredRepo
from ghstars.infrastructure.database import DatabaseRepository
from ghstars.infrastructure.github_client import GitHubAPIError

from factories import make_response, make_starred_item


def _config(args, environ=None) -> Config:
    return Config.from_args(cli.build_parser().parse_args(args), environ=environ or {})


class TestConfig:
    def test_defaults(self) -> None:
        config = _config([])
        assert config.db_path == "data.ghstars"
        assert config.token is None
        assert not (config.skip_update or config.json_export or config.fetch_readme or config.store_private)

    def test_flags_and_environment(self) -> None:
        config = _config(
            ["--db", "x.db", "--debug", "--json", "--get-readme", "--store-private"],
            {"GITHUB_TOKEN": "tok", "GHSTARS_DB": "ignored.db"},
        )
        assert config.db_path == "x.db"
        assert config.token == "tok"
        assert config.debug and config.json_export and config.fetch_readme and config.store_private

    def test_db_from_environment(self) -> None:
        assert _config([], {"GHSTARS_DB": "env.db"}).db_path == "env.db"

    def test_token_required_for_update(self) -> None:
        with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
            _config([]).validate()

    def test_token_not_required_offline(self, db_path) -> None:
        _config(["--skip-update", "--db", db_path]).validate()

    def test_offline_export_requires_database(self, db_path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            _config(["--skip-update", "--json", "--db", db_path]).validate()


class TestMain:
    def test_offline_export_without_database_fails(self, db_path, capsys) -> None:
        assert cli.main(["--skip-update", "--json", "--db", db_path]) == 1
        assert capsys.readouterr().out == ""
        assert not os.path.exists(db_path)

    def test_missing_token_fails(self, db_path, monkeypatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        assert cli.main(["--db", db_path]) == 1

    def test_offline_export(self, database, db_path, capsys) -> None:
        database.insert_repository(StarredRepo.from_api(make_starred_item(5)).to_repository())

        assert cli.main(["--skip-update", "--json", "--db", db_path]) == 0

        records = json.loads(capsys.readouterr().out)
        assert [record["id"] for record in records] == [5]

    def test_sync_then_export(self, db_path, monkeypatch, capsys) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "tok")
        pages = [[StarredRepo.from_api(make_starred_item(1)), StarredRepo.from_api(make_starred_item(2))]]

        with patch.object(cli.GitHubClient, "iter_starred_pages", return_value=iter(pages)) as walk:
            assert cli.main(["--json", "--db", db_path]) == 0

        walk.assert_called_once_with()
        records = json.loads(capsys.readouterr().out)
        assert sorted(record["id"] for record in records) == [1, 2]

    def test_fetch_failure_returns_error(self, db_path, monkeypatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "tok")
        with patch.object(cli.SyncService, "sync", side_effect=GitHubAPIError("status 500", status_code=500)):
            assert cli.main(["--db", db_path]) == 1

        with DatabaseRepository(db_path) as repository:
            assert repository.get_repository_count() == 0

    def test_malformed_page_returns_error(self, db_path, monkeypatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "tok")
        item = make_starred_item(1)
        item["starred_at"] = 5

        with patch.object(cli.GitHubClient, "get", return_value=make_response(json_data=[item])):
            assert cli.main(["--db", db_path]) == 1

        with DatabaseRepository(db_path) as repository:
            assert repository.get_repository_count() == 0
