"""Smoke tests for the CLI."""

import csv
import io
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from forumstore.cli import app


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def store_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty CWD and store directory, with no config files picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("forumstore.config.GLOBAL_CONFIG_PATH", tmp_path / "no-global.toml")
    monkeypatch.delenv("FORUMSTORE_STORE_DIR", raising=False)
    monkeypatch.delenv("FORUMSTORE_ORG", raising=False)
    path = tmp_path / "data"
    path.mkdir()
    return path


def _invoke(runner: CliRunner, store_dir: Path, *args: str):
    return runner.invoke(app, ["--store-dir", str(store_dir), "--org", "acme", *args])


class TestCLI:
    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "channel" in result.output

    def test_main_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "forumstore" in result.output


class TestChannelCommands:
    def test_create_and_info(self, runner: CliRunner, store_dir: Path) -> None:
        created = _invoke(runner, store_dir, "channel", "create", "news", "-d", "Company news")
        assert created.exit_code == 0, created.output
        assert "news" in created.output

        info = _invoke(runner, store_dir, "channel", "info", "news")
        assert info.exit_code == 0, info.output
        payload = json.loads(info.output)
        assert payload["slug"] == "news"
        assert payload["description"] == "Company news"

    def test_duplicate_channel_fails(self, runner: CliRunner, store_dir: Path) -> None:
        _invoke(runner, store_dir, "channel", "create", "news")
        result = _invoke(runner, store_dir, "channel", "create", "news")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_info_for_missing_channel(self, runner: CliRunner, store_dir: Path) -> None:
        result = _invoke(runner, store_dir, "channel", "info", "missing")
        assert result.exit_code == 1
        assert "No channel with slug: missing" in result.output

    def test_channels_are_scoped_to_org(self, runner: CliRunner, store_dir: Path) -> None:
        _invoke(runner, store_dir, "channel", "create", "news")
        result = runner.invoke(
            app, ["--store-dir", str(store_dir), "--org", "globex", "channel", "info", "news"]
        )
        assert result.exit_code == 1

    def test_invalid_org_fails(self, runner: CliRunner, store_dir: Path) -> None:
        result = runner.invoke(
            app, ["--store-dir", str(store_dir), "--org", "", "channel", "info", "news"]
        )
        assert result.exit_code == 1
        assert "Invalid slug" in result.output


class TestPostCommands:
    def _setup(self, runner: CliRunner, store_dir: Path) -> tuple[str, str]:
        _invoke(runner, store_dir, "channel", "create", "news")
        root = _invoke(runner, store_dir, "post", "create", "news", "root post")
        assert root.exit_code == 0, root.output
        root_id = root.output.strip()
        reply = _invoke(runner, store_dir, "post", "create", "news", "a reply", "--reply-to", root_id)
        assert reply.exit_code == 0, reply.output
        return root_id, reply.output.strip()

    def test_list(self, runner: CliRunner, store_dir: Path) -> None:
        self._setup(runner, store_dir)
        result = runner.invoke(
            app,
            ["--store-dir", str(store_dir), "--org", "acme", "post", "list", "news"],
            env={"COLUMNS": "300"},
        )
        assert result.exit_code == 0, result.output
        assert "root post" in result.output
        assert "a reply" in result.output

    def test_post_in_missing_channel(self, runner: CliRunner, store_dir: Path) -> None:
        result = _invoke(runner, store_dir, "post", "create", "missing", "hello")
        assert result.exit_code == 1
        assert "No channel with slug: missing" in result.output

    def test_reply_to_missing_post(self, runner: CliRunner, store_dir: Path) -> None:
        _invoke(runner, store_dir, "channel", "create", "news")
        result = _invoke(runner, store_dir, "post", "create", "news", "hi", "--reply-to", "nope")
        assert result.exit_code == 1
        assert "No post with id" in result.output

    def test_export_csv(self, runner: CliRunner, store_dir: Path) -> None:
        root_id, reply_id = self._setup(runner, store_dir)
        result = _invoke(runner, store_dir, "post", "export", "news")
        assert result.exit_code == 0, result.output

        rows = list(csv.reader(io.StringIO(result.output)))
        assert rows[0] == ["id", "createdAt", "parentPostID", "commandType", "content"]
        assert [r[0] for r in rows[1:]] == [reply_id, root_id]
        assert rows[1][2] == root_id

    def test_export_json_with_replies(self, runner: CliRunner, store_dir: Path) -> None:
        root_id, reply_id = self._setup(runner, store_dir)
        result = _invoke(runner, store_dir, "post", "export", "news", "-f", "json", "--replies")
        assert result.exit_code == 0, result.output

        posts = json.loads(result.output)
        assert [p["id"] for p in posts] == [root_id]
        assert [r["id"] for r in posts[0]["replies"]] == [reply_id]

    def test_export_rss_to_file(self, runner: CliRunner, store_dir: Path, tmp_path: Path) -> None:
        root_id, _ = self._setup(runner, store_dir)
        out = tmp_path / "feed.xml"
        result = _invoke(runner, store_dir, "post", "export", "news", "-f", "rss", "-o", str(out))
        assert result.exit_code == 0, result.output

        xml = out.read_text(encoding="utf-8")
        assert "<rss" in xml
        assert f"/org:acme/channel:news/posts/{root_id}" in xml

    def test_export_rss_with_base_url(self, runner: CliRunner, store_dir: Path) -> None:
        root_id, _ = self._setup(runner, store_dir)
        result = _invoke(
            runner, store_dir, "post", "export", "news", "-f", "rss",
            "--base-url", "https://forum.example/",
        )
        assert result.exit_code == 0, result.output
        assert f"https://forum.example/org:acme/channel:news/posts/{root_id}" in result.output

    def test_export_reports_dropped_replies(self, runner: CliRunner, store_dir: Path) -> None:
        self._setup(runner, store_dir)
        result = _invoke(
            runner, store_dir, "post", "export", "news", "--replies", "--max-count", "1"
        )
        assert result.exit_code == 0, result.output
        assert "1 replies outside" in result.output

    def test_export_missing_channel(self, runner: CliRunner, store_dir: Path) -> None:
        result = _invoke(runner, store_dir, "post", "export", "missing")
        assert result.exit_code == 1
        assert "No channel with slug: missing" in result.output
