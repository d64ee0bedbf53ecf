"""
Unit Tests for the Operator CLI
===============================

Runs the click commands against the bundled fallback CSV.
"""

import pytest
from click.testing import CliRunner

import main
from sheetblog.config import settings as settings_module


@pytest.fixture
def runner(monkeypatch):
    """CLI runner with fresh settings and logging left to pytest."""
    monkeypatch.setattr(settings_module, "_settings", None)
    monkeypatch.setattr(main, "_setup_logging", lambda debug: None)
    return CliRunner()


class FailingPipeline:
    async def load_blog_posts(self, use_cache=False):
        raise RuntimeError("sheet exploded")


class TestCli:

    def test_help_without_command(self, runner):
        result = runner.invoke(main.cli, [])

        assert result.exit_code == 0
        assert "check-config" in result.output

    def test_check_config(self, runner):
        result = runner.invoke(main.cli, ["check-config"])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_load_lists_published_posts(self, runner):
        result = runner.invoke(main.cli, ["load"])

        assert result.exit_code == 0
        assert "Published posts (5)" in result.output

    def test_load_with_category_filter(self, runner):
        result = runner.invoke(main.cli, ["load", "-c", "css"])

        assert result.exit_code == 0
        assert "Published posts (2)" in result.output

    def test_load_failure_exits_nonzero(self, runner, monkeypatch):
        monkeypatch.setattr(main, "PostPipeline", FailingPipeline)

        result = runner.invoke(main.cli, ["load"])

        assert result.exit_code == 1
        assert "An unexpected error occurred" in result.output

    def test_show_post(self, runner):
        result = runner.invoke(main.cli, ["show", "getting-started-with-react-hooks"])

        assert result.exit_code == 0
        assert "Getting Started with React Hooks" in result.output
        assert "# Getting Started with React Hooks" in result.output

    def test_show_draft_is_not_found(self, runner):
        result = runner.invoke(main.cli, ["show", "drafting-posts-in-a-spreadsheet"])

        assert result.exit_code == 1
        assert "No published post" in result.output

    def test_clear_cache(self, runner):
        result = runner.invoke(main.cli, ["clear-cache"])

        assert result.exit_code == 0
        assert "Cache cleared" in result.output

    def test_clear_cache_when_disabled(self, runner, monkeypatch):
        monkeypatch.setenv("SHEETBLOG_CACHE__ENABLED", "false")

        result = runner.invoke(main.cli, ["clear-cache"])

        assert result.exit_code == 0
        assert "Cache is disabled" in result.output

    def test_check_config_rejects_missing_fallback(self, runner, monkeypatch, tmp_path):
        monkeypatch.setenv("SHEETBLOG_SOURCES__FALLBACK_URL", str(tmp_path / "gone.csv"))

        result = runner.invoke(main.cli, ["check-config"])

        assert result.exit_code == 1
        assert "[C001]" in result.output

    def test_load_with_missing_fallback_serves_sample_posts(self, runner, monkeypatch, tmp_path):
        monkeypatch.setenv("SHEETBLOG_SOURCES__FALLBACK_URL", str(tmp_path / "gone.csv"))

        result = runner.invoke(main.cli, ["load"])

        assert result.exit_code == 0
        assert "Published posts (5)" in result.output
