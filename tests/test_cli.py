"""
Tests for the memedocs CLI.
"""

import json
import shutil
import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from memedocs import cli
from memedocs.cli import app


runner = CliRunner()


@pytest.fixture
def home(monkeypatch):
    """Isolated home directory so no user config leaks in."""
    temp_dir = tempfile.mkdtemp()
    monkeypatch.setenv("HOME", temp_dir)
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def assets(home):
    """Asset tree; returns the global options pointing at it."""
    root = home / "assets"
    (root / "Memes" / "Cats").mkdir(parents=True)
    (root / "Memes" / "Dogs").mkdir(parents=True)
    (root / "Memes" / "Cats" / "Grumpy Cat.jpg").write_bytes(b"grumpy bytes")
    (root / "Memes" / "Dogs" / "Good Boy.jpg").write_bytes(b"good boy bytes")
    return ["--assets", str(root), "--prefs", str(home / "prefs.json")]


class TestBrowsing:
    """Tests for roots, ls and info."""

    def test_roots_json(self, assets):
        result = runner.invoke(app, assets + ["roots", "--format", "json"])
        assert result.exit_code == 0
        roots = json.loads(result.stdout)
        assert roots[0]["root_id"] == "Memes"
        assert roots[0]["supports_search"] is True

    def test_roots_table(self, assets):
        result = runner.invoke(app, assets + ["roots"])
        assert result.exit_code == 0
        assert "Memes" in result.stdout

    def test_ls_root_by_default(self, assets):
        result = runner.invoke(app, assets + ["ls", "--format", "json"])
        assert result.exit_code == 0
        docs = json.loads(result.stdout)
        assert [doc["document_id"] for doc in docs] == ["Memes/Cats", "Memes/Dogs"]

    def test_ls_directory(self, assets):
        result = runner.invoke(app, assets + ["ls", "Memes/Cats", "--format", "json"])
        assert result.exit_code == 0
        docs = json.loads(result.stdout)
        assert docs[0]["display_name"] == "Grumpy Cat"
        assert docs[0]["kind"] == "file"

    def test_ls_missing_directory(self, assets):
        result = runner.invoke(app, assets + ["ls", "Memes/Birds"])
        assert result.exit_code == 1
        assert "Not found" in result.stdout

    def test_info(self, assets):
        result = runner.invoke(app, assets + ["info", "Memes/Dogs/Good Boy.jpg"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["display_name"] == "Good Boy"

    def test_markup_in_names_is_literal(self, assets, home):
        (home / "assets" / "Memes" / "Cats" / "[OC] Grumpy.jpg").write_bytes(b"oc")
        result = runner.invoke(app, assets + ["ls", "Memes/Cats"])
        assert result.exit_code == 0
        assert "[OC]" in result.stdout

    def test_markup_in_error_is_literal(self, assets):
        result = runner.invoke(app, assets + ["ls", "Memes/[bold]Birds"])
        assert result.exit_code == 1
        assert "[bold]Birds" in result.stdout

    def test_no_assets_configured(self, home):
        result = runner.invoke(app, ["ls"])
        assert result.exit_code == 1
        assert "No asset location configured" in result.stdout


class TestCat:
    """Tests for streaming content."""

    def test_cat_to_file(self, assets, home):
        output = home / "out.jpg"
        result = runner.invoke(app, assets + ["cat", "Memes/Cats/Grumpy Cat.jpg", "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_bytes() == b"grumpy bytes"

    def test_cat_to_stdout(self, assets):
        result = runner.invoke(app, assets + ["cat", "Memes/Cats/Grumpy Cat.jpg"])
        assert result.exit_code == 0
        assert b"grumpy bytes" in result.stdout_bytes

    def test_cat_missing(self, assets):
        result = runner.invoke(app, assets + ["cat", "Memes/Cats/Nope.jpg"])
        assert result.exit_code == 1


class TestSearch:
    """Tests for the search command."""

    def test_search_json(self, assets):
        result = runner.invoke(app, assets + ["search", "CAT", "--format", "json"])
        assert result.exit_code == 0
        assert [doc["display_name"] for doc in json.loads(result.stdout)] == ["Grumpy Cat"]

    def test_search_no_results(self, assets):
        result = runner.invoke(app, assets + ["search", "parrot"])
        assert result.exit_code == 0
        assert "No results found" in result.stdout

    def test_search_blank_query(self, assets):
        result = runner.invoke(app, assets + ["search", " "])
        assert result.exit_code == 2
        assert "Invalid input" in result.stdout

    def test_search_unknown_root(self, assets):
        result = runner.invoke(app, assets + ["search", "cat", "--root", "Other"])
        assert result.exit_code == 1


class TestRecents:
    """Tests for the recents command."""

    def test_recents_after_cat(self, assets, home):
        runner.invoke(app, assets + ["cat", "Memes/Dogs/Good Boy.jpg", "-o", str(home / "a.jpg")])
        runner.invoke(app, assets + ["cat", "Memes/Cats/Grumpy Cat.jpg", "-o", str(home / "b.jpg")])

        result = runner.invoke(app, assets + ["recents", "--format", "json"])
        assert result.exit_code == 0
        assert [doc["display_name"] for doc in json.loads(result.stdout)] == ["Grumpy Cat", "Good Boy"]

    def test_recents_clear(self, assets, home):
        runner.invoke(app, assets + ["cat", "Memes/Dogs/Good Boy.jpg", "-o", str(home / "a.jpg")])

        result = runner.invoke(app, assets + ["recents", "--clear"])
        assert result.exit_code == 0

        result = runner.invoke(app, assets + ["recents", "--format", "json"])
        assert json.loads(result.stdout) == []


class TestConfigCommand:
    """Tests for the config command."""

    def test_show_defaults(self, home):
        result = runner.invoke(app, ["config", "--show"])
        assert result.exit_code == 0
        assert '"root_id": "Memes"' in result.stdout

    def test_set_assets_path(self, home):
        result = runner.invoke(app, ["config", "--assets-path", str(home / "assets"), "--title", "Mine"])
        assert result.exit_code == 0

        saved = json.loads((home / ".memedocs" / "config.json").read_text())
        assert saved["assets"]["path"] == str(home / "assets")
        assert saved["assets"]["title"] == "Mine"

    def test_configured_assets_used(self, assets, home):
        runner.invoke(app, ["config", "--assets-path", assets[1], "--prefs-path", assets[3]])
        result = runner.invoke(app, ["ls", "--format", "json"])
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 2

    def test_set_color(self, home):
        result = runner.invoke(app, ["config", "--no-cli-color"])
        assert result.exit_code == 0
        saved = json.loads((home / ".memedocs" / "config.json").read_text())
        assert saved["cli"]["color"] is False

    def test_color_setting_applied_to_output(self, home, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        runner.invoke(app, ["config", "--no-cli-color"])
        runner.invoke(app, ["about"])
        assert cli.console.no_color is True
        assert cli.error_console.no_color is True

        runner.invoke(app, ["config", "--cli-color"])
        runner.invoke(app, ["about"])
        assert cli.console.no_color is False


class TestAbout:
    def test_about(self):
        result = runner.invoke(app, ["about"])
        assert result.exit_code == 0
        assert "memedocs" in result.stdout
