"""Tests for the asset CLI commands."""

from unittest.mock import patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from extasset.main import app
from extasset.services.hasher import compute_content_hash

runner = CliRunner()

APP_JS = b"console.log('v1');"
SITE_CSS = b"body { margin: 0; }"


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Render rich output wide enough that table cells do not wrap."""
    monkeypatch.setattr("extasset.commands.assets.console", Console(width=200))
    monkeypatch.setattr("extasset.main.console", Console(width=200))
    for var in ("EXTASSET_DISK", "EXTASSET_CONCURRENCY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    """Write a local-disk config with two assets."""
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[extasset]
concurrency = 2
disk = "local"

[metadata]
path = "{tmp_path / 'metadata.db'}"

[storage.local]
root = "{tmp_path / 'public'}"
base_url = "/assets"

[logging]
dir = "{tmp_path / 'logs'}"

[assets."app.js"]
source = "https://x.example.com/app.js"

[assets."site.css"]
source = "https://x.example.com/site.css"
check_interval = 60
"""
    )
    return path


@pytest.fixture
def serving(fetcher):
    """Patch FetchClient so commands use the fake fetcher."""
    fetcher.responses = {
        "https://x.example.com/app.js": APP_JS,
        "https://x.example.com/site.css": SITE_CSS,
    }
    with patch("extasset.services.sync.FetchClient", return_value=fetcher):
        yield fetcher


class TestUpdateCommand:
    """Tests for the update command."""

    def test_first_update_stores_blobs(self, config_file, tmp_path, serving):
        """A first run stores every asset under its hash key."""
        result = runner.invoke(app, ["update", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "2 updated, 0 unchanged, 0 skipped, 0 failed" in result.output
        stored = tmp_path / "public" / f"{compute_content_hash(APP_JS)}.app.js"
        assert stored.read_bytes() == APP_JS
        assert (tmp_path / "logs" / "extasset.log").exists()

    def test_second_update_skips_and_keeps(self, config_file, serving):
        """A second run leaves unchanged assets alone and honours intervals."""
        runner.invoke(app, ["update", "--config", str(config_file)])
        result = runner.invoke(app, ["update", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "0 updated, 1 unchanged, 1 skipped, 0 failed" in result.output
        assert serving.requested.count("https://x.example.com/site.css") == 1

    def test_force_refetches_everything(self, config_file, serving):
        """--force fetches assets whose interval has not elapsed."""
        runner.invoke(app, ["update", "--config", str(config_file)])
        result = runner.invoke(app, ["update", "--force", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "2 updated" in result.output
        assert serving.requested.count("https://x.example.com/site.css") == 2

    def test_fetch_failure_does_not_fail_command(self, config_file, serving):
        """Failed fetches are reported but the command still succeeds."""
        del serving.responses["https://x.example.com/site.css"]

        result = runner.invoke(app, ["update", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "1 updated, 0 unchanged, 0 skipped, 1 failed" in result.output

    def test_missing_config(self, tmp_path):
        """A missing config file exits with an error."""
        result = runner.invoke(app, ["update", "--config", str(tmp_path / "missing.toml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config(self, tmp_path):
        """An invalid config file exits with an error."""
        path = tmp_path / "config.toml"
        path.write_text("[extasset]\nconcurrency = 0\n")

        result = runner.invoke(app, ["update", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unknown_disk(self, config_file, serving):
        """An unsupported storage backend exits with an error."""
        config_file.write_text(config_file.read_text().replace('disk = "local"', 'disk = "ftp"'))

        result = runner.invoke(app, ["update", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Unsupported storage disk" in result.output

    def test_no_assets(self, tmp_path):
        """A config without assets does nothing."""
        path = tmp_path / "config.toml"
        path.write_text(f'[logging]\ndir = "{tmp_path / "logs"}"\n')

        result = runner.invoke(app, ["update", "--config", str(path)])

        assert result.exit_code == 0
        assert "No assets configured" in result.output

    def test_store_failure_exits(self, config_file, tmp_path, serving):
        """A metadata store that cannot be opened aborts the run."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config_file.write_text(
            config_file.read_text().replace(
                str(tmp_path / "metadata.db"), str(blocker / "metadata.db")
            )
        )

        result = runner.invoke(app, ["update", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Storage failure" in result.output


class TestUrlCommand:
    """Tests for the url command."""

    def test_unknown_asset(self, config_file):
        """Unconfigured names exit with an error."""
        result = runner.invoke(app, ["url", "nope.js", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Unknown asset: nope.js" in result.output

    def test_never_synced_uses_source(self, config_file):
        """Before any update the source URL is printed."""
        result = runner.invoke(app, ["url", "app.js", "--config", str(config_file)])

        assert result.exit_code == 0
        assert result.output.strip() == "https://x.example.com/app.js"

    def test_after_update_uses_stored_blob(self, config_file, serving):
        """After an update the stored blob URL is printed."""
        runner.invoke(app, ["update", "--config", str(config_file)])

        result = runner.invoke(app, ["url", "app.js", "--config", str(config_file)])

        assert result.exit_code == 0
        assert result.output.strip() == f"/assets/{compute_content_hash(APP_JS)}.app.js"


class TestStatusCommand:
    """Tests for the status command."""

    def test_never_synced(self, config_file):
        """Assets without a record are marked as never synced."""
        result = runner.invoke(app, ["status", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "app.js" in result.output
        assert "never synced" in result.output

    def test_after_update_shows_hash(self, config_file, serving):
        """Synced assets show their content hash."""
        runner.invoke(app, ["update", "--config", str(config_file)])

        result = runner.invoke(app, ["status", "--config", str(config_file)])

        assert result.exit_code == 0
        assert compute_content_hash(SITE_CSS) in result.output
        assert "never synced" not in result.output


class TestConfigCommand:
    """Tests for the config command."""

    def test_path(self, tmp_path):
        """config path prints the file location."""
        path = tmp_path / "config.toml"

        result = runner.invoke(app, ["config", "path", "--config", str(path)])

        assert result.exit_code == 0
        assert str(path) in result.output

    def test_show_creates_default(self, tmp_path):
        """config show writes a default file when none exists."""
        path = tmp_path / "config.toml"

        result = runner.invoke(app, ["config", "show", "--config", str(path)])

        assert result.exit_code == 0
        assert path.exists()
        assert "Concurrency:" in result.output

    def test_set_persists(self, tmp_path):
        """config set stores the converted value."""
        path = tmp_path / "config.toml"

        result = runner.invoke(app, ["config", "set", "concurrency", "12", "--config", str(path)])

        assert result.exit_code == 0
        assert "concurrency = 12" in path.read_text()

    def test_set_invalid_value(self, tmp_path):
        """Invalid values are rejected."""
        path = tmp_path / "config.toml"

        result = runner.invoke(app, ["config", "set", "concurrency", "lots", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid value" in result.output

    def test_unknown_action(self, tmp_path):
        """Unknown actions exit with an error."""
        result = runner.invoke(app, ["config", "frobnicate"])

        assert result.exit_code == 1
        assert "Unknown action" in result.output


def test_version():
    """--version prints the package version."""
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "extasset version" in result.output
