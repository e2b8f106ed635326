"""Unit tests for the config commands."""

import json
import tomllib
from pathlib import Path

from typer.testing import CliRunner
from vacuum.cli.commands.config import app

runner = CliRunner()


class TestShow:
    """Tests for config show."""

    def test_defaults_json(self, isolated_env: Path) -> None:
        """Without a config file the defaults are shown."""
        result = runner.invoke(app, ["show", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["follow_symlinks"] is True
        assert data["progress_batch"] == 1000
        assert data["witness_path"] == str(isolated_env)

    def test_explicit_config(self, tmp_path: Path) -> None:
        """--config selects the file to show."""
        config_path = tmp_path / "custom.toml"
        config_path.write_text('exclude = ["**/tmp/**"]\n', encoding="utf-8")

        result = runner.invoke(app, ["--config", str(config_path), "show", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["exclude"] == ["**/tmp/**"]

    def test_table(self) -> None:
        """Human mode renders a table of settings."""
        result = runner.invoke(app, ["show"])

        assert result.exit_code == 0
        assert "follow_symlinks" in result.stdout
        assert "defaults" in result.stdout

    def test_invalid_config(self, tmp_path: Path) -> None:
        """An invalid config file exits 2."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("progress_batch = -1\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(config_path), "show"])

        assert result.exit_code == 2


class TestInit:
    """Tests for config init."""

    def test_writes_defaults(self, tmp_path: Path) -> None:
        """init writes a loadable TOML file."""
        config_path = tmp_path / "vacuum" / "config.toml"

        result = runner.invoke(app, ["--config", str(config_path), "init"])

        assert result.exit_code == 0
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        assert data["follow_symlinks"] is True
        assert data["include"] == []

    def test_default_location(self, tmp_path: Path) -> None:
        """Without --config the XDG location is used."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert (tmp_path / "xdg-config" / "vacuum" / "config.toml").exists()

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        """An existing file is kept unless --force is given."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("witness = false\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(config_path), "init"])

        assert result.exit_code == 1
        assert config_path.read_text(encoding="utf-8") == "witness = false\n"

    def test_force_overwrites(self, tmp_path: Path) -> None:
        """--force replaces an existing file with defaults."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("witness = false\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(config_path), "init", "--force"])

        assert result.exit_code == 0
        with open(config_path, "rb") as f:
            assert tomllib.load(f)["witness"] is True
