"""Configuration model and settings resolution.

Configuration is stored in ~/.config/vacuum/config.toml and is optional:
a missing file means defaults. Settings combine the configuration with
environment-derived values (the witness ledger path) and are resolved once
at startup, then passed explicitly to whatever needs them.
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vacuum.core.errors import ConfigError
from vacuum.core.paths import get_config_path, resolve_witness_path
from vacuum.scanner.progress import DEFAULT_BATCH, DEFAULT_INTERVAL_MS

logger = logging.getLogger(__name__)


class VacuumConfig(BaseModel):
    """User configuration for scans.

    Attributes:
        follow_symlinks: Default symlink policy (``--no-follow`` overrides).
        include: Include patterns applied before any ``--include`` flags.
        exclude: Exclude patterns applied before any ``--exclude`` flags.
        progress_interval_ms: Minimum time between progress events.
        progress_batch: Emit a progress event every N processed entries.
        witness: Append to the witness ledger (``--no-witness`` overrides).
        witness_path: Ledger location (EPISTEMIC_WITNESS overrides).
    """

    model_config = ConfigDict(extra="forbid")

    follow_symlinks: Annotated[
        bool,
        Field(description="Follow symbolic links while walking"),
    ] = True
    include: Annotated[
        list[str],
        Field(description="Default include glob patterns"),
    ] = []
    exclude: Annotated[
        list[str],
        Field(description="Default exclude glob patterns"),
    ] = []
    progress_interval_ms: Annotated[
        int,
        Field(ge=1, le=60_000, description="Progress interval in milliseconds"),
    ] = DEFAULT_INTERVAL_MS
    progress_batch: Annotated[
        int,
        Field(ge=1, description="Progress event every N entries"),
    ] = DEFAULT_BATCH
    witness: Annotated[
        bool,
        Field(description="Record each run in the witness ledger"),
    ] = True
    witness_path: Annotated[
        Path | None,
        Field(description="Witness ledger location"),
    ] = None


@dataclass(frozen=True, slots=True)
class Settings:
    """Effective settings for one invocation.

    Attributes:
        config: Loaded (or default) configuration.
        config_path: Where the configuration was looked up.
        witness_path: Resolved witness ledger location.
    """

    config: VacuumConfig
    config_path: Path
    witness_path: Path


def load_config(path: Path | None = None) -> VacuumConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default path.

    Returns:
        Validated VacuumConfig; defaults if the file does not exist.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return VacuumConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return VacuumConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: VacuumConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The configuration to save.
        path: Destination. If None, uses the default path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    return config_path


def config_to_dict(config: VacuumConfig) -> dict[str, Any]:
    """Convert configuration to a TOML-serializable dictionary.

    TOML has no null, so an unset ``witness_path`` is left out.
    """
    data = config.model_dump(mode="json")
    if data.get("witness_path") is None:
        data.pop("witness_path", None)
    return data


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve effective settings once for the whole invocation.

    Args:
        config_path: Explicit config file (``--config``), or None for default.
        environ: Environment mapping (default: os.environ).

    Returns:
        Settings with the resolved witness ledger path.

    Raises:
        ConfigError: If the configuration file is invalid.
    """
    path = config_path or get_config_path()
    config = load_config(path)
    return Settings(
        config=config,
        config_path=path,
        witness_path=resolve_witness_path(config.witness_path, environ),
    )
