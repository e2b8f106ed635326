"""XDG-compliant path management for vacuum.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, plus the location of the witness ledger
shared with other tools of the same family.

Defaults:
- Config: ~/.config/vacuum/config.toml
- Witness ledger: ~/.epistemic/witness.jsonl
"""

import os
from collections.abc import Mapping
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "vacuum"

# Environment variable overriding the witness ledger location
WITNESS_ENV_VAR = "EPISTEMIC_WITNESS"

CONFIG_FILENAME = "config.toml"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/vacuum/ (or XDG_CONFIG_HOME/vacuum/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/vacuum/config.toml.
    """
    return get_config_dir() / CONFIG_FILENAME


def get_default_witness_path(environ: Mapping[str, str] | None = None) -> Path:
    """Get the default witness ledger path.

    Uses HOME (or USERPROFILE) from the environment, falling back to a
    ledger below the working directory when neither is set.

    Args:
        environ: Environment mapping (default: os.environ).

    Returns:
        Path to <home>/.epistemic/witness.jsonl.
    """
    env = os.environ if environ is None else environ
    home = env.get("HOME") or env.get("USERPROFILE")
    base = Path(home) if home else Path()
    return base / ".epistemic" / "witness.jsonl"


def resolve_witness_path(
    configured: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Resolve the witness ledger location.

    Priority:
    1. EPISTEMIC_WITNESS environment variable
    2. ``witness_path`` from the configuration file
    3. ~/.epistemic/witness.jsonl

    Args:
        configured: Ledger path from configuration, if any.
        environ: Environment mapping (default: os.environ).

    Returns:
        Path to the witness ledger.
    """
    env = os.environ if environ is None else environ
    override = env.get(WITNESS_ENV_VAR)
    if override:
        return Path(override)
    if configured is not None:
        return configured.expanduser()
    return get_default_witness_path(env)
