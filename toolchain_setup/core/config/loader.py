"""
Configuration loader — action inputs and toolchain.yml into models.

Inputs are resolved in precedence order:
    action inputs (INPUT_* env vars)  >  toolchain.yml  >  model defaults

The runner passes each action input as ``INPUT_<NAME>`` with the name
upper-cased and hyphens kept (``INPUT_HUB-VERSION``).  The underscore
spelling is accepted as well for shells that cannot export hyphens.

List inputs (versions, modules) split on whitespace and commas.  Order
is kept and nothing is de-duplicated: order is precedence.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from toolchain_setup.core.models.install import InstallerConfig, SetupInputs

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "toolchain.yml"

# Action input name → SetupInputs field
_INPUT_FIELDS = {
    "versions": "versions",
    "modules": "modules",
    "project-path": "project_path",
    "install-path": "install_path",
    "auto-update-hub": "auto_update_hub",
    "hub-version": "hub_version",
    "cache-installation": "cache_installation",
}

# Runtime env var → InstallerConfig field
_INSTALLER_ENV = {
    "TCS_INSTALL_COMMAND": "install_command",
    "TCS_HUB_COMMAND": "hub_command",
    "TCS_HUB_PATH": "hub_path",
    "TCS_INSTALL_PATH": "install_path",
    "TCS_EDITOR_PATH": "editor_path",
}

_LIST_FIELDS = {"versions", "modules"}
_BOOL_FIELDS = {"auto_update_hub", "cache_installation"}

_SPLIT_RE = re.compile(r"[\s,]+")


class ConfigError(Exception):
    """Raised when configuration cannot be read or does not fit the model."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for toolchain.yml starting from the given directory, walking up.

    Returns:
        Path to toolchain.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def split_list(raw: Any) -> list[str]:
    """Split a list input on whitespace and commas, keeping order."""
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(item).strip() for item in raw if str(item).strip()]
    # YAML may hand back a number for a lone version like 2021.3
    return [part for part in _SPLIT_RE.split(str(raw)) if part]


def parse_bool(raw: Any) -> bool:
    """Action inputs are strings.  Only 'true' (any case) is True."""
    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().lower() == "true"


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def load_config_file(path: Path | None) -> dict[str, Any]:
    """Read toolchain.yml into a plain mapping.

    Raises:
        ConfigError: If the file is unreadable or not a YAML mapping.
    """
    if path is None:
        return {}

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    return data


def _read_input(environ: dict[str, str], name: str) -> str | None:
    for env_name in (f"INPUT_{name.upper()}", f"INPUT_{name.upper().replace('-', '_')}"):
        value = environ.get(env_name)
        if value is not None and value.strip():
            return value.strip()
    return None


def load_inputs(
    config_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> SetupInputs:
    """Resolve the install request from toolchain.yml and action inputs.

    Args:
        config_path: Explicit toolchain.yml (None = no file).
        environ: Environment to read inputs from (default: os.environ).

    Raises:
        ConfigError: If the file is invalid or a value does not fit.
    """
    env = dict(os.environ if environ is None else environ)
    data = load_config_file(config_path)
    section = data.get("setup", data)
    if not isinstance(section, dict):
        raise ConfigError("Expected 'setup' to be a mapping")

    values = {k: v for k, v in _normalize_keys(section).items() if k in _INPUT_FIELDS.values()}

    for input_name, field in _INPUT_FIELDS.items():
        raw = _read_input(env, input_name)
        if raw is not None:
            values[field] = raw

    for field in _LIST_FIELDS:
        if field in values:
            values[field] = split_list(values[field])
    for field in _BOOL_FIELDS:
        if field in values:
            values[field] = parse_bool(values[field])

    try:
        inputs = SetupInputs.model_validate(values)
    except Exception as e:
        raise ConfigError(f"Invalid setup inputs: {e}") from e

    logger.info(
        "Resolved %d version(s), %d module(s)",
        len(inputs.versions),
        len(inputs.modules),
    )
    return inputs


def load_installer_config(
    config_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> InstallerConfig:
    """Resolve the command installer settings.

    Reads the ``installer:`` section of toolchain.yml, then TCS_* env vars.
    """
    env = dict(os.environ if environ is None else environ)
    data = load_config_file(config_path)
    section = data.get("installer") or {}
    if not isinstance(section, dict):
        raise ConfigError("Expected 'installer' to be a mapping")

    values = _normalize_keys(section)
    for env_name, field in _INSTALLER_ENV.items():
        if env.get(env_name):
            values[field] = env[env_name]

    # The install-path action input is visible to both phases, so the
    # post phase re-derives the same path the main phase installed to
    install_path = _read_input(env, "install-path")
    if install_path is not None:
        values["install_path"] = install_path

    try:
        return InstallerConfig.model_validate(values)
    except Exception as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e
