"""
Configuration loader — reads provision.yml or composer.json into settings.

``provision.yml`` is the native format.  A project that keeps its
settings in ``composer.json`` can use that instead: ``config.vendor-dir``
and the ``extra.civicrm`` block are read from it, so the same file the
package manager uses drives the provisioner.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from civicrm_provisioner.core.models.settings import ProvisionSettings

logger = logging.getLogger(__name__)

PROVISION_CONFIG_FILE = "provision.yml"
COMPOSER_CONFIG_FILE = "composer.json"

# Searched in this order in each directory
CONFIG_FILENAMES = (PROVISION_CONFIG_FILE, COMPOSER_CONFIG_FILE)


class ConfigError(Exception):
    """Raised when provisioner configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for a config file starting from ``start_dir``, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to the first provision.yml or composer.json found, or None.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        for filename in CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None) -> ProvisionSettings:
    """Load and validate provisioner settings.

    Args:
        path: Explicit config path. If None, searches upward from cwd.

    Returns:
        Validated ProvisionSettings.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(
            f"No {PROVISION_CONFIG_FILE} or {COMPOSER_CONFIG_FILE} found. "
            "Create one, or specify --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading provisioner config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if path.suffix == ".json":
        data = _parse_json(raw, path)
        settings_data = _from_composer(data)
    else:
        data = _parse_yaml(raw, path)
        settings_data = data

    try:
        settings = ProvisionSettings.model_validate(settings_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid provisioner configuration: {e}") from e

    logger.info(
        "Loaded settings for '%s' with %d extensions",
        settings.package_name, len(settings.extensions),
    )
    return settings


def _parse_yaml(raw: str, path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    # An empty file means all defaults
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _parse_json(raw: str, path: Path) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def _from_composer(data: dict[str, Any]) -> dict[str, Any]:
    """Map composer.json onto the provision.yml shape.

    ``extra.civicrm.extensions`` stays under ``civicrm``; every other
    key of ``extra.civicrm`` is a top-level setting.
    """
    extra = data.get("extra") or {}
    civicrm = dict(extra.get("civicrm") or {}) if isinstance(extra, dict) else {}
    extensions = civicrm.pop("extensions", None)

    settings_data: dict[str, Any] = dict(civicrm)
    settings_data["civicrm"] = {"extensions": extensions}

    composer_config = data.get("config") or {}
    if isinstance(composer_config, dict) and "vendor-dir" in composer_config:
        settings_data.setdefault("vendor_dir", composer_config["vendor-dir"])

    return settings_data


def project_root(config_path: Path) -> Path:
    """Get the project root directory from a config file path."""
    return config_path.parent.resolve()
