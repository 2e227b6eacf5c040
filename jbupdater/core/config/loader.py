"""
Configuration loader — reads the updater config into domain models.

The config file is looked up by fixed name in the working directory
(``updater.yml``, ``updater.yaml``, then the legacy ``config.json``).
It is parsed with YAML (which also reads JSON), validated against
Pydantic schemas, and returned as typed settings.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from jbupdater.core.errors import UpdaterError
from jbupdater.core.models.product import UpdaterSettings

logger = logging.getLogger(__name__)

# Candidate config filenames, in lookup order
CONFIG_FILES = ("updater.yml", "updater.yaml", "config.json")


class ConfigError(UpdaterError):
    """Raised when the updater configuration is invalid or missing."""

    kind = "config_error"


class ConfigUnreadable(ConfigError):
    """The config file is missing or cannot be read."""

    kind = "config_unreadable"


class ConfigMalformed(ConfigError):
    """The config file was read but does not describe valid settings."""

    kind = "config_malformed"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return the first known config file in ``start_dir`` (default: cwd)."""
    directory = start_dir or Path.cwd()
    for name in CONFIG_FILES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_settings(path: Path | None = None) -> UpdaterSettings:
    """Load and validate the updater configuration.

    Args:
        path: Explicit path to the config file. If None, looks in the cwd.

    Returns:
        Validated UpdaterSettings model.

    Raises:
        ConfigUnreadable: If the file is missing or unreadable.
        ConfigMalformed: If the content is not a valid configuration.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigUnreadable(
            f"No config file found. Create one of {', '.join(CONFIG_FILES)} "
            "in the current directory, or specify --config."
        )

    if not path.is_file():
        raise ConfigUnreadable(f"Config file not found: {path}")

    logger.debug("Loading updater config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigUnreadable(f"Cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigMalformed(f"{path} is not UTF-8 text: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigMalformed(f"Invalid YAML/JSON in {path}: {e}") from e

    # The legacy config.json is a bare list of products
    if isinstance(data, list):
        data = {"products": data}

    if not isinstance(data, dict):
        raise ConfigMalformed(
            f"Expected a mapping or a list of products in {path}, got {type(data).__name__}"
        )

    try:
        settings = UpdaterSettings.model_validate(data)
    except Exception as e:
        raise ConfigMalformed(f"Invalid updater configuration: {e}") from e

    logger.debug(
        "Loaded %d products (%d enabled) from %s",
        len(settings.products),
        len(settings.enabled_products()),
        path,
    )
    return settings
