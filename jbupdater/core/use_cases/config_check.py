"""
Config check use case — validate the updater config and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from jbupdater.core.config.loader import ConfigError, find_config_file, load_settings
from jbupdater.core.errors import InvalidPermissionSpec
from jbupdater.core.models.product import UpdaterSettings
from jbupdater.core.services.permissions import parse_permission


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    settings: UpdaterSettings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "catalog": self.settings.catalog if self.settings else None,
            "product_count": len(self.settings.products) if self.settings else 0,
            "enabled_count": len(self.settings.enabled_products()) if self.settings else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate the updater configuration and report issues.

    Args:
        config_path: Optional explicit path to the config file.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    result.config_path = config_path

    try:
        settings = load_settings(config_path)
        result.settings = settings
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    if not settings.products:
        result.warnings.append("No products defined. There is nothing to update.")
    elif not settings.enabled_products():
        result.warnings.append("No product is enabled with both parent_dir and dir set.")

    names = [p.name for p in settings.products]
    dupes = {n for n in names if names.count(n) > 1}
    if dupes:
        result.errors.append(f"Duplicate product names: {', '.join(sorted(dupes))}")

    # Two products extracting into one directory would wipe each other
    dirs = [str(p.install_dir) for p in settings.enabled_products()]
    dir_dupes = {d for d in dirs if dirs.count(d) > 1}
    if dir_dupes:
        result.errors.append(f"Shared install directories: {', '.join(sorted(dir_dupes))}")

    for product in settings.products:
        if product.permissions:
            try:
                parse_permission(product.permissions)
            except InvalidPermissionSpec as e:
                result.errors.append(f"Product '{product.name}': {e}")

        if settings.catalog == "feed" and product.is_installable and not product.download_url:
            result.errors.append(
                f"Product '{product.name}' needs a download_url template with the feed catalog"
            )

        if "-" in product.marker_label:
            result.warnings.append(
                f"Product '{product.name}' label '{product.marker_label}' contains '-'; "
                "its build.txt will not be recognised and it will update on every run."
            )

    result.valid = len(result.errors) == 0
    return result
