"""
Update use case — load config, then check or update every product.

This is the top-level entry the CLI calls: it resolves the config
file, builds the catalog and downloader the config asks for, and hands
the product list to the orchestrator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from jbupdater.core.config.loader import ConfigError, load_settings
from jbupdater.core.models.outcome import UpdateReport
from jbupdater.core.models.product import UpdaterSettings
from jbupdater.core.services.catalog import ReleaseCatalog, make_catalog
from jbupdater.core.services.download import Downloader, HttpDownloader
from jbupdater.core.services.orchestrator import UpdateOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Result of an update (or check) run."""

    report: UpdateReport | None = None
    settings: UpdaterSettings | None = None
    config_path: Path | None = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.report is not None and self.report.failed == 0

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            result["error_kind"] = self.error_kind
            return result

        result["config_path"] = str(self.config_path) if self.config_path else None
        if self.settings:
            result["catalog"] = self.settings.catalog
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def build_orchestrator(
    settings: UpdaterSettings,
    *,
    catalog: ReleaseCatalog | None = None,
    downloader: Downloader | None = None,
    keep_going: bool = False,
) -> UpdateOrchestrator:
    """Wire an orchestrator from settings, with optional collaborator overrides."""
    return UpdateOrchestrator(
        catalog or make_catalog(settings),
        downloader or HttpDownloader(timeout=settings.timeout),
        temp_root=Path(settings.temp_dir) if settings.temp_dir else None,
        keep_going=keep_going,
    )


def run_update(
    config_path: Path | None = None,
    *,
    dry_run: bool = False,
    keep_going: bool = False,
    catalog: ReleaseCatalog | None = None,
    downloader: Downloader | None = None,
) -> UpdateResult:
    """Update (or with ``dry_run``, only check) every configured product.

    Args:
        config_path: Optional explicit config path. None = lookup in cwd.
        dry_run: Check for newer builds without downloading anything.
        keep_going: Continue past per-product download/extraction failures.
        catalog: Optional catalog override (tests, alternate feeds).
        downloader: Optional downloader override.

    Returns:
        UpdateResult with the batch report, or an error for config failures.
    """
    result = UpdateResult(config_path=config_path)

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        logger.error("%s", e)
        result.error = str(e)
        result.error_kind = e.kind
        return result
    result.settings = settings

    orchestrator = build_orchestrator(
        settings,
        catalog=catalog,
        downloader=downloader,
        keep_going=keep_going,
    )

    if dry_run:
        result.report = orchestrator.check(settings.products)
    else:
        result.report = orchestrator.run(settings.products)
    return result
