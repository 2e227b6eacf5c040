"""
Update orchestrator — the per-product update workflow.

For every configured product, in order:

    lookup candidate → read build.txt → decide → download → remove old
    → create install dir → extract → write build.txt → clean up

Products are processed one at a time. By default the first failure
aborts the batch (the updater's long-standing behaviour); with
``keep_going`` a download or extraction failure only fails that
product. Catalog failures always abort: without a working catalog no
later product can be checked either.

A failed product leaves its working directory and any partially
extracted installation on disk.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

from jbupdater.core.errors import (
    CatalogError,
    CatalogMalformed,
    CatalogQueryFailed,
    ExtractionIOFailure,
    InvalidPermissionSpec,
    UpdaterError,
)
from jbupdater.core.models.marker import InstalledMarker
from jbupdater.core.models.outcome import ProductOutcome, UpdateReport, now_iso
from jbupdater.core.models.product import ProductConfig
from jbupdater.core.persistence.marker_file import read_marker, write_marker
from jbupdater.core.services.archive import extract_tar_gz
from jbupdater.core.services.catalog import CatalogRelease, ReleaseCatalog
from jbupdater.core.services.decision import UpdateDecision
from jbupdater.core.services.download import Downloader
from jbupdater.core.services.permissions import parse_permission

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "installation.tar.gz"

_CATALOG_KINDS = frozenset({CatalogError.kind, CatalogQueryFailed.kind, CatalogMalformed.kind})


class UpdateOrchestrator:
    """Drives the update of a sequence of products.

    Args:
        catalog: Source of candidate builds.
        downloader: Fetches installer archives.
        decision: Update policy (default: lexicographic build ordering).
        temp_root: Parent for working directories (default: system temp).
        keep_going: Continue with the next product after a download or
            extraction failure instead of aborting the batch.
    """

    def __init__(
        self,
        catalog: ReleaseCatalog,
        downloader: Downloader,
        *,
        decision: UpdateDecision | None = None,
        temp_root: Path | None = None,
        keep_going: bool = False,
    ):
        self.catalog = catalog
        self.downloader = downloader
        self.decision = decision or UpdateDecision()
        self.temp_root = temp_root
        self.keep_going = keep_going

    # ── Batch ────────────────────────────────────────────────────

    def run(self, products: Sequence[ProductConfig]) -> UpdateReport:
        """Update every installable product, in configuration order."""
        return self._batch(products, self.update_product)

    def check(self, products: Sequence[ProductConfig]) -> UpdateReport:
        """Report which products are outdated without changing anything."""
        return self._batch(products, self.check_product)

    def _batch(
        self,
        products: Sequence[ProductConfig],
        step: Callable[[ProductConfig], ProductOutcome],
    ) -> UpdateReport:
        report = UpdateReport()
        for index, product in enumerate(products):
            outcome = step(product)
            report.outcomes.append(outcome)
            if outcome.failed and self._aborts(outcome):
                report.aborted = True
                remaining = len(products) - index - 1
                if remaining:
                    logger.error("Aborting: %d remaining product(s) not processed", remaining)
                break
        return report

    def _aborts(self, outcome: ProductOutcome) -> bool:
        return not self.keep_going or outcome.error_kind in _CATALOG_KINDS

    # ── Single product ───────────────────────────────────────────

    def check_product(self, product: ProductConfig) -> ProductOutcome:
        started = now_iso()
        skipped = _skip_reason(product)
        if skipped:
            return ProductOutcome.skip(product.name, skipped, started_at=started)

        try:
            release = self.catalog.lookup(product)
        except UpdaterError as e:
            logger.error("Error looking up %s: %s", product.name, e)
            return ProductOutcome.failure(product.name, e, started_at=started)

        marker = read_marker(product.install_dir)
        outdated = self.decision.needs_update(marker, release.build)
        return ProductOutcome(
            product=product.name,
            status="outdated" if outdated else "up_to_date",
            installed_build=marker.build if marker else None,
            candidate_build=release.build,
            url=release.download_url,
            started_at=started,
        )

    def update_product(self, product: ProductConfig) -> ProductOutcome:
        """Bring one product up to date. Never raises for updater errors."""
        started = now_iso()
        skipped = _skip_reason(product)
        if skipped:
            logger.debug("Skipping %s: %s", product.name, skipped)
            return ProductOutcome.skip(product.name, skipped, started_at=started)

        release: CatalogRelease | None = None
        try:
            release = self.catalog.lookup(product)
            return self._install(product, release, started)
        except UpdaterError as e:
            if release is None:
                logger.error("Error looking up %s: %s", product.name, e)
                return ProductOutcome.failure(product.name, e, started_at=started)
            logger.error(
                "Error updating %s %s (%s): %s",
                product.name, release.build, release.download_url, e,
            )
            return ProductOutcome.failure(
                product.name,
                e,
                candidate_build=release.build,
                url=release.download_url,
                started_at=started,
            )

    def _install(
        self,
        product: ProductConfig,
        release: CatalogRelease,
        started: str,
    ) -> ProductOutcome:
        install_dir = product.install_dir
        marker = read_marker(install_dir)
        installed = marker.build if marker else None

        if not self.decision.needs_update(marker, release.build):
            logger.info("%s is already up-to-date. Continuing...", product.name)
            return ProductOutcome(
                product=product.name,
                status="up_to_date",
                installed_build=installed,
                candidate_build=release.build,
                url=release.download_url,
                started_at=started,
            )

        name_and_build = f"{product.name} {release.build}"
        work_dir = self._make_work_dir(product)
        archive = work_dir / ARCHIVE_NAME

        try:
            logger.info("Downloading %s (%s)...", name_and_build, release.download_url)
            self.downloader.download(release.download_url, archive)
            logger.info("Successfully downloaded %s.", name_and_build)

            logger.info("Removing old %s if exists...", product.name)
            try:
                _remove_path(install_dir)
                if product.permissions:
                    _make_install_dir(install_dir, product.permissions)
            except OSError as e:
                raise ExtractionIOFailure(f"Cannot prepare {install_dir}: {e}") from e

            logger.info("Extracting files for %s", name_and_build)
            extract_tar_gz(archive, install_dir)

            try:
                write_marker(
                    install_dir,
                    InstalledMarker(label=product.marker_label, build=release.build),
                )
            except OSError as e:
                raise ExtractionIOFailure(f"Cannot write build marker in {install_dir}: {e}") from e
        except UpdaterError:
            logger.warning("Leaving working directory %s in place", work_dir)
            raise

        shutil.rmtree(work_dir, ignore_errors=True)
        logger.info("%s was installed!", name_and_build)
        return ProductOutcome(
            product=product.name,
            status="updated",
            installed_build=installed,
            candidate_build=release.build,
            url=release.download_url,
            message=f"installed into {install_dir}",
            started_at=started,
        )

    def _make_work_dir(self, product: ProductConfig) -> Path:
        try:
            return Path(tempfile.mkdtemp(
                prefix=f"{product.install_dir_name}-",
                dir=self.temp_root,
            ))
        except OSError as e:
            raise ExtractionIOFailure(f"Cannot create working directory: {e}") from e


def _skip_reason(product: ProductConfig) -> str:
    if not product.enabled:
        return "disabled"
    if not product.install_parent_dir or not product.install_dir_name:
        return "install directory not configured"
    return ""


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _make_install_dir(install_dir: Path, permissions: str) -> None:
    try:
        mode = parse_permission(permissions)
    except InvalidPermissionSpec as e:
        mode = e.best_effort_mode
        logger.warning("%s; using %04o", e, mode)
    install_dir.mkdir(mode=mode, parents=True)
    # mkdir's mode is filtered by the umask
    os.chmod(install_dir, mode)
