"""
Marker file persistence — read/write build.txt in an installation.

Reads are forgiving: any problem means "no prior installation" and the
update goes ahead. Writes are atomic (write to temp file, then rename)
so an interrupted run never leaves a half-written marker.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from jbupdater.core.errors import MarkerUnreadable
from jbupdater.core.models.marker import MARKER_FILE, InstalledMarker

logger = logging.getLogger(__name__)

MARKER_MODE = 0o644


def marker_path(install_dir: Path) -> Path:
    return install_dir / MARKER_FILE


def load_marker(install_dir: Path) -> InstalledMarker:
    """Load the marker of an installation.

    Raises:
        MarkerUnreadable: If build.txt is missing, unreadable or malformed.
    """
    path = marker_path(install_dir)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MarkerUnreadable(f"Cannot read {path}: {e}") from e

    marker = InstalledMarker.parse(raw)
    if marker is None:
        raise MarkerUnreadable(f"Malformed marker in {path}: {raw.strip()!r}")
    return marker


def read_marker(install_dir: Path) -> InstalledMarker | None:
    """Return the installed marker, or None when there is no usable one."""
    try:
        marker = load_marker(install_dir)
    except MarkerUnreadable as e:
        logger.debug("%s — treating as not installed", e)
        return None
    logger.debug("Installed marker in %s: %s", install_dir, marker.render())
    return marker


def write_marker(install_dir: Path, marker: InstalledMarker) -> Path:
    """Write ``<label>-<build>`` to build.txt (atomic write)."""
    path = marker_path(install_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".build_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(fd, "w", encoding="utf-8") as f:
            f.write(marker.render())
        os.chmod(tmp, MARKER_MODE)
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        logger.error("Failed to write marker %s", path)
        raise

    logger.debug("Marker %s written to %s", marker.render(), path)
    return path
