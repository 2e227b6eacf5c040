"""
Domain models — Pydantic types for the updater.

    from jbupdater.core.models import ProductConfig, InstalledMarker, ProductOutcome
"""

from jbupdater.core.models.marker import MARKER_FILE, InstalledMarker
from jbupdater.core.models.outcome import ProductOutcome, UpdateReport
from jbupdater.core.models.product import ProductConfig, UpdaterSettings

__all__ = [
    "InstalledMarker",
    "MARKER_FILE",
    "ProductConfig",
    "ProductOutcome",
    "UpdateReport",
    "UpdaterSettings",
]
