"""
Update decision — is the installed build behind the candidate?

Build identifiers are opaque strings ordered by plain string
comparison, not by version semantics: ``"9" >= "10"`` holds, so an
installed build 9 is considered newer than a candidate 10. That is the
historical behaviour of the updater and is kept as is. The comparison
lives behind ``UpdateDecision`` so another ordering can be plugged in
without touching the orchestrator.
"""

from __future__ import annotations

from collections.abc import Callable

from jbupdater.core.models.marker import InstalledMarker

# (installed_build, candidate_build) -> True when installed is current
BuildComparator = Callable[[str, str], bool]


def lexicographic_up_to_date(installed: str, candidate: str) -> bool:
    """Installed build counts as current when it sorts at or after the candidate."""
    return installed >= candidate


class UpdateDecision:
    """Decides whether a product needs to be (re)installed."""

    def __init__(self, up_to_date: BuildComparator = lexicographic_up_to_date):
        self._up_to_date = up_to_date

    def needs_update(self, marker: InstalledMarker | None, candidate_build: str) -> bool:
        """Return True unless ``marker`` records a build at least as new as the candidate."""
        if marker is None:
            return True
        return not self._up_to_date(marker.build, candidate_build)


_default = UpdateDecision()


def needs_update(marker: InstalledMarker | None, candidate_build: str) -> bool:
    """Decide with the default (lexicographic) ordering."""
    return _default.needs_update(marker, candidate_build)
