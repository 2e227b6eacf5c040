"""
Error types — one class per failure kind the updater can report.

Collaborators (catalog, downloader, extractor) raise these; the
orchestrator turns them into failed product outcomes and decides
whether the batch continues.
"""

from __future__ import annotations


class UpdaterError(Exception):
    """Base class for every updater failure."""

    kind = "updater_error"


# ── Catalog ─────────────────────────────────────────────────────


class CatalogError(UpdaterError):
    """The release catalog could not supply a candidate build."""

    kind = "catalog_error"


class CatalogQueryFailed(CatalogError):
    """Network or HTTP failure while querying the catalog."""

    kind = "catalog_query_failed"


class CatalogMalformed(CatalogError):
    """The catalog answered, but the document is unusable."""

    kind = "catalog_malformed"


# ── Product configuration ───────────────────────────────────────


class ProductMisconfigured(UpdaterError):
    """One product's entry cannot be used. Other products are unaffected."""

    kind = "product_misconfigured"


# ── Download ────────────────────────────────────────────────────


class DownloadFailed(UpdaterError):
    """The installer archive could not be fetched."""

    kind = "download_failed"

    def __init__(self, url: str, reason: str, status: int | None = None):
        self.url = url
        self.reason = reason
        self.status = status
        detail = f"HTTP {status}: {reason}" if status else reason
        super().__init__(f"Download of {url} failed ({detail})")


# ── Permissions ─────────────────────────────────────────────────


class InvalidPermissionSpec(UpdaterError, ValueError):
    """A permission string is not four octal digits.

    ``best_effort_mode`` still holds whatever mode could be decoded
    from the input. Callers decide whether to use it.
    """

    kind = "invalid_permission_spec"

    def __init__(self, spec: str, message: str, best_effort_mode: int):
        self.spec = spec
        self.best_effort_mode = best_effort_mode
        super().__init__(f"Invalid permission string {spec!r}: {message}")


class InvalidLength(InvalidPermissionSpec):
    kind = "invalid_length"


class DigitOutOfRange(InvalidPermissionSpec):
    kind = "digit_out_of_range"


# ── Extraction ──────────────────────────────────────────────────


class ExtractionError(UpdaterError):
    """Extraction of an installer archive stopped."""

    kind = "extraction_error"


class UnsupportedArchiveEntryType(ExtractionError):
    """The archive holds an entry that is neither a directory nor a regular file."""

    kind = "unsupported_archive_entry_type"

    def __init__(self, name: str, type_flag: str):
        self.name = name
        self.type_flag = type_flag
        super().__init__(f"Unsupported entry type {type_flag!r} for {name!r}")


class UnsafeArchiveEntry(ExtractionError):
    """An entry would land outside the destination directory."""

    kind = "unsafe_archive_entry"


class ExtractionIOFailure(ExtractionError):
    """Reading the archive or writing the installation failed."""

    kind = "extraction_io_failure"


# ── Marker ──────────────────────────────────────────────────────


class MarkerUnreadable(UpdaterError):
    """build.txt is missing, unreadable or malformed."""

    kind = "marker_unreadable"
