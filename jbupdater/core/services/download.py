"""
Downloader — fetch installer archives to disk.

``HttpDownloader`` streams the response in chunks, logs progress every
5% and removes the partial file on any failure.
"""

from __future__ import annotations

import logging
import urllib.error
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from jbupdater.core.errors import DownloadFailed
from jbupdater.core.services.http import open_url

logger = logging.getLogger(__name__)

# (bytes_downloaded, total_bytes) — total is 0 when the server sends no length
ProgressCallback = Callable[[int, int], None]


def fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


class Downloader(ABC):
    """Abstract archive downloader."""

    @abstractmethod
    def download(self, url: str, dest: Path) -> int:
        """Fetch ``url`` into ``dest`` and return the number of bytes written.

        Raises:
            DownloadFailed: With the URL and the HTTP status or cause.
        """


class HttpDownloader(Downloader):
    """Plain HTTP(S) downloader on top of urllib."""

    def __init__(
        self,
        timeout: float = 60.0,
        progress: ProgressCallback | None = None,
        chunk_size: int = 64 * 1024,
    ):
        self.timeout = timeout
        self.progress = progress
        self.chunk_size = chunk_size

    def download(self, url: str, dest: Path) -> int:
        dest.parent.mkdir(parents=True, exist_ok=True)
        downloaded = 0
        total = 0

        try:
            with open_url(url, self.timeout) as resp, open(dest, "wb") as f:
                total = int(resp.headers.get("Content-Length") or 0)
                last_progress = 0
                while True:
                    chunk = resp.read(self.chunk_size)
                    if not chunk:
                        break
                    f.write(chunk)
                    downloaded += len(chunk)

                    if self.progress is not None:
                        self.progress(downloaded, total)
                    if total > 0:
                        pct = int(downloaded * 100 / total)
                        if pct >= last_progress + 5:
                            last_progress = pct
                            logger.info(
                                "Progress %s / %s (%d%%)",
                                fmt_size(downloaded), fmt_size(total), pct,
                            )
        except urllib.error.HTTPError as e:
            dest.unlink(missing_ok=True)
            raise DownloadFailed(url, str(e.reason), status=e.code) from e
        except (urllib.error.URLError, OSError, ValueError) as e:
            dest.unlink(missing_ok=True)
            raise DownloadFailed(url, str(getattr(e, "reason", e))) from e

        if total and downloaded < total:
            dest.unlink(missing_ok=True)
            raise DownloadFailed(
                url, f"connection closed after {downloaded} of {total} bytes"
            )

        logger.debug("Downloaded %s from %s to %s", fmt_size(downloaded), url, dest)
        return downloaded
