"""
HTTP transport — thin wrapper over urllib shared by catalog and downloader.
"""

from __future__ import annotations

import urllib.request

from jbupdater import __version__

USER_AGENT = f"jetbrains-updater/{__version__}"


def open_url(url: str, timeout: float):
    """Open ``url`` for reading. The caller closes the response."""
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    return urllib.request.urlopen(req, timeout=timeout)
