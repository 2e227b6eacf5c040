"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import io
import tarfile
import urllib.error
import urllib.request
from pathlib import Path

import pytest

from jbupdater.core.errors import CatalogQueryFailed, DownloadFailed
from jbupdater.core.models.product import ProductConfig
from jbupdater.core.services.catalog import CatalogRelease, ReleaseCatalog
from jbupdater.core.services.download import Downloader


# ── Archives ─────────────────────────────────────────────────────


def build_tar_gz(path: Path, entries: list[tuple]) -> Path:
    """Write a .tar.gz from ``(name, kind, payload, mode)`` tuples.

    kind is "dir", "file" or "symlink"; payload is file bytes or the
    symlink target.
    """
    with tarfile.open(path, "w:gz") as tar:
        for name, kind, payload, mode in entries:
            info = tarfile.TarInfo(name=name)
            info.mode = mode
            if kind == "dir":
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.linkname = payload
                tar.addfile(info)
            else:
                info.size = len(payload)
                tar.addfile(info, io.BytesIO(payload))
    return path


@pytest.fixture
def make_archive(tmp_path: Path):
    """Factory: build a .tar.gz under tmp_path and return its path."""
    counter = {"n": 0}

    def _make(entries: list[tuple], name: str | None = None) -> Path:
        counter["n"] += 1
        return build_tar_gz(tmp_path / (name or f"archive-{counter['n']}.tar.gz"), entries)

    return _make


@pytest.fixture
def ide_archive(make_archive) -> Path:
    """A typical vendor archive with one wrapping directory."""
    return make_archive([
        ("root/", "dir", None, 0o755),
        ("root/a.txt", "file", b"alpha\n", 0o644),
        ("root/sub/", "dir", None, 0o755),
        ("root/sub/b.txt", "file", b"bravo\n", 0o755),
    ])


# ── Collaborator fakes ───────────────────────────────────────────


class FakeCatalog(ReleaseCatalog):
    """Catalog answering from a dict of code → CatalogRelease (or exception)."""

    def __init__(self, releases: dict[str, CatalogRelease | Exception]):
        self.releases = releases
        self.lookups: list[str] = []

    @property
    def name(self) -> str:
        return "fake"

    def lookup(self, product: ProductConfig) -> CatalogRelease:
        self.lookups.append(product.code)
        answer = self.releases.get(product.code)
        if answer is None:
            raise CatalogQueryFailed(f"unknown product {product.code}")
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeDownloader(Downloader):
    """Downloader copying prepared archives (url → path) into place."""

    def __init__(self, archives: dict[str, Path] | None = None):
        self.archives = archives or {}
        self.calls: list[tuple[str, Path]] = []

    def download(self, url: str, dest: Path) -> int:
        self.calls.append((url, dest))
        source = self.archives.get(url)
        if source is None:
            raise DownloadFailed(url, "Not Found", status=404)
        data = source.read_bytes()
        dest.write_bytes(data)
        return len(data)


@pytest.fixture
def fake_catalog_cls():
    return FakeCatalog


@pytest.fixture
def fake_downloader_cls():
    return FakeDownloader


# ── HTTP ─────────────────────────────────────────────────────────


class FakeResponse:
    """Minimal stand-in for the object urllib.request.urlopen returns."""

    def __init__(self, body: bytes, headers: dict | None = None):
        self._buf = io.BytesIO(body)
        self.headers = headers if headers is not None else {"Content-Length": str(len(body))}

    def read(self, size: int = -1) -> bytes:
        return self._buf.read(size)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def fake_urlopen(monkeypatch):
    """Route urllib.request.urlopen to canned answers.

    Register answers with ``routes[url] = bytes | FakeResponse | Exception``;
    requested URLs are recorded in ``routes.requests``.
    """

    class Routes(dict):
        requests: list[str]

    routes = Routes()
    routes.requests = []

    def _urlopen(req, timeout=None):
        url = req.full_url if isinstance(req, urllib.request.Request) else req
        routes.requests.append(url)
        answer = routes.get(url)
        if answer is None:
            raise urllib.error.HTTPError(url, 404, "Not Found", hdrs=None, fp=None)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, FakeResponse):
            return answer
        return FakeResponse(answer)

    monkeypatch.setattr(urllib.request, "urlopen", _urlopen)
    return routes


@pytest.fixture
def fake_response_cls():
    return FakeResponse
