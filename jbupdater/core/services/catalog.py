"""
Release catalog — where the newest build of a product comes from.

Two sources are supported:

    ProductReleasesCatalog   per-product JSON endpoint
                             (data.services.jetbrains.com/products/releases)
    UpdatesFeedCatalog       the combined updates.xml feed covering
                             every product and channel

Both answer the same question for the orchestrator: which build is
newest, and where can its Linux archive be downloaded.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel

from jbupdater.core.errors import CatalogMalformed, CatalogQueryFailed, ProductMisconfigured
from jbupdater.core.models.product import ProductConfig, UpdaterSettings
from jbupdater.core.services.http import open_url

logger = logging.getLogger(__name__)


class CatalogRelease(BaseModel):
    """The candidate build for a product."""

    build: str
    download_url: str
    version: str = ""


class ReleaseCatalog(ABC):
    """Abstract source of candidate builds.

    Implementations raise ``CatalogQueryFailed`` when the source cannot
    be reached and ``CatalogMalformed`` when its answer is unusable.
    A problem with one product's own entry (such as a bad URL template)
    is ``ProductMisconfigured`` and only fails that product.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Catalog identifier (e.g. 'releases', 'feed')."""

    @abstractmethod
    def lookup(self, product: ProductConfig) -> CatalogRelease:
        """Return the newest build of ``product`` on its channel."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


def _http_get(url: str, timeout: float) -> bytes:
    try:
        with open_url(url, timeout) as resp:
            return resp.read()
    except urllib.error.HTTPError as e:
        raise CatalogQueryFailed(f"Catalog query {url} failed: HTTP {e.code} {e.reason}") from e
    except (urllib.error.URLError, OSError) as e:
        reason = getattr(e, "reason", e)
        raise CatalogQueryFailed(f"Catalog query {url} failed: {reason}") from e


# ── Per-product JSON endpoint ───────────────────────────────────


class ProductReleasesCatalog(ReleaseCatalog):
    """Queries the releases endpoint once per product.

    The answer is keyed by the product code::

        {"IIU": [{"build": "193.5233.102", "version": "2019.3",
                  "downloads": {"linux": {"link": "https://..."}}}]}
    """

    def __init__(self, base_url: str, platform: str = "linux", timeout: float = 60.0):
        self.base_url = base_url
        self.platform = platform
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "releases"

    def query_url(self, product: ProductConfig) -> str:
        params = {
            "code": product.code,
            "latest": "true",
            "type": "eap" if product.eap else "release",
        }
        return f"{self.base_url}?{urlencode(params)}"

    def lookup(self, product: ProductConfig) -> CatalogRelease:
        url = self.query_url(product)
        logger.debug("Querying %s for %s", url, product.name)
        body = _http_get(url, self.timeout)
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CatalogMalformed(f"Invalid JSON from {url}: {e}") from e
        return parse_releases(data, self.platform, source=url)


def parse_releases(data: Any, platform: str, source: str = "catalog") -> CatalogRelease:
    """Pick the newest release out of a releases-endpoint document.

    The single top-level key is the product code; its name is not
    checked, only its value is used.
    """
    if not isinstance(data, dict) or not data:
        raise CatalogMalformed(f"Expected a non-empty mapping from {source}")

    releases = next(iter(data.values()))
    if not isinstance(releases, list) or not releases:
        raise CatalogMalformed(f"No releases listed by {source}")

    latest = releases[0]
    if not isinstance(latest, dict):
        raise CatalogMalformed(f"Release entry from {source} is not an object")

    build = latest.get("build")
    if not isinstance(build, str) or not build:
        raise CatalogMalformed(f"Release from {source} has no build number")

    downloads = latest.get("downloads")
    entry = downloads.get(platform) if isinstance(downloads, dict) else None
    link = entry.get("link") if isinstance(entry, dict) else None
    if not isinstance(link, str) or not link:
        raise CatalogMalformed(f"Release {build} from {source} has no '{platform}' download")

    version = latest.get("version")
    return CatalogRelease(
        build=build,
        download_url=link,
        version=version if isinstance(version, str) else "",
    )


# ── Combined XML feed ───────────────────────────────────────────


class UpdatesFeedCatalog(ReleaseCatalog):
    """Reads the combined updates.xml feed, fetched once per run.

    Layout::

        <products>
          <product name="IntelliJ IDEA">
            <code>IU</code>
            <channel id="IDEA_EAP" status="eap">
              <build number="193.5096" fullNumber="193.5096.12" version="2019.3"/>
            </channel>
          </product>
        </products>

    Products match on the ``name`` attribute or a ``<code>`` child.
    The feed carries no download links, so the URL comes from the
    product's template with the build filled in.
    """

    def __init__(self, feed_url: str, timeout: float = 60.0):
        self.feed_url = feed_url
        self.timeout = timeout
        self._root: ET.Element | None = None

    @property
    def name(self) -> str:
        return "feed"

    def _document(self) -> ET.Element:
        if self._root is None:
            logger.debug("Fetching release feed %s", self.feed_url)
            body = _http_get(self.feed_url, self.timeout)
            try:
                self._root = ET.fromstring(body)
            except ET.ParseError as e:
                raise CatalogMalformed(f"Invalid XML from {self.feed_url}: {e}") from e
        return self._root

    def lookup(self, product: ProductConfig) -> CatalogRelease:
        if not product.download_url:
            raise ProductMisconfigured(
                f"{product.name} has no download URL template (needed with the feed catalog)"
            )
        channel = "eap" if product.eap else "release"
        builds = newest_feed_builds(self._document(), product.code, channel)
        if not builds:
            raise CatalogMalformed(
                f"No {channel} builds for '{product.code}' in {self.feed_url}"
            )
        build, version = max(builds)
        return CatalogRelease(
            build=build,
            download_url=format_download_url(product.download_url, build),
            version=version,
        )


def newest_feed_builds(root: ET.Element, code: str, channel: str) -> list[tuple[str, str]]:
    """Return ``(fullNumber, version)`` for every build of ``code`` on ``channel``."""
    found: list[tuple[str, str]] = []
    for product in root.iter("product"):
        codes = {c.text.strip() for c in product.findall("code") if c.text}
        if product.get("name") != code and code not in codes:
            continue
        for ch in product.findall("channel"):
            if ch.get("status", "").lower() != channel:
                continue
            for build in ch.findall("build"):
                full_number = build.get("fullNumber")
                if full_number:
                    found.append((full_number, build.get("version", "")))
    return found


def format_download_url(template: str, build: str) -> str:
    """Fill ``build`` into a ``%s`` or ``{build}`` URL template."""
    if "%s" in template:
        return template.replace("%s", build)
    try:
        return template.format(build=build)
    except (KeyError, IndexError, ValueError) as e:
        raise ProductMisconfigured(f"Bad download URL template {template!r}: {e}") from e


def make_catalog(settings: UpdaterSettings) -> ReleaseCatalog:
    """Build the catalog selected in the config."""
    if settings.catalog == "feed":
        return UpdatesFeedCatalog(settings.feed_url, timeout=settings.timeout)
    return ProductReleasesCatalog(
        settings.releases_url,
        platform=settings.platform,
        timeout=settings.timeout,
    )
