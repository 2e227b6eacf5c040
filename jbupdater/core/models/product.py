"""
Product model — one configured JetBrains product to keep up to date.

Loaded from the updater config file. Keys accept both the snake_case
names used in YAML configs and the capitalised names of the original
config.json layout (Name, Url, ParentDir, Dir, Chmod, Enabled).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_RELEASES_URL = "https://data.services.jetbrains.com/products/releases"
DEFAULT_FEED_URL = "https://www.jetbrains.com/updates/updates.xml"


class ProductConfig(BaseModel):
    """A product entry — immutable for the duration of a run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(validation_alias=AliasChoices("name", "Name"))
    remote_id: str = Field(
        "", validation_alias=AliasChoices("code", "remote_id", "Code")
    )
    download_url: str = Field(
        "", validation_alias=AliasChoices("download_url", "url", "Url")
    )
    install_parent_dir: str = Field(
        "", validation_alias=AliasChoices("parent_dir", "install_parent_dir", "ParentDir")
    )
    install_dir_name: str = Field(
        "", validation_alias=AliasChoices("dir", "install_dir_name", "install_dir", "Dir")
    )
    permissions: str | None = Field(
        None, validation_alias=AliasChoices("chmod", "permissions", "Chmod")
    )
    enabled: bool = Field(True, validation_alias=AliasChoices("enabled", "Enabled"))
    eap: bool = Field(True, validation_alias=AliasChoices("eap", "Eap", "EAP"))
    label: str = Field("", validation_alias=AliasChoices("label", "Label"))

    @field_validator("permissions", mode="before")
    @classmethod
    def _blank_permissions(cls, value: object) -> object:
        # An empty Chmod in the old config.json meant "not set"
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        # YAML 1.1 reads an unquoted 0755 as the octal integer 493
        if isinstance(value, int) and not isinstance(value, bool):
            return f"{value:04o}"
        return value

    @property
    def code(self) -> str:
        """Identifier used to query the release catalog."""
        return self.remote_id or self.name

    @property
    def marker_label(self) -> str:
        """Label written in front of the build number in build.txt."""
        return self.label or self.code

    @property
    def install_dir(self) -> Path:
        return Path(self.install_parent_dir) / self.install_dir_name

    @property
    def is_installable(self) -> bool:
        """Enabled and both directory fields set."""
        return self.enabled and bool(self.install_parent_dir) and bool(self.install_dir_name)


class UpdaterSettings(BaseModel):
    """Root config model — the whole updater config file."""

    model_config = ConfigDict(extra="ignore")

    catalog: Literal["releases", "feed"] = "releases"
    releases_url: str = DEFAULT_RELEASES_URL
    feed_url: str = DEFAULT_FEED_URL
    platform: str = "linux"
    timeout: float = 60.0
    temp_dir: str | None = None

    products: list[ProductConfig] = Field(default_factory=list)

    def enabled_products(self) -> list[ProductConfig]:
        return [p for p in self.products if p.is_installable]
