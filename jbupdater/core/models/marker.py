"""
InstalledMarker — the build.txt record of what is installed.

The file holds a single line ``<label>-<build>``. Anything that does not
split into exactly two hyphen-separated fields is not a marker.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

MARKER_FILE = "build.txt"


class InstalledMarker(BaseModel):
    """Product label and build identifier of an installation."""

    model_config = ConfigDict(frozen=True)

    label: str
    build: str

    @classmethod
    def parse(cls, text: str) -> InstalledMarker | None:
        """Parse marker text, or return None when it is malformed."""
        fields = text.strip().split("-")
        if len(fields) != 2:
            return None
        return cls(label=fields[0], build=fields[1])

    def render(self) -> str:
        return f"{self.label}-{self.build}"
