"""
Outcome models — what happened to each product during a run.

A ProductOutcome is to a product what a Receipt is to an action:
the orchestrator never lets a product failure escape as an exception,
it records it here instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

OutcomeStatus = Literal["updated", "up_to_date", "outdated", "skipped", "failed"]


def now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class ProductOutcome(BaseModel):
    """Result of processing a single product."""

    product: str
    status: OutcomeStatus

    installed_build: str | None = None
    candidate_build: str | None = None
    url: str | None = None

    message: str = ""
    error: str | None = None
    error_kind: str | None = None

    started_at: str = Field(default_factory=now_iso)
    ended_at: str = Field(default_factory=now_iso)

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def skip(cls, product: str, reason: str, **kwargs: Any) -> ProductOutcome:
        return cls(product=product, status="skipped", message=reason, **kwargs)

    @classmethod
    def failure(
        cls,
        product: str,
        error: Exception,
        **kwargs: Any,
    ) -> ProductOutcome:
        return cls(
            product=product,
            status="failed",
            error=str(error),
            error_kind=getattr(error, "kind", type(error).__name__),
            **kwargs,
        )


@dataclass
class UpdateReport:
    """All outcomes of one batch, in configuration order."""

    outcomes: list[ProductOutcome] = field(default_factory=list)
    aborted: bool = False

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def updated(self) -> int:
        return self._count("updated")

    @property
    def up_to_date(self) -> int:
        return self._count("up_to_date")

    @property
    def outdated(self) -> int:
        return self._count("outdated")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.updated > 0 or self.up_to_date > 0:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "aborted": self.aborted,
            "total": self.total,
            "updated": self.updated,
            "up_to_date": self.up_to_date,
            "outdated": self.outdated,
            "skipped": self.skipped,
            "failed": self.failed,
            "outcomes": [o.model_dump(mode="json") for o in self.outcomes],
        }
