"""Load report.

Loading never raises for bad data. Each line that could not become an
entity is described by a :class:`SkippedLine` so callers can inspect what
was dropped, or ignore it.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class StoreName(StrEnum):
    VEHICLES = "vehicles"
    CUSTOMERS = "customers"
    RECORDS = "records"


class SkipReason(StrEnum):
    MALFORMED = "malformed"
    MISSING_REFERENCE = "missing_reference"
    DUPLICATE_KEY = "duplicate_key"


class SkippedLine(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    store: StoreName
    line_number: int = Field(..., description="1-based line number in the store file")
    line: str
    reason: SkipReason
    detail: str = ""


def _zero_counts() -> dict[StoreName, int]:
    return dict.fromkeys(StoreName, 0)


class LoadReport(BaseModel):
    """Outcome of reading the three stores at startup."""

    model_config = ConfigDict(extra="forbid")

    loaded: dict[StoreName, int] = Field(default_factory=_zero_counts)
    unavailable_stores: list[StoreName] = Field(default_factory=list)
    skipped: list[SkippedLine] = Field(default_factory=list)

    def add_loaded(self, store: StoreName) -> None:
        self.loaded[store] = self.loaded.get(store, 0) + 1

    def add_skipped(
        self,
        store: StoreName,
        line_number: int,
        line: str,
        reason: SkipReason,
        detail: str = "",
    ) -> None:
        self.skipped.append(
            SkippedLine(store=store, line_number=line_number, line=line, reason=reason, detail=detail)
        )

    def mark_unavailable(self, store: StoreName) -> None:
        if store not in self.unavailable_stores:
            self.unavailable_stores.append(store)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def count(self, reason: SkipReason, store: StoreName | None = None) -> int:
        """Number of skipped lines with *reason*, optionally limited to one store."""
        return sum(1 for item in self.skipped if item.reason == reason and (store is None or item.store == store))

    @property
    def ok(self) -> bool:
        """``True`` when every non-empty line of every store was loaded."""
        return not self.skipped
