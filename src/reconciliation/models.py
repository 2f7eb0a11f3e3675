"""Data models for reconciliation runs and their per-item outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from src.pipeline_config import MediaKind


class ItemKind(StrEnum):
    """What a batch item was: a new task or an update directive."""

    TASK = "task"
    DIRECTIVE = "directive"


class OutcomeStatus(StrEnum):
    """How a single batch item ended."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SessionContext:
    """Where the media came from; only narrated into created issues."""

    session_id: str
    kind: MediaKind = MediaKind.AUDIO
    interface_type: str | None = None


@dataclass
class ItemOutcome:
    """Result of processing one task or directive."""

    kind: ItemKind
    index: int
    status: OutcomeStatus
    label: str
    key: str | None = None
    reason: str | None = None


@dataclass
class CreatedIssue:
    """An issue created from an extracted task."""

    key: str
    title: str
    status: str
    source: str
    project: str | None = None


@dataclass
class UpdatedIssue:
    """An existing issue moved to a new status by a directive."""

    key: str
    title: str
    old_status: str
    new_status: str
    reason: str | None = None


_SUMMARY_PREFIX: dict[MediaKind, str] = {
    MediaKind.AUDIO: "Meeting processed successfully.",
    MediaKind.SCREEN: "Screenshot processed successfully.",
    MediaKind.VIDEO: "Video processed successfully.",
}


@dataclass
class ReconciliationResult:
    """Everything one reconciliation run did, item by item."""

    created: list[CreatedIssue] = field(default_factory=list)
    updated: list[UpdatedIssue] = field(default_factory=list)
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.created) + len(self.updated)

    def outcomes_with(self, status: OutcomeStatus) -> list[ItemOutcome]:
        return [o for o in self.outcomes if o.status is status]

    def summary(self, kind: MediaKind = MediaKind.AUDIO) -> str:
        return (
            f"{_SUMMARY_PREFIX[kind]} Tasks created: {len(self.created)}, "
            f"updated: {len(self.updated)}"
        )
