"""Pipeline configuration: media/policy enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from src.config import Settings
from src.errors import ConfigurationError


class MediaKind(StrEnum):
    """Kinds of captured media the service accepts."""

    AUDIO = "audio"
    SCREEN = "screen"
    VIDEO = "video"


class UpdateMatchPolicy(StrEnum):
    """How an update directive picks its target when several issues match."""

    MOST_RECENT = "most_recent"
    UNIQUE = "unique"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for one reconciliation run.

    Defaults mirror the project's current behaviour (CRM project, newest
    match wins, no cap on created tasks).
    """

    project_key: str = "CRM"
    project_hint: str = "LEARN"
    update_match_policy: UpdateMatchPolicy = UpdateMatchPolicy.MOST_RECENT
    search_limit: int = 5
    max_tasks: int | None = None

    @classmethod
    def from_settings(cls, settings: Settings, kind: MediaKind) -> PipelineConfig:
        try:
            policy = UpdateMatchPolicy(settings.update_match_policy.strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in UpdateMatchPolicy)
            raise ConfigurationError(
                f"Invalid UPDATE_MATCH_POLICY {settings.update_match_policy!r}; expected one of: {allowed}"
            ) from None
        return cls(
            project_key=settings.jira_project_key,
            project_hint=settings.jira_project_hint,
            update_match_policy=policy,
            search_limit=settings.jira_search_limit,
            max_tasks=settings.video_max_tasks if kind is MediaKind.VIDEO else None,
        )
