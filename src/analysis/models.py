"""Data models for the structured analysis Gemini returns for a media payload."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Accepts both camelCase (the prompt schema) and snake_case keys; numbers read as strings."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow", coerce_numbers_to_str=True
    )


class ExtractedTask(_CamelModel):
    """A single action item detected in the media."""

    title: str
    description: str | None = None
    assignee: str | None = None
    deadline: str | None = None
    priority: str | None = None
    status: str | None = None
    is_update: bool = False
    project: str | None = None  # screen captures only
    source: str | None = None  # interface the task was read from (Jira, Trello, chat...)


class UpdateDirective(_CamelModel):
    """A hint that an already-tracked issue changed state."""

    search_keywords: list[str] = Field(default_factory=list)
    new_status: str
    reason: str | None = None


class MediaAnalysis(_CamelModel):
    """Everything Gemini extracted from one submission."""

    transcription: str | None = None
    extracted_text: str | None = None
    tasks: list[ExtractedTask] = Field(default_factory=list)
    task_updates: list[UpdateDirective] = Field(default_factory=list)
    decisions: list[Any] = Field(default_factory=list)
    participants: list[Any] = Field(default_factory=list)
    interface_type: str | None = None
    project_context: str | None = None
    confidence: str | None = None
    degraded: bool = False

    @property
    def new_tasks(self) -> list[ExtractedTask]:
        return [task for task in self.tasks if not task.is_update]
