"""Pydantic request/response schemas for the Meeting Task Sync API.

Bodies use camelCase on the wire (the browser capture surfaces send
``audioData``, ``meetingId``...). Snake-case field names are accepted too.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Media submission
# ---------------------------------------------------------------------------


class TranscribeRequest(ApiModel):
    """Request body for /api/gemini/transcribe (inline audio or a URL to fetch)."""

    audio_data: str | None = None
    audio_url: str | None = None
    mime_type: str | None = None
    meeting_id: str = "unknown"


class ScreenAnalysisRequest(ApiModel):
    """Request body for /api/gemini/analyze-screen."""

    image_data: str | None = None
    mime_type: str | None = None
    session_id: str = "unknown"


class VideoAnalysisRequest(ApiModel):
    """Request body for /api/gemini/analyze-video."""

    video_data: str | None = None
    mime_type: str | None = None
    session_id: str = "unknown"


class CreatedTaskResponse(ApiModel):
    key: str
    title: str
    status: str
    source: str
    project: str | None = None


class UpdatedTaskResponse(ApiModel):
    key: str
    title: str
    old_status: str
    new_status: str
    reason: str | None = None


class ItemOutcomeResponse(ApiModel):
    """How one task or directive of the batch ended."""

    kind: str
    index: int
    status: str
    label: str
    key: str | None = None
    reason: str | None = None


class MediaAnalysisResponse(ApiModel):
    """Response body for every media submission endpoint."""

    success: bool = True
    analysis: dict[str, Any]
    created_tasks: list[CreatedTaskResponse] = []
    updated_tasks: list[UpdatedTaskResponse] = []
    outcomes: list[ItemOutcomeResponse] = []
    total_processed: int = 0
    message: str


class ErrorResponse(ApiModel):
    """Body returned when a whole submission or tracker call fails."""

    success: bool = False
    error: str
    details: str | None = None
    quota_exceeded: bool | None = None


# ---------------------------------------------------------------------------
# Jira
# ---------------------------------------------------------------------------


class ProjectResponse(ApiModel):
    key: str
    name: str
    id: str
    project_type_key: str | None = None


class JiraProjectsResponse(ApiModel):
    """Response body for /api/jira/projects."""

    success: bool = True
    user: str | None = None
    account_id: str | None = None
    projects: list[ProjectResponse] = []


class ProjectStatusesResponse(ApiModel):
    success: bool = True
    project_key: str
    statuses: list[str] = []


class TaskResponse(ApiModel):
    key: str
    summary: str
    status: str
    priority: str | None = None
    assignee: str | None = None
    description: str | None = None
    issue_type: str | None = None
    created: str | None = None


class JiraTasksResponse(ApiModel):
    """Response body for GET /api/jira/tasks."""

    success: bool = True
    project_key: str
    tasks: list[TaskResponse] = []


class CreateTaskRequest(ApiModel):
    """Request body for POST /api/jira/tasks."""

    title: str
    description: str | None = None
    priority: str | None = None


class CreateTaskResponse(ApiModel):
    success: bool = True
    key: str
    project_key: str
    message: str


# ---------------------------------------------------------------------------
# Zoom
# ---------------------------------------------------------------------------


class ZoomConnectRequest(ApiModel):
    meeting_url: str


class ZoomConnectResponse(ApiModel):
    success: bool = True
    meeting: dict[str, Any]
    message: str
