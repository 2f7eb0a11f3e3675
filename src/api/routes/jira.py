"""Jira endpoints: credential check, project listing, task listing and manual creation."""

from __future__ import annotations

from fastapi import APIRouter

from src.api.models import (
    CreateTaskRequest,
    CreateTaskResponse,
    JiraProjectsResponse,
    JiraTasksResponse,
    ProjectResponse,
    ProjectStatusesResponse,
    TaskResponse,
)
from src.config import settings
from src.pipeline_config import MediaKind, PipelineConfig
from src.reconciliation.engine import TaskReconciler
from src.tracker.jira import JiraClient
from src.tracker.models import to_adf
from src.tracker.vocabulary import jira_priority

router = APIRouter()

TASK_LIST_LIMIT = 50


def _reconciler(jira: JiraClient) -> TaskReconciler:
    return TaskReconciler(jira, PipelineConfig.from_settings(settings, MediaKind.AUDIO))


@router.get("/api/jira/projects", response_model=JiraProjectsResponse)
async def list_projects() -> JiraProjectsResponse:
    """Validate the configured credentials and list every visible project."""
    jira = JiraClient(settings)
    user = await jira.get_myself()
    projects = await jira.list_projects()
    return JiraProjectsResponse(
        user=user.display_name,
        account_id=user.account_id,
        projects=[
            ProjectResponse(key=p.key, name=p.name, id=p.id, project_type_key=p.project_type)
            for p in projects
        ],
    )


@router.get("/api/jira/projects/{project_key}/statuses", response_model=ProjectStatusesResponse)
async def project_statuses(project_key: str) -> ProjectStatusesResponse:
    """Distinct workflow statuses used in a project."""
    jira = JiraClient(settings)
    statuses = await jira.get_project_statuses(project_key)
    return ProjectStatusesResponse(project_key=project_key, statuses=statuses)


@router.get("/api/jira/tasks", response_model=JiraTasksResponse)
async def list_tasks() -> JiraTasksResponse:
    """Latest issues of the project new tasks are created in."""
    jira = JiraClient(settings)
    project_key = await _reconciler(jira).resolve_project()
    issues = await jira.search_issues(
        f"project = {project_key} ORDER BY created DESC", max_results=TASK_LIST_LIMIT
    )
    return JiraTasksResponse(
        project_key=project_key,
        tasks=[TaskResponse(**issue.model_dump()) for issue in issues],
    )


@router.post("/api/jira/tasks", response_model=CreateTaskResponse)
async def create_task(request: CreateTaskRequest) -> CreateTaskResponse:
    """Create a single task by hand, outside of any media analysis."""
    jira = JiraClient(settings)
    reconciler = _reconciler(jira)
    project_key = await reconciler.resolve_project()
    issue_type = await reconciler.resolve_issue_type(project_key)

    fields: dict[str, object] = {
        "project": {"key": project_key},
        "summary": request.title,
        "issuetype": {"name": issue_type},
    }
    if request.description:
        fields["description"] = to_adf(request.description)
    if request.priority:
        fields["priority"] = {"name": str(jira_priority(request.priority))}

    key = await jira.create_issue(fields)
    return CreateTaskResponse(
        key=key,
        project_key=project_key,
        message=f"Task {key} created in Jira",
    )
