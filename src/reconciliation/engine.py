"""Reconcile a media analysis with Jira: create new issues, transition existing ones.

Every task and directive is processed on its own. A tracker failure on one
item is logged, recorded as a FAILED outcome and the batch moves on; only a
project-less Jira account aborts the whole run.
"""

from __future__ import annotations

import logging

from src.analysis.models import ExtractedTask, MediaAnalysis, UpdateDirective
from src.errors import NoProjectError
from src.pipeline_config import MediaKind, PipelineConfig, UpdateMatchPolicy
from src.reconciliation.models import (
    CreatedIssue,
    ItemKind,
    ItemOutcome,
    OutcomeStatus,
    ReconciliationResult,
    SessionContext,
    UpdatedIssue,
)
from src.tracker.jira import JiraAPIError, JiraClient, escape_jql
from src.tracker.models import JiraTransition, to_adf
from src.tracker.vocabulary import INITIAL_STATUS, find_transition, jira_priority, needs_transition

logger = logging.getLogger(__name__)

ISSUE_TYPE_PREFERENCE = ("Task", "Story", "Bug")
DEFAULT_ISSUE_TYPE = "Task"

_SOURCE_LABELS: dict[MediaKind, str] = {
    MediaKind.AUDIO: "Meeting recording",
    MediaKind.SCREEN: "Screen capture analysis",
    MediaKind.VIDEO: "Video analysis",
}


def build_update_jql(project_key: str, keywords: list[str]) -> str:
    """JQL matching any keyword in summary or description, newest first."""
    clauses = " OR ".join(
        f'summary ~ "{escape_jql(k)}" OR description ~ "{escape_jql(k)}"' for k in keywords
    )
    return f"project = {project_key} AND ({clauses}) ORDER BY created DESC"


def compose_description(task: ExtractedTask, context: SessionContext) -> str:
    """Task description followed by provenance lines.

    Assignee and status are narrated here only; they are never set as Jira fields.
    """
    lines = [
        f"Source: {_SOURCE_LABELS[context.kind]}",
        f"Session: {context.session_id}",
    ]
    interface = task.source or context.interface_type
    if context.kind is MediaKind.SCREEN or interface:
        lines.append(f"Interface type: {interface or 'unknown'}")
    if context.kind is MediaKind.SCREEN or task.project:
        lines.append(f"Project: {task.project or 'Not specified'}")
    lines.append(f"Assignee: {task.assignee or 'Unassigned'}")
    if task.deadline:
        lines.append(f"Deadline: {task.deadline}")
    lines.append(f"Status: {task.status or INITIAL_STATUS}")

    body = (task.description or "").strip()
    provenance = "\n".join(lines)
    return f"{body}\n\n{provenance}" if body else provenance


def build_issue_fields(
    project_key: str, issue_type: str, task: ExtractedTask, context: SessionContext
) -> dict[str, object]:
    """The ``fields`` payload for creating ``task`` in ``project_key``."""
    fields: dict[str, object] = {
        "project": {"key": project_key},
        "summary": task.title,
        "description": to_adf(compose_description(task, context)),
        "issuetype": {"name": issue_type},
    }
    # Absent priority leaves Jira's default in place.
    if task.priority:
        fields["priority"] = {"name": str(jira_priority(task.priority))}
    return fields


class TaskReconciler:
    """Turns a MediaAnalysis into Jira mutations and reports what happened."""

    def __init__(self, jira: JiraClient, config: PipelineConfig | None = None) -> None:
        self.jira = jira
        self.config = config or PipelineConfig()

    async def reconcile(
        self, analysis: MediaAnalysis, context: SessionContext
    ) -> ReconciliationResult:
        """Apply update directives, then create issues for new tasks.

        Both lists are processed strictly in input order, one call at a time.

        Raises:
            NoProjectError: Jira returned no project to create issues in.
        """
        result = ReconciliationResult()

        for index, directive in enumerate(analysis.task_updates):
            await self._apply_directive(index, directive, result)

        tasks = analysis.new_tasks
        if self.config.max_tasks is not None and len(tasks) > self.config.max_tasks:
            logger.info("Capping %d extracted tasks to %d", len(tasks), self.config.max_tasks)
            tasks = tasks[: self.config.max_tasks]

        for index, task in enumerate(tasks):
            await self._create_task(index, task, context, result)

        logger.info(
            "Reconciled session %s: %d created, %d updated, %d skipped, %d failed",
            context.session_id,
            len(result.created),
            len(result.updated),
            len(result.outcomes_with(OutcomeStatus.SKIPPED)),
            len(result.outcomes_with(OutcomeStatus.FAILED)),
        )
        return result

    # ------------------------------------------------------------------
    # Update directives
    # ------------------------------------------------------------------

    async def _apply_directive(
        self, index: int, directive: UpdateDirective, result: ReconciliationResult
    ) -> None:
        keywords = [k.strip() for k in directive.search_keywords if k and k.strip()]
        label = ", ".join(keywords)

        def outcome(status: OutcomeStatus, reason: str | None = None, key: str | None = None) -> None:
            result.outcomes.append(
                ItemOutcome(ItemKind.DIRECTIVE, index, status, label, key=key, reason=reason)
            )

        if not keywords:
            outcome(OutcomeStatus.SKIPPED, "no search keywords")
            return

        try:
            matches = await self.jira.search_issues(
                build_update_jql(self.config.project_key, keywords),
                max_results=self.config.search_limit,
            )
            if not matches:
                logger.info("No existing issue matches keywords %s", keywords)
                outcome(OutcomeStatus.SKIPPED, "no matching issue")
                return
            if self.config.update_match_policy is UpdateMatchPolicy.UNIQUE and len(matches) > 1:
                logger.info("Keywords %s match %d issues; skipping", keywords, len(matches))
                outcome(OutcomeStatus.SKIPPED, f"{len(matches)} issues match")
                return

            target = matches[0]
            transition = await self._find_transition(target.key, directive.new_status)
            if transition is None:
                outcome(OutcomeStatus.SKIPPED, f"no transition to {directive.new_status!r}", target.key)
                return

            await self.jira.transition_issue(target.key, transition.id)
        except JiraAPIError as exc:
            logger.warning("Update for keywords %s failed: %s", keywords, exc)
            outcome(OutcomeStatus.FAILED, str(exc))
            return

        logger.info("Moved %s from %s to %s", target.key, target.status, transition.to_status)
        result.updated.append(
            UpdatedIssue(
                key=target.key,
                title=target.summary,
                old_status=target.status,
                new_status=directive.new_status,
                reason=directive.reason,
            )
        )
        outcome(OutcomeStatus.UPDATED, directive.reason, target.key)

    async def _find_transition(self, issue_key: str, target: str) -> JiraTransition | None:
        transitions = await self.jira.get_transitions(issue_key)
        transition = find_transition(transitions, target)
        if transition is None:
            logger.info(
                "No transition to %r from current status of %s (available: %s)",
                target,
                issue_key,
                [t.to_status for t in transitions],
            )
        return transition

    # ------------------------------------------------------------------
    # New tasks
    # ------------------------------------------------------------------

    async def _create_task(
        self,
        index: int,
        task: ExtractedTask,
        context: SessionContext,
        result: ReconciliationResult,
    ) -> None:
        try:
            project_key = await self.resolve_project()
            issue_type = await self.resolve_issue_type(project_key)
            key = await self.jira.create_issue(
                build_issue_fields(project_key, issue_type, task, context)
            )
        except JiraAPIError as exc:
            logger.warning("Creating task %r failed: %s", task.title, exc)
            result.outcomes.append(
                ItemOutcome(ItemKind.TASK, index, OutcomeStatus.FAILED, task.title, reason=str(exc))
            )
            return

        logger.info("Created %s (%s) from task %r", key, issue_type, task.title)
        if needs_transition(task.status):
            await self._move_new_issue(key, str(task.status))

        result.created.append(
            CreatedIssue(
                key=key,
                title=task.title,
                status=task.status or str(INITIAL_STATUS),
                source=task.source or context.interface_type or str(context.kind),
                project=task.project,
            )
        )
        result.outcomes.append(ItemOutcome(ItemKind.TASK, index, OutcomeStatus.CREATED, task.title, key=key))

    async def _move_new_issue(self, key: str, status: str) -> None:
        """Best effort: the issue exists either way."""
        try:
            transition = await self._find_transition(key, status)
            if transition is not None:
                await self.jira.transition_issue(key, transition.id)
                logger.info("Set status %s on %s via transition %s", status, key, transition.id)
        except JiraAPIError as exc:
            logger.warning("Could not move %s to %r: %s", key, status, exc)

    async def resolve_project(self) -> str:
        """Preferred key, else a project matching the hint, else the first one."""
        projects = await self.jira.list_projects()
        if not projects:
            raise NoProjectError("No accessible Jira projects found")

        for project in projects:
            if project.key == self.config.project_key:
                return project.key

        hint = self.config.project_hint.casefold()
        if hint:
            for project in projects:
                if hint in project.name.casefold() or hint in project.key.casefold():
                    return project.key

        return projects[0].key

    async def resolve_issue_type(self, project_key: str) -> str:
        try:
            available = await self.jira.get_issue_types(project_key)
        except JiraAPIError as exc:
            logger.warning("Issue type discovery for %s failed, using %s: %s", project_key, DEFAULT_ISSUE_TYPE, exc)
            return DEFAULT_ISSUE_TYPE

        for name in ISSUE_TYPE_PREFERENCE:
            if name in available:
                return name
        return DEFAULT_ISSUE_TYPE
