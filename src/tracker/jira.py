"""Async Jira Cloud REST adapter.

Every call opens its own ``httpx.AsyncClient`` with Basic auth built from the
configured email and API token; the client keeps no session state between
calls.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.config import Settings
from src.errors import ConfigurationError
from src.tracker.models import (
    JiraIssue,
    JiraProject,
    JiraTransition,
    JiraUser,
    issue_from_payload,
)

logger = logging.getLogger(__name__)

ISSUE_FIELDS = ["summary", "status", "priority", "assignee", "description", "issuetype", "created"]


class JiraAPIError(Exception):
    """A Jira call returned a non-2xx status (or never got a response)."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Jira API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class JiraConnectionError(JiraAPIError):
    """Transport-level failure talking to Jira."""

    def __init__(self, message: str) -> None:
        super().__init__(503, f"Failed to connect to Jira: {message}")


def escape_jql(value: str) -> str:
    """Escape a value for use inside a double-quoted JQL string literal."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


class JiraClient:
    """Stateless wrapper around the Jira v3 REST endpoints the service uses."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        if not settings.jira_configured:
            raise ConfigurationError(
                "Jira credentials not configured. Set JIRA_BASE_URL, JIRA_EMAIL and JIRA_API_TOKEN."
            )
        self.base_url = settings.jira_base_url.strip().rstrip("/")
        self._auth = httpx.BasicAuth(settings.jira_email.strip(), settings.jira_api_token.strip())
        self._timeout = settings.jira_timeout_seconds
        self._transport = transport

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            auth=self._auth,
            timeout=self._timeout,
            headers={"Accept": "application/json"},
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise JiraAPIError(e.response.status_code, e.response.text) from e
            except httpx.RequestError as e:
                raise JiraConnectionError(str(e)) from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise JiraAPIError(response.status_code, response.text) from e

    async def get_myself(self) -> JiraUser:
        """Validate the credentials and return the authenticated account."""
        data = await self._request("GET", "/rest/api/3/myself")
        return JiraUser(
            account_id=data.get("accountId", ""),
            display_name=data.get("displayName"),
            email_address=data.get("emailAddress"),
        )

    async def list_projects(self) -> list[JiraProject]:
        """Fetch all accessible Jira projects."""
        projects = await self._request("GET", "/rest/api/3/project")
        return [
            JiraProject(
                id=str(project["id"]),
                key=project["key"],
                name=project.get("name", project["key"]),
                project_type=project.get("projectTypeKey"),
            )
            for project in projects or []
        ]

    async def get_issue_types(self, project_key: str) -> list[str]:
        """Names of the issue types the caller may create in ``project_key``."""
        data = await self._request("GET", f"/rest/api/3/issue/createmeta/{project_key}/issuetypes")
        data = data or {}
        issue_types = data.get("issueTypes") or data.get("values") or []
        return [t["name"] for t in issue_types if t.get("name")]

    async def get_project_statuses(self, project_key: str) -> list[str]:
        """Distinct status names used across the project's issue types."""
        data = await self._request("GET", f"/rest/api/3/project/{project_key}/statuses")
        names: list[str] = []
        for issue_type in data or []:
            for status in issue_type.get("statuses", []):
                name = status.get("name")
                if name and name not in names:
                    names.append(name)
        return names

    async def create_issue(self, fields: dict[str, Any]) -> str:
        """Create an issue from a ready ``fields`` payload and return its key."""
        created = await self._request("POST", "/rest/api/3/issue", json={"fields": fields})
        if not isinstance(created, dict) or not created.get("key"):
            raise JiraAPIError(502, f"Issue creation returned no key: {created!r}")
        return str(created["key"])

    async def search_issues(self, jql: str, max_results: int = 50) -> list[JiraIssue]:
        """Run a JQL search and return issues in the order Jira ranks them."""
        data = await self._request(
            "POST",
            "/rest/api/3/search/jql",
            json={"jql": jql, "maxResults": max_results, "fields": ISSUE_FIELDS},
        )
        result = []
        for issue in (data or {}).get("issues", []):
            if not issue.get("key"):
                continue
            try:
                result.append(issue_from_payload(issue))
            except Exception as e:
                logger.warning("Skipping malformed issue %s: %s", issue.get("key"), e)
        return result

    async def get_transitions(self, issue_key: str) -> list[JiraTransition]:
        """Transitions available from the issue's current status."""
        data = await self._request("GET", f"/rest/api/3/issue/{issue_key}/transitions")
        return [
            JiraTransition(
                id=str(t["id"]),
                name=t.get("name", ""),
                to_status=(t.get("to") or {}).get("name", ""),
            )
            for t in (data or {}).get("transitions", [])
        ]

    async def transition_issue(self, issue_key: str, transition_id: str) -> None:
        """Move the issue along one workflow edge."""
        await self._request(
            "POST",
            f"/rest/api/3/issue/{issue_key}/transitions",
            json={"transition": {"id": transition_id}},
        )
