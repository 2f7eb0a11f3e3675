"""Pydantic mirrors of the Jira entities the service reads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class JiraUser(BaseModel):
    """The account behind the configured API token."""

    account_id: str
    display_name: str | None = None
    email_address: str | None = None


class JiraProject(BaseModel):
    """Represents a Jira project."""

    id: str
    key: str
    name: str
    project_type: str | None = None


class JiraIssue(BaseModel):
    """Represents a Jira issue."""

    key: str
    summary: str
    status: str
    priority: str | None = None
    assignee: str | None = None
    description: str | None = None
    issue_type: str | None = None
    created: str | None = None


class JiraTransition(BaseModel):
    """A workflow edge available from an issue's current status."""

    id: str
    name: str
    to_status: str


def extract_description(description_field: Any) -> str | None:
    """Extract plain text from Jira v3 ADF description format."""
    if description_field is None:
        return None
    if isinstance(description_field, str):
        return description_field
    if isinstance(description_field, dict) and "content" in description_field:
        texts = []
        for block in description_field.get("content", []):
            for item in block.get("content", []):
                if item.get("type") == "text":
                    texts.append(item.get("text", ""))
        return " ".join(texts) if texts else None
    return str(description_field)


def to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text as a single-paragraph Atlassian Document Format doc."""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


def _name(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("name") or value.get("displayName")
    return value


def issue_from_payload(issue: dict[str, Any]) -> JiraIssue:
    """Build a JiraIssue from a search/get payload (``key`` + ``fields``)."""
    fields = issue.get("fields") or {}
    return JiraIssue(
        key=issue["key"],
        summary=fields.get("summary") or "",
        status=_name(fields.get("status")) or "Unknown",
        priority=_name(fields.get("priority")),
        assignee=_name(fields.get("assignee")),
        description=extract_description(fields.get("description")),
        issue_type=_name(fields.get("issuetype")),
        created=fields.get("created"),
    )
