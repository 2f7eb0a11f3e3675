"""Shared fixtures: test settings and an in-memory Jira behind httpx.MockTransport."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.config import Settings


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "gemini_api_key": "test-gemini-key",
        "jira_base_url": "https://example.atlassian.net",
        "jira_email": "bot@example.com",
        "jira_api_token": "test-token",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


def issue_payload(key: str, summary: str, status: str = "To Do", created: str = "2024-05-01T10:00:00.000+0000") -> dict[str, Any]:
    return {
        "key": key,
        "fields": {
            "summary": summary,
            "status": {"name": status},
            "description": None,
            "created": created,
        },
    }


def transition(id_: str, to: str) -> dict[str, Any]:
    return {"id": id_, "name": to, "to": {"name": to}}


DEFAULT_TRANSITIONS = [
    transition("11", "To Do"),
    transition("21", "In Progress"),
    transition("31", "Done"),
]


@dataclass
class FakeJira:
    """Just enough of Jira Cloud's v3 API for the service, recording every call."""

    projects: list[dict[str, Any]] = field(
        default_factory=lambda: [{"id": "10000", "key": "CRM", "name": "Customer Relations"}]
    )
    issue_types: list[str] = field(default_factory=lambda: ["Epic", "Task", "Subtask"])
    search_results: list[dict[str, Any]] = field(default_factory=list)
    transitions: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    fail_titles: set[str] = field(default_factory=set)
    fail_paths: dict[str, int] = field(default_factory=dict)
    create_overrides: dict[str, httpx.Response] = field(default_factory=dict)

    created: list[dict[str, Any]] = field(default_factory=list)
    searches: list[str] = field(default_factory=list)
    transitioned: list[tuple[str, str]] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if path in self.fail_paths:
            return httpx.Response(self.fail_paths[path], text="boom")

        if path == "/rest/api/3/myself":
            return httpx.Response(200, json={"accountId": "acc-1", "displayName": "Sync Bot"})
        if path == "/rest/api/3/project":
            return httpx.Response(200, json=self.projects)
        if re.fullmatch(r"/rest/api/3/issue/createmeta/[^/]+/issuetypes", path):
            return httpx.Response(200, json={"issueTypes": [{"name": n} for n in self.issue_types]})
        if re.fullmatch(r"/rest/api/3/project/[^/]+/statuses", path):
            return httpx.Response(
                200,
                json=[
                    {"name": "Task", "statuses": [{"name": "To Do"}, {"name": "In Progress"}, {"name": "Done"}]},
                    {"name": "Bug", "statuses": [{"name": "To Do"}, {"name": "Done"}]},
                ],
            )
        if path == "/rest/api/3/issue" and method == "POST":
            fields = json.loads(request.content)["fields"]
            if fields["summary"] in self.fail_titles:
                return httpx.Response(400, json={"errors": {"summary": "rejected"}})
            if fields["summary"] in self.create_overrides:
                return self.create_overrides[fields["summary"]]
            key = f"{fields['project']['key']}-{len(self.created) + 1}"
            self.created.append({"key": key, **fields})
            return httpx.Response(201, json={"id": "1", "key": key})
        if path == "/rest/api/3/search/jql":
            self.searches.append(json.loads(request.content)["jql"])
            return httpx.Response(200, json={"issues": self.search_results})
        if m := re.fullmatch(r"/rest/api/3/issue/([^/]+)/transitions", path):
            key = m.group(1)
            if method == "GET":
                return httpx.Response(
                    200, json={"transitions": self.transitions.get(key, DEFAULT_TRANSITIONS)}
                )
            self.transitioned.append((key, json.loads(request.content)["transition"]["id"]))
            return httpx.Response(204)

        return httpx.Response(404, text=f"unexpected {method} {path}")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_jira() -> FakeJira:
    return FakeJira()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def jira_issue():
    return issue_payload


@pytest.fixture
def jira_transition():
    return transition
