"""Status and priority vocabularies shared by the analysis and the tracker.

Gemini answers in free text (English or Russian, depending on the prompt and
the meeting language) while Jira speaks its own workflow vocabulary. Both are
folded onto the closed enums below through one synonym table each.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.tracker.models import JiraTransition


class TaskStatus(StrEnum):
    """Canonical workflow states, named the way Jira names them."""

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class TaskPriority(StrEnum):
    """Jira's three-level priority vocabulary."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# Keys are normalised with _normalise(): lower case, no spaces/underscores/hyphens.
STATUS_SYNONYMS: dict[str, TaskStatus] = {
    "todo": TaskStatus.TODO,
    "open": TaskStatus.TODO,
    "backlog": TaskStatus.TODO,
    "квыполнению": TaskStatus.TODO,
    "сделать": TaskStatus.TODO,
    "inprogress": TaskStatus.IN_PROGRESS,
    "вработе": TaskStatus.IN_PROGRESS,
    "впроцессе": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.DONE,
    "completed": TaskStatus.DONE,
    "complete": TaskStatus.DONE,
    "finished": TaskStatus.DONE,
    "готово": TaskStatus.DONE,
    "выполнено": TaskStatus.DONE,
    "завершено": TaskStatus.DONE,
}

PRIORITY_SYNONYMS: dict[str, TaskPriority] = {
    "high": TaskPriority.HIGH,
    "высокий": TaskPriority.HIGH,
    "medium": TaskPriority.MEDIUM,
    "средний": TaskPriority.MEDIUM,
    "low": TaskPriority.LOW,
    "низкий": TaskPriority.LOW,
}

INITIAL_STATUS = TaskStatus.TODO

_SEPARATORS = re.compile(r"[\s_\-]+")


def _normalise(value: str) -> str:
    return _SEPARATORS.sub("", value).casefold()


def parse_status(value: str | None) -> TaskStatus | None:
    """Map free-text status onto TaskStatus, or None when unrecognised."""
    if not value:
        return None
    return STATUS_SYNONYMS.get(_normalise(value))


def parse_priority(value: str | None) -> TaskPriority | None:
    """Map free-text priority onto TaskPriority, or None when unrecognised."""
    if not value:
        return None
    return PRIORITY_SYNONYMS.get(_normalise(value))


def jira_priority(value: str | None) -> TaskPriority:
    """Total priority mapping: unknown or absent values fall back to Medium."""
    return parse_priority(value) or TaskPriority.MEDIUM


def needs_transition(status: str | None) -> bool:
    """True when a freshly created issue must be moved out of its initial state.

    Absent status means the issue stays where Jira creates it. Unrecognised
    text still gets a transition attempt, matched by substring.
    """
    if not status or not status.strip():
        return False
    return parse_status(status) is not INITIAL_STATUS


def status_matches(target: str, destination: str) -> bool:
    """Whether a transition into ``destination`` satisfies ``target``.

    Case-insensitive substring of the destination name first, then synonym
    equality ("InProgress" vs "В работе", "Done" vs "Выполнено").
    """
    needle = target.strip().casefold()
    if needle and needle in destination.casefold():
        return True
    wanted = parse_status(target)
    return wanted is not None and parse_status(destination) is wanted


def find_transition(
    transitions: Iterable[JiraTransition], target: str
) -> JiraTransition | None:
    """Return the first transition whose destination matches ``target``."""
    for transition in transitions:
        if status_matches(target, transition.to_status):
            return transition
    return None
