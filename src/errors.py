"""Submission-level failures.

Anything raised from here aborts the whole media submission; the API layer
turns it into a ``{"success": false, "error": ...}`` response. Per-item
tracker failures never use these classes.
"""

from __future__ import annotations


class SubmissionError(Exception):
    """Base class for failures that abort a whole submission."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(SubmissionError):
    """A required credential (Gemini key, Jira/Zoom credentials) is missing."""


class InvalidMediaError(SubmissionError):
    """The request carried no media payload, or one that is not valid base64."""

    status_code = 400


class AnalysisError(SubmissionError):
    """The Gemini call failed in transport or could not be read."""


class QuotaExceededError(AnalysisError):
    """Gemini rejected the call for quota reasons; the user should retry later."""

    status_code = 429


class NoProjectError(SubmissionError):
    """The Jira credentials cannot see any project to create issues in."""
