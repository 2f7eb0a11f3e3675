"""Turn Gemini's free-text answer into a MediaAnalysis."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel, to_snake

from src.analysis.models import ExtractedTask, MediaAnalysis, UpdateDirective
from src.pipeline_config import MediaKind

logger = logging.getLogger(__name__)

# Leftmost "{" through rightmost "}"; not a brace matcher.
_JSON_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_span(text: str) -> str | None:
    """Return the greedy ``{...}`` span of ``text``, or None if there is none."""
    match = _JSON_SPAN.search(text)
    return match.group(0) if match else None


def fallback_analysis(text: str, kind: MediaKind) -> MediaAnalysis:
    """Degraded analysis: raw text kept, no tasks, no update directives."""
    if kind is MediaKind.SCREEN:
        return MediaAnalysis(
            extracted_text=text,
            interface_type="unknown",
            confidence="low",
            degraded=True,
        )
    return MediaAnalysis(transcription=text, degraded=True)


def _pop(data: dict[str, Any], field: str) -> Any:
    """Remove a field from ``data`` under either its camelCase or snake_case key."""
    camel = data.pop(to_camel(field), None)
    snake = data.pop(field, None)
    return camel if camel is not None else snake


def _validate_items(raw: Any, model: type[BaseModel], label: str) -> list[Any]:
    """Validate list entries one by one; an invalid entry is logged and dropped."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring %s: expected a list, got %s", label, type(raw).__name__)
        return []

    items = []
    for index, entry in enumerate(raw):
        try:
            items.append(model.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s #%d: %s", label, index, exc.errors()[0]["msg"])
    return items


def _validate_envelope(data: dict[str, Any]) -> MediaAnalysis:
    """Validate the top-level fields, dropping any that fail instead of the whole answer."""
    try:
        return MediaAnalysis.model_validate(data)
    except ValidationError as exc:
        bad = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        logger.warning("Dropping invalid analysis fields: %s", sorted(bad))
        kept = {k: v for k, v in data.items() if k not in bad and to_snake(k) not in bad}
        return MediaAnalysis.model_validate(kept)


def parse_analysis(text: str, kind: MediaKind = MediaKind.AUDIO) -> MediaAnalysis:
    """Parse a Gemini response into a MediaAnalysis, failing soft.

    Tasks and update directives are validated individually, so one malformed
    entry costs only itself.

    Args:
        text: The raw response text, JSON possibly wrapped in prose or fences.
        kind: The submitted medium; decides which text field the fallback fills.

    Returns:
        The decoded analysis, or the degraded fallback when no usable JSON
        object is found.
    """
    span = extract_json_span(text)
    if span is None:
        logger.warning("No JSON object in %s analysis (%d chars)", kind, len(text))
        return fallback_analysis(text, kind)

    try:
        data = json.loads(span)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        tasks = _validate_items(_pop(data, "tasks"), ExtractedTask, "task")
        updates = _validate_items(_pop(data, "task_updates"), UpdateDirective, "task update")
        analysis = _validate_envelope(data)
    except ValueError as exc:  # covers JSONDecodeError and ValidationError
        logger.warning("Could not decode %s analysis: %s", kind, exc)
        return fallback_analysis(text, kind)

    return analysis.model_copy(update={"tasks": tasks, "task_updates": updates})
