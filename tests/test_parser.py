"""Tests for parsing Gemini responses into MediaAnalysis (pure, no APIs)."""

from __future__ import annotations

import json

from src.analysis.parser import extract_json_span, parse_analysis
from src.pipeline_config import MediaKind


class TestExtractJsonSpan:
    def test_object_inside_prose(self) -> None:
        text = 'Here is the result:\n```json\n{"tasks": []}\n```\nHope that helps.'
        assert extract_json_span(text) == '{"tasks": []}'

    def test_no_braces(self) -> None:
        assert extract_json_span("Nothing structured here.") is None

    def test_greedy_leftmost_to_rightmost(self) -> None:
        """Two fragments are captured as one span, braces in between included."""
        text = 'Example: {"a": 1} and the answer {"b": 2}'
        assert extract_json_span(text) == '{"a": 1} and the answer {"b": 2}'


class TestParseAnalysis:
    def test_well_formed_object_in_prose(self) -> None:
        payload = {
            "transcription": "We need to fix the login bug.",
            "tasks": [
                {
                    "title": "Fix login bug",
                    "description": "Users cannot sign in",
                    "assignee": "Anna",
                    "priority": "Высокий",
                    "status": "To Do",
                    "isUpdate": False,
                }
            ],
            "taskUpdates": [
                {
                    "searchKeywords": ["billing", "invoice"],
                    "newStatus": "Done",
                    "reason": "completed per discussion",
                }
            ],
            "decisions": ["Ship on Friday"],
            "participants": ["Anna", "Boris"],
        }
        text = f"Sure! Here is the analysis:\n{json.dumps(payload, ensure_ascii=False)}\nDone."

        analysis = parse_analysis(text, MediaKind.AUDIO)

        assert analysis.degraded is False
        assert analysis.transcription == "We need to fix the login bug."
        assert len(analysis.tasks) == 1
        task = analysis.tasks[0]
        assert task.title == "Fix login bug"
        assert task.assignee == "Anna"
        assert task.priority == "Высокий"
        assert task.is_update is False
        assert task.deadline is None
        directive = analysis.task_updates[0]
        assert directive.search_keywords == ["billing", "invoice"]
        assert directive.new_status == "Done"
        assert directive.reason == "completed per discussion"
        assert analysis.decisions == ["Ship on Friday"]

    def test_plain_prose_falls_back(self) -> None:
        text = "The meeting was about quarterly planning; no tasks were discussed."
        analysis = parse_analysis(text, MediaKind.AUDIO)

        assert analysis.degraded is True
        assert analysis.transcription == text
        assert analysis.tasks == []
        assert analysis.task_updates == []

    def test_malformed_json_falls_back(self) -> None:
        text = '{"tasks": [ {"title": "Broken", } }'
        analysis = parse_analysis(text, MediaKind.AUDIO)
        assert analysis.degraded is True
        assert analysis.transcription == text

    def test_screen_fallback_uses_extracted_text_and_low_confidence(self) -> None:
        text = "Board: Backlog | In Progress | Done"
        analysis = parse_analysis(text, MediaKind.SCREEN)

        assert analysis.extracted_text == text
        assert analysis.transcription is None
        assert analysis.confidence == "low"
        assert analysis.tasks == []

    def test_screen_snake_case_keys_accepted(self) -> None:
        text = json.dumps(
            {
                "extractedText": "Sprint board",
                "tasks": [{"title": "Deploy", "status": "В работе", "source": "Jira"}],
                "interface_type": "Jira",
                "project_context": "Release 2",
                "confidence": "высокий",
            }
        )
        analysis = parse_analysis(text, MediaKind.SCREEN)

        assert analysis.interface_type == "Jira"
        assert analysis.project_context == "Release 2"
        assert analysis.tasks[0].source == "Jira"

    def test_invalid_items_are_dropped_others_kept(self) -> None:
        text = json.dumps(
            {
                "tasks": [{"title": "Fix login bug"}, {"description": "no title"}],
                "taskUpdates": [
                    {"searchKeywords": ["billing"], "newStatus": "Done"},
                    {"searchKeywords": ["hiring"]},
                ],
            }
        )
        analysis = parse_analysis(text, MediaKind.VIDEO)

        assert analysis.degraded is False
        assert [t.title for t in analysis.tasks] == ["Fix login bug"]
        assert [u.search_keywords for u in analysis.task_updates] == [["billing"]]

    def test_numeric_scalars_are_read_as_strings(self) -> None:
        text = '{"tasks": [{"title": "A", "deadline": 5}], "confidence": 0.9}'
        analysis = parse_analysis(text, MediaKind.SCREEN)

        assert analysis.degraded is False
        assert analysis.tasks[0].deadline == "5"
        assert analysis.confidence == "0.9"

    def test_invalid_top_level_field_is_dropped(self) -> None:
        text = '{"transcription": {"nested": true}, "tasks": [{"title": "Keep me"}]}'
        analysis = parse_analysis(text, MediaKind.AUDIO)

        assert analysis.degraded is False
        assert analysis.transcription is None
        assert [t.title for t in analysis.tasks] == ["Keep me"]

    def test_tasks_not_a_list_are_ignored(self) -> None:
        analysis = parse_analysis('{"tasks": "none", "decisions": ["Ship it"]}')
        assert analysis.tasks == []
        assert analysis.decisions == ["Ship it"]

    def test_empty_object_is_a_valid_analysis(self) -> None:
        analysis = parse_analysis("Result: {} (nothing found)", MediaKind.AUDIO)
        assert analysis.degraded is False
        assert analysis.tasks == []

    def test_update_flagged_tasks_are_not_new(self) -> None:
        text = json.dumps(
            {
                "tasks": [
                    {"title": "New thing"},
                    {"title": "Old thing", "isUpdate": True},
                ]
            }
        )
        analysis = parse_analysis(text)
        assert [t.title for t in analysis.new_tasks] == ["New thing"]
