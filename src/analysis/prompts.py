"""Extraction prompts sent to Gemini alongside the inline media.

The instructions are written in English, but Gemini is asked to keep task text
in the language of the meeting. Statuses and priorities can come back in
Russian or English; tracker/vocabulary.py folds both onto the same enums.
"""

from __future__ import annotations

from src.pipeline_config import MediaKind

AUDIO_PROMPT = """\
Transcribe this meeting recording and extract:
1. The full transcription of the conversation.
2. Action items (tasks), with the responsible person and deadline when mentioned.
3. The status of each task, inferred from context.
4. Key decisions made during the meeting.
5. IMPORTANT: updates to tasks that already exist ("we launched the startup",
   "hiring is finished", "we created the channel").

Infer task status like this:
- "To Do": new tasks, planned actions, upcoming meetings.
- "In Progress": work already started, ongoing projects ("we are working on", "in progress").
- "Done": finished work, past meetings, anything described in the past tense
  ("we created", "we finished", "we launched").

Put items that change an existing task into "taskUpdates", not into "tasks".
Write task titles and descriptions in the language spoken in the meeting.

Return the result as JSON:
{
  "transcription": "full transcription",
  "tasks": [
    {
      "title": "task title",
      "description": "description",
      "assignee": "responsible person",
      "deadline": "deadline if any",
      "priority": "High/Medium/Low",
      "status": "To Do/In Progress/Done",
      "isUpdate": false
    }
  ],
  "taskUpdates": [
    {
      "searchKeywords": ["keywords that identify the existing task"],
      "newStatus": "Done/In Progress",
      "reason": "why the status changed"
    }
  ],
  "decisions": ["decision 1", "decision 2"],
  "participants": ["participant 1", "participant 2"]
}
"""

SCREEN_PROMPT = """\
Analyse this screenshot and extract:
1. All visible text (OCR).
2. Tasks, projects or actions that can be identified from the interface.
3. Task statuses if visible (To Do, In Progress, Done, ...).
4. Priorities, assignees and deadlines if shown.
5. Project or team names.

Pay special attention to Kanban boards (Trello, Jira, Asana, Notion), task lists
and checklists, calendars, planning documents, chats mentioning tasks and
presentations with action items. For each task infer the status from the
column or section it sits in, the priority from colours or labels, and the
project context.

Return the result as JSON:
{
  "extractedText": "all extracted text",
  "tasks": [
    {
      "title": "task title",
      "description": "description from context",
      "assignee": "responsible person if visible",
      "deadline": "deadline if any",
      "priority": "High/Medium/Low",
      "status": "To Do/In Progress/Done",
      "project": "project name if identified",
      "source": "where it was found (Jira/Trello/document/chat)"
    }
  ],
  "interfaceType": "Jira/Trello/Notion/document/chat/calendar",
  "projectContext": "overall project context",
  "confidence": "high/medium/low"
}
"""

VIDEO_PROMPT = """\
Analyse this video and extract tasks. Look at interface text, discussions,
plans and deadlines. Keep descriptions short. Return JSON only:
{
  "tasks": [
    {
      "title": "task title",
      "description": "short description",
      "priority": "High/Medium/Low",
      "status": "To Do/In Progress/Done"
    }
  ]
}
"""

PROMPTS: dict[MediaKind, str] = {
    MediaKind.AUDIO: AUDIO_PROMPT,
    MediaKind.SCREEN: SCREEN_PROMPT,
    MediaKind.VIDEO: VIDEO_PROMPT,
}

DEFAULT_MIME_TYPES: dict[MediaKind, str] = {
    MediaKind.AUDIO: "audio/webm",
    MediaKind.SCREEN: "image/png",
    MediaKind.VIDEO: "video/webm",
}
