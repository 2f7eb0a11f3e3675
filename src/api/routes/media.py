"""Media submission endpoints: Gemini analysis followed by Jira reconciliation."""

from __future__ import annotations

import logging
from dataclasses import asdict

import httpx
from fastapi import APIRouter

from src.analysis.gemini import GeminiAnalyzer, decode_media
from src.analysis.parser import parse_analysis
from src.api.models import (
    CreatedTaskResponse,
    ItemOutcomeResponse,
    MediaAnalysisResponse,
    ScreenAnalysisRequest,
    TranscribeRequest,
    UpdatedTaskResponse,
    VideoAnalysisRequest,
)
from src.config import settings
from src.errors import InvalidMediaError
from src.pipeline_config import MediaKind, PipelineConfig
from src.reconciliation.engine import TaskReconciler
from src.reconciliation.models import SessionContext
from src.tracker.jira import JiraClient

logger = logging.getLogger(__name__)

router = APIRouter()

# 25 MB of downloaded audio
MAX_AUDIO_DOWNLOAD_BYTES = 25 * 1024 * 1024


async def _download_audio(url: str, transport: httpx.AsyncBaseTransport | None = None) -> bytes:
    """Fetch a recording the caller only referenced by URL.

    The body is streamed and the download abandoned as soon as it passes
    MAX_AUDIO_DOWNLOAD_BYTES.
    """
    content = bytearray()
    try:
        async with httpx.AsyncClient(timeout=60.0, follow_redirects=True, transport=transport) as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > MAX_AUDIO_DOWNLOAD_BYTES:
                    raise InvalidMediaError("Downloaded audio is too large")
                async for chunk in response.aiter_bytes():
                    content.extend(chunk)
                    if len(content) > MAX_AUDIO_DOWNLOAD_BYTES:
                        raise InvalidMediaError("Downloaded audio is too large")
    except httpx.HTTPError as exc:
        raise InvalidMediaError(f"Could not download audio from {url}: {exc}") from exc

    return bytes(content)


async def process_media(
    kind: MediaKind,
    session_id: str,
    mime_type: str | None,
    media_b64: str | None = None,
    media_url: str | None = None,
) -> MediaAnalysisResponse:
    """Analyse one media payload and mirror its tasks into Jira.

    Credentials are checked before anything else runs; a missing key aborts
    the submission without touching Gemini or Jira.
    """
    analyzer = GeminiAnalyzer(settings)
    jira = JiraClient(settings)
    config = PipelineConfig.from_settings(settings, kind)

    if media_b64:
        media = decode_media(media_b64)
    elif media_url:
        media = await _download_audio(media_url)
    else:
        raise InvalidMediaError(f"No {kind} data provided")
    logger.info("Processing %s submission for session %s (%d bytes)", kind, session_id, len(media))

    text = await analyzer.analyze(media, mime_type, kind)
    analysis = parse_analysis(text, kind)
    logger.info(
        "Analysis extracted %d tasks and %d task updates",
        len(analysis.tasks),
        len(analysis.task_updates),
    )

    reconciler = TaskReconciler(jira, config)
    result = await reconciler.reconcile(
        analysis, SessionContext(session_id, kind, analysis.interface_type)
    )

    return MediaAnalysisResponse(
        analysis=analysis.model_dump(by_alias=True, exclude={"degraded"}),
        created_tasks=[CreatedTaskResponse(**asdict(c)) for c in result.created],
        updated_tasks=[UpdatedTaskResponse(**asdict(u)) for u in result.updated],
        outcomes=[ItemOutcomeResponse(**asdict(o)) for o in result.outcomes],
        total_processed=result.total_processed,
        message=result.summary(kind),
    )


@router.post("/api/gemini/transcribe", response_model=MediaAnalysisResponse)
async def transcribe(request: TranscribeRequest) -> MediaAnalysisResponse:
    """Transcribe a meeting recording, create new tasks and update existing ones."""
    return await process_media(
        MediaKind.AUDIO,
        request.meeting_id,
        request.mime_type,
        media_b64=request.audio_data,
        media_url=request.audio_url,
    )


@router.post("/api/gemini/analyze-screen", response_model=MediaAnalysisResponse)
async def analyze_screen(request: ScreenAnalysisRequest) -> MediaAnalysisResponse:
    """OCR a screenshot (boards, task lists, chats) and create the tasks it shows."""
    return await process_media(
        MediaKind.SCREEN, request.session_id, request.mime_type, media_b64=request.image_data
    )


@router.post("/api/gemini/analyze-video", response_model=MediaAnalysisResponse)
async def analyze_video(request: VideoAnalysisRequest) -> MediaAnalysisResponse:
    """Extract tasks from a short screen or camera clip."""
    return await process_media(
        MediaKind.VIDEO, request.session_id, request.mime_type, media_b64=request.video_data
    )
