"""Zoom endpoints: connect to a meeting by URL and receive webhook events."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from src.api.models import ZoomConnectRequest, ZoomConnectResponse
from src.config import settings
from src.errors import ConfigurationError
from src.meetings.zoom import ZoomClient, url_validation_response, verify_webhook_signature

logger = logging.getLogger(__name__)

router = APIRouter()

MEETING_EVENTS = {"meeting.started", "meeting.ended", "recording.completed"}


@router.post("/api/zoom/connect", response_model=ZoomConnectResponse)
async def connect(request: ZoomConnectRequest) -> ZoomConnectResponse:
    """Look up a Zoom meeting from its join URL."""
    meeting = await ZoomClient(settings).get_meeting(request.meeting_url)
    return ZoomConnectResponse(meeting=meeting, message="Connected to the Zoom meeting")


@router.post("/api/zoom/webhook")
async def webhook(request: Request) -> dict[str, Any]:
    """Zoom event subscription endpoint.

    Answers the ``endpoint.url_validation`` challenge, verifies the
    ``x-zm-signature`` header when a secret token is configured, and logs
    meeting lifecycle events.
    """
    raw = await request.body()
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Webhook body is not valid JSON") from None
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")

    secret = settings.zoom_webhook_secret_token
    event = body.get("event")
    payload = body.get("payload") or {}

    if event == "endpoint.url_validation":
        if not secret:
            raise ConfigurationError("Zoom webhook secret token not configured")
        return url_validation_response(payload.get("plainToken", ""), secret)

    if secret and not verify_webhook_signature(
        raw,
        request.headers.get("x-zm-request-timestamp", ""),
        request.headers.get("x-zm-signature", ""),
        secret,
    ):
        raise HTTPException(status_code=401, detail="Invalid Zoom webhook signature")

    meeting = payload.get("object") or {}
    if event in MEETING_EVENTS:
        logger.info("Zoom %s for meeting %s", event, meeting.get("id"))
    else:
        logger.debug("Ignoring Zoom event %s", event)

    return {"success": True}
