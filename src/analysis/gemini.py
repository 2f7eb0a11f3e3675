"""Gemini client: one inline-media + prompt request per submission."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from src.analysis.prompts import DEFAULT_MIME_TYPES, PROMPTS
from src.config import Settings
from src.errors import AnalysisError, ConfigurationError, InvalidMediaError, QuotaExceededError
from src.pipeline_config import MediaKind

logger = logging.getLogger(__name__)

QUOTA_MESSAGE = (
    "API quota exceeded. Please wait a moment and try again, or upgrade your Gemini API plan."
)


def decode_media(data: str) -> bytes:
    """Decode a base64 payload, tolerating a ``data:<mime>;base64,`` prefix."""
    if not data:
        raise InvalidMediaError("No media data provided")
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidMediaError(f"Media data is not valid base64: {exc}") from exc


def _is_quota_error(exc: Exception) -> bool:
    if isinstance(exc, google_exceptions.ResourceExhausted):
        return True
    message = str(exc).lower()
    return "quota" in message or "429" in message


class GeminiAnalyzer:
    """Sends captured media to Gemini and returns the raw response text."""

    def __init__(self, settings: Settings) -> None:
        if not settings.gemini_api_key:
            raise ConfigurationError("Gemini API key not configured")
        self.model_name = settings.gemini_model
        genai.configure(api_key=settings.gemini_api_key)  # type: ignore[attr-defined]

    async def analyze(self, media: bytes, mime_type: str | None, kind: MediaKind) -> str:
        """Run the extraction prompt for ``kind`` over ``media``.

        Raises:
            QuotaExceededError: Gemini refused the call for quota reasons.
            AnalysisError: Any other transport or response failure.
        """
        model = genai.GenerativeModel(self.model_name)  # type: ignore[attr-defined]
        blob: dict[str, Any] = {
            "mime_type": mime_type or DEFAULT_MIME_TYPES[kind],
            "data": media,
        }
        logger.info(
            "Sending %d bytes of %s (%s) to %s", len(media), kind, blob["mime_type"], self.model_name
        )

        try:
            response = await model.generate_content_async([blob, PROMPTS[kind]])
            text: str = response.text
        except Exception as exc:
            if _is_quota_error(exc):
                logger.warning("Gemini quota exceeded: %s", exc)
                raise QuotaExceededError(QUOTA_MESSAGE) from exc
            logger.exception("Gemini %s analysis failed", kind)
            raise AnalysisError(f"Failed to process {kind}: {exc}") from exc

        logger.info("Gemini response received, length: %d", len(text))
        return text
