"""Zoom server-to-server OAuth client and webhook signature helpers."""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
from typing import Any

import httpx

from src.config import Settings
from src.errors import ConfigurationError

logger = logging.getLogger(__name__)

ZOOM_OAUTH_URL = "https://zoom.us/oauth/token"
ZOOM_API_URL = "https://api.zoom.us/v2"

_MEETING_ID = re.compile(r"/j/(\d+)")


class ZoomAPIError(Exception):
    """A Zoom call returned a non-2xx status or no usable token."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Zoom API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


def extract_meeting_id(meeting_url: str) -> str:
    """Pull the numeric id out of a ``.../j/<id>`` join URL; pass anything else through."""
    match = _MEETING_ID.search(meeting_url)
    return match.group(1) if match else meeting_url.strip()


def _sign(secret: str, message: str) -> str:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def url_validation_response(plain_token: str, secret: str) -> dict[str, str]:
    """Answer Zoom's ``endpoint.url_validation`` challenge."""
    return {"plainToken": plain_token, "encryptedToken": _sign(secret, plain_token)}


def verify_webhook_signature(body: bytes, timestamp: str, signature: str, secret: str) -> bool:
    """Check the ``x-zm-signature`` header against ``v0:{timestamp}:{body}``."""
    expected = "v0=" + _sign(secret, f"v0:{timestamp}:{body.decode('utf-8')}")
    return hmac.compare_digest(expected, signature)


class ZoomClient:
    """Fetches meeting details with an account-credentials access token."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        if not settings.zoom_configured:
            raise ConfigurationError(
                "Zoom credentials not configured. Set ZOOM_ACCOUNT_ID, ZOOM_CLIENT_ID and ZOOM_CLIENT_SECRET."
            )
        self._account_id = settings.zoom_account_id
        self._auth = httpx.BasicAuth(settings.zoom_client_id, settings.zoom_client_secret)
        self._transport = transport

    async def get_access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            ZOOM_OAUTH_URL,
            auth=self._auth,
            data={"grant_type": "account_credentials", "account_id": self._account_id},
        )
        if response.is_error:
            raise ZoomAPIError(response.status_code, response.text)
        token = response.json().get("access_token")
        if not token:
            raise ZoomAPIError(response.status_code, "Failed to get Zoom access token")
        return str(token)

    async def get_meeting(self, meeting_url: str) -> dict[str, Any]:
        """Resolve a join URL (or bare id) to Zoom's meeting object."""
        meeting_id = extract_meeting_id(meeting_url)
        async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
            try:
                token = await self.get_access_token(client)
                response = await client.get(
                    f"{ZOOM_API_URL}/meetings/{meeting_id}",
                    headers={"Authorization": f"Bearer {token}"},
                )
            except httpx.RequestError as e:
                raise ZoomAPIError(503, f"Failed to connect to Zoom: {e}") from e

        if response.is_error:
            raise ZoomAPIError(response.status_code, response.text)
        logger.info("Fetched Zoom meeting %s", meeting_id)
        return response.json()  # type: ignore[no-any-return]
