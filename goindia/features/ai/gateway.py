"""
Prompt/response gateway for the hosted text-generation endpoint.

One request per call, no streaming and no retries: every failure goes
back to the caller as an AIGatewayError subclass.
- AIConfigurationError: credential missing, placeholder or rejected
- AIUpstreamError: upstream error, safety block, empty/malformed output
- AITransportError: network failure
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from goindia.core.config import Settings, settings, is_placeholder
from goindia.core.errors import (
    AIConfigurationError,
    AITransportError,
    AIUpstreamError,
    ValidationError,
)
from goindia.core.logging import latency_bucket_ms, log_event, safe_truncate
from goindia.features.ai.extraction import extract_payload
from goindia.features.profiles.session import UserSession

EMPTY_RESPONSE_MESSAGE = "Received an empty response from the AI assistant."
TRY_AGAIN_MESSAGE = "Sorry, the AI assistant is unreachable right now. Please try again later."
PROXY_MISSING_KEY_MARKER = "API key is not configured"


def image_data_url(image_base64: str) -> str:
    if image_base64.startswith("data:"):
        return image_base64
    return f"data:image/jpeg;base64,{image_base64}"


def _upstream_message(response: httpx.Response) -> Optional[str]:
    """Human-readable error text from an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None
    if isinstance(body, dict):
        return _error_text(body.get("error"))
    return None


class AIGateway:
    def __init__(
        self,
        settings_obj: Optional[Settings] = None,
        session: Optional[UserSession] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings_obj or settings
        self.session = session
        self._transport = transport

    @property
    def uses_proxy(self) -> bool:
        return bool(getattr(self.settings, "AI_PROXY_URL", None))

    async def query(self, prompt: str) -> str:
        """Send a text prompt and return the extracted payload."""
        self._require_prompt(prompt)
        return await self._complete([{"role": "user", "content": prompt}])

    async def query_with_image(self, prompt: str, image_base64: str) -> str:
        """Same as query, with one inlined image for vision-capable models."""
        self._require_prompt(prompt)
        if not image_base64 or not image_base64.strip():
            raise ValidationError("image is required")
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_data_url(image_base64.strip())}},
                ],
            }
        ]
        return await self._complete(messages)

    @staticmethod
    def _require_prompt(prompt: str) -> None:
        if not prompt or not prompt.strip():
            raise ValidationError("prompt must not be empty")

    def _endpoint(self) -> str:
        if self.uses_proxy:
            return self.settings.AI_PROXY_URL
        return self.settings.AI_API_URL

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "X-Title": self.settings.AI_APP_TITLE,
        }
        if not self.uses_proxy:
            api_key = self.settings.OPENROUTER_API_KEY
            if is_placeholder(api_key):
                raise AIConfigurationError(
                    "The AI service API key is not configured. Set OPENROUTER_API_KEY."
                )
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def _complete(self, messages: List[Dict[str, Any]]) -> str:
        headers = self._headers()
        body = {"model": self.settings.AI_MODEL, "messages": messages}
        user_id = self.session.user_id if self.session else None

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.settings.AI_TIMEOUT_SECONDS,
            ) as client:
                response = await client.post(self._endpoint(), json=body, headers=headers)
        except httpx.HTTPError as exc:
            log_event(
                "error",
                "ai.transport_failed",
                user_id=user_id,
                error_code="ai_unavailable",
                extra={"error": exc.__class__.__name__},
            )
            raise AITransportError(TRY_AGAIN_MESSAGE) from exc
        latency = latency_bucket_ms((time.perf_counter() - start) * 1000)

        if response.status_code >= 400:
            self._raise_for_error(response, user_id)

        try:
            data = response.json()
        except ValueError as exc:
            raise AIUpstreamError(
                _upstream_message(response) or "The AI assistant returned an unreadable response."
            ) from exc

        content = self._content_from(data)
        log_event(
            "info",
            "ai.completed",
            user_id=user_id,
            event_type="ai.query",
            extra={"latency_bucket": latency, "chars": len(content)},
        )
        return extract_payload(content)

    def _raise_for_error(self, response: httpx.Response, user_id: Optional[str]) -> None:
        message = _upstream_message(response)
        log_event(
            "warning",
            "ai.upstream_error",
            user_id=user_id,
            error_code="ai_upstream_error",
            extra={"status": response.status_code, "upstream_message": safe_truncate(message or "", 200)},
        )
        if message and PROXY_MISSING_KEY_MARKER in message:
            raise AIConfigurationError(
                "The backend proxy is missing the API key. Please ensure OPENROUTER_API_KEY is set on the server."
            )
        if response.status_code in (401, 403):
            raise AIConfigurationError(
                f"The AI service rejected the configured API key. ({message or response.status_code})"
            )
        raise AIUpstreamError(message or f"AI request failed with status: {response.status_code}")

    @staticmethod
    def _content_from(data: Any) -> str:
        if not isinstance(data, dict):
            raise AIUpstreamError(EMPTY_RESPONSE_MESSAGE)
        choices = data.get("choices") or []
        if not choices:
            message = _error_text(data.get("error"))
            raise AIUpstreamError(message or EMPTY_RESPONSE_MESSAGE)

        choice = choices[0] or {}
        content = (choice.get("message") or {}).get("content")
        if isinstance(content, str) and content.strip():
            return content
        if choice.get("finish_reason") == "content_filter":
            raise AIUpstreamError("The AI provider blocked this response with its safety filter.")
        raise AIUpstreamError(EMPTY_RESPONSE_MESSAGE)


def _error_text(error: Any) -> Optional[str]:
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        return error.get("message")
    return None
