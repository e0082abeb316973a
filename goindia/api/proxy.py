"""
Same-origin proxy to the hosted text-generation API.

Keeps the OpenRouter key on the server: clients post the chat-completions
body here and get the upstream JSON back unchanged.
"""

import logging

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from goindia.core.config import settings, is_placeholder

logger = logging.getLogger("goindia")

router = APIRouter(prefix="/api/ai", tags=["ai-proxy"])


@router.post("/proxy")
async def proxy_endpoint(request: Request):
    if is_placeholder(settings.OPENROUTER_API_KEY):
        return JSONResponse(
            status_code=500,
            content={"error": "OpenRouter API key is not configured on the server."},
        )

    try:
        body = await request.json()
    except ValueError:
        body = {}

    headers = {
        "Authorization": f"Bearer {settings.OPENROUTER_API_KEY}",
        "Content-Type": "application/json",
        "HTTP-Referer": request.headers.get("referer", ""),
        "X-Title": request.headers.get("x-title") or settings.AI_APP_TITLE,
    }

    try:
        async with httpx.AsyncClient(timeout=settings.AI_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.AI_API_URL, json=body, headers=headers)
    except httpx.HTTPError as exc:
        logger.error(f"[proxy] upstream request failed: {exc.__class__.__name__}")
        return JSONResponse(
            status_code=500,
            content={"error": str(exc) or "An internal server error occurred."},
        )

    if response.status_code >= 400:
        try:
            error = (response.json().get("error") or {}).get("message")
        except (ValueError, AttributeError):
            error = None
        logger.warning(f"[proxy] upstream returned {response.status_code}")
        return JSONResponse(
            status_code=response.status_code,
            content={"error": error or "Failed to fetch from OpenRouter API"},
        )

    try:
        data = response.json()
    except ValueError:
        return JSONResponse(status_code=502, content={"error": "Upstream returned invalid JSON"})
    return JSONResponse(status_code=200, content=data)


@router.api_route("/proxy", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def proxy_method_not_allowed():
    return JSONResponse(status_code=405, content={"error": "Method Not Allowed"})
