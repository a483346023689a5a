"""
Ollama relay.

  /api/ollama/<path>  ->  {ollama_base_url}/api/<path>

Browser requests are forwarded without their origin/referer so Ollama's own
origin check does not reject them; CORS headers on the way back come from
CORSMiddleware. Response bodies are streamed through unchanged.
"""
from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from flashdeck.config import settings

logger = logging.getLogger(__name__)
router = APIRouter()

_DROP_REQUEST_HEADERS = {"host", "origin", "referer", "content-length", "connection"}
_HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "content-length",
}


def upstream_path(path: str) -> str:
    """Map the path after /api/ollama onto Ollama's /api namespace."""
    path = path.lstrip("/")
    if path != "api" and not path.startswith("api/"):
        path = f"api/{path}" if path else "api"
    return f"/{path}"


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def proxy_ollama(path: str, request: Request):
    target = upstream_path(path)
    headers = {
        k: v for k, v in request.headers.items() if k.lower() not in _DROP_REQUEST_HEADERS
    }
    body = await request.body()

    client = httpx.AsyncClient(
        base_url=settings.ollama_base_url, timeout=settings.proxy_timeout
    )
    upstream_request = client.build_request(
        request.method,
        target,
        params=request.query_params.multi_items(),
        headers=headers,
        content=body or None,
    )
    logger.info("Proxying %s %s", request.method, target)
    try:
        upstream = await client.send(upstream_request, stream=True)
    except httpx.HTTPError as e:
        await client.aclose()
        logger.error("Ollama error: %s", e)
        return JSONResponse(
            status_code=502,
            content={
                "error": "Ollama Connection Failed",
                "message": str(e),
                "fix": "Make sure Ollama is running: ollama serve",
            },
        )

    logger.info("Ollama: %d %s", upstream.status_code, target)
    response_headers = {
        k: v
        for k, v in upstream.headers.items()
        if k.lower() not in _HOP_BY_HOP_HEADERS
    }

    async def _close() -> None:
        await upstream.aclose()
        await client.aclose()

    return StreamingResponse(
        upstream.aiter_raw(),
        status_code=upstream.status_code,
        headers=response_headers,
        background=BackgroundTask(_close),
    )
