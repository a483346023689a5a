from datetime import datetime, timezone

import httpx
from fastapi import APIRouter

from flashdeck.config import settings
from flashdeck.services.llm_service import list_models

router = APIRouter()


@router.get("/health")
@router.get("/healthz")
async def health() -> dict:
    """Report whether the local Ollama server answers. Always HTTP 200."""
    try:
        models = await list_models(timeout=settings.health_timeout)
    except httpx.HTTPStatusError as e:
        return {
            "status": "warning",
            "message": f"Ollama returned HTTP {e.response.status_code}",
        }
    except httpx.HTTPError:
        return {"status": "unhealthy", "ollama": "not connected"}
    except ValueError:
        return {"status": "warning", "message": "Ollama returned invalid JSON"}

    return {
        "status": "healthy",
        "server": "running",
        "ollama": "connected",
        "models": models,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
