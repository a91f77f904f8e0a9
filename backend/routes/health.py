"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "komik-api", "commit": request.app.state.settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Deep health check that verifies the scraped site answers."""
    state = request.app.state
    # Count live entries only
    state.cache.purge_expired()
    result = {
        "status": "ok",
        "service": "komik-api",
        "commit": state.settings.git_sha,
        "upstream": "not_tested",
        "cache": {"entries": len(state.cache), "ttl_seconds": state.cache.ttl},
    }

    if await state.comics.client.ping():
        result["upstream"] = "reachable"
    else:
        logger.warning("Upstream health check failed for %s", state.comics.client.base_url)
        result["status"] = "degraded"
        result["upstream"] = "unreachable"

    return result
