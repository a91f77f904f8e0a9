"""Comic routes: one handler, parameterized by operation.

GET /api?type=<operation>   → the single-entry API older clients call
GET /api/<operation>        → same operations, path style

Operations: home, genres, genre, latest, search, detail, chapter.
Every response carries ``cached`` telling whether it came from the cache.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from errors import InvalidParameterError
from services.comics import MAX_LIMIT, ComicService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_comic_service(request: Request) -> ComicService:
    return request.app.state.comics


async def _run(
    service: ComicService,
    operation: str,
    endpoint: str | None,
    page: int,
    q: str | None,
    limit: int | None,
) -> dict:
    payload, cached = await service.run(operation, endpoint=endpoint, page=page, q=q, limit=limit)
    return {**payload, "cached": cached}


@router.get("")
async def api_index(
    operation: str | None = Query(None, alias="type"),
    endpoint: str | None = Query(None),
    page: int = Query(1, ge=1),
    q: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=MAX_LIMIT),
    service: ComicService = Depends(get_comic_service),
) -> dict:
    """Query-style entry point: the operation comes from ``type``."""
    if not operation:
        raise InvalidParameterError(
            "Invalid parameters. 'type' is required, plus 'endpoint' or 'q' where the type needs it."
        )
    return await _run(service, operation, endpoint, page, q, limit)


@router.get("/{operation}")
async def api_operation(
    operation: str,
    endpoint: str | None = Query(None),
    page: int = Query(1, ge=1),
    q: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=MAX_LIMIT),
    service: ComicService = Depends(get_comic_service),
) -> dict:
    return await _run(service, operation, endpoint, page, q, limit)
