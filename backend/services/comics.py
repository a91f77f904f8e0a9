"""Comic operations: build the site URL, fetch, extract, cache.

Every operation runs through the same pipeline, parameterized by an
``Operation`` entry. Only the params an operation declares reach the
upstream request and the cache key.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from errors import ComicNotFoundError, InvalidParameterError
from services.cache import TTLCache, get_or_fetch, make_key
from services.extract import extract
from services.komikcast_client import KomikcastClient

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


@dataclass(frozen=True)
class Operation:
    name: str
    page_kind: str
    # (params) -> (path, query params)
    build_request: Callable[[dict], tuple[str, dict | None]]
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    # Key of the list that ``limit`` truncates
    list_field: str | None = None
    # True when the extracted payload means the page had nothing to show
    not_found: Callable[[dict], bool] | None = None


def _slug(value: str) -> str:
    return quote(value.strip("/"), safe="")


OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        Operation("home", "home", lambda p: ("/", None)),
        Operation("genres", "genres", lambda p: ("/genres/", None)),
        Operation(
            "genre",
            "genre",
            lambda p: (f"/genres/{_slug(p['endpoint'])}/", {"page": p["page"]}),
            required=("endpoint",),
            optional=("page", "limit"),
            list_field="comics",
        ),
        Operation(
            "latest",
            "latest",
            lambda p: ("/", {"page": p["page"]}),
            optional=("page", "limit"),
            list_field="comics",
        ),
        Operation(
            "search",
            "search",
            lambda p: ("/", {"s": p["q"]}),
            required=("q",),
            optional=("limit",),
            list_field="results",
        ),
        Operation(
            "detail",
            "detail",
            lambda p: (f"/komik/{_slug(p['endpoint'])}/", None),
            required=("endpoint",),
            not_found=lambda payload: not payload["title"],
        ),
        Operation(
            "chapter",
            "chapter",
            lambda p: (f"/chapter/{_slug(p['endpoint'])}/", None),
            required=("endpoint",),
            not_found=lambda payload: not payload["images"],
        ),
    )
}


def _normalize(op: Operation, raw: dict[str, Any]) -> dict[str, Any]:
    """Validate and keep only the params ``op`` declares."""
    params: dict[str, Any] = {}
    for name in op.required:
        value = raw.get(name)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise InvalidParameterError(f"Parameter '{name}' is required for type '{op.name}'")
        params[name] = value

    if "page" in op.optional:
        page = raw.get("page")
        if page is None:
            page = 1
        try:
            page = int(page)
        except (TypeError, ValueError):
            raise InvalidParameterError(f"Parameter 'page' must be an integer, got {page!r}") from None
        if page < 1:
            raise InvalidParameterError("Parameter 'page' must be >= 1")
        params["page"] = page

    if "limit" in op.optional and raw.get("limit") is not None:
        try:
            limit = int(raw["limit"])
        except (TypeError, ValueError):
            raise InvalidParameterError(f"Parameter 'limit' must be an integer, got {raw['limit']!r}") from None
        if not 1 <= limit <= MAX_LIMIT:
            raise InvalidParameterError(f"Parameter 'limit' must be between 1 and {MAX_LIMIT}")
        params["limit"] = limit

    return params


class ComicService:
    """Runs named operations against the site through the response cache."""

    def __init__(self, client: KomikcastClient, cache: TTLCache):
        self.client = client
        self.cache = cache

    async def run(self, operation: str, **raw_params: Any) -> tuple[dict, bool]:
        """Return ``(payload, cached)`` for ``operation``.

        Unknown operations and missing or malformed params raise
        ``InvalidParameterError``. Upstream failures propagate and are not cached.
        """
        op = OPERATIONS.get(operation)
        if op is None:
            raise InvalidParameterError(
                f"Unknown type: {operation!r}. Supported: {sorted(OPERATIONS)}"
            )
        params = _normalize(op, raw_params)
        key = make_key(op.name, params)
        return await get_or_fetch(self.cache, key, lambda: self._scrape(op, params))

    async def _scrape(self, op: Operation, params: dict[str, Any]) -> dict:
        path, query = op.build_request(params)
        html = await self.client.fetch_html(path, params=query)
        payload = extract(html, op.page_kind)

        if op.not_found and op.not_found(payload):
            raise ComicNotFoundError(f"{op.name} '{params.get('endpoint')}'")

        limit = params.get("limit")
        if limit and op.list_field:
            payload[op.list_field] = payload[op.list_field][:limit]

        logger.info("Scraped %s %s", op.name, params)
        return payload
