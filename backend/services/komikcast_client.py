"""Async HTML client for the scraped comic site.

One ``httpx.AsyncClient`` per app, created in the lifespan and closed on
shutdown. Transport failures surface as typed errors from ``errors``.
"""

import logging

import httpx

from errors import ComicNotFoundError, UpstreamTimeoutError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


class KomikcastClient:
    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"User-Agent": user_agent, "Referer": f"{self.base_url}/"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def fetch_html(self, path: str, params: dict | None = None) -> str:
        """GET ``path`` on the site and return the response body."""
        url = f"{self.base_url}{path}"
        logger.info("Fetching %s params=%s", url, params)
        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("Upstream timeout for %s: %s", url, e)
            raise UpstreamTimeoutError(url) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise ComicNotFoundError(path) from e
            logger.warning("Upstream returned %d for %s", status, url)
            raise UpstreamUnavailableError(url, f"HTTP {status}") from e
        except httpx.HTTPError as e:
            logger.warning("Upstream request failed for %s: %s", url, e)
            raise UpstreamUnavailableError(url, type(e).__name__) from e
        return resp.text

    async def ping(self) -> bool:
        """True if the site's home page answers with a non-error status."""
        try:
            resp = await self._client.get("/")
        except httpx.HTTPError as e:
            logger.warning("Upstream ping failed: %s", e)
            return False
        return resp.status_code < 400

    async def aclose(self) -> None:
        await self._client.aclose()
