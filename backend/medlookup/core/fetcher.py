import logging
from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from medlookup.core.config import settings

logger = logging.getLogger("medlookup.fetcher")

JSON_ACCEPT = "application/json"
TEXT_ACCEPT = "text/html, text/plain"


class TransportError(Exception):
    """Raised when both the direct request and the proxy hop failed."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url


def proxied_url(url: str) -> str:
    # encodeURIComponent-compatible quoting; the proxy expects the target as one query value
    return settings.CORS_PROXY_TEMPLATE.format(url=quote(url, safe="!*'()"))


async def _get(
    url: str,
    *,
    accept: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport) as client:
        r = await client.get(url, headers={"Accept": accept})
        r.raise_for_status()
        return r


async def _fetch(
    url: str,
    *,
    accept: str,
    timeout: float,
    decode: Callable[[httpx.Response], Any],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """
    GET `url` and decode the body. On any failure (status, timeout, network,
    undecodable body) retry once through the proxy; if that fails too, raise
    TransportError chained to the ORIGINAL error.
    """
    try:
        r = await _get(url, accept=accept, timeout=timeout, transport=transport)
        return decode(r)
    except (httpx.HTTPError, ValueError) as err:
        if not settings.CORS_PROXY_ENABLED:
            raise TransportError(f"Request failed: {url} ({err!r})", url=url) from err

        logger.warning("Direct fetch failed for %s (%r); retrying through proxy", url, err)
        try:
            r2 = await _get(proxied_url(url), accept=accept, timeout=timeout, transport=transport)
            return decode(r2)
        except (httpx.HTTPError, ValueError) as proxy_err:
            logger.warning("Proxy fetch failed for %s (%r)", url, proxy_err)
            raise TransportError(f"Request failed: {url} ({err!r})", url=url) from err


async def fetch_json(
    url: str,
    timeout: Optional[float] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    return await _fetch(
        url,
        accept=JSON_ACCEPT,
        timeout=timeout if timeout is not None else settings.JSON_TIMEOUT_SECONDS,
        decode=lambda r: r.json(),
        transport=transport,
    )


async def fetch_text(
    url: str,
    timeout: Optional[float] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    return await _fetch(
        url,
        accept=TEXT_ACCEPT,
        timeout=timeout if timeout is not None else settings.HTML_TIMEOUT_SECONDS,
        decode=lambda r: r.text,
        transport=transport,
    )
