"""
HTTP fetch client for the static catalog pages.
"""

from __future__ import annotations

import httpx

from catalogsync.config import REQUEST_TIMEOUT_SECONDS, USER_AGENT
from catalogsync.retry import retry_operation


def create_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """
    Create the shared async client (fixed user agent, 10 s timeout).

    `transport` is only passed by tests (httpx.MockTransport).
    """
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        timeout=httpx.Timeout(REQUEST_TIMEOUT_SECONDS),
        follow_redirects=True,
        transport=transport,
    )


async def fetch_page(client: httpx.AsyncClient, url: str) -> str:
    """
    GET one page and return its body. Non-2xx responses raise httpx.HTTPStatusError.
    """
    resp = await client.get(url)
    resp.raise_for_status()
    return resp.text


async def fetch_page_with_retry(client: httpx.AsyncClient, url: str) -> str:
    return await retry_operation(lambda: fetch_page(client, url))
