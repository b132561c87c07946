"""
PostgrestTransport - httpx transport bound to a PostgREST base URL.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class PostgrestTransport(httpx.AsyncBaseTransport):
    """
    Wraps a parent transport, resolving request paths against a base URL.

    When ``debug`` is enabled every outgoing request is logged with its
    method, URL and headers before being handed to the parent.
    """

    def __init__(
        self,
        base_url: str,
        parent: Optional[httpx.AsyncBaseTransport] = None,
        debug: bool = False,
    ):
        if not base_url.endswith("/"):
            base_url += "/"
        self._base_url = httpx.URL(base_url)
        self.parent = parent or httpx.AsyncHTTPTransport()
        self.debug = debug

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def resolve(self, path: str) -> httpx.URL:
        """
        Resolve a request path against the base URL.

        A single leading ``/`` is dropped so that ``/countries`` under
        ``https://host/rest/v1/`` becomes ``https://host/rest/v1/countries``.
        """
        if path.startswith("/"):
            path = path[1:]
        return self._base_url.join(path)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if self.debug:
            lines = [f"{request.method} {request.url}"]
            lines.extend(f"{key}: {value}" for key, value in request.headers.multi_items())
            logger.info("outgoing postgrest request\n%s", "\n".join(lines))

        return await self.parent.handle_async_request(request)

    async def aclose(self) -> None:
        await self.parent.aclose()
