"""
PostgrestClient - entry point for PostgREST queries.
"""

import base64
import logging
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from .request_builder import RequestBuilder, RpcRequestBuilder
from .transport import PostgrestTransport

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "public"


class PostgrestClient:
    """
    Client owning the default headers and the transport shared by all builders.

    Args:
        base_url: Root of the PostgREST API, e.g. ``https://host/rest/v1/``
        token: Bearer token sent in the Authorization header
        basic_auth: ``(username, password)`` for HTTP basic auth
        schema: Value of the Accept-Profile/Content-Profile headers
        headers: Extra default headers, applied last
        debug: Log every outgoing request
        transport: Parent httpx transport (defaults to a real network transport)
        timeout: httpx timeout for the underlying session

    Example:
        >>> client = PostgrestClient("https://host/rest/v1/", token="s3cr3t")
        >>> rows = await client.from_("countries").select("id", "name").eq("id", "1").execute()
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        basic_auth: Optional[Tuple[str, str]] = None,
        schema: str = DEFAULT_SCHEMA,
        headers: Optional[Dict[str, str]] = None,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Union[float, httpx.Timeout, None] = 30.0,
    ):
        if token is not None and basic_auth is not None:
            raise ValueError("token and basic_auth are mutually exclusive")

        self.transport = PostgrestTransport(base_url, parent=transport, debug=debug)
        self.session = httpx.AsyncClient(transport=self.transport, timeout=timeout)
        self.debug = debug

        self._headers = httpx.Headers(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Accept-Profile": schema,
                "Content-Profile": schema,
            }
        )

        if token is not None:
            self.add_header("Authorization", f"Bearer {token}")
        if basic_auth is not None:
            username, password = basic_auth
            credentials = base64.b64encode(f"{username}:{password}".encode()).decode()
            self.add_header("Authorization", f"Basic {credentials}")

        for key, value in (headers or {}).items():
            self.add_header(key, value)

        if debug:
            logger.warning(
                "CAUTION! Please make sure to disable the debug option before deploying to production."
            )

    @property
    def base_url(self) -> httpx.URL:
        return self.transport.base_url

    @property
    def headers(self) -> httpx.Headers:
        """A copy of the default headers sent with every request."""
        return self._headers.copy()

    def add_header(self, key: str, value: str) -> None:
        """Set a default header, replacing any previous value."""
        self._headers[key] = value

    def from_(self, table: str) -> RequestBuilder:
        """Start a request on a table or view."""
        return RequestBuilder(self, f"/{table}")

    def table(self, table: str) -> RequestBuilder:
        """Alias for from_."""
        return self.from_(table)

    def rpc(self, fn: str, params: Optional[Dict[str, Any]] = None) -> RpcRequestBuilder:
        """
        Call a stored function.

        Example:
            >>> total = await client.rpc("add_them", {"a": 1, "b": 2}).execute()
        """
        return RpcRequestBuilder(self, f"/rpc/{fn}", params)

    async def aclose(self) -> None:
        """Close the underlying HTTP session."""
        await self.session.aclose()

    async def __aenter__(self) -> "PostgrestClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
