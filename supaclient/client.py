"""
Client - Main client for the Supabase HTTP APIs.
"""

import logging
import os
from typing import Any, Dict, Optional, Type

import httpx

from .admin import Admin
from .auth import Auth
from .constants import DEFAULT_TIMEOUT, REST_ENDPOINT
from .errors import SupabaseError
from .postgrest import PostgrestClient, RequestBuilder, RpcRequestBuilder
from .storage import Storage

logger = logging.getLogger(__name__)


def create_client(
    supabase_url: str,
    supabase_key: str,
    options: Optional[Dict[str, Any]] = None,
    **kwargs,
) -> "Client":
    """
    Create a new Supabase client.

    Args:
        supabase_url: The Supabase project URL
        supabase_key: The Supabase anon or service role key
        options: Optional configuration options

    Returns:
        A configured Supabase client

    Example:
        >>> supabase = create_client("http://localhost:3000", "your-anon-key")
        >>> rows = await supabase.from_("posts").select("*").execute()
    """
    return Client(supabase_url, supabase_key, options, **kwargs)


def create_client_from_env(**kwargs) -> "Client":
    """
    Create a client from SUPABASE_URL and SUPABASE_KEY.

    SUPABASE_SCHEMA and SUPABASE_DEBUG are honoured when set.
    """
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")

    options = {
        "db": {"schema": os.environ.get("SUPABASE_SCHEMA", "public")},
        "debug": os.environ.get("SUPABASE_DEBUG", "").lower() in ("1", "true", "yes"),
    }
    return Client(url, key, options, **kwargs)


class Client:
    """
    Supabase Client - Main entry point for all Supabase operations.

    Options:
        db.schema: Postgres schema used by the query builder (default "public")
        global.headers: Extra headers sent to the REST API
        debug: Log every outgoing REST request
        timeout: Timeout in seconds for every request (default 60)
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        options: Optional[Dict[str, Any]] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not supabase_url:
            raise ValueError("supabase_url is required")
        if not supabase_key:
            raise ValueError("supabase_key is required")

        self.supabase_url = supabase_url.rstrip("/")
        self.supabase_key = supabase_key
        self.options = options or {}

        self.http_client = httpx.AsyncClient(
            transport=transport,
            timeout=self.options.get("timeout", DEFAULT_TIMEOUT),
        )

        headers = {"apikey": supabase_key}
        if "global" in self.options and "headers" in self.options["global"]:
            headers.update(self.options["global"]["headers"])

        self.db = PostgrestClient(
            f"{self.supabase_url}/{REST_ENDPOINT}/",
            token=supabase_key,
            schema=self.options.get("db", {}).get("schema", "public"),
            headers=headers,
            debug=self.options.get("debug", False),
            transport=transport,
            timeout=self.options.get("timeout", DEFAULT_TIMEOUT),
        )

        self.auth = Auth(self)
        self.admin = Admin(self, supabase_key)
        self.storage = Storage(self)
        logger.debug("Supabase client configured for %s", self.supabase_url)

    def from_(self, table: str) -> RequestBuilder:
        """
        Start a query on a table.

        Example:
            >>> rows = await supabase.from_("posts") \\
            ...     .select("id", "title") \\
            ...     .eq("published", True) \\
            ...     .order_by("created_at", "desc") \\
            ...     .limit(10) \\
            ...     .execute()
        """
        return self.db.from_(table)

    def table(self, table: str) -> RequestBuilder:
        """Alias for from_."""
        return self.db.from_(table)

    def rpc(self, fn: str, params: Optional[Dict[str, Any]] = None) -> RpcRequestBuilder:
        """Call a stored function (RPC)."""
        return self.db.rpc(fn, params)

    def endpoint(self, endpoint: str, path: str = "") -> str:
        """Absolute URL of a path under one of the API endpoints."""
        url = f"{self.supabase_url}/{endpoint}"
        return f"{url}/{path}" if path else url

    # =========================================================================
    # Shared request plumbing for auth, admin and storage
    # =========================================================================

    async def send(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
        error_cls: Type[SupabaseError] = SupabaseError,
    ) -> httpx.Response:
        """
        Send one request and return the raw successful response.

        The apikey header is always injected; ``token`` becomes a bearer
        Authorization header.

        Raises:
            SupabaseError (or ``error_cls``): the server answered with a non-2xx status
        """
        request_headers = dict(headers or {})
        if token is not None:
            request_headers["Authorization"] = f"Bearer {token}"
        request_headers["apikey"] = self.supabase_key

        response = await self.http_client.request(
            method,
            url,
            content=content,
            json=json_body,
            headers=request_headers,
            params=params,
        )
        if not response.is_success:
            raise error_from_response(response, error_cls)
        return response

    async def send_json(self, method: str, url: str, **kwargs) -> Any:
        """send() and decode the JSON body; 204 or an empty body gives None."""
        response = await self.send(method, url, **kwargs)
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        """Close all HTTP clients."""
        await self.http_client.aclose()
        await self.db.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def error_from_response(
    response: httpx.Response,
    error_cls: Type[SupabaseError] = SupabaseError,
) -> SupabaseError:
    """
    Map a non-2xx auth/admin/storage response to an exception.

    Understands the ``{error_code, msg}``, ``{code, msg}``, ``{error, message}``
    and ``{message}`` error bodies. A body that is not a JSON object gives
    an "unknown" error carrying only the status code.
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if not isinstance(data, dict):
        return error_cls(f"unknown, status code: {response.status_code}", response.status_code)

    message = data.get("msg") or data.get("message") or data.get("error_description") or ""
    code = data.get("error_code") or data.get("error") or data.get("code")
    if data.get("error_code"):
        message = f"{data['error_code']}: {message}"
    elif data.get("error") and data.get("message"):
        message = f"{data['error']}: {data['message']}"
    if not message:
        message = f"unknown, status code: {response.status_code}"

    return error_cls(
        message,
        response.status_code,
        str(code) if code is not None else None,
        body=data,
    )
