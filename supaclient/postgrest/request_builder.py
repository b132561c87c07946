"""
Chainable request builders for PostgREST resources.

Builders form a capability chain: QueryRequestBuilder knows how to execute,
FilterRequestBuilder adds filter operators and SelectRequestBuilder adds
ordering, pagination and response shaping. Every chained call mutates the
builder in place and returns it; builders are single-use.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from .exceptions import APIError, DecodeError
from .utils import sanitize_param, sanitize_pattern_param

if TYPE_CHECKING:
    from .client import PostgrestClient

Params = List[Tuple[str, str]]

# PostgREST grammar characters that must reach the server unescaped
QUERY_SAFE_CHARS = ",.:()*\"{}"


def _to_str(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _set_param(params: Params, key: str, value: str) -> None:
    params[:] = [(k, v) for k, v in params if k != key]
    params.append((key, value))


def _parse_count(content_range: Optional[str]) -> int:
    parts = (content_range or "").split("/")
    if len(parts) != 2:
        raise DecodeError("invalid content range returned from count request")
    try:
        return int(parts[1])
    except ValueError as e:
        raise DecodeError(f"invalid count in content range: {parts[1]!r}") from e


class RequestBuilder:
    """Entry point for a single resource, see PostgrestClient.from_."""

    def __init__(self, client: "PostgrestClient", path: str):
        self.client = client
        self.path = path
        self.headers = httpx.Headers()
        self.params: Params = []

    def select(self, *columns: str) -> "SelectRequestBuilder":
        """SELECT the given columns (all columns when none are given)."""
        _set_param(self.params, "select", ",".join(columns) if columns else "*")
        return SelectRequestBuilder(self.client, self.path, "GET", self.headers, self.params)

    def insert(self, payload: Any) -> "QueryRequestBuilder":
        """INSERT one row (dict) or many rows (list of dicts)."""
        self.headers["Prefer"] = "return=representation"
        return QueryRequestBuilder(
            self.client, self.path, "POST", self.headers, self.params, payload
        )

    def upsert(self, payload: Any) -> "QueryRequestBuilder":
        """INSERT, merging rows that conflict on the primary key."""
        self.headers["Prefer"] = "return=representation,resolution=merge-duplicates"
        return QueryRequestBuilder(
            self.client, self.path, "POST", self.headers, self.params, payload
        )

    def update(self, payload: Any) -> "FilterRequestBuilder":
        """UPDATE the rows matched by the filters chained afterwards."""
        self.headers["Prefer"] = "return=representation"
        return FilterRequestBuilder(
            self.client, self.path, "PATCH", self.headers, self.params, payload
        )

    def delete(self) -> "FilterRequestBuilder":
        """DELETE the rows matched by the filters chained afterwards."""
        return FilterRequestBuilder(self.client, self.path, "DELETE", self.headers, self.params)


class QueryRequestBuilder:
    """A fully shaped request that can be executed."""

    def __init__(
        self,
        client: "PostgrestClient",
        path: str,
        method: str,
        headers: httpx.Headers,
        params: Params,
        payload: Optional[Any] = None,
    ):
        self.client = client
        self.path = path
        self.method = method
        self.headers = headers
        self.params = params
        self.payload = payload
        self.is_count = False

    @property
    def query_string(self) -> str:
        """
        Parameters rendered as ``key=value`` pairs, sorted by key.

        This is the readable form; values sharing a key keep the order they
        were added in. See encoded_query_string for what is sent.
        """
        ordered = sorted(self.params, key=lambda item: item[0])
        return "&".join(f"{key}={value}" for key, value in ordered)

    @property
    def encoded_query_string(self) -> str:
        """
        query_string with the characters that would break the URL structure
        (``#``, ``&``, ``=``, ``+``, ``%``, spaces) percent-encoded in keys and values.
        The PostgREST grammar characters ``,.:()*"{}`` stay literal.
        """
        ordered = sorted(self.params, key=lambda item: item[0])
        return "&".join(
            f"{quote(key, safe=QUERY_SAFE_CHARS)}={quote(value, safe=QUERY_SAFE_CHARS)}"
            for key, value in ordered
        )

    def build_request(self) -> httpx.Request:
        """Turn the builder into an httpx.Request without sending it."""
        headers = self.client.headers
        for key, value in self.headers.items():
            headers[key] = value

        target = self.path
        query = self.encoded_query_string
        if query:
            target = f"{target}?{query}"
        url = self.client.transport.resolve(target)

        return self.client.session.build_request(
            self.method, url, headers=headers, json=self.payload
        )

    async def execute(self) -> Any:
        """
        Send the request and decode the response.

        Returns:
            The decoded JSON body, the row count when count() was used,
            or None for a 204 No Content response.

        Raises:
            APIError: the server answered with a non-2xx status
            DecodeError: the response could not be decoded
            httpx.HTTPError: the request could not be sent
        """
        request = self.build_request()
        response = await self.client.session.send(request)
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        if not response.is_success:
            raise APIError.from_response(response)

        if response.status_code == httpx.codes.NO_CONTENT:
            return None

        if self.is_count:
            return _parse_count(response.headers.get("Content-Range"))

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"could not decode response body: {e}") from e


class FilterRequestBuilder(QueryRequestBuilder):
    """Query builder with PostgREST filter operators."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.negate_next = False

    # =========================================================================
    # Core
    # =========================================================================

    def not_(self) -> "FilterRequestBuilder":
        """Negate the next filter only."""
        self.negate_next = True
        return self

    def filter(self, column: str, operator: str, criteria: str) -> "FilterRequestBuilder":
        """Append ``column=[not.]operator.criteria``; criteria is used as given."""
        if self.negate_next:
            self.negate_next = False
            operator = f"not.{operator}"
        self.params.append((column, f"{operator}.{criteria}"))
        return self

    def _list_filter(self, column: str, operator: str, values: Sequence[Any], brackets: str):
        sanitized = ",".join(sanitize_param(_to_str(v)) for v in values)
        return self.filter(column, operator, f"{brackets[0]}{sanitized}{brackets[1]}")

    def _range_filter(self, column: str, operator: str, start: int, end: int):
        return self.filter(column, operator, f"({int(start)},{int(end)})")

    # =========================================================================
    # Comparison
    # =========================================================================

    def eq(self, column: str, value: Any) -> "FilterRequestBuilder":
        return self.filter(column, "eq", sanitize_param(_to_str(value)))

    def neq(self, column: str, value: Any) -> "FilterRequestBuilder":
        return self.filter(column, "neq", sanitize_param(_to_str(value)))

    def gt(self, column: str, value: Any) -> "FilterRequestBuilder":
        return self.filter(column, "gt", sanitize_param(_to_str(value)))

    def gte(self, column: str, value: Any) -> "FilterRequestBuilder":
        return self.filter(column, "gte", sanitize_param(_to_str(value)))

    def lt(self, column: str, value: Any) -> "FilterRequestBuilder":
        return self.filter(column, "lt", sanitize_param(_to_str(value)))

    def lte(self, column: str, value: Any) -> "FilterRequestBuilder":
        return self.filter(column, "lte", sanitize_param(_to_str(value)))

    def is_(self, column: str, value: Any) -> "FilterRequestBuilder":
        """IS filter; None and booleans map to null/true/false."""
        return self.filter(column, "is", sanitize_param(_to_str(value)))

    def is_null(self, column: str) -> "FilterRequestBuilder":
        return self.filter(column, "is", "null")

    def match(self, query: Dict[str, Any]) -> "FilterRequestBuilder":
        """Add an eq filter for every column/value pair."""
        for column, value in query.items():
            self.eq(column, value)
        return self

    # =========================================================================
    # Pattern matching and full-text search
    # =========================================================================

    def like(self, column: str, pattern: str) -> "FilterRequestBuilder":
        return self.filter(column, "like", sanitize_pattern_param(pattern))

    def ilike(self, column: str, pattern: str) -> "FilterRequestBuilder":
        return self.filter(column, "ilike", sanitize_pattern_param(pattern))

    def fts(self, column: str, query: str) -> "FilterRequestBuilder":
        return self.filter(column, "fts", sanitize_param(query))

    def plfts(self, column: str, query: str) -> "FilterRequestBuilder":
        return self.filter(column, "plfts", sanitize_param(query))

    def phfts(self, column: str, query: str) -> "FilterRequestBuilder":
        return self.filter(column, "phfts", sanitize_param(query))

    def wfts(self, column: str, query: str) -> "FilterRequestBuilder":
        return self.filter(column, "wfts", sanitize_param(query))

    # =========================================================================
    # Sets and arrays
    # =========================================================================

    def in_(self, column: str, values: Sequence[Any]) -> "FilterRequestBuilder":
        return self._list_filter(column, "in", values, "()")

    def cs(self, column: str, values: Sequence[Any]) -> "FilterRequestBuilder":
        """Contains (@>)."""
        return self._list_filter(column, "cs", values, "{}")

    def cd(self, column: str, values: Sequence[Any]) -> "FilterRequestBuilder":
        """Contained by (<@)."""
        return self._list_filter(column, "cd", values, "{}")

    def ov(self, column: str, values: Sequence[Any]) -> "FilterRequestBuilder":
        """Overlaps (&&)."""
        return self._list_filter(column, "ov", values, "{}")

    def ad(self, column: str, values: Sequence[Any]) -> "FilterRequestBuilder":
        """Adjacent to (-|-)."""
        return self._list_filter(column, "ad", values, "{}")

    contains = cs
    contained_by = cd
    overlaps = ov

    # =========================================================================
    # Ranges
    # =========================================================================

    def sl(self, column: str, start: int, end: int) -> "FilterRequestBuilder":
        """Strictly left of (<<)."""
        return self._range_filter(column, "sl", start, end)

    def sr(self, column: str, start: int, end: int) -> "FilterRequestBuilder":
        """Strictly right of (>>)."""
        return self._range_filter(column, "sr", start, end)

    def nxl(self, column: str, start: int, end: int) -> "FilterRequestBuilder":
        """Does not extend to the left of (&<)."""
        return self._range_filter(column, "nxl", start, end)

    def nxr(self, column: str, start: int, end: int) -> "FilterRequestBuilder":
        """Does not extend to the right of (&>)."""
        return self._range_filter(column, "nxr", start, end)


class SelectRequestBuilder(FilterRequestBuilder):
    """Filter builder with ordering, pagination and response shaping."""

    def order_by(self, column: str, direction: str = "asc") -> "SelectRequestBuilder":
        """Order by a column; only the last call is kept."""
        _set_param(self.params, "order", f"{column}.{direction}")
        return self

    def range(self, start: int, end: int) -> "SelectRequestBuilder":
        """Return rows ``start`` through ``end`` inclusive, zero-indexed."""
        self.headers["Range-Unit"] = "items"
        self.headers["Range"] = f"{start}-{end}"
        return self

    def limit(self, size: int) -> "SelectRequestBuilder":
        return self.limit_with_offset(size, 0)

    def limit_with_offset(self, size: int, start: int) -> "SelectRequestBuilder":
        """Return at most ``size`` rows starting at row ``start``."""
        return self.range(start, start + size - 1)

    def single(self) -> "SelectRequestBuilder":
        """Ask for exactly one object; the server errors on zero or many rows."""
        self.headers["Accept"] = "application/vnd.pgrst.object+json"
        return self

    def count(self) -> "SelectRequestBuilder":
        """
        Only count the matching rows.

        The request becomes a HEAD request and execute() returns the total
        parsed from the Content-Range header instead of a body.
        """
        self.headers["Prefer"] = "count=exact"
        self.is_count = True
        self.method = "HEAD"
        return self

    def single_row(self) -> "SelectRequestBuilder":
        _set_param(self.params, "single-row", "true")
        return self

    def only_payload(self) -> "SelectRequestBuilder":
        _set_param(self.params, "only-payload", "true")
        return self

    def without_count(self) -> "SelectRequestBuilder":
        _set_param(self.params, "without-count", "true")
        return self

    def single_value(self) -> "SelectRequestBuilder":
        _set_param(self.params, "single-value", "true")
        return self


class RpcRequestBuilder(QueryRequestBuilder):
    """POST to a stored function with its arguments as the JSON body."""

    def __init__(
        self,
        client: "PostgrestClient",
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(client, path, "POST", httpx.Headers(), [], params or {})
