"""
Errors raised by the PostgREST query builders.
"""

from typing import Any, Dict, Optional

import httpx


class DecodeError(Exception):
    """A successful response whose body or headers are not in the expected shape."""


class APIError(Exception):
    """Error response returned by the PostgREST server."""

    def __init__(
        self,
        message: str = "",
        details: str = "",
        hint: str = "",
        code: str = "",
        status_code: Optional[int] = None,
    ):
        super().__init__(f"{code}: {message}")
        self.message = message
        self.details = details
        self.hint = hint
        self.code = code
        self.status_code = status_code

    @classmethod
    def from_dict(cls, data: Dict[str, Any], status_code: Optional[int] = None) -> "APIError":
        return cls(
            message=data.get("message") or "",
            details=data.get("details") or "",
            hint=data.get("hint") or "",
            code=data.get("code") or "",
            status_code=status_code,
        )

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIError":
        """
        Build an APIError from a non-2xx response.

        The status code is taken from the response itself, never from the body.

        Raises:
            DecodeError: if the body is not a JSON object
        """
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(
                f"could not decode error response (status {response.status_code}): {e}"
            ) from e
        if not isinstance(data, dict):
            raise DecodeError(
                f"could not decode error response (status {response.status_code}): "
                f"expected an object, got {type(data).__name__}"
            )
        return cls.from_dict(data, status_code=response.status_code)

    def __repr__(self) -> str:
        return (
            f"APIError(status_code={self.status_code!r}, code={self.code!r}, "
            f"message={self.message!r})"
        )
