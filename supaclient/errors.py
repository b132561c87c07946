"""
Errors raised by the auth, admin and storage clients.
"""

from typing import Any, Dict, Optional


class SupabaseError(Exception):
    """Non-2xx response from an auth, admin or storage endpoint."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        body: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.body = body or {}


class AuthError(SupabaseError):
    """Authentication failure."""


class StorageError(SupabaseError):
    """Storage request failure."""


class StorageNotFoundError(StorageError):
    """The requested file does not exist."""
