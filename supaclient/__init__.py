"""
supaclient - async Python client for Supabase-compatible HTTP APIs.

Covers the PostgREST query interface, GoTrue auth and admin APIs and
object storage.
"""

from .admin import Admin
from .auth import Auth
from .client import Client, create_client, create_client_from_env
from .constants import ADMIN_ENDPOINT, AUTH_ENDPOINT, REST_ENDPOINT, STORAGE_ENDPOINT
from .errors import AuthError, StorageError, StorageNotFoundError, SupabaseError
from .postgrest import APIError, DecodeError, PostgrestClient
from .storage import BucketFiles, Storage

__version__ = "0.1.0"
__all__ = [
    "Client",
    "create_client",
    "create_client_from_env",
    "Auth",
    "Admin",
    "Storage",
    "BucketFiles",
    "PostgrestClient",
    "APIError",
    "DecodeError",
    "SupabaseError",
    "AuthError",
    "StorageError",
    "StorageNotFoundError",
    "AUTH_ENDPOINT",
    "ADMIN_ENDPOINT",
    "REST_ENDPOINT",
    "STORAGE_ENDPOINT",
]
