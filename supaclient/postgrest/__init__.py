"""
PostgREST query builder.
"""

from .client import PostgrestClient
from .exceptions import APIError, DecodeError
from .request_builder import (
    FilterRequestBuilder,
    QueryRequestBuilder,
    RequestBuilder,
    RpcRequestBuilder,
    SelectRequestBuilder,
)
from .transport import PostgrestTransport
from .utils import sanitize_param, sanitize_pattern_param

__all__ = [
    "PostgrestClient",
    "PostgrestTransport",
    "RequestBuilder",
    "QueryRequestBuilder",
    "FilterRequestBuilder",
    "SelectRequestBuilder",
    "RpcRequestBuilder",
    "APIError",
    "DecodeError",
    "sanitize_param",
    "sanitize_pattern_param",
]
