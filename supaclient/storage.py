"""
Storage - buckets and file objects.
"""

import re
from typing import TYPE_CHECKING, List, Optional

from .constants import STORAGE_ENDPOINT
from .errors import StorageError, StorageNotFoundError
from .types import (
    Bucket,
    BucketOption,
    FileObject,
    FileResponse,
    FileSearchOptions,
    FileUploadOptions,
    from_dict,
    to_dict,
)

if TYPE_CHECKING:
    from .client import Client


def remove_empty_folders(path: str) -> str:
    """Collapse repeated slashes left by empty path segments."""
    return re.sub(r"/{2,}", "/", path)


class Storage:
    """Storage client: bucket management and access to bucket files."""

    def __init__(self, client: "Client"):
        self.client = client

    @property
    def url(self) -> str:
        return self.client.endpoint(STORAGE_ENDPOINT)

    async def _request(self, method: str, path: str, **kwargs):
        return await self.client.send_json(
            method,
            f"{self.url}/{path}",
            token=self.client.supabase_key,
            error_cls=StorageError,
            **kwargs,
        )

    # =========================================================================
    # Buckets
    # =========================================================================

    async def create_bucket(self, option: BucketOption) -> Bucket:
        """Create a bucket; the response only carries its name."""
        data = await self._request("POST", "bucket", json_body=to_dict(option))
        return from_dict(Bucket, data)

    async def get_bucket(self, bucket_id: str) -> Bucket:
        data = await self._request("GET", f"bucket/{bucket_id}")
        return from_dict(Bucket, data)

    async def list_buckets(self) -> List[Bucket]:
        data = await self._request("GET", "bucket/")
        return [from_dict(Bucket, item) for item in data or []]

    async def empty_bucket(self, bucket_id: str) -> str:
        """Delete every object in a bucket. Returns the server message."""
        data = await self._request("POST", f"bucket/{bucket_id}/empty")
        return (data or {}).get("message", "")

    async def update_bucket(self, bucket_id: str, option: BucketOption) -> str:
        data = await self._request("PUT", f"bucket/{bucket_id}", json_body=to_dict(option))
        return (data or {}).get("message", "")

    async def delete_bucket(self, bucket_id: str) -> str:
        """Delete a bucket. Only empty buckets can be deleted."""
        data = await self._request("DELETE", f"bucket/{bucket_id}")
        return (data or {}).get("message", "")

    def from_(self, bucket_id: str) -> "BucketFiles":
        """File operations on one bucket."""
        return BucketFiles(self, bucket_id)


class BucketFiles:
    """File object operations scoped to a bucket."""

    def __init__(self, storage: Storage, bucket_id: str):
        self.storage = storage
        self.bucket_id = bucket_id

    async def _upload_or_update(
        self,
        path: str,
        data: bytes,
        update: bool,
        opts: Optional[FileUploadOptions],
    ) -> FileResponse:
        opts = opts or FileUploadOptions()
        defaults = FileUploadOptions()
        headers = {
            "cache-control": opts.cache_control or defaults.cache_control,
            "content-type": opts.content_type or defaults.content_type,
            "x-upsert": "true" if opts.upsert else "false",
        }
        object_path = remove_empty_folders(f"{self.bucket_id}/{path}")
        result = await self.storage._request(
            "PUT" if update else "POST",
            f"object/{object_path}",
            content=data,
            headers=headers,
        )
        return from_dict(FileResponse, result)

    async def upload(
        self, path: str, data: bytes, opts: Optional[FileUploadOptions] = None
    ) -> FileResponse:
        return await self._upload_or_update(path, data, False, opts)

    async def update(
        self, path: str, data: bytes, opts: Optional[FileUploadOptions] = None
    ) -> FileResponse:
        """Replace an existing file."""
        return await self._upload_or_update(path, data, True, opts)

    async def move(self, from_path: str, to_path: str) -> FileResponse:
        result = await self.storage._request(
            "POST",
            "object/move",
            json_body={
                "bucketId": self.bucket_id,
                "sourceKey": from_path,
                "destinationKey": to_path,
            },
        )
        return from_dict(FileResponse, result)

    async def copy(self, from_path: str, to_path: str) -> FileResponse:
        result = await self.storage._request(
            "POST",
            "object/copy",
            json_body={
                "bucketId": self.bucket_id,
                "sourceKey": from_path,
                "destinationKey": to_path,
            },
        )
        return from_dict(FileResponse, result)

    async def create_signed_url(self, file_path: str, expires_in: int) -> str:
        """Create a time-limited URL for a private file. Returns the absolute URL."""
        result = await self.storage._request(
            "POST",
            f"object/sign/{self.bucket_id}/{file_path}",
            json_body={"expiresIn": expires_in},
        )
        signed = (result or {}).get("signedURL", "")
        return f"{self.storage.url}{signed}"

    def get_public_url(self, file_path: str) -> str:
        """URL of a file in a public bucket. No request is sent."""
        return f"{self.storage.url}/object/public/{self.bucket_id}/{file_path}"

    async def remove(self, file_paths: List[str]) -> List[FileObject]:
        """Delete files. Returns the removed objects."""
        result = await self.storage._request(
            "DELETE",
            f"object/{self.bucket_id}",
            json_body={"prefixes": file_paths},
        )
        return [from_dict(FileObject, item) for item in result or []]

    async def list(
        self, query_path: str = "", options: Optional[FileSearchOptions] = None
    ) -> List[FileObject]:
        """List the files under a folder prefix."""
        options = options or FileSearchOptions()
        defaults = FileSearchOptions()
        body = {
            "limit": options.limit or defaults.limit,
            "offset": options.offset or defaults.offset,
            "sortBy": {
                "column": options.sort_by.column or defaults.sort_by.column,
                "order": options.sort_by.order or defaults.sort_by.order,
            },
            "prefix": query_path,
        }
        result = await self.storage._request(
            "POST", f"object/list/{self.bucket_id}", json_body=body
        )
        return [from_dict(FileObject, item) for item in result or []]

    async def download(self, file_path: str) -> bytes:
        """
        Download a file.

        Raises:
            StorageNotFoundError: the file does not exist
            StorageError: any other failure
        """
        try:
            response = await self.storage.client.send(
                "GET",
                f"{self.storage.url}/object/authenticated/{self.bucket_id}/{file_path}",
                token=self.storage.client.supabase_key,
                error_cls=StorageError,
            )
        except StorageError as e:
            # failures come back as JSON carrying their own statusCode
            if e.status_code == 404 or str(e.body.get("statusCode")) == "404":
                raise StorageNotFoundError(e.message, e.status_code, e.code, e.body) from e
            raise
        return response.content
