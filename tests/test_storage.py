import pytest

from supaclient import StorageError, StorageNotFoundError, create_client
from supaclient.storage import remove_empty_folders
from supaclient.types import BucketOption, FileSearchOptions, FileUploadOptions, SortBy

URL = "https://project.supabase.co"
KEY = "service-key"


@pytest.fixture
def supabase(transport):
    return create_client(URL, KEY, transport=transport)


def test_remove_empty_folders():
    assert remove_empty_folders("avatars//a.png") == "avatars/a.png"
    assert remove_empty_folders("avatars///x//a.png") == "avatars/x/a.png"


@pytest.mark.asyncio
async def test_create_bucket(supabase, recorder):
    recorder.respond(200, body={"name": "avatars"})

    bucket = await supabase.storage.create_bucket(BucketOption(id="avatars", name="avatars", public=True))

    assert bucket.name == "avatars"
    assert str(recorder.last.url) == f"{URL}/storage/v1/bucket"
    assert recorder.last_json() == {"id": "avatars", "name": "avatars", "public": True}
    assert recorder.last.headers["Authorization"] == f"Bearer {KEY}"


@pytest.mark.asyncio
async def test_bucket_crud(supabase, recorder):
    recorder.respond(200, body={"id": "avatars", "name": "avatars", "owner": "", "public": False})
    bucket = await supabase.storage.get_bucket("avatars")
    assert bucket.id == "avatars"
    assert str(recorder.last.url) == f"{URL}/storage/v1/bucket/avatars"

    recorder.respond(200, body=[{"id": "a", "name": "a"}, {"id": "b", "name": "b"}])
    buckets = await supabase.storage.list_buckets()
    assert [b.id for b in buckets] == ["a", "b"]
    assert str(recorder.last.url) == f"{URL}/storage/v1/bucket/"

    recorder.respond(200, body={"message": "Successfully emptied"})
    assert await supabase.storage.empty_bucket("avatars") == "Successfully emptied"
    assert str(recorder.last.url) == f"{URL}/storage/v1/bucket/avatars/empty"

    recorder.respond(200, body={"message": "Successfully updated"})
    assert await supabase.storage.update_bucket("avatars", BucketOption(id="avatars", name="avatars")) == "Successfully updated"
    assert recorder.last.method == "PUT"

    recorder.respond(200, body={"message": "Successfully deleted"})
    assert await supabase.storage.delete_bucket("avatars") == "Successfully deleted"
    assert recorder.last.method == "DELETE"


@pytest.mark.asyncio
async def test_bucket_error(supabase, recorder):
    recorder.respond(400, body={"statusCode": "409", "error": "Duplicate", "message": "The resource already exists"})

    with pytest.raises(StorageError) as exc_info:
        await supabase.storage.create_bucket(BucketOption(id="a", name="a"))

    assert exc_info.value.message == "Duplicate: The resource already exists"
    assert exc_info.value.code == "Duplicate"


@pytest.mark.asyncio
async def test_upload_uses_default_options(supabase, recorder):
    recorder.respond(200, body={"Key": "avatars/a.txt", "key": "avatars/a.txt"})

    response = await supabase.storage.from_("avatars").upload("folder//a.txt", b"hello")

    request = recorder.last
    assert request.method == "POST"
    assert str(request.url) == f"{URL}/storage/v1/object/avatars/folder/a.txt"
    assert request.headers["cache-control"] == "3600"
    assert request.headers["content-type"] == "text/plain;charset=UTF-8"
    assert request.headers["x-upsert"] == "false"
    assert request.content == b"hello"
    assert response.key == "avatars/a.txt"


@pytest.mark.asyncio
async def test_update_with_options(supabase, recorder):
    recorder.respond(200, body={"key": "avatars/a.png"})

    await supabase.storage.from_("avatars").update(
        "a.png", b"\x89PNG", FileUploadOptions(content_type="image/png", upsert=True, cache_control="")
    )

    request = recorder.last
    assert request.method == "PUT"
    assert request.headers["content-type"] == "image/png"
    assert request.headers["x-upsert"] == "true"
    assert request.headers["cache-control"] == "3600"


@pytest.mark.asyncio
async def test_move_and_copy(supabase, recorder):
    recorder.respond(200, body={"message": "Successfully moved"})
    response = await supabase.storage.from_("avatars").move("a.png", "b.png")
    assert response.message == "Successfully moved"
    assert str(recorder.last.url) == f"{URL}/storage/v1/object/move"
    assert recorder.last_json() == {"bucketId": "avatars", "sourceKey": "a.png", "destinationKey": "b.png"}

    recorder.respond(200, body={"key": "avatars/c.png"})
    await supabase.storage.from_("avatars").copy("a.png", "c.png")
    assert str(recorder.last.url) == f"{URL}/storage/v1/object/copy"


@pytest.mark.asyncio
async def test_create_signed_url(supabase, recorder):
    recorder.respond(200, body={"signedURL": "/object/sign/avatars/a.png?token=t"})

    url = await supabase.storage.from_("avatars").create_signed_url("a.png", 60)

    assert url == f"{URL}/storage/v1/object/sign/avatars/a.png?token=t"
    assert recorder.last_json() == {"expiresIn": 60}


def test_get_public_url(supabase, recorder):
    url = supabase.storage.from_("avatars").get_public_url("a.png")
    assert url == f"{URL}/storage/v1/object/public/avatars/a.png"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_remove(supabase, recorder):
    recorder.respond(200, body=[{"name": "a.png", "bucket_id": "avatars"}])

    removed = await supabase.storage.from_("avatars").remove(["a.png"])

    assert [f.name for f in removed] == ["a.png"]
    assert recorder.last.method == "DELETE"
    assert recorder.last_json() == {"prefixes": ["a.png"]}


@pytest.mark.asyncio
async def test_list_defaults(supabase, recorder):
    recorder.respond(200, body=[{"name": "a.png", "id": "1", "metadata": {"size": 3}}])

    files = await supabase.storage.from_("avatars").list("folder")

    assert files[0].metadata == {"size": 3}
    assert str(recorder.last.url) == f"{URL}/storage/v1/object/list/avatars"
    assert recorder.last_json() == {
        "limit": 100,
        "offset": 0,
        "sortBy": {"column": "name", "order": "asc"},
        "prefix": "folder",
    }


@pytest.mark.asyncio
async def test_list_with_options(supabase, recorder):
    recorder.respond(200, body=[])

    options = FileSearchOptions(limit=10, offset=20, sort_by=SortBy(column="created_at", order=""))
    await supabase.storage.from_("avatars").list("", options)

    assert recorder.last_json()["limit"] == 10
    assert recorder.last_json()["offset"] == 20
    assert recorder.last_json()["sortBy"] == {"column": "created_at", "order": "asc"}


@pytest.mark.asyncio
async def test_download(supabase, recorder):
    recorder.respond(200, content=b"file bytes")

    data = await supabase.storage.from_("avatars").download("a.png")

    assert data == b"file bytes"
    assert str(recorder.last.url) == f"{URL}/storage/v1/object/authenticated/avatars/a.png"


@pytest.mark.asyncio
async def test_download_not_found(supabase, recorder):
    recorder.respond(400, body={"statusCode": "404", "error": "not_found", "message": "Object not found"})

    with pytest.raises(StorageNotFoundError):
        await supabase.storage.from_("avatars").download("missing.png")


@pytest.mark.asyncio
async def test_download_other_error(supabase, recorder):
    recorder.respond(403, body={"statusCode": "403", "error": "Unauthorized", "message": "denied"})

    with pytest.raises(StorageError) as exc_info:
        await supabase.storage.from_("avatars").download("a.png")

    assert not isinstance(exc_info.value, StorageNotFoundError)
    assert exc_info.value.status_code == 403
