"""Unit tests for upload helpers and the OSS storage wrapper."""

import base64

import pytest
from libs.common.config import get_settings
from libs.common.errors import STORAGE_FAILED, STORAGE_UNAVAILABLE, AppError
from services.market_service.services.storage import (
    OssStorage,
    build_object_key,
    decode_file_data,
    resolve_extension,
)
from tests.fakes import FakeS3Client


def _settings(**overrides):
    return get_settings().model_copy(
        update={
            "OSS_BUCKET": "farm-media",
            "OSS_REGION": "cn-hangzhou",
            "OSS_PUBLIC_BASE_URL": "https://cdn.farmdirect.test",
            **overrides,
        }
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "file_name,content_type,expected",
    [
        ("photo.PNG", None, ".png"),
        (None, "image/webp", ".webp"),
        ("noext", "image/jpeg", ".jpg"),
        (None, None, ".jpg"),
        (None, "application/octet-stream", ".jpg"),
    ],
)
def test_resolve_extension(file_name, content_type, expected):
    assert resolve_extension(file_name, content_type) == expected


@pytest.mark.unit
def test_object_key_layout():
    key = build_object_key("user-1", ".png", "stories/")
    assert key.startswith("farmer/user-1/stories/")
    assert key.endswith(".png")

    assert build_object_key("user-1", ".jpg").startswith("farmer/user-1/products/")


@pytest.mark.unit
def test_decode_data_uri_uses_embedded_type():
    encoded = base64.b64encode(b"\x89PNG").decode()

    data, content_type = decode_file_data(f"data:image/png;base64,{encoded}")

    assert data == b"\x89PNG"
    assert content_type == "image/png"


@pytest.mark.unit
def test_decode_explicit_type_wins():
    encoded = base64.b64encode(b"abc").decode()

    _, content_type = decode_file_data(f"data:image/png;base64,{encoded}", "image/webp")

    assert content_type == "image/webp"


@pytest.mark.unit
@pytest.mark.parametrize("payload", ["not base64!!", "data:image/png;base64,"])
def test_decode_rejects_bad_payloads(payload):
    with pytest.raises(AppError) as exc_info:
        decode_file_data(payload)
    assert exc_info.value.status_code == 400


# ---------------------------------------------------------------------------
# OssStorage
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_unconfigured_storage_is_unavailable():
    storage = OssStorage(get_settings())

    assert storage.enabled is False
    with pytest.raises(AppError) as exc_info:
        storage.ensure_enabled()
    assert exc_info.value.status_code == 503
    assert exc_info.value.code == STORAGE_UNAVAILABLE


@pytest.mark.unit
def test_presign_signs_put_with_content_type():
    client = FakeS3Client()
    storage = OssStorage(_settings(), client=client)

    credential = storage.presign_upload(
        user_id="u1", file_name="a.png", content_type="image/png"
    )

    operation, params, expires_in, method = client.sign_calls[0]
    assert operation == "put_object"
    assert method == "PUT"
    assert params["Bucket"] == "farm-media"
    assert params["ContentType"] == "image/png"
    assert expires_in == get_settings().UPLOAD_URL_EXPIRES_SECONDS
    assert credential.headers == {"Content-Type": "image/png"}
    assert credential.public_url == f"https://cdn.farmdirect.test/{credential.object_key}"


@pytest.mark.unit
def test_public_url_defaults_to_bucket_domain():
    storage = OssStorage(_settings(OSS_PUBLIC_BASE_URL=None), client=FakeS3Client())

    assert (
        storage.public_url("farmer/u1/products/x.jpg")
        == "https://farm-media.oss-cn-hangzhou.aliyuncs.com/farmer/u1/products/x.jpg"
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_bytes_puts_object():
    client = FakeS3Client()
    storage = OssStorage(_settings(), client=client)

    stored = await storage.upload_bytes(
        user_id="u1", data=b"hello", content_type="image/png", directory="stories"
    )

    call = client.put_calls[0]
    assert call["Body"] == b"hello"
    assert call["Key"] == stored.object_key
    assert call["ContentType"] == "image/png"
    assert stored.size == 5
    assert "/stories/" in stored.object_key


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_failure_maps_to_bad_gateway():
    storage = OssStorage(_settings(), client=FakeS3Client(fail=True))

    with pytest.raises(AppError) as exc_info:
        await storage.upload_bytes(user_id="u1", data=b"x")

    assert exc_info.value.status_code == 502
    assert exc_info.value.code == STORAGE_FAILED
