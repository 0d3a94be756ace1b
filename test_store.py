"""ストレージ直接アップロードのテスト"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from conftest import JPEG_BYTES, PNG_BYTES
from image_uploader.core.retry import RetryPolicy
from image_uploader.core.signer import EMPTY_PAYLOAD_HASH, Signer, SigningHeaders
from image_uploader.core.store import DirectStoreClient
from image_uploader.core.transfer import ObjectTransferClient
from image_uploader.exceptions import TransferError
from image_uploader.models.config import StoreConfig

TIMESTAMP = datetime(2026, 1, 18, 9, 30, 15, tzinfo=timezone.utc)


@pytest.fixture
def store_config():
    return StoreConfig(endpoint="https://nyc3.digitaloceanspaces.com/", bucket="turf", region="nyc3")


@pytest.fixture
def signer():
    return Signer("AKID", "SECRET", "nyc3")


@pytest.fixture
def transfer():
    return MagicMock(spec=ObjectTransferClient)


@pytest.fixture
def client(store_config, signer, transfer):
    return DirectStoreClient(
        store_config, signer, transfer, RetryPolicy(max_attempts=3, base_delay=0, sleep=lambda _: None)
    )


def test_upload_image(client, signer, transfer):
    stored = client.upload_image(JPEG_BYTES, "user-1", object_id="abc", timestamp=TIMESTAMP)

    assert stored.key == "user-1/abc.jpg"
    assert stored.url == "https://nyc3.digitaloceanspaces.com/turf/user-1/abc.jpg"

    expected = signer.sign(
        "PUT",
        "/turf/user-1/abc.jpg",
        SigningHeaders(host="nyc3.digitaloceanspaces.com", content_type="image/jpeg", acl="public-read"),
        JPEG_BYTES,
        TIMESTAMP,
    )
    transfer.put.assert_called_once_with(stored.url, JPEG_BYTES, expected.headers)

    headers = transfer.put.call_args.args[2]
    assert headers["x-amz-acl"] == "public-read"
    assert headers["x-amz-date"] == "20260118T093015Z"
    assert headers["Content-Type"] == "image/jpeg"
    assert "SignedHeaders=content-type;host;x-amz-acl;x-amz-content-sha256;x-amz-date" in headers["Authorization"]


def test_upload_image_uses_sniffed_content_type(client, transfer):
    client.upload_image(PNG_BYTES, "user-1", object_id="abc", timestamp=TIMESTAMP)
    assert transfer.put.call_args.args[2]["Content-Type"] == "image/png"


def test_upload_image_generates_object_id(client, transfer):
    stored = client.upload_image(JPEG_BYTES, "user-1")
    owner, name = stored.key.split("/")
    assert owner == "user-1"
    assert name.endswith(".jpg") and len(name) == len("00000000-0000-0000-0000-000000000000.jpg")


def test_delete_image(client, transfer):
    client.delete_image("user-1/abc.jpg", timestamp=TIMESTAMP)

    url, headers = transfer.delete.call_args.args
    assert url == "https://nyc3.digitaloceanspaces.com/turf/user-1/abc.jpg"
    assert headers["x-amz-content-sha256"] == EMPTY_PAYLOAD_HASH
    assert "Content-Type" not in headers
    assert "SignedHeaders=host;x-amz-content-sha256;x-amz-date" in headers["Authorization"]


def test_server_errors_are_retried(client, transfer):
    transfer.put.side_effect = [TransferError("unavailable", status_code=503), None]
    client.upload_image(JPEG_BYTES, "user-1", object_id="abc")
    assert transfer.put.call_count == 2


def test_auth_failure_is_not_retried(client, transfer):
    transfer.delete.side_effect = TransferError("forbidden", status_code=403)
    with pytest.raises(TransferError):
        client.delete_image("user-1/abc.jpg")
    assert transfer.delete.call_count == 1


def test_public_url(client, store_config, signer, transfer):
    assert client.public_url("user-1/R1/a.jpg") == "https://turf.nyc3.digitaloceanspaces.com/user-1/R1/a.jpg"

    store_config.public_base_url = "https://cdn.example.com/"
    assert client.public_url("user-1/R1/a.jpg") == "https://cdn.example.com/user-1/R1/a.jpg"
