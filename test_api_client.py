"""アップロードAPIクライアントのテスト"""
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from image_uploader.core.api_client import UploadApiClient
from image_uploader.exceptions import ConfirmationError, NegotiationError
from image_uploader.models.upload import UploadMetadata, UploadSlot


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return UploadApiClient("https://api.example.com/", session, timeout=5)


@pytest.fixture
def metadata():
    return UploadMetadata(session_id="s1", timestamp="2026-01-18T09:30:15Z")


def test_request_upload_slots(client, session, metadata):
    session.post.return_value = make_response(200, {
        "recordId": "R1",
        "uploads": [{"filename": "a.jpg", "presignedUrl": "https://store/R1/a.jpg"}],
    })

    record_id, slots = client.request_upload_slots(
        "user-1", metadata, [{"key": "1", "filename": "a.jpg", "contentType": "image/jpeg"}]
    )

    assert record_id == "R1"
    assert slots == [UploadSlot("a.jpg", "https://store/R1/a.jpg")]
    session.post.assert_called_once_with(
        "https://api.example.com/images/upload",
        json={
            "userId": "user-1",
            "metadata": {
                "uploadSource": "mobile_app",
                "sessionId": "s1",
                "timestamp": "2026-01-18T09:30:15Z",
            },
            "images": [{"key": "1", "filename": "a.jpg", "contentType": "image/jpeg"}],
        },
        timeout=5,
    )


@pytest.mark.parametrize("response", [
    make_response(201, {"recordId": "R1", "uploads": []}),
    make_response(400, {"error": "bad request"}),
    make_response(200, None),
    make_response(200, ["not", "an", "object"]),
    make_response(200, {"uploads": []}),
    make_response(200, {"recordId": "", "uploads": []}),
    make_response(200, {"recordId": "R1"}),
    make_response(200, {"recordId": "R1", "uploads": [{"filename": "a.jpg"}]}),
    make_response(200, {"recordId": "R1", "uploads": ["a.jpg"]}),
])
def test_negotiation_failures(client, session, metadata, response):
    session.post.return_value = response
    with pytest.raises(NegotiationError):
        client.request_upload_slots("user-1", metadata, [])


def test_negotiation_transport_error(client, session, metadata):
    session.post.side_effect = requests.Timeout("timed out")
    with pytest.raises(NegotiationError) as exc_info:
        client.request_upload_slots("user-1", metadata, [])
    assert exc_info.value.status_code is None


def test_confirm_upload(client, session):
    session.post.return_value = make_response(200, {"success": True, "recordId": "R1"})

    result = client.confirm_upload("R1")

    assert result.success
    assert result.record_id == "R1"
    session.post.assert_called_once_with(
        "https://api.example.com/images/R1/confirm", json={}, timeout=5
    )


def test_confirm_upload_with_checksums(client, session):
    session.post.return_value = make_response(200, {"success": True, "recordId": "R1"})
    client.confirm_upload("R1", checksums={"a.jpg": "abc"})
    assert session.post.call_args.kwargs["json"] == {"checksums": {"a.jpg": "abc"}}


def test_confirm_success_false_without_message(client, session):
    session.post.return_value = make_response(200, {"success": False, "recordId": "R1"})

    with pytest.raises(ConfirmationError) as exc_info:
        client.confirm_upload("R1")

    assert exc_info.value.status_code == 200
    assert exc_info.value.server_message is None


@pytest.mark.parametrize("response", [
    make_response(404, {"error": "not found"}),
    make_response(200, None),
    make_response(200, {"recordId": "R1"}),
])
def test_confirm_failures(client, session, response):
    session.post.return_value = response
    with pytest.raises(ConfirmationError):
        client.confirm_upload("R1")


def test_confirm_transport_error(client, session):
    session.post.side_effect = requests.ConnectionError("refused")
    with pytest.raises(ConfirmationError):
        client.confirm_upload("R1")
