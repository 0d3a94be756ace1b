"""オブジェクト転送のテスト"""
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from image_uploader.core.transfer import ObjectTransferClient
from image_uploader.exceptions import InvalidURLError, TransferError


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ObjectTransferClient(session, timeout=10)


@pytest.mark.parametrize("status_code", [200, 201, 204])
def test_put_success(client, session, status_code):
    session.request.return_value = make_response(status_code)

    assert client.put("https://store/R1/a.jpg?X-Amz-Signature=x", b"data", {"Content-Type": "image/jpeg"}) is None

    session.request.assert_called_once_with(
        "PUT",
        "https://store/R1/a.jpg?X-Amz-Signature=x",
        data=b"data",
        headers={"Content-Type": "image/jpeg"},
        timeout=10,
    )


def test_delete_sends_no_body(client, session):
    session.request.return_value = make_response(204)

    client.delete("https://store/bucket/a.jpg", {"Authorization": "sig"})

    session.request.assert_called_once_with(
        "DELETE", "https://store/bucket/a.jpg", data=None, headers={"Authorization": "sig"}, timeout=10
    )


@pytest.mark.parametrize("status_code,retryable", [(403, False), (404, False), (500, True), (503, True)])
def test_non_2xx_raises_transfer_error(client, session, status_code, retryable):
    session.request.return_value = make_response(status_code)

    with pytest.raises(TransferError) as exc_info:
        client.put("https://store/a.jpg", b"data")

    assert exc_info.value.status_code == status_code
    assert exc_info.value.retryable is retryable
    assert exc_info.value.url == "https://store/a.jpg"


def test_transport_failure(client, session):
    cause = requests.ConnectionError("connection refused")
    session.request.side_effect = cause

    with pytest.raises(TransferError) as exc_info:
        client.put("https://store/a.jpg", b"data")

    assert exc_info.value.status_code is None
    assert exc_info.value.cause is cause
    assert exc_info.value.retryable


@pytest.mark.parametrize("url", ["", "not a url", "ftp://store/a.jpg", "/relative/a.jpg"])
def test_invalid_url(client, session, url):
    with pytest.raises(InvalidURLError) as exc_info:
        client.put(url, b"data")

    assert not exc_info.value.retryable
    session.request.assert_not_called()
