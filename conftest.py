"""共通フィクスチャ"""
from unittest.mock import MagicMock

import pytest

from image_uploader.utils.logger import LoggerManager

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def make_response(status_code=200, json_body=None, url="https://api.example.com"):
    """requests.Response の代わり"""
    response = MagicMock()
    response.status_code = status_code
    response.url = url
    if json_body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture(autouse=True)
def reset_logger():
    """テストごとにロガーの状態を戻す"""
    LoggerManager.reset()
    yield
    LoggerManager.reset()


@pytest.fixture
def jpeg_bytes():
    return JPEG_BYTES


@pytest.fixture
def png_bytes():
    return PNG_BYTES
