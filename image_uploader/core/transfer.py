"""オブジェクト単位のPUT/DELETE"""
from typing import Dict, Optional
from urllib.parse import urlparse

import requests

from ..exceptions import InvalidURLError, TransferError
from ..utils.logger import LoggerManager


def validate_url(url: str) -> str:
    """http(s)の絶対URLかチェック"""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(f"Invalid destination URL: {url!r}", url=url)
    return url


class ObjectTransferClient:
    """1オブジェクトの転送を実行（リトライはしない）"""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 120):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = LoggerManager.get_logger()

    def put(self, url: str, body: bytes, headers: Optional[Dict[str, str]] = None) -> None:
        """オブジェクトをアップロード"""
        self._send("PUT", url, headers, body)

    def delete(self, url: str, headers: Optional[Dict[str, str]] = None) -> None:
        """オブジェクトを削除"""
        self._send("DELETE", url, headers)

    def _send(self, method: str, url: str, headers: Optional[Dict[str, str]], body: Optional[bytes] = None):
        validate_url(url)
        try:
            response = self.session.request(
                method,
                url,
                data=body,
                headers=headers or {},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.warning(f"{method} {_redact(url)} failed: {e}")
            raise TransferError(f"{method} failed: {e}", cause=e, url=url) from e

        if not 200 <= response.status_code < 300:
            self.logger.warning(f"{method} {_redact(url)} returned status {response.status_code}")
            raise TransferError(
                f"{method} failed with status: {response.status_code}",
                status_code=response.status_code,
                url=url,
            )

        self.logger.debug(f"{method} {_redact(url)} succeeded ({response.status_code})")


def _redact(url: str) -> str:
    """署名付きURLのクエリはログに出さない"""
    return url.split("?", 1)[0]
