"""AWS Signature Version 4 による署名"""
import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from ..exceptions import SigningError

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
TERMINATOR = "aws4_request"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"
SUPPORTED_METHODS = ("GET", "HEAD", "PUT", "POST", "DELETE")

EMPTY_PAYLOAD_HASH = hashlib.sha256(b"").hexdigest()


@dataclass(frozen=True)
class SigningHeaders:
    """署名対象のヘッダー

    署名するヘッダーはこのクラスのフィールドに固定されている。
    canonical request のヘッダー行と SignedHeaders は同じ
    ``canonical_items`` から作られるので両者がずれることはない。
    """
    host: str
    content_type: Optional[str] = None
    acl: Optional[str] = None

    def canonical_items(
        self,
        payload_hash: str,
        amz_date: str,
        session_token: Optional[str] = None,
    ) -> List[Tuple[str, str]]:
        """小文字のヘッダー名でソート済みの (name, value) リスト"""
        items = []
        if self.content_type is not None:
            items.append(("content-type", self.content_type))
        items.append(("host", self.host))
        if self.acl is not None:
            items.append(("x-amz-acl", self.acl))
        items.append(("x-amz-content-sha256", payload_hash))
        items.append(("x-amz-date", amz_date))
        if session_token is not None:
            items.append(("x-amz-security-token", session_token))
        return items


@dataclass(frozen=True)
class SignedRequest:
    """署名結果"""
    authorization: str
    amz_date: str
    payload_hash: str
    signed_headers: str
    headers: Dict[str, str] = field(default_factory=dict)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def payload_hash(body: Optional[bytes]) -> str:
    """ボディのSHA-256（ボディなしは空バイト列のハッシュ）"""
    if body is None:
        return EMPTY_PAYLOAD_HASH
    if not isinstance(body, (bytes, bytearray, memoryview)):
        raise SigningError(f"Request body must be bytes, got {type(body).__name__}")
    return sha256_hex(bytes(body))


def canonical_uri(path: str) -> str:
    """パスを1回だけURIエンコード（'/' はそのまま）"""
    return quote(path, safe="/~")


def signed_header_names(items: Sequence[Tuple[str, str]]) -> str:
    return ";".join(name for name, _ in items)


def canonical_request(
    method: str,
    uri: str,
    items: Sequence[Tuple[str, str]],
    body_hash: str,
    signed_headers: Optional[str] = None,
    query: str = "",
) -> str:
    """canonical request を組み立てる

    ``signed_headers`` を省略すると ``items`` の順序から作る。
    """
    header_block = "".join(f"{name}:{value}\n" for name, value in items)
    if signed_headers is None:
        signed_headers = signed_header_names(items)
    return "\n".join([method, uri, query, header_block, signed_headers, body_hash])


def credential_scope(date_stamp: str, region: str) -> str:
    return f"{date_stamp}/{region}/{SERVICE}/{TERMINATOR}"


def string_to_sign(amz_date: str, scope: str, request: str) -> str:
    return "\n".join([ALGORITHM, amz_date, scope, sha256_hex(request.encode("utf-8"))])


def derive_signing_key(secret_key: str, date_stamp: str, region: str) -> bytes:
    """kDate -> kRegion -> kService -> kSigning"""
    k_date = _hmac(f"AWS4{secret_key}".encode("utf-8"), date_stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, SERVICE)
    return _hmac(k_service, TERMINATOR)


def signature(signing_key: bytes, to_sign: str) -> str:
    return hmac.new(signing_key, to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def _utc(timestamp: Optional[datetime]) -> datetime:
    if timestamp is None:
        return datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def _check_header_value(name: str, value: str):
    if not isinstance(value, str):
        raise SigningError(f"Header {name} must be a string, got {type(value).__name__}")
    if "\r" in value or "\n" in value:
        raise SigningError(f"Header {name} contains a line break")
    try:
        value.encode("ascii")
    except UnicodeEncodeError as e:
        raise SigningError(f"Header {name} is not ASCII encodable: {e}")


class Signer:
    """S3互換ストレージ用のリクエスト署名（I/Oなし）"""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        region: str,
        session_token: Optional[str] = None,
    ):
        if not access_key or not secret_key:
            raise SigningError("access_key and secret_key are required")
        if not region:
            raise SigningError("region is required")
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.session_token = session_token

    def sign(
        self,
        method: str,
        canonical_path: str,
        headers: SigningHeaders,
        body: Optional[bytes] = None,
        timestamp: Optional[datetime] = None,
    ) -> SignedRequest:
        """Authorization ヘッダーと x-amz-date を計算

        Args:
            method: HTTPメソッド
            canonical_path: バケットを含むオブジェクトパス（未エンコード）
            headers: 署名対象ヘッダー
            body: リクエストボディ（DELETEなどはNone）
            timestamp: 署名時刻（省略時は現在時刻、naiveはUTC扱い）

        Returns:
            SignedRequest
        """
        method = (method or "").upper()
        if method not in SUPPORTED_METHODS:
            raise SigningError(f"Unsupported method: {method}")
        if not isinstance(canonical_path, str) or not canonical_path.startswith("/"):
            raise SigningError(f"Canonical path must start with '/': {canonical_path!r}")
        if not isinstance(headers, SigningHeaders):
            raise SigningError(f"headers must be SigningHeaders, got {type(headers).__name__}")
        if not headers.host:
            raise SigningError("host header is required")
        if method == "PUT" and not headers.content_type:
            raise SigningError("content-type header is required for PUT")

        now = _utc(timestamp)
        amz_date = now.strftime(AMZ_DATE_FORMAT)
        date_stamp = now.strftime(DATE_STAMP_FORMAT)

        body_hash = payload_hash(body)
        items = headers.canonical_items(body_hash, amz_date, self.session_token)
        for name, value in items:
            _check_header_value(name, value)

        names = signed_header_names(items)
        request = canonical_request(method, canonical_uri(canonical_path), items, body_hash, names)
        scope = credential_scope(date_stamp, self.region)
        to_sign = string_to_sign(amz_date, scope, request)
        key = derive_signing_key(self.secret_key, date_stamp, self.region)

        authorization = (
            f"{ALGORITHM} Credential={self.access_key}/{scope}, "
            f"SignedHeaders={names}, Signature={signature(key, to_sign)}"
        )

        # host はHTTPクライアントがURLから付与する
        wire_headers = {name: value for name, value in items if name != "host"}
        wire_headers["Authorization"] = authorization
        if headers.content_type is not None:
            wire_headers["Content-Type"] = wire_headers.pop("content-type")

        return SignedRequest(
            authorization=authorization,
            amz_date=amz_date,
            payload_hash=body_hash,
            signed_headers=names,
            headers=wire_headers,
        )
