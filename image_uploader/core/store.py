"""S3互換ストレージへの直接アップロード"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from ..models.config import StoreConfig
from ..models.upload import DEFAULT_CONTENT_TYPE
from ..utils.content_type import sniff_content_type
from ..utils.logger import LoggerManager
from .retry import RetryPolicy
from .signer import Signer, SigningHeaders, canonical_uri
from .transfer import ObjectTransferClient


@dataclass(frozen=True)
class StoredObject:
    """アップロード済みオブジェクト"""
    key: str
    url: str


class DirectStoreClient:
    """署名付きリクエストでストレージに直接PUT/DELETEする"""

    def __init__(
        self,
        store_config: StoreConfig,
        signer: Signer,
        transfer_client: ObjectTransferClient,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.store_config = store_config
        self.signer = signer
        self.transfer_client = transfer_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = LoggerManager.get_logger()
        self.host = urlparse(store_config.endpoint).netloc

    def object_path(self, key: str) -> str:
        """署名に使うパス (/bucket/key)"""
        return f"/{self.store_config.bucket}/{key.lstrip('/')}"

    def object_url(self, key: str) -> str:
        return f"{self.store_config.endpoint}{canonical_uri(self.object_path(key))}"

    def public_url(self, path: str) -> str:
        """公開URL（未設定時は仮想ホスト形式）"""
        if self.store_config.public_base_url:
            return f"{self.store_config.public_base_url.rstrip('/')}/{path}"
        return (
            f"https://{self.store_config.bucket}.{self.store_config.region}"
            f".digitaloceanspaces.com/{path}"
        )

    def upload_image(
        self,
        data: bytes,
        owner_id: str,
        object_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> StoredObject:
        """画像をアップロード（キーは owner_id/object_id.jpg）"""
        key = f"{owner_id}/{object_id or uuid.uuid4()}.jpg"
        content_type = sniff_content_type(data) or DEFAULT_CONTENT_TYPE
        headers = SigningHeaders(host=self.host, content_type=content_type, acl=self.store_config.acl)
        url = self.object_url(key)

        def attempt():
            # リトライごとに署名し直す（x-amz-date を更新）
            signed = self.signer.sign("PUT", self.object_path(key), headers, data, timestamp)
            self.transfer_client.put(url, data, signed.headers)

        self.retry_policy.call(attempt, label=f"upload of {key}")
        self.logger.info(f"Successfully uploaded {key} to {self.store_config.bucket}")
        return StoredObject(key=key, url=url)

    def delete_image(self, key: str, timestamp: Optional[datetime] = None) -> None:
        """画像を削除"""
        headers = SigningHeaders(host=self.host)
        url = self.object_url(key)

        def attempt():
            signed = self.signer.sign("DELETE", self.object_path(key), headers, None, timestamp)
            self.transfer_client.delete(url, signed.headers)

        self.retry_policy.call(attempt, label=f"delete of {key}")
        self.logger.info(f"Deleted {key} from {self.store_config.bucket}")
