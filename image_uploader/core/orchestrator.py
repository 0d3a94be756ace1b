"""3段階アップロード（ネゴシエーション -> 転送 -> 完了確認）"""
from typing import List, Optional, Sequence, Tuple

from ..exceptions import ImageUploadError, NegotiationError
from ..models.upload import (
    BatchSession,
    ObjectItem,
    SessionState,
    UploadBatch,
    UploadMetadata,
    generate_filename,
    object_path,
)
from ..utils.logger import LoggerManager
from .api_client import UploadApiClient
from .session_store import SessionStore
from .uploader import ParallelUploadExecutor


class UploadOrchestrator:
    """1バッチ分の3段階プロトコルを実行"""

    def __init__(
        self,
        api_client: UploadApiClient,
        executor: ParallelUploadExecutor,
        session_store: Optional[SessionStore] = None,
        upload_source: str = "mobile_app",
    ):
        self.api_client = api_client
        self.executor = executor
        self.session_store = session_store if session_store is not None else SessionStore()
        self.upload_source = upload_source
        self.logger = LoggerManager.get_logger()

    def upload_batch(self, batch: UploadBatch, session_id: Optional[str] = None) -> str:
        """バッチをアップロードして record_id を返す

        いずれかのフェーズが失敗した時点で以降のフェーズは実行しない。
        転送済みのオブジェクトは削除しない。
        """
        metadata = UploadMetadata(upload_source=self.upload_source)
        if session_id:
            metadata.session_id = session_id

        # 1. ネゴシエーション
        record_id, slots = self.api_client.request_upload_slots(
            batch.owner_id, metadata, batch.manifest()
        )
        session = BatchSession.from_slots(record_id, slots)
        try:
            self.session_store.add(session)
        except KeyError:
            raise NegotiationError(f"Record {record_id} is already being uploaded")

        # 2. 転送（結果に関わらずセッションは破棄）
        try:
            session.state = SessionState.TRANSFERRING
            result = self.executor.transfer_all(batch.items, session.slots)
        except ImageUploadError as e:
            session.state = SessionState.FAILED
            raise e.attach_batch(record_id)
        finally:
            self.session_store.remove(record_id)

        if not result.ok:
            session.state = SessionState.FAILED
            error = result.first_error
            self.logger.error(
                f"Batch {record_id} failed: {len(result.succeeded)}/{len(batch.items)} "
                f"objects transferred, first error: {error}"
            )
            raise error.attach_batch(record_id, result.succeeded)
        session.state = SessionState.TRANSFERRED

        # 3. 完了確認
        try:
            self.api_client.confirm_upload(record_id)
        except ImageUploadError as e:
            session.state = SessionState.FAILED
            # 転送済みオブジェクトは未確認のままストレージに残る
            self.logger.warning(
                f"Batch {record_id} transferred but not confirmed; "
                f"{len(result.succeeded)} objects remain unconfirmed"
            )
            raise e.attach_batch(record_id, result.succeeded)
        session.state = SessionState.CONFIRMED

        self.logger.info(f"Batch {record_id} uploaded for owner {batch.owner_id}")
        return record_id

    def upload_images(self, owner_id: str, images: Sequence[Tuple[str, bytes, str]]) -> str:
        """(key, data, filename) のリストをアップロード"""
        return self.upload_batch(UploadBatch.from_tuples(owner_id, images))

    def upload_single(self, owner_id: str, data: bytes, filename: Optional[str] = None) -> str:
        """画像1枚をアップロードしてオブジェクトのパスを返す"""
        filename = filename or generate_filename()
        record_id = self.upload_images(owner_id, [("1", data, filename)])
        return object_path(owner_id, record_id, filename)

    def upload_multiple(self, owner_id: str, datas: Sequence[bytes]) -> Tuple[str, List[str]]:
        """複数画像を1バッチでアップロード

        Returns:
            (record_id, オブジェクトパスのリスト)
        """
        items = [
            ObjectItem.from_bytes(str(index), data, generate_filename())
            for index, data in enumerate(datas, 1)
        ]
        batch = UploadBatch(owner_id=owner_id, items=tuple(items))
        record_id = self.upload_batch(batch)
        return record_id, [object_path(owner_id, record_id, item.filename) for item in items]
