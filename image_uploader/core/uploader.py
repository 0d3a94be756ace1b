"""バッチ内オブジェクトの並列転送"""
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ..exceptions import ImageUploadError, MissingSlotError, TransferError
from ..models.upload import ObjectItem, UploadSlot
from ..utils.content_type import sniff_content_type
from ..utils.logger import LoggerManager
from ..utils.progress import ProgressTracker
from .retry import RetryPolicy
from .transfer import ObjectTransferClient


@dataclass
class UploadResult:
    """アップロード結果"""
    index: int
    filename: str
    success: bool
    error: Optional[ImageUploadError] = None


@dataclass
class BatchTransferResult:
    """バッチ全体の転送結果（results は入力順）"""
    results: List[UploadResult]

    @property
    def ok(self) -> bool:
        return all(result.success for result in self.results)

    @property
    def succeeded(self) -> List[str]:
        return [result.filename for result in self.results if result.success]

    @property
    def failed(self) -> List[UploadResult]:
        return [result for result in self.results if not result.success]

    @property
    def first_error(self) -> Optional[ImageUploadError]:
        """インデックスが最も小さい失敗のエラー"""
        for result in self.results:
            if not result.success:
                return result.error
        return None

    def raise_for_failure(self):
        error = self.first_error
        if error is not None:
            raise error


class ParallelUploadExecutor:
    """並列アップロード実行"""

    def __init__(
        self,
        transfer_client: ObjectTransferClient,
        retry_policy: Optional[RetryPolicy] = None,
        max_workers: int = 3,
        enable_progress: bool = False,
        progress_callback: Optional[Callable[[float], None]] = None,
    ):
        self.transfer_client = transfer_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_workers = max_workers
        self.enable_progress = enable_progress
        self.progress_callback = progress_callback
        self.logger = LoggerManager.get_logger()

    def transfer_all(self, items: Sequence[ObjectItem], slots: Dict[str, UploadSlot]) -> BatchTransferResult:
        """全オブジェクトを並列で転送

        開始済みの転送はキャンセルせず、全タスクの完了を待ってから結果を返す。

        Args:
            items: 転送するオブジェクト
            slots: ファイル名 -> UploadSlot

        Returns:
            入力順に並んだ BatchTransferResult
        """
        total_files = len(items)
        self.logger.info(
            f"Starting parallel upload of {total_files} files with {self.max_workers} workers"
        )

        progress = None
        if self.enable_progress or self.progress_callback:
            progress = ProgressTracker(
                total_files, "batch", callback=self.progress_callback, display=self.enable_progress
            )

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                pool.submit(self._transfer_one, index, item, slots.get(item.filename), progress)
                for index, item in enumerate(items)
            ]
            wait(futures)

        # 完了順ではなく入力順で集計する
        results = [future.result() for future in futures]
        if progress:
            progress.complete()

        batch_result = BatchTransferResult(results)
        self.logger.info(
            f"Parallel upload completed: {len(batch_result.succeeded)} successful, "
            f"{len(batch_result.failed)} failed"
        )
        return batch_result

    def _transfer_one(
        self,
        index: int,
        item: ObjectItem,
        slot: Optional[UploadSlot],
        progress: Optional[ProgressTracker],
    ) -> UploadResult:
        try:
            if slot is None:
                raise MissingSlotError(item.filename)

            headers = {}
            content_type = sniff_content_type(item.data)
            if content_type:
                headers["Content-Type"] = content_type

            self.retry_policy.call(
                lambda: self.transfer_client.put(slot.destination_url, item.data, headers),
                label=f"upload of {item.filename}",
            )
            self.logger.info(f"Successfully uploaded {item.filename} ({item.size} bytes)")
            result = UploadResult(index, item.filename, success=True)

        except ImageUploadError as e:
            self.logger.error(f"Upload failed for {item.filename}: {e}")
            result = UploadResult(index, item.filename, success=False, error=e)
        except Exception as e:
            self.logger.error(f"Unexpected error uploading {item.filename}: {e}")
            error = TransferError(f"Unexpected error uploading {item.filename}: {e}", cause=e)
            result = UploadResult(index, item.filename, success=False, error=error)

        if progress:
            # 進捗通知の失敗は転送結果に影響させない
            try:
                progress(item.filename, result.success)
            except Exception as e:
                self.logger.warning(f"Progress notification failed for {item.filename}: {e}")
        return result
