"""アップロードタスクの実行"""
import os
from typing import List, Optional, Tuple

import requests

from ..exceptions import ImageUploadError
from ..models.config import UploadTask, Config
from ..models.upload import ObjectItem, UploadBatch, object_path
from ..utils.logger import LoggerManager
from ..utils.file_utils import FileInfo, FileScanner
from .api_client import UploadApiClient
from .orchestrator import UploadOrchestrator
from .retry import RetryPolicy
from .s3_client import CredentialsProvider
from .store import DirectStoreClient
from .transfer import ObjectTransferClient
from .uploader import ParallelUploadExecutor


class TaskRunner:
    """設定ファイルのアップロードタスクを実行"""

    def __init__(
        self,
        config: Config,
        orchestrator: Optional[UploadOrchestrator] = None,
        store_client: Optional[DirectStoreClient] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.logger = LoggerManager.get_logger()
        self.session = session or requests.Session()
        self._orchestrator = orchestrator
        self._store_client = store_client
        self.file_scanner = FileScanner(
            config.options.exclude_patterns,
            config.options.supported_formats,
            config.options.max_file_size,
        )

    @property
    def orchestrator(self) -> UploadOrchestrator:
        """API経由のアップロードに使うオーケストレーター"""
        if self._orchestrator is None:
            if self.config.api is None:
                raise ValueError("'api' section is required for api mode tasks")
            api = self.config.api
            options = self.config.options
            executor = ParallelUploadExecutor(
                ObjectTransferClient(self.session, timeout=api.upload_timeout),
                RetryPolicy.from_options(options),
                max_workers=options.max_concurrency,
                enable_progress=options.enable_progress,
            )
            self._orchestrator = UploadOrchestrator(
                UploadApiClient(api.base_url, self.session, timeout=api.request_timeout),
                executor,
                upload_source=api.upload_source,
            )
        return self._orchestrator

    @property
    def store_client(self) -> DirectStoreClient:
        """ストレージ直接アップロード用のクライアント"""
        if self._store_client is None:
            if self.config.store is None:
                raise ValueError("'store' section is required for direct mode tasks")
            timeout = self.config.api.upload_timeout if self.config.api else 120
            self._store_client = DirectStoreClient(
                self.config.store,
                CredentialsProvider(self.config.store).create_signer(),
                ObjectTransferClient(self.session, timeout=timeout),
                RetryPolicy.from_options(self.config.options),
            )
        return self._store_client

    def run_all_tasks(self) -> Tuple[int, int]:
        """全てのタスクを実行"""
        total_tasks = len(self.config.upload_tasks)
        successful_tasks = 0
        failed_tasks = 0

        self.logger.info(f"Starting upload tasks: {total_tasks} tasks to process")

        for i, task in enumerate(self.config.upload_tasks, 1):
            if not task.enabled:
                self.logger.info(f"Skipping disabled task: {task.name}")
                continue

            self.logger.info(f"Task {i}/{total_tasks}: Starting '{task.name}' ({task.mode} mode)")

            try:
                success = self._run_single_task(task)
            except (ImageUploadError, ValueError, OSError) as e:
                self.logger.error(f"Task {i}/{total_tasks}: '{task.name}' failed with error: {e}")
                success = False

            if success:
                successful_tasks += 1
                self.logger.info(f"Task {i}/{total_tasks}: '{task.name}' completed successfully")
            else:
                failed_tasks += 1
                self.logger.error(f"Task {i}/{total_tasks}: '{task.name}' failed")

        self.logger.info(
            f"Upload tasks completed: {successful_tasks} successful, {failed_tasks} failed"
        )
        return successful_tasks, failed_tasks

    def _collect_files(self, task: UploadTask) -> List[FileInfo]:
        if os.path.isfile(task.source):
            return [self.file_scanner.get_file_info(task.source)]
        if os.path.isdir(task.source):
            return list(self.file_scanner.scan_directory(task.source, task.recursive))
        raise ValueError(f"Source is neither file nor directory: {task.source}")

    def _run_single_task(self, task: UploadTask) -> bool:
        """単一タスクを実行"""
        files = self._collect_files(task)
        if not files:
            self.logger.warning(f"No image files found in {task.source}")
            return True

        if task.mode == "direct":
            return self._upload_direct(task, files)
        return self._upload_batch(task, files)

    def _upload_batch(self, task: UploadTask, files: List[FileInfo]) -> bool:
        """API経由で1バッチとしてアップロード"""
        if self.config.options.dry_run:
            for file_info in files:
                self.logger.info(f"[DRY RUN]: Would upload {file_info.path} for {task.owner_id}")
            return True

        items = [
            ObjectItem.from_bytes(
                str(index),
                file_info.read(),
                file_info.relative_path.replace(os.sep, "_"),
            )
            for index, file_info in enumerate(files, 1)
        ]
        batch = UploadBatch(owner_id=task.owner_id, items=tuple(items))
        record_id = self.orchestrator.upload_batch(batch)

        for item in items:
            self.logger.info(f"Uploaded: {object_path(task.owner_id, record_id, item.filename)}")
        return True

    def _upload_direct(self, task: UploadTask, files: List[FileInfo]) -> bool:
        """ファイルごとにストレージへ直接アップロード"""
        failed = 0
        for file_info in files:
            if self.config.options.dry_run:
                self.logger.info(f"[DRY RUN]: Would upload {file_info.path} to store for {task.owner_id}")
                continue
            try:
                stored = self.store_client.upload_image(file_info.read(), task.owner_id)
                self.logger.info(f"Uploaded: {stored.key}")
            except (ImageUploadError, OSError) as e:
                self.logger.error(f"Error uploading file {file_info.path}: {e}")
                failed += 1

        self.logger.info(
            f"Direct upload completed: {len(files) - failed} successful, {failed} failed"
        )
        return failed == 0
