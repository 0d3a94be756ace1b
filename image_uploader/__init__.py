"""Image Uploader パッケージ"""
from typing import Tuple
from .models.config import Config
from .models.upload import ObjectItem, UploadBatch, object_path
from .utils.logger import LoggerManager
from .core.task_runner import TaskRunner
from .exceptions import (
    ImageUploadError,
    SigningError,
    CredentialsError,
    NegotiationError,
    TransferError,
    InvalidURLError,
    ConfirmationError,
    MissingSlotError,
)


class ImageUploader:
    """画像アップローダーのメインクラス"""

    def __init__(self, config_path: str = "config.json"):
        self.config = Config.from_file(config_path)

        self.logger = LoggerManager.setup(self.config.logging)
        self.logger.info("Image Uploader initialized")

        self.task_runner = TaskRunner(self.config)

    def upload(self, owner_id: str, images) -> str:
        """(key, data, filename) のリストをAPI経由でアップロードして record_id を返す"""
        return self.task_runner.orchestrator.upload_images(owner_id, images)

    def run(self) -> Tuple[int, int]:
        """アップロードタスクを実行"""
        self.logger.info("Starting image upload process...")
        return self.task_runner.run_all_tasks()


__all__ = [
    'ImageUploader',
    'Config',
    'ObjectItem',
    'UploadBatch',
    'object_path',
    'ImageUploadError',
    'SigningError',
    'CredentialsError',
    'NegotiationError',
    'TransferError',
    'InvalidURLError',
    'ConfirmationError',
    'MissingSlotError',
]
