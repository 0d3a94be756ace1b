"""設定管理用のデータクラス"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import os
import re


@dataclass
class LoggingConfig:
    """ロギング設定"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class AssumeRoleConfig:
    """AssumeRole設定"""
    role_arn: str
    session_name: str
    external_id: Optional[str] = None
    duration_seconds: int = 3600

    def __post_init__(self):
        """AssumeRole設定のバリデーション"""
        arn_pattern = r'^arn:aws:iam::[0-9]{12}:role\/[a-zA-Z0-9+=,.@_-]+$'
        if not re.match(arn_pattern, self.role_arn):
            raise ValueError(
                f"Invalid role_arn format: {self.role_arn}. "
                "Expected format: arn:aws:iam::ACCOUNT_ID:role/ROLE_NAME"
            )

        if not self.session_name or not self.session_name.strip():
            raise ValueError("session_name cannot be empty")

        # セッション名は2-64文字の英数字、アンダースコア、ハイフン、ピリオドのみ許可
        session_name_pattern = r'^[a-zA-Z0-9_.-]{2,64}$'
        if not re.match(session_name_pattern, self.session_name):
            raise ValueError(
                f"Invalid session_name: {self.session_name}. "
                "Must be 2-64 characters long and contain only alphanumeric characters, "
                "underscores, hyphens, and periods"
            )

        # 900秒から43200秒の範囲
        if not (900 <= self.duration_seconds <= 43200):
            raise ValueError(
                f"Invalid duration_seconds: {self.duration_seconds}. "
                "Must be between 900 and 43200 seconds (15 minutes to 12 hours)"
            )


@dataclass
class StoreConfig:
    """S3互換ストレージ（直接アップロード）の設定"""
    endpoint: str
    bucket: str
    region: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    profile: Optional[str] = None
    assume_role: Optional[AssumeRoleConfig] = None
    acl: str = "public-read"
    public_base_url: Optional[str] = None

    def __post_init__(self):
        if not self.endpoint.startswith(("http://", "https://")):
            raise ValueError(f"Invalid endpoint: {self.endpoint}. Must start with http:// or https://")
        self.endpoint = self.endpoint.rstrip("/")
        if not self.bucket:
            raise ValueError("bucket cannot be empty")
        if not self.region:
            raise ValueError("region cannot be empty")

        if self.assume_role:
            if isinstance(self.assume_role, dict):
                self.assume_role = AssumeRoleConfig(**self.assume_role)
            elif not isinstance(self.assume_role, AssumeRoleConfig):
                raise TypeError(
                    f"assume_role must be dict or AssumeRoleConfig, got {type(self.assume_role)}"
                )


@dataclass
class ApiConfig:
    """アップロードAPIの設定"""
    base_url: str
    request_timeout: float = 30
    upload_timeout: float = 120
    upload_source: str = "mobile_app"

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")


@dataclass
class UploadOptions:
    """アップロードオプション"""
    max_concurrency: int = 3
    max_attempts: int = 3
    retry_delay: float = 2.0
    enable_retry: bool = True
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    supported_formats: List[str] = field(
        default_factory=lambda: ["jpg", "jpeg", "png", "heic", "heif", "webp"]
    )
    exclude_patterns: List[str] = field(default_factory=list)
    dry_run: bool = False
    enable_progress: bool = True

    def __post_init__(self):
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay cannot be negative, got {self.retry_delay}")


@dataclass
class UploadTask:
    """個別のアップロードタスク"""
    name: str
    source: str
    owner_id: str

    description: Optional[str] = None
    enabled: bool = True
    mode: str = "api"  # "api" または "direct"
    recursive: bool = False

    def __post_init__(self):
        if self.mode not in ("api", "direct"):
            raise ValueError(f"Invalid mode for task {self.name}: {self.mode}. Must be 'api' or 'direct'")


@dataclass
class Config:
    """メイン設定クラス"""
    logging: LoggingConfig
    options: UploadOptions
    api: Optional[ApiConfig] = None
    store: Optional[StoreConfig] = None
    upload_tasks: List[UploadTask] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """辞書から設定を作成"""
        api_data = data.get("api")
        store_data = data.get("store")

        upload_tasks = [
            UploadTask(**task) for task in data.get("upload_tasks", [])
        ]

        return cls(
            logging=LoggingConfig(**data.get("logging", {})),
            options=UploadOptions(**data.get("options", {})),
            api=ApiConfig(**api_data) if api_data else None,
            store=StoreConfig(**store_data) if store_data else None,
            upload_tasks=upload_tasks,
        )

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """設定ファイルから読み込み"""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file {config_path} not found.")

        try:
            with open(config_path, "r", encoding="utf-8") as file:
                data = json.load(file)
            return cls.from_dict(data)

        except json.JSONDecodeError as e:
            raise ValueError(f"Error decoding JSON from {config_path}: {e}")
        except Exception as e:
            raise RuntimeError(f"Error loading configuration: {e}")
