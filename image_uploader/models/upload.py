"""アップロード処理のデータモデル"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
import uuid

from ..utils.content_type import sniff_content_type

DEFAULT_CONTENT_TYPE = "image/jpeg"


def object_path(owner_id: str, record_id: str, filename: str) -> str:
    """アップロード済みオブジェクトのパス (owner/record/filename)"""
    return f"{owner_id}/{record_id}/{filename}"


def generate_filename(extension: str = "jpg") -> str:
    return f"{uuid.uuid4()}.{extension}"


@dataclass(frozen=True)
class ObjectItem:
    """アップロード対象の画像1件"""
    key: str
    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @classmethod
    def from_bytes(cls, key: str, data: bytes, filename: Optional[str] = None) -> 'ObjectItem':
        """バイト列から作成（Content-Typeは先頭バイトから判定）"""
        return cls(
            key=key,
            filename=filename or generate_filename(),
            content_type=sniff_content_type(data) or DEFAULT_CONTENT_TYPE,
            data=data,
        )

    @property
    def size(self) -> int:
        return len(self.data)

    def manifest_entry(self) -> Dict[str, str]:
        return {"key": self.key, "filename": self.filename, "contentType": self.content_type}


@dataclass(frozen=True)
class UploadBatch:
    """1レコード分のアップロード要求（生成後は変更しない）"""
    owner_id: str
    items: Tuple[ObjectItem, ...]

    def __post_init__(self):
        if not self.owner_id:
            raise ValueError("owner_id cannot be empty")
        # リストで渡されてもタプルに固定
        object.__setattr__(self, "items", tuple(self.items))
        if not self.items:
            raise ValueError("An upload batch needs at least one object")

        filenames = [item.filename for item in self.items]
        duplicates = sorted({name for name in filenames if filenames.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate filenames in batch: {', '.join(duplicates)}")

    @classmethod
    def from_tuples(cls, owner_id: str, images: Iterable[Tuple[str, bytes, Optional[str]]]) -> 'UploadBatch':
        """(key, data, filename) のタプル列から作成"""
        return cls(
            owner_id=owner_id,
            items=tuple(ObjectItem.from_bytes(key, data, filename) for key, data, filename in images),
        )

    @property
    def filenames(self) -> List[str]:
        return [item.filename for item in self.items]

    def manifest(self) -> List[Dict[str, str]]:
        """APIに送る画像一覧"""
        return [item.manifest_entry() for item in self.items]


@dataclass
class UploadMetadata:
    """アップロード要求のメタデータ"""
    upload_source: str = "mobile_app"
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    )

    def to_dict(self) -> Dict[str, str]:
        return {
            "uploadSource": self.upload_source,
            "sessionId": self.session_id,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class UploadSlot:
    """ネゴシエーションで払い出された転送先（1回の転送に有効）"""
    filename: str
    destination_url: str


class SessionState(str, Enum):
    """バッチの状態"""
    NEGOTIATED = "negotiated"
    TRANSFERRING = "transferring"
    TRANSFERRED = "transferred"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class BatchSession:
    """処理中バッチの状態"""
    record_id: str
    slots: Dict[str, UploadSlot]
    state: SessionState = SessionState.NEGOTIATED

    @classmethod
    def from_slots(cls, record_id: str, slots: Iterable[UploadSlot]) -> 'BatchSession':
        return cls(record_id=record_id, slots={slot.filename: slot for slot in slots})

    def slot_for(self, filename: str) -> Optional[UploadSlot]:
        return self.slots.get(filename)


@dataclass(frozen=True)
class ConfirmationResult:
    """確認APIのレスポンス"""
    success: bool
    record_id: Optional[str] = None
    message: Optional[str] = None
