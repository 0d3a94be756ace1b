"""処理中バッチのセッション管理"""
import threading
from typing import Dict, List, Optional

from ..models.upload import BatchSession


class SessionStore:
    """record_id -> BatchSession のスレッドセーフなマップ

    インスタンスごとに独立している。テストや呼び出し元ごとに生成して使う。
    """

    def __init__(self):
        self._sessions: Dict[str, BatchSession] = {}
        self._lock = threading.Lock()

    def add(self, session: BatchSession) -> None:
        """セッションを登録（同じrecord_idが処理中ならKeyError）"""
        with self._lock:
            if session.record_id in self._sessions:
                raise KeyError(f"Session already in progress: {session.record_id}")
            self._sessions[session.record_id] = session

    def get(self, record_id: str) -> Optional[BatchSession]:
        with self._lock:
            return self._sessions.get(record_id)

    def remove(self, record_id: str) -> Optional[BatchSession]:
        """セッションを削除して返す（なければNone）"""
        with self._lock:
            return self._sessions.pop(record_id, None)

    def record_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __contains__(self, record_id: str) -> bool:
        with self._lock:
            return record_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
