"""アップロード進捗の表示"""
import time
import threading
from typing import Callable, Optional

from .logger import LoggerManager


class ProgressTracker:
    """1バッチ分の転送完了数を追跡（表示のみで処理結果には影響しない）"""

    def __init__(
        self,
        total: int,
        label: str,
        callback: Optional[Callable[[float], None]] = None,
        display: bool = True,
    ):
        self.total = total
        self.label = label
        self.callback = callback
        self.display = display
        self.completed = 0
        self.failed = 0
        self.lock = threading.Lock()
        self.start_time = time.time()

    def __call__(self, filename: str, success: bool):
        """転送1件の完了時に呼ばれる"""
        with self.lock:
            self.completed += 1
            if not success:
                self.failed += 1
            fraction = self.fraction
            if self.display:
                self._display_progress(filename)
        if self.callback:
            try:
                self.callback(fraction)
            except Exception as e:
                LoggerManager.get_logger().warning(f"Progress callback failed for {filename}: {e}")

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 1.0
        return self.completed / self.total

    def _display_progress(self, filename: str):
        elapsed_time = time.time() - self.start_time
        print(f"\r{self.label}: {self.completed}/{self.total} ({self.fraction * 100:.0f}%) "
              f"- last: {filename} - {elapsed_time:.1f}s", end="", flush=True)

    def complete(self):
        """バッチ完了"""
        if not self.display:
            return
        elapsed_time = time.time() - self.start_time
        status = "Complete!" if self.failed == 0 else f"{self.failed} failed"
        print(f"\r{self.label}: {status} - {self.completed}/{self.total} - {elapsed_time:.1f}s")
