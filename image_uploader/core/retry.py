"""転送のリトライ制御"""
import time
from typing import Callable, Optional, TypeVar

from ..exceptions import TransferError
from ..models.config import UploadOptions
from ..utils.logger import LoggerManager

T = TypeVar("T")


class RetryPolicy:
    """回数上限と線形バックオフ付きのリトライ

    k回目（k >= 2）の試行の前に ``k * base_delay`` 秒待つ。
    リトライするのは通信エラーと5xxの TransferError だけ。
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        if base_delay < 0:
            raise ValueError(f"base_delay cannot be negative, got {base_delay}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep
        self.logger = LoggerManager.get_logger()

    @classmethod
    def from_options(cls, options: UploadOptions, sleep: Callable[[float], None] = time.sleep) -> 'RetryPolicy':
        max_attempts = options.max_attempts if options.enable_retry else 1
        return cls(max_attempts=max_attempts, base_delay=options.retry_delay, sleep=sleep)

    def delay_before(self, attempt: int) -> float:
        """attempt回目の前の待ち時間"""
        if attempt < 2:
            return 0.0
        return attempt * self.base_delay

    def call(self, operation: Callable[[], T], label: str = "transfer") -> T:
        """operation をリトライ付きで実行"""
        last_error: Optional[TransferError] = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                wait_time = self.delay_before(attempt)
                self.logger.warning(
                    f"{label} failed (attempt {attempt - 1}/{self.max_attempts}), "
                    f"retrying in {wait_time}s: {last_error}"
                )
                self.sleep(wait_time)

            try:
                return operation()
            except TransferError as e:
                if not e.retryable:
                    self.logger.error(f"{label} failed with non-retryable error: {e}")
                    raise
                last_error = e

        self.logger.error(f"{label} failed after {self.max_attempts} attempts: {last_error}")
        raise last_error
