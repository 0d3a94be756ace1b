"""ロギング設定ユーティリティ"""
import logging
import os
from typing import List, Optional

from ..models.config import LoggingConfig

LOGGER_NAME = "image_uploader"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    """コンソールと（指定があれば）ファイルのハンドラーを作成"""
    formatter = logging.Formatter(config.format, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if config.file:
        os.makedirs(os.path.dirname(config.file) or ".", exist_ok=True)
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


class LoggerManager:
    """パッケージロガーの設定と管理

    ライブラリとして使われる場合は setup() を呼ばず、NullHandler だけが付いた
    ロガーを返す。出力先の設定はアプリケーション側（main.py）に任せる。
    """

    _logger: Optional[logging.Logger] = None

    @classmethod
    def setup(cls, config: LoggingConfig) -> logging.Logger:
        """ロガーをセットアップ（2回目以降は既存のロガーを返す）"""
        if cls._logger is not None:
            return cls._logger

        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
        logger.handlers = _build_handlers(config)

        cls._logger = logger
        return logger

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """ロガーを取得"""
        if cls._logger is not None:
            return cls._logger

        logger = logging.getLogger(LOGGER_NAME)
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
        return logger

    @classmethod
    def reset(cls):
        """ハンドラーを閉じてセットアップ前の状態に戻す"""
        logger = logging.getLogger(LOGGER_NAME)
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
        cls._logger = None
