"""ファイル操作関連のユーティリティ"""
import os
import fnmatch
from typing import List, Generator, Optional
from dataclasses import dataclass


@dataclass
class FileInfo:
    """ファイル情報"""
    path: str
    size: int
    relative_path: str

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.path)[1].lstrip(".").lower()

    def read(self) -> bytes:
        with open(self.path, "rb") as file:
            return file.read()


class FileScanner:
    """アップロード対象の画像ファイルを探す"""

    def __init__(
        self,
        exclude_patterns: List[str] = None,
        supported_formats: Optional[List[str]] = None,
        max_file_size: Optional[int] = None,
    ):
        self.exclude_patterns = exclude_patterns or []
        self.supported_formats = [fmt.lower().lstrip(".") for fmt in (supported_formats or [])]
        self.max_file_size = max_file_size

    def should_exclude(self, file_path: str) -> bool:
        """ファイルが除外パターンに一致するかチェック"""
        file_name = os.path.basename(file_path)

        for pattern in self.exclude_patterns:
            if fnmatch.fnmatch(file_name, pattern):
                return True
            if fnmatch.fnmatch(file_path, f"*{pattern}*"):
                return True

        return False

    def is_supported(self, file_info: FileInfo) -> bool:
        """形式とサイズの条件を満たすか"""
        if self.supported_formats and file_info.extension not in self.supported_formats:
            return False
        if self.max_file_size is not None and file_info.size > self.max_file_size:
            return False
        return True

    def scan_directory(self, directory: str, recursive: bool = False) -> Generator[FileInfo, None, None]:
        """ディレクトリをスキャンしてファイル情報を生成（ファイル名順）"""
        if not os.path.isdir(directory):
            raise ValueError(f"Not a directory: {directory}")

        if recursive:
            for root, dirs, files in os.walk(directory):
                dirs[:] = sorted(d for d in dirs if not self.should_exclude(os.path.join(root, d)))

                for file in sorted(files):
                    file_path = os.path.join(root, file)
                    if self.should_exclude(file_path):
                        continue
                    file_info = FileInfo(
                        path=file_path,
                        size=os.path.getsize(file_path),
                        relative_path=os.path.relpath(file_path, directory),
                    )
                    if self.is_supported(file_info):
                        yield file_info
        else:
            for item in sorted(os.listdir(directory)):
                file_path = os.path.join(directory, item)
                if not os.path.isfile(file_path) or self.should_exclude(file_path):
                    continue
                file_info = FileInfo(
                    path=file_path,
                    size=os.path.getsize(file_path),
                    relative_path=item,
                )
                if self.is_supported(file_info):
                    yield file_info

    def get_file_info(self, file_path: str) -> FileInfo:
        """単一ファイルの情報を取得"""
        if not os.path.isfile(file_path):
            raise ValueError(f"Not a file: {file_path}")

        file_info = FileInfo(
            path=file_path,
            size=os.path.getsize(file_path),
            relative_path=os.path.basename(file_path)
        )
        if not self.is_supported(file_info):
            raise ValueError(
                f"Unsupported file: {file_path} ({file_info.extension}, {file_info.size} bytes)"
            )
        return file_info
