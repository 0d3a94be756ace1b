"""アップロード処理の例外定義"""
from typing import Optional, Sequence, Tuple


class ImageUploadError(Exception):
    """image_uploader の基底例外"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        # バッチ処理中に発生した場合のコンテキスト
        self.record_id: Optional[str] = None
        self.transferred: Tuple[str, ...] = ()

    def attach_batch(self, record_id: str, transferred: Sequence[str] = ()) -> "ImageUploadError":
        """失敗したバッチの情報を付与"""
        self.record_id = record_id
        self.transferred = tuple(transferred)
        return self


class SigningError(ImageUploadError):
    """署名入力が不正"""
    pass


class CredentialsError(ImageUploadError):
    """ストレージの認証情報が取得できない"""
    pass


class NegotiationError(ImageUploadError):
    """アップロード枠の取得に失敗"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransferError(ImageUploadError):
    """オブジェクトの転送に失敗"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause
        self.url = url

    @property
    def retryable(self) -> bool:
        """通信エラーと5xxのみリトライ対象"""
        if self.status_code is None:
            return True
        return self.status_code >= 500


class InvalidURLError(TransferError):
    """転送先URLが不正"""

    @property
    def retryable(self) -> bool:
        return False


class ConfirmationError(ImageUploadError):
    """アップロード完了の確認に失敗"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class MissingSlotError(ImageUploadError):
    """ファイル名に対応するアップロード枠がない"""

    def __init__(self, filename: str):
        super().__init__(f"No upload slot for file: {filename}")
        self.filename = filename
