"""画像データからのContent-Type判定"""
from typing import Optional


def sniff_content_type(data: bytes) -> Optional[str]:
    """先頭バイトから画像のMIMEタイプを判定（判定できなければNone）"""
    if not data:
        return None

    first = data[0]
    if first == 0xFF:
        return "image/jpeg"
    if first == 0x89:
        return "image/png"
    if first == 0x47:
        return "image/gif"
    if first in (0x49, 0x4D):
        return "image/tiff"
    if first == 0x52 and len(data) > 12:
        # RIFF....WEBP
        if data[0:4] == b"RIFF" and data[8:12] == b"WEBP":
            return "image/webp"
    return None
