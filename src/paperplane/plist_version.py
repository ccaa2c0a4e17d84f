"""
`Info.plist` 中 `CFBundleVersion` 的文本级读写。

只匹配 `<key>CFBundleVersion</key>` 紧跟的 `<string>` 元素，不解析整个文档，
也不重新序列化，因此文件其余部分逐字节保持不变。
"""

from __future__ import annotations

import re

from .errors import MalformedInputError, UpdateFailedError

_BUNDLE_VERSION_RE = re.compile(
    r"(<key>CFBundleVersion</key>\s*<string>)([^<]*)(</string>)"
)


def decode_plist_text(data: bytes) -> str:
    """将 plist 原始字节解码为文本；二进制 plist 无法按文本编辑。"""
    if data.startswith(b"bplist"):
        raise MalformedInputError(
            "Info.plist is a binary plist; convert it to XML first "
            "(plutil -convert xml1 Info.plist)."
        )
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"Info.plist is not valid UTF-8: {e}") from e


def read_bundle_version(text: str) -> str | None:
    """返回 `CFBundleVersion` 的原始字符串值，不存在时返回 `None`。"""
    m = _BUNDLE_VERSION_RE.search(text)
    return m.group(2) if m else None


def write_bundle_version(text: str, value: int) -> str:
    """把 `CFBundleVersion` 改写为 `value` 的十进制形式。"""
    m = _BUNDLE_VERSION_RE.search(text)
    if not m:
        raise UpdateFailedError("Failed to update CFBundleVersion in Info.plist: key not found.")
    start, end = m.span(2)
    updated = f"{text[:start]}{value}{text[end:]}"
    if updated == text:
        raise UpdateFailedError(
            f"Failed to update CFBundleVersion in Info.plist: already set to {value}."
        )
    return updated
