"""
应用配置中 iOS 构建号（`buildNumber`）的读取、计算与原位写回。

设计原则：
- `app.config.ts` / `app.config.js` 只做文本匹配，绝不当作代码执行。
- `app.json` 用 `json` 解析取值，但写回时只替换那一段数字，不重新序列化整个文档。
- 读取返回位置标签，写回必须使用同一标签，保证两者命中同一处。
"""

from __future__ import annotations

import bisect
import json
import re
from json.decoder import scanstring

from .errors import (
    BuildNumberNotFoundError,
    InvalidValueError,
    MalformedInputError,
    UpdateFailedError,
)
from .types import (
    FORMAT_JSON,
    FORMAT_SCRIPT,
    LOCATION_JSON_EXPO,
    LOCATION_JSON_IOS,
    LOCATION_SCRIPT_ANY,
    LOCATION_SCRIPT_IOS,
    BuildNumberReading,
)

_DIGITS_RE = re.compile(r"[0-9]+")

# 键名可带引号（`ios` / `"ios"` / `'ios'`），但不能是更长标识符的尾部（如 `scenarios`）。
_IOS_OPEN_RE = re.compile(r"""(?<![\w$])(['"]?)ios\1\s*:\s*\{""")
_BUILD_NUMBER_RE = re.compile(r"""(?<![\w$])(['"]?)buildNumber\1\s*:\s*(['"])([0-9]+)\2""")

# 优先级从高到低。
_SCRIPT_LOCATIONS = (LOCATION_SCRIPT_IOS, LOCATION_SCRIPT_ANY)

_JSON_PATHS: dict[str, tuple[str, ...]] = {
    LOCATION_JSON_IOS: ("expo", "ios", "buildNumber"),
    LOCATION_JSON_EXPO: ("expo", "buildNumber"),
}

_JSON_WS_RE = re.compile(r"[ \t\n\r]*")
_JSON_DECODER = json.JSONDecoder()


def _skip_string(text: str, idx: int) -> int:
    """跳过从 `idx` 开始的字符串字面量，返回闭合引号之后的位置。"""
    quote = text[idx]
    i = idx + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            # 未闭合的普通字符串在行尾结束。
            return i
        i += 1
    return len(text)


def _skip_literal(text: str, idx: int) -> int | None:
    """若 `idx` 处是字符串字面量或注释的开头，返回其结束位置，否则返回 `None`。"""
    if text[idx] in "'\"`":
        return _skip_string(text, idx)
    if text.startswith("//", idx):
        nl = text.find("\n", idx)
        return len(text) if nl < 0 else nl + 1
    if text.startswith("/*", idx):
        end = text.find("*/", idx + 2)
        return len(text) if end < 0 else end + 2
    return None


def _literal_spans(text: str) -> list[tuple[int, int]]:
    """收集全文中字符串字面量与注释的区间，按起点升序。"""
    spans: list[tuple[int, int]] = []
    i = 0
    while i < len(text):
        end = _skip_literal(text, i)
        if end is None:
            i += 1
            continue
        spans.append((i, end))
        i = end
    return spans


def _inside_literal(spans: list[tuple[int, int]], pos: int) -> bool:
    """`pos` 是否落在某个字符串或注释内部（恰好位于引号开头的带引号键不算）。"""
    idx = bisect.bisect_right(spans, (pos, float("inf"))) - 1
    if idx < 0:
        return False
    start, end = spans[idx]
    return start < pos < end


def _matching_brace(text: str, open_idx: int) -> int | None:
    """
    返回与 `open_idx` 处 `{` 配对的 `}` 下标；不配对时返回 `None`。

    扫描时跳过字符串字面量与注释，其中的花括号不计数。
    """
    depth = 0
    i = open_idx
    while i < len(text):
        end = _skip_literal(text, i)
        if end is not None:
            i = end
            continue
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def _first_live_build_number(
    text: str, spans: list[tuple[int, int]], start: int = 0, end: int | None = None
) -> tuple[int, int] | None:
    for bm in _BUILD_NUMBER_RE.finditer(text, start, len(text) if end is None else end):
        if not _inside_literal(spans, bm.start()):
            return bm.span(3)
    return None


def _locate_script(text: str, location: str) -> tuple[int, int] | None:
    """返回指定位置标签对应的数字区间 `(start, end)`；注释和字符串中的匹配一律忽略。"""
    spans = _literal_spans(text)
    if location == LOCATION_SCRIPT_IOS:
        for m in _IOS_OPEN_RE.finditer(text):
            if _inside_literal(spans, m.start()):
                continue
            open_idx = m.end() - 1
            close_idx = _matching_brace(text, open_idx)
            if close_idx is None:
                continue
            span = _first_live_build_number(text, spans, open_idx + 1, close_idx)
            if span is not None:
                return span
        return None
    if location == LOCATION_SCRIPT_ANY:
        return _first_live_build_number(text, spans)
    return None


def _json_value_span(text: str, idx: int, path: tuple[str, ...]) -> tuple[int, int] | None:
    """
    从 `idx` 处的 JSON 对象出发沿 `path` 查找，返回叶子值的源码区间。

    与 `json.loads` 一致，重复键以最后一次出现为准。
    """
    if not text.startswith("{", idx):
        return None
    idx = _JSON_WS_RE.match(text, idx + 1).end()
    if text.startswith("}", idx):
        return None

    found: tuple[int, int] | None = None
    while True:
        if not text.startswith('"', idx):
            return None
        key, idx = scanstring(text, idx + 1)
        idx = _JSON_WS_RE.match(text, idx).end()
        if not text.startswith(":", idx):
            return None
        value_start = _JSON_WS_RE.match(text, idx + 1).end()
        _value, idx = _JSON_DECODER.raw_decode(text, value_start)
        if key == path[0]:
            if len(path) == 1:
                found = (value_start, idx)
            else:
                found = _json_value_span(text, value_start, path[1:])
        idx = _JSON_WS_RE.match(text, idx).end()
        if text.startswith(",", idx):
            idx = _JSON_WS_RE.match(text, idx + 1).end()
            continue
        if text.startswith("}", idx):
            return found
        return None


def _locate_json(text: str, location: str) -> tuple[int, int] | None:
    """返回 JSON 字符串字面量（含引号）的区间；路径不存在或值不是字符串时返回 `None`。"""
    path = _JSON_PATHS.get(location)
    if path is None:
        return None
    start = _JSON_WS_RE.match(text, 0).end()
    try:
        span = _json_value_span(text, start, path)
    except json.JSONDecodeError:
        return None
    if span is None or text[span[0]] != '"':
        return None
    return span


def _parse_digits(value: object, label: str) -> int:
    """校验构建号为纯十进制数字字符串并转换为整数。"""
    if not isinstance(value, str) or not _DIGITS_RE.fullmatch(value):
        raise InvalidValueError(f"{label} must be a numeric string, got {value!r}.")
    return int(value)


def _read_script(text: str) -> BuildNumberReading:
    for location in _SCRIPT_LOCATIONS:
        span = _locate_script(text, location)
        if span is not None:
            return BuildNumberReading(value=int(text[span[0]:span[1]]), location=location)
    return BuildNumberReading()


def _read_json(text: str) -> BuildNumberReading:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"app.json is not valid JSON: {e}") from e

    expo = doc.get("expo") if isinstance(doc, dict) else None
    if not isinstance(expo, dict):
        return BuildNumberReading()

    ios = expo.get("ios")
    if isinstance(ios, dict) and ios.get("buildNumber") is not None:
        value = _parse_digits(ios["buildNumber"], "expo.ios.buildNumber")
        return BuildNumberReading(value=value, location=LOCATION_JSON_IOS)

    if expo.get("buildNumber") is not None:
        value = _parse_digits(expo["buildNumber"], "expo.buildNumber")
        return BuildNumberReading(value=value, location=LOCATION_JSON_EXPO)

    return BuildNumberReading()


def read_build_number(fmt: str, text: str) -> BuildNumberReading:
    """读取当前构建号及其位置标签；未找到时返回空读数而不是抛错。"""
    if fmt == FORMAT_JSON:
        return _read_json(text)
    if fmt == FORMAT_SCRIPT:
        return _read_script(text)
    raise ValueError(f"unknown config format: {fmt}")


def write_build_number(fmt: str, text: str, location: str, next_value: int) -> str:
    """
    将 `location` 处的构建号替换为 `next_value`，其余字节保持不变。

    若该处数值已等于 `next_value`（包括带前导零的写法），原样返回。
    """
    if fmt == FORMAT_SCRIPT:
        span = _locate_script(text, location)
        if span is None:
            raise UpdateFailedError(f"Failed to update buildNumber ({location}) in app config.")
        start, end = span
        current = text[start:end]
    elif fmt == FORMAT_JSON:
        literal = _locate_json(text, location)
        if literal is None:
            dotted = ".".join(_JSON_PATHS.get(location, ("buildNumber",)))
            raise UpdateFailedError(f"Failed to update {dotted} in app.json.")
        # 只替换引号之间的内容。
        start, end = literal[0] + 1, literal[1] - 1
        current, _ = scanstring(text, start)
    else:
        raise ValueError(f"unknown config format: {fmt}")

    if _DIGITS_RE.fullmatch(current) and int(current) == next_value:
        return text
    return f"{text[:start]}{next_value}{text[end:]}"


def next_build_number(current: int | None, requested: int | None = None) -> int:
    """
    计算新构建号：显式指定时校验其为正整数，否则为 `current + 1`。

    新值与当前值相同视为错误，避免提交一个没有变化的版本。
    """
    if requested is not None:
        if isinstance(requested, bool) or not isinstance(requested, int) or requested <= 0:
            raise InvalidValueError("Build number must be a positive integer.")
        value = requested
    else:
        if current is None:
            raise BuildNumberNotFoundError("Unable to detect current build number.")
        value = current + 1

    if current is not None and value == current:
        raise InvalidValueError(f"Build number is already set to {current}.")
    return value
