"""
发布配置：`.env` 加载与环境变量汇总。

环境只在 CLI 层读取一次，整理成 `ReleaseSettings` 后显式传给发布流程。
"""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass

_LINE_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")
_INLINE_COMMENT_RE = re.compile(r"\s+#.*$")

ENV_HELP = """\
Environment:
  IOS_APP_NAME         iOS target folder + scheme (defaults to workspace name)
  IOS_SCHEME           Override the Xcode scheme
  IOS_WORKSPACE        Override the workspace path (relative to repo root)
  ASC_APPLE_ID         Apple ID (required for upload)
  ASC_APP_PASSWORD     App-specific password (required for upload)
  ASC_ITC_PROVIDER     iTMSTransporter provider short name (optional)
"""


def _unescape(value: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value):
            nxt = value[i + 1]
            mapped = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\"}.get(nxt)
            if mapped is not None:
                out.append(mapped)
                i += 2
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def parse_dotenv(content: str) -> dict[str, str]:
    """解析 `.env` 文本为键值对（同名键以第一次出现为准）。"""
    out: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        m = _LINE_RE.match(line)
        if not m:
            continue
        key, value = m.group(1), m.group(2).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            quote = value[0]
            value = value[1:-1]
            if quote == '"':
                value = _unescape(value)
        else:
            value = _INLINE_COMMENT_RE.sub("", value)
        out.setdefault(key, value)
    return out


def load_dotenv(path: str, environ: MutableMapping[str, str]) -> None:
    """把 `.env` 中的变量写入 `environ`，已存在的键不覆盖；文件不存在时忽略。"""
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        return
    except OSError as e:
        raise RuntimeError(f"Failed to read .env file at {path}: {e}") from e

    for key, value in parse_dotenv(content).items():
        if key not in environ:
            environ[key] = value


@dataclass(frozen=True)
class ReleaseSettings:
    """发布流程所需的环境配置；空字符串表示未设置。"""

    app_name: str = ""
    scheme: str = ""
    workspace: str = ""
    apple_id: str = ""
    app_password: str = ""
    itc_provider: str = ""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> ReleaseSettings:
        return cls(
            app_name=environ.get("IOS_APP_NAME", ""),
            scheme=environ.get("IOS_SCHEME", ""),
            workspace=environ.get("IOS_WORKSPACE", ""),
            apple_id=environ.get("ASC_APPLE_ID", ""),
            app_password=environ.get("ASC_APP_PASSWORD", ""),
            itc_provider=environ.get("ASC_ITC_PROVIDER", ""),
        )
