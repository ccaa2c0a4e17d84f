"""
用于在项目根目录中定位应用配置、Xcode workspace 与 `Info.plist`。
"""

from __future__ import annotations

import os
import sys

from .types import FORMAT_JSON, FORMAT_SCRIPT, ConfigFile

CONFIG_CANDIDATES = ("app.config.ts", "app.config.js", "app.json")


def ensure_dir(path: str, label: str = "directory") -> None:
    """目录不存在或不是目录时退出。"""
    if not os.path.exists(path):
        raise SystemExit(f"Error: missing required {label}: {path}")
    if not os.path.isdir(path):
        raise SystemExit(f"Error: expected {label} at {path}")


def ensure_file(path: str, label: str = "file") -> None:
    """文件不存在或不是普通文件时退出。"""
    if not os.path.exists(path):
        raise SystemExit(f"Error: missing required {label}: {path}")
    if not os.path.isfile(path):
        raise SystemExit(f"Error: expected {label} at {path}")


def resolve_config_file(root: str) -> ConfigFile:
    """按优先级选取第一个存在的应用配置文件。"""
    for name in CONFIG_CANDIDATES:
        p = os.path.join(root, name)
        if os.path.exists(p):
            fmt = FORMAT_JSON if name.endswith(".json") else FORMAT_SCRIPT
            return ConfigFile(path=p, format=fmt)
    raise SystemExit(
        "Error: no app config found. Expected one of app.config.ts, app.config.js, or app.json."
    )


def resolve_workspace_path(ios_dir: str, root: str, override: str = "") -> str:
    """定位 `.xcworkspace`：优先使用覆盖值，否则在 `ios/` 下查找。"""
    if override:
        resolved = override if os.path.isabs(override) else os.path.join(root, override)
        resolved = os.path.abspath(resolved)
        ensure_dir(resolved, "workspace")
        return resolved

    workspaces: list[str] = []
    for name in sorted(os.listdir(ios_dir)):
        if name.endswith(".xcworkspace"):
            workspaces.append(name)

    if not workspaces:
        raise SystemExit("Error: no .xcworkspace found in ios/. Set IOS_WORKSPACE.")
    if len(workspaces) > 1:
        print(
            f"Warning: multiple workspaces found. Using {workspaces[0]}. "
            "Set IOS_WORKSPACE to override.",
            file=sys.stderr,
        )
    return os.path.join(ios_dir, workspaces[0])


def resolve_app_name(workspace_path: str, override: str = "") -> str:
    """应用名默认取 workspace 文件名（去掉 `.xcworkspace`）。"""
    if override:
        return override
    name = os.path.basename(workspace_path.rstrip(os.sep))
    if name.endswith(".xcworkspace"):
        name = name[: -len(".xcworkspace")]
    return name
