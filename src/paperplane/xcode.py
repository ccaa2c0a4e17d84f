"""
对 `xcodebuild` 归档与导出的轻量封装。

参数拼装与产物查找集中在此模块，发布流程只负责按顺序调用。
"""

from __future__ import annotations

import os
import plistlib
from typing import Any

from .pipeline_utils import run_passthrough

EXPORT_OPTIONS: dict[str, Any] = {
    "method": "app-store-connect",
    "signingStyle": "automatic",
    "uploadBitcode": False,
    "compileBitcode": False,
}


def export_options_plist() -> bytes:
    """生成 `-exportOptionsPlist` 所需的 XML plist 内容。"""
    return plistlib.dumps(EXPORT_OPTIONS, fmt=plistlib.FMT_XML, sort_keys=False)


def write_export_options(path: str) -> str:
    with open(path, "wb") as f:
        f.write(export_options_plist())
    return path


def archive_args(workspace_path: str, scheme: str, archive_path: str) -> list[str]:
    return [
        "xcodebuild",
        "-workspace",
        workspace_path,
        "-scheme",
        scheme,
        "-configuration",
        "Release",
        "-sdk",
        "iphoneos",
        "-destination",
        "generic/platform=iOS",
        "-archivePath",
        archive_path,
        "-allowProvisioningUpdates",
        "archive",
    ]


def export_args(archive_path: str, export_options_path: str, export_path: str) -> list[str]:
    return [
        "xcodebuild",
        "-exportArchive",
        "-archivePath",
        archive_path,
        "-exportOptionsPlist",
        export_options_path,
        "-exportPath",
        export_path,
        "-allowProvisioningUpdates",
    ]


def archive(
    root: str, workspace_path: str, scheme: str, archive_path: str, *, verbose: bool = False
) -> None:
    """执行 Release 归档，失败时抛出异常。"""
    run_passthrough(archive_args(workspace_path, scheme, archive_path), cwd=root, verbose=verbose)


def export_archive(
    root: str,
    archive_path: str,
    export_options_path: str,
    export_path: str,
    *,
    verbose: bool = False,
) -> None:
    """把 `.xcarchive` 导出为可上传的 `.ipa`。"""
    run_passthrough(
        export_args(archive_path, export_options_path, export_path), cwd=root, verbose=verbose
    )


def find_ipa(export_path: str) -> str:
    """在导出目录（及其下一层子目录）中查找 `.ipa`。"""
    names = sorted(os.listdir(export_path))
    for name in names:
        if name.endswith(".ipa"):
            return os.path.join(export_path, name)
    for name in names:
        sub = os.path.join(export_path, name)
        if not os.path.isdir(sub):
            continue
        for nested in sorted(os.listdir(sub)):
            if nested.endswith(".ipa"):
                return os.path.join(sub, nested)
    raise RuntimeError(f"No .ipa found after export in {export_path}")
