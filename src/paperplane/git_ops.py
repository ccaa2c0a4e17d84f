"""
对 `git` 命令的轻量封装：工作区检查、跟踪状态判断与提交。
"""

from __future__ import annotations

from collections.abc import Sequence

from .pipeline_utils import run_cmd, run_status


def default_commit_message(build_number: int) -> str:
    return f"chore(release): bump iOS build to {build_number}"


def ensure_clean(root: str) -> None:
    """工作区存在未提交改动时退出。"""
    out = run_cmd(["git", "status", "--porcelain"], cwd=root)
    if out.strip():
        raise SystemExit(
            "Error: working tree is not clean. Commit or stash changes first, "
            "or pass --allow-dirty."
        )


def is_tracked(root: str, path: str) -> bool:
    """判断文件是否已被 git 跟踪。"""
    return run_status(["git", "ls-files", "--error-unmatch", path], cwd=root) == 0


def commit_paths(root: str, paths: Sequence[str], message: str, *, verbose: bool = False) -> None:
    """暂存指定文件并提交。"""
    run_cmd(["git", "add", *paths], cwd=root, verbose=verbose)
    run_cmd(["git", "commit", "-m", message], cwd=root, verbose=verbose)
