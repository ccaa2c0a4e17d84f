from __future__ import annotations

"""
流程通用工具：外部命令执行与构建目录命名。
"""

import subprocess
from datetime import datetime, timezone


def _echo(cmd: list[str], cwd: str | None) -> None:
    if cwd:
        print(f"+ (cd {cwd}) {' '.join(cmd)}")
    else:
        print(f"+ {' '.join(cmd)}")


def run_cmd(cmd: list[str], *, cwd: str | None = None, verbose: bool = False) -> str:
    """执行外部命令并返回 stdout，失败时抛出带 stderr 的异常。"""
    if verbose:
        _echo(cmd, cwd)
    try:
        p = subprocess.run(
            cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, cwd=cwd, check=False
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"Command not found: {cmd[0]}") from e
    if p.returncode != 0:
        raise RuntimeError(f"Command failed: {' '.join(cmd)}\n{p.stderr.decode(errors='replace')}")
    return p.stdout.decode(errors="replace")


def run_passthrough(cmd: list[str], *, cwd: str | None = None, verbose: bool = False) -> None:
    """执行外部命令并直接继承终端输出（用于 xcodebuild 等长耗时命令）。"""
    if verbose:
        _echo(cmd, cwd)
    try:
        p = subprocess.run(cmd, cwd=cwd, check=False)
    except FileNotFoundError as e:
        raise RuntimeError(f"Command not found: {cmd[0]}") from e
    if p.returncode != 0:
        raise RuntimeError(f"Command failed: {' '.join(cmd)}")


def run_status(cmd: list[str], *, cwd: str | None = None) -> int:
    """执行外部命令，丢弃输出，仅返回退出码；命令不存在时返回 127。"""
    try:
        p = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            cwd=cwd,
            check=False,
        )
    except FileNotFoundError:
        return 127
    return p.returncode


def make_run_id(now: datetime | None = None) -> str:
    """生成构建目录名，形如 `2026-01-31-093015`（UTC）。"""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%d-%H%M%S")
