"""
通过 `xcrun iTMSTransporter` 上传到 App Store Connect / TestFlight。
"""

from __future__ import annotations

from .config import ReleaseSettings
from .pipeline_utils import run_passthrough, run_status


def ensure_available(root: str) -> None:
    """确认本机已安装 Transporter。"""
    if run_status(["xcrun", "--find", "iTMSTransporter"], cwd=root) != 0:
        raise SystemExit(
            "Error: iTMSTransporter not found. Install the Transporter app from the "
            "Mac App Store, then try again."
        )


def upload_args(ipa_path: str, settings: ReleaseSettings) -> list[str]:
    """拼装上传参数；缺少账号凭据时退出。"""
    if not settings.apple_id or not settings.app_password:
        raise SystemExit(
            "Error: missing App Store Connect credentials. "
            "Set ASC_APPLE_ID and ASC_APP_PASSWORD."
        )
    args = [
        "xcrun",
        "iTMSTransporter",
        "-m",
        "upload",
        "-assetFile",
        ipa_path,
        "-u",
        settings.apple_id,
        "-p",
        settings.app_password,
    ]
    if settings.itc_provider:
        args += ["-itc_provider", settings.itc_provider]
    return args


def upload(root: str, ipa_path: str, settings: ReleaseSettings) -> None:
    # 命令行含密码，不回显，失败信息里也不带参数。
    try:
        run_passthrough(upload_args(ipa_path, settings), cwd=root)
    except RuntimeError:
        raise RuntimeError(f"Upload failed: xcrun iTMSTransporter -m upload {ipa_path}") from None
