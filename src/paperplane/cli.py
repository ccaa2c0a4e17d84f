"""
`paperplane` 的命令行入口模块。

负责收集参数、加载 `.env` 与环境配置，并调用 `paperplane.release.release`。
"""

import argparse
import os
import re
from collections.abc import Sequence

from .config import ENV_HELP, ReleaseSettings, load_dotenv
from .release import release

_INT_RE = re.compile(r"[+-]?[0-9]+")

BANNER = r"""
                               __
                          _.-'`  `'-._
                      _.-'    .--.    `-._
                  _.-'      .'    `.      `-._
               .-'         /  /\    \         `-.
             .'           /  /  \    \           `.
            /            /__/____\____\            \
           /              /  __  \                  \
          /              /  /  \  \                  \
         /              /__/    \__\                  \
        /____________________________\_________________\

 ____  ____  ____  ____  ____  __     ___  _   _  _____
|  _ \|  _ \|  _ \|  _ \|  _ \|  |   / _ \| \ | |/  ___|
| |_) | |_) | |_) | |_) | |_) |  |  / /_\ \  \| |\ `--.
|  __/|  __/|  __/|  __/|  _ <|  |  |  _  | . ` | `--. \
| |   | |   | |   | |   | |_) |  |__| | | | |\  |/\__/ /
\_|   \_|   \_|   \_|   |____/|_____\_| |_\_| \_/\____/
"""


def _int_arg(raw: str) -> int:
    """`--build-number` 只在这里校验为整数，是否为正数由 `next_build_number` 判断。"""
    if not _INT_RE.fullmatch(raw.strip()):
        raise argparse.ArgumentTypeError(f"invalid build number: {raw}")
    return int(raw.strip())


def build_parser() -> argparse.ArgumentParser:
    """构建并返回 `paperplane` 命令行参数解析器。"""
    p = argparse.ArgumentParser(
        prog="paperplane",
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "Bump the iOS build number, commit, archive/export with xcodebuild\n"
            "and upload the ipa to TestFlight in one command."
        ),
        epilog=ENV_HELP,
    )
    p.add_argument(
        "--build-number",
        type=_int_arg,
        default=None,
        metavar="N",
        help="Set an explicit build number (default: current + 1)",
    )
    p.add_argument("--message", default="", help="Commit message override")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Show actions without modifying files",
    )
    p.add_argument("--allow-dirty", action="store_true", help="Skip clean git check")
    p.add_argument(
        "--skip-upload",
        action="store_true",
        help="Build/export only; skip Transporter upload",
    )
    p.add_argument("--no-banner", action="store_true", help="Do not print the banner")
    p.add_argument("--verbose", action="store_true", help="Verbose logging")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    """CLI 入口：解析参数、加载配置并执行发布流程。"""
    parser = build_parser()
    ns = parser.parse_args(argv)

    if not ns.no_banner:
        print(BANNER)

    root = os.getcwd()
    try:
        load_dotenv(os.path.join(root, ".env"), os.environ)
        settings = ReleaseSettings.from_environ(os.environ)
        result = release(
            root=root,
            settings=settings,
            build_number=ns.build_number,
            message=ns.message or "",
            dry_run=bool(ns.dry_run),
            allow_dirty=bool(ns.allow_dirty),
            skip_upload=bool(ns.skip_upload),
            verbose=bool(ns.verbose),
        )
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e

    print()
    if result.dry_run:
        print("paperplane: dry run complete.")
    elif result.ipa_path:
        print(f"paperplane: done -> {result.ipa_path}")
    else:
        print("paperplane: done.")
    return 0
