from __future__ import annotations

"""
TestFlight release pipeline.

High-level flow:
1) Locate `ios/`, the app config (`app.config.ts` > `app.config.js` > `app.json`),
   the Xcode workspace and `ios/<App>/Info.plist`.
2) Require a clean git tree (unless `allow_dirty`).
3) Read the current build number, compute the next one once, and prepare the
   updated config and Info.plist text in memory. Any error stops here, before a
   single file is touched.
4) Dry run: print what would change and stop.
5) Write the config, then Info.plist. The two writes are not atomic; an
   interruption in between leaves them out of sync.
6) Commit both files.
7) `xcodebuild archive` + `-exportArchive` into `ios/build/testflight/<run-id>/`.
8) Upload the exported ipa with iTMSTransporter (unless `skip_upload`).
"""

import os
from dataclasses import dataclass

from . import git_ops, transporter, xcode
from .build_number import next_build_number, read_build_number, write_build_number
from .config import ReleaseSettings
from .errors import MalformedInputError
from .pipeline_utils import make_run_id
from .plist_version import decode_plist_text, read_bundle_version, write_bundle_version
from .project_scan import (
    ensure_dir,
    ensure_file,
    resolve_app_name,
    resolve_config_file,
    resolve_workspace_path,
)
from .types import ConfigFile


@dataclass(frozen=True)
class ReleasePlan:
    """Everything resolved before the first side effect."""

    root: str
    config: ConfigFile
    workspace_path: str
    app_name: str
    scheme: str
    info_plist_path: str
    current_build: int | None
    next_build: int
    current_plist_build: str | None
    config_text: str
    info_plist_text: str


@dataclass(frozen=True)
class ReleaseResult:
    next_build_number: int
    ipa_path: str = ""
    dry_run: bool = False


def _log_step(message: str) -> None:
    print(f"[paperplane] {message}")


def _write_text(path: str, text: str) -> None:
    # newline="" keeps the original line endings.
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def plan_release(
    root: str,
    settings: ReleaseSettings,
    *,
    build_number: int | None = None,
    allow_dirty: bool = False,
) -> ReleasePlan:
    """Resolve paths, check the tree and compute the new file contents."""
    ios_dir = os.path.join(root, "ios")
    ensure_dir(ios_dir, "ios directory")

    config = resolve_config_file(root)
    workspace_path = resolve_workspace_path(ios_dir, root, settings.workspace)
    app_name = resolve_app_name(workspace_path, settings.app_name)
    scheme = settings.scheme or app_name
    info_plist_path = os.path.join(ios_dir, app_name, "Info.plist")
    ensure_file(info_plist_path, "Info.plist")

    if not allow_dirty:
        git_ops.ensure_clean(root)

    config_name = os.path.basename(config.path)
    with open(config.path, "rb") as f:
        raw = f.read()
    try:
        config_text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"{config_name} is not valid UTF-8: {e}") from e
    reading = read_build_number(config.format, config_text)

    # Without a current value and without an override this raises BuildNumberNotFoundError.
    next_build = next_build_number(reading.value, build_number)
    if not reading.found:
        raise SystemExit(
            f"Error: unable to detect build number in {config.path}; "
            f"{config_name} needs a buildNumber field (e.g. ios.buildNumber) to update."
        )
    updated_config = write_build_number(config.format, config_text, reading.location, next_build)

    with open(info_plist_path, "rb") as f:
        info_plist_text = decode_plist_text(f.read())
    current_plist_build = read_bundle_version(info_plist_text)
    updated_plist = write_bundle_version(info_plist_text, next_build)

    return ReleasePlan(
        root=root,
        config=config,
        workspace_path=workspace_path,
        app_name=app_name,
        scheme=scheme,
        info_plist_path=info_plist_path,
        current_build=reading.value,
        next_build=next_build,
        current_plist_build=current_plist_build,
        config_text=updated_config,
        info_plist_text=updated_plist,
    )


def print_dry_run(plan: ReleasePlan) -> None:
    current = plan.current_build if plan.current_build is not None else "unknown"
    plist_current = plan.current_plist_build if plan.current_plist_build is not None else "unknown"
    print("Dry run:")
    print(f"  App       : {plan.app_name}")
    print(f"  Workspace : {plan.workspace_path}")
    print(f"  Scheme    : {plan.scheme}")
    print(f"  {os.path.basename(plan.config.path)} buildNumber: {current} -> {plan.next_build}")
    print(f"  Info.plist CFBundleVersion: {plist_current} -> {plan.next_build}")
    print("  No files were written, no commit made, no build/export/upload executed.")


def release(
    *,
    root: str,
    settings: ReleaseSettings,
    build_number: int | None = None,
    message: str = "",
    dry_run: bool = False,
    allow_dirty: bool = False,
    skip_upload: bool = False,
    verbose: bool = False,
) -> ReleaseResult:
    # Public API used by the CLI.
    _log_step("Resolving project layout")
    plan = plan_release(root, settings, build_number=build_number, allow_dirty=allow_dirty)
    _log_step(f"Build number: {plan.current_build} -> {plan.next_build}")

    if dry_run:
        print_dry_run(plan)
        return ReleaseResult(next_build_number=plan.next_build, dry_run=True)

    _log_step("Writing build number")
    _write_text(plan.config.path, plan.config_text)
    _write_text(plan.info_plist_path, plan.info_plist_text)

    _log_step("Committing")
    paths = [plan.config.path]
    if git_ops.is_tracked(root, plan.info_plist_path):
        paths.append(plan.info_plist_path)
    git_ops.commit_paths(
        root,
        paths,
        message or git_ops.default_commit_message(plan.next_build),
        verbose=verbose,
    )

    build_root = os.path.join(root, "ios", "build", "testflight", make_run_id())
    archive_path = os.path.join(build_root, f"{plan.app_name}.xcarchive")
    export_path = os.path.join(build_root, "export")
    export_options_path = os.path.join(build_root, "exportOptions.plist")
    os.makedirs(export_path, exist_ok=True)
    xcode.write_export_options(export_options_path)

    _log_step(f"Archiving {plan.scheme}")
    xcode.archive(root, plan.workspace_path, plan.scheme, archive_path, verbose=verbose)
    _log_step("Exporting ipa")
    xcode.export_archive(root, archive_path, export_options_path, export_path, verbose=verbose)
    ipa_path = xcode.find_ipa(export_path)

    if skip_upload:
        _log_step(f"Build/export complete. IPA ready at: {ipa_path}")
        return ReleaseResult(next_build_number=plan.next_build, ipa_path=ipa_path)

    _log_step("Uploading to App Store Connect")
    transporter.ensure_available(root)
    transporter.upload(root, ipa_path, settings)
    _log_step(f"Upload complete. IPA: {ipa_path}")
    return ReleaseResult(next_build_number=plan.next_build, ipa_path=ipa_path)
