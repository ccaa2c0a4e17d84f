import plistlib

import pytest

from paperplane import xcode


def test_export_options_plist_contents() -> None:
    obj = plistlib.loads(xcode.export_options_plist())
    assert obj == {
        "method": "app-store-connect",
        "signingStyle": "automatic",
        "uploadBitcode": False,
        "compileBitcode": False,
    }


def test_write_export_options(tmp_path) -> None:
    path = xcode.write_export_options(str(tmp_path / "exportOptions.plist"))
    with open(path, "rb") as f:
        assert f.read().startswith(b"<?xml")


def test_archive_args() -> None:
    args = xcode.archive_args("/p/ios/Demo.xcworkspace", "Demo", "/b/Demo.xcarchive")
    assert args[0] == "xcodebuild"
    assert args[-1] == "archive"
    assert args[args.index("-workspace") + 1] == "/p/ios/Demo.xcworkspace"
    assert args[args.index("-scheme") + 1] == "Demo"
    assert args[args.index("-configuration") + 1] == "Release"
    assert args[args.index("-destination") + 1] == "generic/platform=iOS"
    assert "-allowProvisioningUpdates" in args


def test_archive_and_export_run_xcodebuild(monkeypatch) -> None:
    calls: list[tuple[list[str], str | None]] = []
    monkeypatch.setattr(
        xcode,
        "run_passthrough",
        lambda cmd, cwd=None, verbose=False: calls.append((cmd, cwd)),
    )

    xcode.archive("/p", "/p/ios/Demo.xcworkspace", "Demo", "/b/Demo.xcarchive")
    xcode.export_archive("/p", "/b/Demo.xcarchive", "/b/exportOptions.plist", "/b/export")

    assert calls[0] == (xcode.archive_args("/p/ios/Demo.xcworkspace", "Demo", "/b/Demo.xcarchive"), "/p")
    assert calls[1][0][:2] == ["xcodebuild", "-exportArchive"]
    assert calls[1][0][calls[1][0].index("-exportPath") + 1] == "/b/export"


def test_find_ipa_direct(tmp_path) -> None:
    (tmp_path / "DistributionSummary.plist").write_text("x")
    (tmp_path / "Demo.ipa").write_bytes(b"ipa")
    assert xcode.find_ipa(str(tmp_path)) == str(tmp_path / "Demo.ipa")


def test_find_ipa_nested(tmp_path) -> None:
    sub = tmp_path / "Apps"
    sub.mkdir()
    (sub / "Demo.ipa").write_bytes(b"ipa")
    assert xcode.find_ipa(str(tmp_path)) == str(sub / "Demo.ipa")


def test_find_ipa_missing(tmp_path) -> None:
    with pytest.raises(RuntimeError) as e:
        xcode.find_ipa(str(tmp_path))
    assert "No .ipa found" in str(e.value)
