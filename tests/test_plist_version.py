import plistlib

import pytest

from paperplane.errors import MalformedInputError, UpdateFailedError
from paperplane.plist_version import decode_plist_text, read_bundle_version, write_bundle_version

INFO_PLIST = """\
<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
\t<key>CFBundleShortVersionString</key>
\t<string>1.2.0</string>
\t<key>CFBundleVersion</key>
\t<string>5</string>
\t<key>CFBundleVersionNote</key>
\t<string>5</string>
</dict>
</plist>
"""


def test_read_bundle_version() -> None:
    assert read_bundle_version(INFO_PLIST) == "5"


def test_read_bundle_version_inline() -> None:
    text = "<key>CFBundleVersion</key><string>5</string>"
    assert read_bundle_version(text) == "5"
    assert write_bundle_version(text, 6) == "<key>CFBundleVersion</key><string>6</string>"


def test_read_bundle_version_missing() -> None:
    assert read_bundle_version("<dict></dict>") is None


def test_write_bundle_version_only_touches_target() -> None:
    out = write_bundle_version(INFO_PLIST, 6)
    assert out == INFO_PLIST.replace(
        "<key>CFBundleVersion</key>\n\t<string>5</string>",
        "<key>CFBundleVersion</key>\n\t<string>6</string>",
    )
    assert plistlib.loads(out.encode())["CFBundleVersionNote"] == "5"


def test_write_bundle_version_replaces_build_variable() -> None:
    text = "<key>CFBundleVersion</key>\n<string>$(CURRENT_PROJECT_VERSION)</string>"
    assert write_bundle_version(text, 12) == "<key>CFBundleVersion</key>\n<string>12</string>"


def test_write_bundle_version_missing_key_fails() -> None:
    with pytest.raises(UpdateFailedError):
        write_bundle_version("<dict></dict>", 3)


def test_write_bundle_version_unchanged_fails() -> None:
    with pytest.raises(UpdateFailedError):
        write_bundle_version(INFO_PLIST, 5)


def test_decode_plist_text_rejects_binary() -> None:
    data = plistlib.dumps({"CFBundleVersion": "1"}, fmt=plistlib.FMT_BINARY)
    with pytest.raises(MalformedInputError):
        decode_plist_text(data)


def test_decode_plist_text_xml() -> None:
    assert decode_plist_text(INFO_PLIST.encode()) == INFO_PLIST
