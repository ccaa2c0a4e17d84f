from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from paperplane import pipeline_utils


def test_run_cmd_raises_runtime_error_on_failure(monkeypatch) -> None:
    def fake_run(_cmd, stdout=None, stderr=None, cwd=None, check=False):
        _ = (stdout, stderr, cwd, check)
        return SimpleNamespace(returncode=1, stdout=b"", stderr=b"boom")

    monkeypatch.setattr(pipeline_utils.subprocess, "run", fake_run)

    try:
        pipeline_utils.run_cmd(["/usr/bin/false"])
        assert False, "expected RuntimeError"
    except RuntimeError as e:
        msg = str(e)
        assert "Command failed" in msg
        assert "boom" in msg


def test_run_cmd_returns_stdout(monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        pipeline_utils.subprocess,
        "run",
        lambda *_a, **_k: SimpleNamespace(returncode=0, stdout=b" M app.json\n", stderr=b""),
    )

    out = pipeline_utils.run_cmd(["git", "status", "--porcelain"], cwd="/repo", verbose=True)
    assert out == " M app.json\n"
    assert "+ (cd /repo) git status --porcelain" in capsys.readouterr().out


def test_run_cmd_missing_executable(monkeypatch) -> None:
    def fake_run(*_a, **_k):
        raise FileNotFoundError("git")

    monkeypatch.setattr(pipeline_utils.subprocess, "run", fake_run)
    with pytest.raises(RuntimeError) as e:
        pipeline_utils.run_cmd(["git", "status"])
    assert "Command not found: git" in str(e.value)


def test_run_passthrough_raises_on_failure(monkeypatch) -> None:
    monkeypatch.setattr(
        pipeline_utils.subprocess, "run", lambda *_a, **_k: SimpleNamespace(returncode=65)
    )
    with pytest.raises(RuntimeError) as e:
        pipeline_utils.run_passthrough(["xcodebuild", "archive"])
    assert "Command failed: xcodebuild archive" in str(e.value)


def test_run_status_reports_exit_code(monkeypatch) -> None:
    monkeypatch.setattr(
        pipeline_utils.subprocess, "run", lambda *_a, **_k: SimpleNamespace(returncode=1)
    )
    assert pipeline_utils.run_status(["git", "ls-files", "--error-unmatch", "x"]) == 1


def test_run_status_missing_executable(monkeypatch) -> None:
    def fake_run(*_a, **_k):
        raise FileNotFoundError("xcrun")

    monkeypatch.setattr(pipeline_utils.subprocess, "run", fake_run)
    assert pipeline_utils.run_status(["xcrun", "--find", "iTMSTransporter"]) == 127


def test_make_run_id() -> None:
    now = datetime(2026, 1, 31, 9, 30, 15, 123000, tzinfo=timezone.utc)
    assert pipeline_utils.make_run_id(now) == "2026-01-31-093015"
