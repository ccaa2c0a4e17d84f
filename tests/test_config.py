import pytest

from paperplane.config import ReleaseSettings, load_dotenv, parse_dotenv


def test_parse_dotenv_handles_quotes_comments_and_export() -> None:
    content = (
        "# comment\n"
        "\n"
        "export ASC_APPLE_ID=dev@example.com\n"
        'ASC_APP_PASSWORD="abcd-efgh\\tx"\n'
        "IOS_SCHEME='My App'\n"
        "IOS_APP_NAME=Demo  # trailing comment\n"
        "not a valid line\n"
        "IOS_APP_NAME=Ignored\n"
    )
    got = parse_dotenv(content)
    assert got == {
        "ASC_APPLE_ID": "dev@example.com",
        "ASC_APP_PASSWORD": "abcd-efgh\tx",
        "IOS_SCHEME": "My App",
        "IOS_APP_NAME": "Demo",
    }


def test_single_quoted_values_are_literal() -> None:
    assert parse_dotenv("A='x\\ny'\n") == {"A": "x\\ny"}


def test_load_dotenv_does_not_override_existing(tmp_path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("IOS_SCHEME=FromFile\nASC_APPLE_ID=a@b.c\n", encoding="utf-8")
    environ = {"IOS_SCHEME": "FromShell"}

    load_dotenv(str(env_path), environ)
    assert environ == {"IOS_SCHEME": "FromShell", "ASC_APPLE_ID": "a@b.c"}


def test_load_dotenv_missing_file_is_noop(tmp_path) -> None:
    environ: dict = {}
    load_dotenv(str(tmp_path / ".env"), environ)
    assert environ == {}


def test_load_dotenv_unreadable_path_raises(tmp_path) -> None:
    # 目录无法按文件读取。
    (tmp_path / ".env").mkdir()
    with pytest.raises(RuntimeError) as e:
        load_dotenv(str(tmp_path / ".env"), {})
    assert "Failed to read .env" in str(e.value)


def test_release_settings_from_environ() -> None:
    settings = ReleaseSettings.from_environ(
        {
            "IOS_APP_NAME": "Demo",
            "IOS_WORKSPACE": "ios/Demo.xcworkspace",
            "ASC_APPLE_ID": "dev@example.com",
            "ASC_APP_PASSWORD": "secret",
            "UNRELATED": "x",
        }
    )
    assert settings == ReleaseSettings(
        app_name="Demo",
        workspace="ios/Demo.xcworkspace",
        apple_id="dev@example.com",
        app_password="secret",
    )
    assert settings.scheme == ""
    assert settings.itc_provider == ""
