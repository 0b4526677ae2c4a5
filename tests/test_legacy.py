import logging
from pathlib import Path

from makeflow.legacy import (
    HOME_ENV_KEY,
    get_home,
    get_legacy_home,
    migrate,
    migrate_from_directory,
    show_deprecated_attribute_warning,
)


def test_get_legacy_home_under_user_home():
    assert get_legacy_home() == Path.home() / ".cargo-make"


def test_get_home_no_env(monkeypatch):
    monkeypatch.delenv(HOME_ENV_KEY, raising=False)
    assert get_home() == get_legacy_home()


def test_get_home_with_env(monkeypatch, tmp_path):
    directory = tmp_path / "home"
    monkeypatch.setenv(HOME_ENV_KEY, str(directory))
    assert get_home() == directory


def test_migrate_from_directory_not_exists(tmp_path):
    done = migrate_from_directory(tmp_path / "target_bad", "test.txt", tmp_path / "legacy_bad")
    assert done is True
    assert not (tmp_path / "target_bad").exists()


def test_migrate_from_directory_dir_exists_file_not_exists(tmp_path):
    done = migrate_from_directory(tmp_path / "target_bad", "test.txt", tmp_path)
    assert done is True


def test_migrate_from_directory_delete_legacy_directory(tmp_path):
    legacy_directory = tmp_path / "legacy"
    target_directory = tmp_path / "target"
    legacy_directory.mkdir()
    (legacy_directory / "test.txt").write_text("test 123")

    done = migrate_from_directory(target_directory, "test.txt", legacy_directory)

    assert done is True
    assert target_directory.exists()
    assert not legacy_directory.exists()
    assert (target_directory / "test.txt").read_text() == "test 123"


def test_migrate_from_directory_keeps_non_empty_legacy_directory(tmp_path):
    legacy_directory = tmp_path / "legacy"
    legacy_directory.mkdir()
    (legacy_directory / "test.txt").write_text("a")
    (legacy_directory / "other.txt").write_text("b")

    done = migrate_from_directory(tmp_path / "target", "test.txt", legacy_directory)

    assert done is True
    assert legacy_directory.exists()
    assert not (legacy_directory / "test.txt").exists()


def test_migrate_from_directory_copy_fails(tmp_path):
    legacy_directory = tmp_path / "legacy"
    legacy_directory.mkdir()
    (legacy_directory / "test.txt").write_text("data")
    target_as_file = tmp_path / "target"
    target_as_file.write_text("not a directory")

    done = migrate_from_directory(target_as_file, "test.txt", legacy_directory)

    assert done is False
    assert (legacy_directory / "test.txt").exists()


def test_migrate_uses_home(monkeypatch, tmp_path):
    home = tmp_path / "user"
    legacy_directory = home / ".cargo-make"
    legacy_directory.mkdir(parents=True)
    (legacy_directory / "cache.toml").write_text("value")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    target = tmp_path / "new"

    assert migrate(target, "cache.toml") is True
    assert (target / "cache.toml").read_text() == "value"


def test_show_deprecated_attribute_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="makeflow.legacy"):
        show_deprecated_attribute_warning("old", "new")

    assert (
        "[DEPRECATED] The attribute 'old' has been replaced with 'new'. "
        "Please update your makefile." in caplog.text
    )