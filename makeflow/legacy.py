"""Support for legacy home directory layouts and attributes."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

_log = logging.getLogger(__name__)

HOME_ENV_KEY = "CARGO_MAKE_HOME"
_LEGACY_DIR_NAME = ".cargo-make"


def get_legacy_home() -> Path | None:
    """Return the legacy home directory under the user's home, if known."""
    try:
        return Path.home() / _LEGACY_DIR_NAME
    except RuntimeError:
        return None


def get_home() -> Path | None:
    """Return the configured home directory or the legacy one."""
    directory = os.environ.get(HOME_ENV_KEY)
    if directory is not None:
        return Path(directory)
    return get_legacy_home()


def migrate_from_directory(target_directory: Path, file: str, legacy_directory: Path) -> bool:
    """Move a legacy file into the target directory; False if that failed."""
    legacy_file = Path(legacy_directory) / file
    if not legacy_file.exists():
        return True

    target_directory = Path(target_directory)
    if not target_directory.exists():
        try:
            target_directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False

    target_file = target_directory / file
    _log.info(
        "Legacy file: %s exists, target directory: %s exists, copy to: %s",
        legacy_file,
        target_directory,
        target_file,
    )
    try:
        shutil.copyfile(legacy_file, target_file)
    except OSError as error:
        _log.info(
            "Error while copying legacy file: %s to: %s, error: %r",
            legacy_file,
            target_file,
            error,
        )
        return False

    _log.info("Delete legacy file: %s", legacy_file)
    try:
        legacy_file.unlink()
    except OSError:
        pass
    # Only succeeds when the directory is now empty.
    try:
        Path(legacy_directory).rmdir()
    except OSError:
        pass
    return True


def migrate(target_directory: Path, file: str) -> bool:
    """Migrate a file from the legacy home directory into target_directory."""
    _log.debug("Legacy target_directory: %s file: %s", target_directory, file)
    legacy_directory = get_legacy_home()
    if legacy_directory is None:
        return True
    return migrate_from_directory(target_directory, file, legacy_directory)


def show_deprecated_attribute_warning(old_attribute: str, new_attribute: str) -> None:
    """Warn that a makefile attribute was renamed."""
    _log.warning(
        "[DEPRECATED] The attribute '%s' has been replaced with '%s'. "
        "Please update your makefile.",
        old_attribute,
        new_attribute,
    )