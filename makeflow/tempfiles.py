"""Temporary file helpers for generated scripts."""

from __future__ import annotations

import logging
import os
import secrets
import string
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

_log = logging.getLogger(__name__)

_TEMP_DIR_NAME = "makeflow"
_NAME_ALPHABET = string.ascii_letters + string.digits
_NAME_LENGTH = 10


def _random_name() -> str:
    return "".join(secrets.choice(_NAME_ALPHABET) for _ in range(_NAME_LENGTH))


def create_file(write_content: Callable[[BinaryIO, str], None], extension: str) -> str:
    """Create a uniquely named temporary file filled by write_content; return its path."""
    directory = Path(tempfile.gettempdir()) / _TEMP_DIR_NAME
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        _log.debug("Unable to create temporary directory: %s %r", directory, error)

    name = _random_name()
    file_path = directory / (f"{name}.{extension}" if extension else name)
    path_str = str(file_path)
    _log.debug("Creating temporary file: %s", path_str)

    with open(file_path, "wb") as file:
        write_content(file, path_str)
        file.flush()
        try:
            os.fsync(file.fileno())
        except OSError as error:
            _log.debug("Error syncing file: %r", error)

    return path_str


def create_text_file(text: str, extension: str) -> str:
    """Write text to a new temporary file and return its path."""

    def write_content(file: BinaryIO, file_path: str) -> None:
        file.write(text.encode("utf-8"))
        _log.debug("Written file text:\n%s", text)

    return create_file(write_content, extension)


def delete_file(file: str) -> None:
    """Delete a temporary file, ignoring failures."""
    try:
        os.remove(file)
        _log.debug("Temporary file deleted: %s", file)
    except OSError as error:
        _log.debug("Unable to delete temporary file: %s %r", file, error)