"""Environment variable set up before tasks run."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from makeflow import crateinfo, gitinfo
from makeflow.crateinfo import CrateInfo
from makeflow.gitinfo import GitInfo
from makeflow.profile import DEFAULT_PROFILE, PROFILE_ENV_KEY
from makeflow.tempfiles import create_text_file, delete_file

_log = logging.getLogger(__name__)

TASK_ARGS_ENV_KEY = "CARGO_MAKE_TASK_ARGS"
WORKING_DIRECTORY_ENV_KEY = "CARGO_MAKE_WORKING_DIRECTORY"
LOCK_FILE = "Cargo.lock"
_ALL_ARGS = "${@}"
_UNC_PREFIX = "\\\\?\\"


@dataclass
class EnvValueScript:
    """An environment value produced by running a script."""

    script: list[str]
    multi_line: bool | None = None


# A value is a plain string, a boolean, a script, or a profile's own mapping.
EnvValue = Union[str, bool, EnvValueScript, Mapping[str, "EnvValue"]]


def _set_optional(key: str, value: str | None) -> None:
    if value is not None:
        os.environ[key] = value


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def _run_script(script: Sequence[str]) -> tuple[int, str] | None:
    """Run script lines in the platform shell; None if it could not start."""
    windows = os.name == "nt"
    lines = ["@echo off", *script] if windows else list(script)
    file_path = create_text_file("\n".join(lines), "bat" if windows else "sh")
    command = ["cmd", "/C", file_path] if windows else ["sh", file_path]
    try:
        result = subprocess.run(command, capture_output=True)
    except OSError as error:
        _log.debug("Unable to run script: %r", error)
        return None
    finally:
        delete_file(file_path)
    return result.returncode, result.stdout.decode("utf-8", errors="replace")


def evaluate_env_value(env_value: EnvValueScript) -> str:
    """Run the script and return its output: all of it, or its last non-empty line."""
    result = _run_script(env_value.script)
    if result is None:
        return ""
    exit_code, stdout = result
    if exit_code != 0:
        raise subprocess.CalledProcessError(exit_code, "env script", output=stdout)

    _log.debug("Env script stdout:\n%s", stdout)

    if env_value.multi_line:
        return stdout
    lines = [line for line in stdout.split("\n") if line]
    if not lines:
        return ""
    return lines[-1].replace("\r", "")


def expand_value(value: str) -> str:
    """Replace every ${NAME} of a defined environment variable by its value."""
    if "${" not in value:
        return value
    for key, existing in os.environ.items():
        value = value.replace("${" + key + "}", existing)
    return value


def evaluate_and_set_env(key: str, value: str) -> None:
    """Expand variables in value and store it under key."""
    env_value = expand_value(value)
    _log.debug("Setting Env: %s Value: %s", key, env_value)
    os.environ[key] = env_value


def set_env_for_bool(key: str, value: bool) -> None:
    """Store a boolean as 'true' or 'false'."""
    _log.debug("Setting Env: %s Value: %s", key, value)
    os.environ[key] = _bool_text(value)


def set_env_for_script(key: str, env_value: EnvValueScript) -> None:
    """Store the expanded output of a script."""
    evaluate_and_set_env(key, evaluate_env_value(env_value))


def set_env_for_profile(
    profile_name: str,
    sub_env: Mapping[str, EnvValue],
    additional_profiles: Sequence[str] | None,
) -> None:
    """Apply a profile's variables if that profile is active."""
    current_profile = os.environ.get(PROFILE_ENV_KEY, DEFAULT_PROFILE)
    found = additional_profiles is not None and profile_name in additional_profiles
    if current_profile == profile_name or found:
        _log.debug("Setting Up Profile: %s Env.", profile_name)
        set_env(sub_env)


def set_env(
    env: Mapping[str, EnvValue], additional_profiles: Sequence[str] | None = None
) -> None:
    """Update the environment from the given values, in order."""
    _log.debug("Setting Up Env.")
    for key, env_value in env.items():
        _log.debug("Setting env: %s = %r", key, env_value)
        if isinstance(env_value, bool):
            set_env_for_bool(key, env_value)
        elif isinstance(env_value, str):
            evaluate_and_set_env(key, env_value)
        elif isinstance(env_value, EnvValueScript):
            set_env_for_script(key, env_value)
        elif isinstance(env_value, Mapping):
            set_env_for_profile(key, env_value, additional_profiles)
        else:
            raise TypeError(f"Unsupported env value for {key}: {env_value!r}")


def setup_env_for_crate() -> CrateInfo:
    """Export the crate details of the current directory and return them."""
    crate_info = crateinfo.load()
    package = crate_info.package or crateinfo.PackageInfo()

    if package.name is not None:
        os.environ["CARGO_MAKE_CRATE_NAME"] = package.name
        os.environ["CARGO_MAKE_CRATE_FS_NAME"] = package.name.replace("-", "_")

    _set_optional("CARGO_MAKE_CRATE_VERSION", package.version)
    _set_optional("CARGO_MAKE_CRATE_DESCRIPTION", package.description)
    _set_optional("CARGO_MAKE_CRATE_LICENSE", package.license)
    _set_optional("CARGO_MAKE_CRATE_DOCUMENTATION", package.documentation)
    _set_optional("CARGO_MAKE_CRATE_HOMEPAGE", package.homepage)
    _set_optional("CARGO_MAKE_CRATE_REPOSITORY", package.repository)

    if crate_info.dependencies is not None:
        has_dependencies = len(crate_info.dependencies) > 0
    else:
        has_dependencies = crate_info.workspace is not None
    os.environ["CARGO_MAKE_CRATE_HAS_DEPENDENCIES"] = _bool_text(has_dependencies)

    is_workspace = crate_info.workspace is not None
    os.environ["CARGO_MAKE_CRATE_IS_WORKSPACE"] = _bool_text(is_workspace)

    members = (crate_info.workspace.members if crate_info.workspace else None) or []
    os.environ["CARGO_MAKE_CRATE_WORKSPACE_MEMBERS"] = ",".join(members)

    os.environ["CARGO_MAKE_CRATE_LOCK_FILE_EXISTS"] = _bool_text(Path(LOCK_FILE).exists())

    return crate_info


def setup_env_for_git_repo() -> GitInfo:
    """Export the git details of the current directory and return them."""
    git_info = gitinfo.load()
    _set_optional("CARGO_MAKE_GIT_BRANCH", git_info.branch)
    _set_optional("CARGO_MAKE_GIT_USER_NAME", git_info.user_name)
    _set_optional("CARGO_MAKE_GIT_USER_EMAIL", git_info.user_email)
    return git_info


def remove_unc_prefix(directory_path: str | os.PathLike[str]) -> Path:
    """Strip a leading extended-length path prefix."""
    path_str = str(directory_path)
    if path_str.startswith(_UNC_PREFIX):
        return Path(path_str[len(_UNC_PREFIX):])
    return Path(directory_path)


def setup_cwd(cwd: str | None = None) -> None:
    """Change the working directory and record it in the environment."""
    directory = cwd if cwd is not None else "."
    _log.debug("Changing working directory to: %s", directory)

    path = Path(directory)
    try:
        path = path.resolve(strict=True)
    except OSError:
        pass
    if os.name == "nt":
        path = remove_unc_prefix(path)

    try:
        os.chdir(path)
    except OSError as error:
        _log.error("Unable to set current working directory to: %s %r", directory, error)
        return
    os.environ[WORKING_DIRECTORY_ENV_KEY] = str(path)
    _log.debug("Working directory changed to: %s", directory)


def _parse_env_file(text: str):
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            yield key, value.strip()


def load_env_file(env_file: str | None = None) -> bool:
    """Load KEY=VALUE lines from a file into the environment.

    Paths starting with '.' are relative to the recorded working directory.
    Returns False when no file is given; raises OSError if it cannot be read.
    """
    if env_file is None:
        return False
    if env_file.startswith("."):
        base_path = os.environ.get(WORKING_DIRECTORY_ENV_KEY, ".")
        file_path = Path(base_path) / env_file
    else:
        file_path = Path(env_file)

    text = file_path.read_text(encoding="utf-8")
    for key, value in _parse_env_file(text):
        os.environ[key] = expand_value(value)
    _log.debug("Loaded env file: %s", file_path)
    return True


def get_project_root_for_path(directory: str | os.PathLike[str]) -> str | None:
    """Return the nearest directory, upwards from directory, holding a manifest."""
    path = Path(directory)
    for candidate in (path, *path.parents):
        if (candidate / crateinfo.MANIFEST_FILE).exists():
            return str(candidate)
    return None


def get_project_root() -> str | None:
    """Return the project root of the current working directory."""
    try:
        directory = Path.cwd()
    except OSError:
        return None
    return get_project_root_for_path(directory)


def _task_args() -> list[str]:
    value = os.environ.get(TASK_ARGS_ENV_KEY, "")
    return value.split(";") if value else []


def expand_args(args: Sequence[str] | None) -> list[str] | None:
    """Expand ${@} into the task arguments and ${NAME} into variable values."""
    if args is None:
        return None
    task_args = _task_args()
    expanded: list[str] = []
    for arg in args:
        if _ALL_ARGS not in arg:
            expanded.append(arg)
        elif arg == _ALL_ARGS:
            expanded.extend(task_args)
        else:
            expanded.extend(arg.replace(_ALL_ARGS, task_arg) for task_arg in task_args)
    return [expand_value(arg) for arg in expanded]


def expand_env(
    command: str | None, args: Sequence[str] | None
) -> tuple[str | None, list[str] | None]:
    """Return the command and arguments with environment variables expanded."""
    expanded_command = expand_value(command) if command is not None else None
    return expanded_command, expand_args(args)