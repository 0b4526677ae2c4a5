"""Creation of the task that runs a flow in every workspace member."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase

from makeflow.crateinfo import CrateInfo
from makeflow.logger import get_log_level

_log = logging.getLogger(__name__)

SKIP_MEMBERS_ENV_KEY = "CARGO_MAKE_WORKSPACE_SKIP_MEMBERS"
EXTEND_WORKSPACE_MAKEFILE_ENV_KEY = "CARGO_MAKE_EXTEND_WORKSPACE_MAKEFILE"
MAKEFILE_PATH_ENV_KEY = "CARGO_MAKE_MAKEFILE_PATH"
WORKSPACE_MAKEFILE_ENV_KEY = "CARGO_MAKE_WORKSPACE_MAKEFILE"

_MAKE_COMMAND = "cargo make"
_MAKE_FLAGS = "--disable-check-for-updates --allow-private --no-on-error"


@dataclass
class WorkspaceTask:
    """A script task that runs the requested task inside each member."""

    script: list[str]
    env: dict[str, str] | None = None


def _env_flag(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() not in ("", "0", "false", "no")


def get_skipped_workspace_members(skip_members_config: str) -> set[str]:
    """Parse a ';' separated list of members to skip."""
    return {member for member in skip_members_config.split(";") if member}


def should_skip_workspace_member(member: str, skipped_members: set[str]) -> bool:
    """True if the member is listed or matches a listed glob."""
    if member in skipped_members:
        return True
    return any(
        "*" in skipped and fnmatchcase(member, skipped) for skipped in skipped_members
    )


def update_member_path(member: str) -> str:
    """Convert a member path to the platform's separators."""
    return member.replace("\\", os.sep).replace("/", os.sep)


def create_workspace_task(crate_info: CrateInfo, task: str) -> WorkspaceTask:
    """Build the script that invokes task in every non-skipped member."""
    if crate_info.workspace is None:
        raise ValueError("Crate is not a workspace")
    members = crate_info.workspace.members or []

    log_level = get_log_level()
    skipped = get_skipped_workspace_members(os.environ.get(SKIP_MEMBERS_ENV_KEY, ""))
    windows = os.name == "nt"

    script: list[str] = []
    for member in members:
        if should_skip_workspace_member(member, skipped):
            _log.debug("Skipping Member: %s.", member)
            continue
        _log.debug("Adding Member: %s.", member)

        member_path = update_member_path(member)
        script.append(f"PUSHD {member_path}" if windows else f"cd ./{member_path}")
        script.append(f"{_MAKE_COMMAND} {_MAKE_FLAGS} --loglevel={log_level} {task}")
        if windows:
            script.append("if %errorlevel% neq 0 exit /b %errorlevel%")
            script.append("POPD")
        else:
            script.append("cd -")

    env = None
    if _env_flag(EXTEND_WORKSPACE_MAKEFILE_ENV_KEY, False):
        makefile = os.environ.get(MAKEFILE_PATH_ENV_KEY)
        if makefile is not None:
            env = {WORKSPACE_MAKEFILE_ENV_KEY: makefile}

    return WorkspaceTask(script=script, env=env)