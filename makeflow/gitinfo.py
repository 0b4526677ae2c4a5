"""Loading of git repository information."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

_log = logging.getLogger(__name__)


@dataclass
class GitInfo:
    """Git details of the current working directory."""

    branch: str | None = None
    user_name: str | None = None
    user_email: str | None = None


def _lines(output: str):
    for line in output.split("\n"):
        line = line.strip()
        _log.debug("Checking: %s", line)
        yield line


def parse_git_config(output: str, git_info: GitInfo) -> None:
    """Fill user name and e-mail from 'git config --list' output."""
    for line in _lines(output):
        if line.startswith("user.name="):
            git_info.user_name = line.split("=")[1]
        elif line.startswith("user.email="):
            git_info.user_email = line.split("=")[1]


def parse_branch(output: str, git_info: GitInfo) -> None:
    """Fill the current branch from 'git branch' output."""
    for line in _lines(output):
        if line.startswith("*"):
            parts = line.split(" ")
            if len(parts) > 1:
                git_info.branch = parts[1]


def _run_git(*args: str) -> str | None:
    try:
        result = subprocess.run(["git", *args], capture_output=True)
    except OSError as error:
        _log.info("Error while running git %s command: %r", " ".join(args), error)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.decode("utf-8", errors="replace")


def load_from_git_config(git_info: GitInfo) -> None:
    """Read the user details from the git configuration."""
    output = _run_git("config", "--list")
    if output is not None:
        parse_git_config(output, git_info)


def load_branch(git_info: GitInfo) -> None:
    """Read the current branch name."""
    output = _run_git("branch")
    if output is not None:
        parse_branch(output, git_info)


def load() -> GitInfo:
    """Collect git information for the current working directory."""
    _log.debug("Searching for git info.")
    git_info = GitInfo()
    load_from_git_config(git_info)
    load_branch(git_info)
    _log.debug("Loaded git info %r", git_info)
    return git_info