"""Installation of cargo plugins, crates and rustup components needed by tasks."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

_log = logging.getLogger(__name__)

_CARGO = "cargo"
_RUSTUP = "rustup"
_GIT_FLAG = "--git"


class InstallError(RuntimeError):
    """Raised when a required installation step fails."""


@dataclass
class InstallCrateInfo:
    """How to detect and install a crate providing a binary."""

    crate_name: str
    binary: str
    test_arg: str
    rustup_component_name: str | None = None


@dataclass
class InstallRustupComponentInfo:
    """How to detect and install a rustup component."""

    rustup_component_name: str
    binary: str | None = None
    test_arg: str | None = None


def _probe(command: list[str]) -> subprocess.CompletedProcess[bytes] | None:
    """Run a command capturing its output; None if it could not be started."""
    try:
        return subprocess.run(command, capture_output=True)
    except OSError as error:
        _log.debug("Unable to run %s: %r", " ".join(command), error)
        return None


def _run_command(command: str, args: Sequence[str], validate: bool) -> int:
    """Run a command in the foreground; raise on failure when validating."""
    try:
        result = subprocess.run([command, *args])
    except OSError as error:
        if validate:
            raise InstallError(f"Unable to run command: {command} {error}") from error
        _log.debug("Unable to run command: %s %r", command, error)
        return -1
    if validate and result.returncode != 0:
        raise InstallError(
            f"Command {command} {' '.join(args)} failed with exit code {result.returncode}"
        )
    return result.returncode


def should_skip_crate_name(args: Sequence[str] | None) -> bool:
    """True when the install arguments name the source themselves (--git)."""
    return args is not None and _GIT_FLAG in args


def get_install_crate_args(
    crate_name: str, force: bool, args: Sequence[str] | None
) -> list[str]:
    """Build the arguments of a 'cargo install' invocation."""
    install_args = ["install"]
    if force:
        install_args.append("--force")
    if args is not None:
        install_args.extend(args)
    else:
        _log.debug("No crate installation args defined.")
    if not should_skip_crate_name(args):
        install_args.append(crate_name)
    return install_args


def is_crate_installed(crate_name: str) -> bool:
    """True if cargo lists crate_name among its installed commands."""
    _log.debug("Getting list of installed cargo commands.")
    result = _probe([_CARGO, "--list"])
    if result is None:
        _log.error("Unable to check if crate is installed: %s", crate_name)
        return False
    if result.returncode != 0:
        raise InstallError(
            f"Listing cargo commands failed with exit code {result.returncode}"
        )
    stdout = result.stdout.decode("utf-8", errors="replace")
    for token in stdout.split(" "):
        token = token.strip()
        _log.debug("Checking: %s", token)
        if token == crate_name:
            _log.debug("Found installed crate.")
            return True
    return False


def install_crate(
    cargo_command: str, crate_name: str, args: Sequence[str] | None, validate: bool
) -> None:
    """Install crate_name with cargo unless cargo_command is already available."""
    if is_crate_installed(cargo_command):
        return
    _run_command(_CARGO, get_install_crate_args(crate_name, False, args), validate)


def is_installed(binary: str, test_arg: str) -> bool:
    """True if running 'binary test_arg' starts and exits with code 0."""
    result = _probe([binary, test_arg])
    if result is None:
        _log.debug("Unable to check if crate is installed: %s", binary)
        return False
    return result.returncode == 0


def invoke_rustup_install(component_name: str) -> bool:
    """Add a component via rustup; True if that succeeded."""
    result = _probe([_RUSTUP, "component", "add", component_name])
    if result is None or result.returncode != 0:
        _log.debug("Failed to add component: %s via rustup", component_name)
        return False
    _log.debug("Component: %s added via rustup", component_name)
    return True


def install_component(info: InstallRustupComponentInfo, validate: bool) -> bool:
    """Ensure a rustup component is present; return whether it is."""
    if info.binary is not None and info.test_arg is not None:
        if is_installed(info.binary, info.test_arg):
            return True

    _log.debug("Rustup Component: %s not installed.", info.rustup_component_name)
    installed = invoke_rustup_install(info.rustup_component_name)
    if validate and not installed:
        raise InstallError(
            f"Failed to add rustup component: {info.rustup_component_name}"
        )
    return installed


def install_crate_info(
    info: InstallCrateInfo, args: Sequence[str] | None, validate: bool
) -> None:
    """Ensure the crate's binary works, via rustup first and cargo install second."""
    if is_installed(info.binary, info.test_arg):
        return
    _log.debug("Crate: %s not installed.", info.crate_name)

    if info.rustup_component_name is not None and invoke_rustup_install(
        info.rustup_component_name
    ):
        return

    _run_command(_CARGO, get_install_crate_args(info.crate_name, True, args), validate)