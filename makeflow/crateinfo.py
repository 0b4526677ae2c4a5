"""Loading of crate manifest information and workspace members."""

from __future__ import annotations

import glob
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_log = logging.getLogger(__name__)

MANIFEST_FILE = "Cargo.toml"


@dataclass
class Workspace:
    """The workspace section of a manifest."""

    members: list[str] | None = None
    exclude: list[str] | None = None


@dataclass
class PackageInfo:
    """The package section of a manifest."""

    name: str | None = None
    version: str | None = None
    description: str | None = None
    license: str | None = None
    documentation: str | None = None
    homepage: str | None = None
    repository: str | None = None


@dataclass
class CrateDependencyInfo:
    """A dependency given as a table rather than a version string."""

    path: str | None = None


@dataclass
class CrateInfo:
    """The parts of a manifest that task runs care about.

    Dependencies map a name to either a version string or a CrateDependencyInfo.
    """

    package: PackageInfo | None = None
    workspace: Workspace | None = None
    dependencies: dict[str, str | CrateDependencyInfo] | None = field(default=None)


def _string_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _string_list_or_none(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(item) for item in value]


def parse_crate_info(text: str) -> CrateInfo:
    """Parse manifest text into a CrateInfo; raise ValueError if it is invalid."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as error:
        raise ValueError(f"Unable to parse {MANIFEST_FILE}, {error}") from error

    crate_info = CrateInfo()

    package = data.get("package")
    if isinstance(package, dict):
        crate_info.package = PackageInfo(
            name=_string_or_none(package.get("name")),
            version=_string_or_none(package.get("version")),
            description=_string_or_none(package.get("description")),
            license=_string_or_none(package.get("license")),
            documentation=_string_or_none(package.get("documentation")),
            homepage=_string_or_none(package.get("homepage")),
            repository=_string_or_none(package.get("repository")),
        )

    workspace = data.get("workspace")
    if isinstance(workspace, dict):
        crate_info.workspace = Workspace(
            members=_string_list_or_none(workspace.get("members")),
            exclude=_string_list_or_none(workspace.get("exclude")),
        )

    dependencies = data.get("dependencies")
    if isinstance(dependencies, dict):
        parsed: dict[str, str | CrateDependencyInfo] = {}
        for name, value in dependencies.items():
            if isinstance(value, dict):
                parsed[name] = CrateDependencyInfo(path=_string_or_none(value.get("path")))
            else:
                parsed[name] = str(value)
        crate_info.dependencies = parsed

    return crate_info


def expand_glob_members(glob_member: str) -> list[str]:
    """Return the paths matching a glob, with '/' as separator."""
    return [path.replace("\\", "/") for path in sorted(glob.glob(glob_member))]


def normalize_members(crate_info: CrateInfo) -> None:
    """Replace glob members by their expansions, appended after the plain members."""
    workspace = crate_info.workspace
    if workspace is None or workspace.members is None:
        return
    plain = [member for member in workspace.members if "*" not in member]
    expanded = [
        path
        for member in workspace.members
        if "*" in member
        for path in expand_glob_members(member)
    ]
    workspace.members[:] = plain + expanded


def get_members_from_dependencies(crate_info: CrateInfo) -> list[str]:
    """Return the paths of dependencies that live under the crate directory."""
    if not crate_info.dependencies:
        return []
    return [
        value.path[2:]
        for value in crate_info.dependencies.values()
        if isinstance(value, CrateDependencyInfo)
        and value.path is not None
        and value.path.startswith("./")
    ]


def add_members(crate_info: CrateInfo, new_members: list[str]) -> None:
    """Add members to the workspace, skipping ones already listed."""
    workspace = crate_info.workspace
    if not new_members or workspace is None:
        return
    if workspace.members is None:
        workspace.members = list(new_members)
        return
    for member in new_members:
        if member not in workspace.members:
            workspace.members.append(member)


def remove_excludes(crate_info: CrateInfo) -> bool:
    """Remove excluded entries from the members; True if any was removed."""
    workspace = crate_info.workspace
    if workspace is None or workspace.exclude is None or workspace.members is None:
        return False
    removed = False
    for exclude in workspace.exclude:
        if exclude in workspace.members:
            workspace.members.remove(exclude)
            removed = True
    return removed


def load_workspace_members(crate_info: CrateInfo) -> None:
    """Resolve the full member list of a workspace crate."""
    if crate_info.workspace is None:
        return
    normalize_members(crate_info)
    add_members(crate_info, get_members_from_dependencies(crate_info))
    remove_excludes(crate_info)


def load() -> CrateInfo:
    """Load crate info from the manifest in the current working directory."""
    file_path = Path(MANIFEST_FILE)
    if not file_path.exists():
        return CrateInfo()

    _log.debug("Opening file: %s", file_path)
    crate_info = parse_crate_info(file_path.read_text(encoding="utf-8"))
    load_workspace_members(crate_info)
    _log.debug("Loaded %s: %r", MANIFEST_FILE, crate_info)
    return crate_info