from pathlib import Path

import pytest

from makeflow.crateinfo import (
    CrateDependencyInfo,
    CrateInfo,
    PackageInfo,
    Workspace,
    add_members,
    expand_glob_members,
    get_members_from_dependencies,
    load,
    load_workspace_members,
    normalize_members,
    parse_crate_info,
    remove_excludes,
)


@pytest.fixture
def examples_cwd(tmp_path, monkeypatch):
    examples = tmp_path / "examples"
    examples.mkdir()
    (examples / "env.toml").write_text("[env]\n")
    (examples / "workspace2").mkdir()
    (examples / "workspace2" / "Makefile.toml").write_text("[tasks]\n")
    for name in ("member1", "member2", "member3"):
        (examples / "workspace" / name).mkdir(parents=True)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_load_from_manifest(tmp_path, monkeypatch):
    (tmp_path / "Cargo.toml").write_text(
        '[package]\nname = "sample-crate"\nversion = "0.1.0"\n\n'
        '[dependencies]\nserde = "1"\nlocal = { path = "./local" }\n'
    )
    monkeypatch.chdir(tmp_path)

    crate_info = load()

    assert crate_info.package is not None
    assert crate_info.package.name == "sample-crate"
    assert crate_info.package.version == "0.1.0"
    assert crate_info.workspace is None
    assert crate_info.dependencies == {
        "serde": "1",
        "local": CrateDependencyInfo(path="./local"),
    }


def test_load_without_manifest(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load() == CrateInfo()


def test_load_workspace_manifest(tmp_path, monkeypatch):
    (tmp_path / "Cargo.toml").write_text('[workspace]\nmembers = ["member1", "member2"]\n')
    monkeypatch.chdir(tmp_path)

    crate_info = load()

    assert crate_info.package is None
    assert crate_info.workspace == Workspace(members=["member1", "member2"])


def test_parse_invalid_manifest():
    with pytest.raises(ValueError):
        parse_crate_info("[package\nname = ")


def test_parse_package_fields():
    crate_info = parse_crate_info(
        '[package]\nname = "a"\nlicense = "MIT"\nhomepage = "https://example.com"\n'
    )
    assert crate_info.package == PackageInfo(
        name="a", license="MIT", homepage="https://example.com"
    )


def test_add_members_workspace_none_members_empty():
    crate_info = CrateInfo()
    add_members(crate_info, [])
    assert crate_info.workspace is None


def test_add_members_workspace_none_members_with_data():
    crate_info = CrateInfo()
    add_members(crate_info, ["test1", "test2"])
    assert crate_info.workspace is None


def test_add_members_workspace_new_members_with_data():
    crate_info = CrateInfo(workspace=Workspace())
    add_members(crate_info, ["test1", "test2"])
    assert crate_info.workspace.members == ["test1", "test2"]


def test_add_members_workspace_empty_members_with_data():
    crate_info = CrateInfo(workspace=Workspace(members=[]))
    add_members(crate_info, ["test1", "test2"])
    assert len(crate_info.workspace.members) == 2


def test_add_members_no_duplicates():
    crate_info = CrateInfo(workspace=Workspace(members=["member1", "member2"]))
    add_members(crate_info, ["test1", "test2"])
    assert len(crate_info.workspace.members) == 4


def test_add_members_with_duplicates():
    crate_info = CrateInfo(workspace=Workspace(members=["member1", "member2", "test1"]))
    add_members(crate_info, ["test1", "test2"])
    assert crate_info.workspace.members == ["member1", "member2", "test1", "test2"]


def test_get_members_from_dependencies_none():
    assert get_members_from_dependencies(CrateInfo()) == []


def test_get_members_from_dependencies_empty():
    assert get_members_from_dependencies(CrateInfo(dependencies={})) == []


def test_get_members_from_dependencies_only_versions():
    crate_info = CrateInfo(dependencies={"test1": "1", "test2": "2"})
    assert get_members_from_dependencies(crate_info) == []


def test_get_members_from_dependencies_no_paths():
    crate_info = CrateInfo(
        dependencies={"test1": "1", "test2": "2", "test3": CrateDependencyInfo(path=None)}
    )
    assert get_members_from_dependencies(crate_info) == []


def test_get_members_from_dependencies_workspace_paths():
    crate_info = CrateInfo(
        dependencies={
            "test1": "1",
            "test2": "2",
            "test3": CrateDependencyInfo(path="somepath"),
            "valid1": CrateDependencyInfo(path="./member1"),
            "valid2": CrateDependencyInfo(path="./member2"),
        }
    )
    assert get_members_from_dependencies(crate_info) == ["member1", "member2"]


def test_remove_excludes_no_workspace():
    crate_info = CrateInfo()
    assert remove_excludes(crate_info) is False
    assert crate_info.workspace is None


def test_remove_excludes_workspace_no_members_with_excludes():
    crate_info = CrateInfo(workspace=Workspace(exclude=["test"]))
    remove_excludes(crate_info)
    assert crate_info.workspace.members is None


def test_remove_excludes_workspace_empty_members_with_excludes():
    crate_info = CrateInfo(workspace=Workspace(members=[], exclude=["test"]))
    assert remove_excludes(crate_info) is False
    assert crate_info.workspace.members == []


def test_remove_excludes_workspace_with_members_no_excludes():
    crate_info = CrateInfo(workspace=Workspace(members=["test"]))
    remove_excludes(crate_info)
    assert crate_info.workspace.members == ["test"]


def test_remove_excludes_workspace_with_members_empty_excludes():
    crate_info = CrateInfo(workspace=Workspace(members=["test"], exclude=[]))
    remove_excludes(crate_info)
    assert crate_info.workspace.members == ["test"]


def test_remove_excludes_workspace_with_members_with_excludes():
    crate_info = CrateInfo(
        workspace=Workspace(
            members=["test1", "test2", "test3", "test4"],
            exclude=["test0", "test2", "test3", "test6"],
        )
    )
    assert remove_excludes(crate_info) is True
    assert crate_info.workspace.members == ["test1", "test4"]


def test_expand_glob_members_empty(examples_cwd):
    assert expand_glob_members("examples/*/*.bad") == []


def test_expand_glob_members_found(examples_cwd):
    members = expand_glob_members("examples/*.toml")
    assert "examples/env.toml" in members

    members = expand_glob_members("examples/*/*.toml")
    assert "examples/workspace2/Makefile.toml" in members

    members = expand_glob_members("examples/workspace/member*")
    assert "examples/workspace/member1" in members
    assert "examples/workspace/member2" in members


def test_normalize_members_no_workspace():
    crate_info = CrateInfo()
    normalize_members(crate_info)
    assert crate_info.workspace is None


def test_normalize_members_no_members():
    crate_info = CrateInfo(workspace=Workspace())
    normalize_members(crate_info)
    assert crate_info.workspace.members is None


def test_normalize_members_empty_members():
    crate_info = CrateInfo(workspace=Workspace(members=[]))
    normalize_members(crate_info)
    assert crate_info.workspace.members == []


def test_normalize_members_no_glob():
    crate_info = CrateInfo(workspace=Workspace(members=["member1", "member2"]))
    normalize_members(crate_info)
    assert crate_info.workspace.members == ["member1", "member2"]


def test_normalize_members_mixed(examples_cwd):
    crate_info = CrateInfo(
        workspace=Workspace(
            members=["member1", "member2", "examples/workspace/mem*", "member3", "member4"]
        )
    )
    normalize_members(crate_info)
    members = crate_info.workspace.members
    for expected in (
        "member1",
        "member2",
        "member3",
        "member4",
        "examples/workspace/member1",
        "examples/workspace/member2",
    ):
        assert expected in members
    assert "examples/workspace/mem*" not in members


def test_load_workspace_members_no_workspace():
    crate_info = CrateInfo()
    load_workspace_members(crate_info)
    assert crate_info.workspace is None


def test_load_workspace_members_mixed(examples_cwd):
    crate_info = CrateInfo(
        dependencies={
            "test1": "1",
            "test2": "2",
            "test3": CrateDependencyInfo(path="somepath"),
            "valid1": CrateDependencyInfo(path="./path1"),
            "valid2": CrateDependencyInfo(path="./path2"),
            "valid3": CrateDependencyInfo(path="./member1"),
        },
        workspace=Workspace(
            members=["member1", "member2", "examples/workspace/mem*", "member3", "member4"],
            exclude=["bad1", "member3", "examples/workspace/member2", "bad2"],
        ),
    )
    load_workspace_members(crate_info)

    members = crate_info.workspace.members
    for expected in (
        "path1",
        "path2",
        "member1",
        "member2",
        "member4",
        "examples/workspace/member1",
    ):
        assert expected in members
    assert "member3" not in members
    assert "examples/workspace/member2" not in members
    assert len(members) == 7


def test_load_expands_workspace_globs(examples_cwd):
    Path("Cargo.toml").write_text(
        '[workspace]\nmembers = ["examples/workspace/*"]\n'
        'exclude = ["examples/workspace/member3"]\n'
    )
    crate_info = load()
    assert crate_info.workspace.members == [
        "examples/workspace/member1",
        "examples/workspace/member2",
    ]