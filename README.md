# makeflow

Building blocks for a task runner that drives Rust projects. The package covers
these pieces:

- reading workspace details from `Cargo.toml`
- setting up the environment
- evaluating functions inside task arguments
- handling profiles
- installing cargo plugins and rustup components

## Installation

```sh
pip install makeflow
```

To run the tests:

```sh
pip install "makeflow[test]"
pytest
```

## Modules

- `makeflow.logger`
  - `get_level(name)` maps `"verbose"`, `"info"` and `"error"` to a `LogLevel`. Any other name gives `LogLevel.INFO`.
  - `get_log_level()` returns the name of the level the `makeflow` logger currently lets through.
  - `get_name_for_level`, `get_formatted_name` and `get_formatted_log_level` produce the display names. With colour on, they add ANSI bold and colour codes.
  - `init(LoggerOptions(level=..., color=...))` sends the `makeflow` logger to standard output and sets `CARGO_MAKE_LOG_LEVEL`.
  - Once `init` has run, logging an error writes "Build Failed." and raises `SystemExit(1)`.
- `makeflow.profile`
  - `get_profile()`, `set_profile(name)` and `set_additional_profiles(names)` use `CARGO_MAKE_PROFILE` and `CARGO_MAKE_ADDITIONAL_PROFILES`.
  - Profile names are lower-cased and stripped.
  - An empty profile falls back to `"development"`.
- `makeflow.tempfiles`
  - `create_text_file(text, extension)` writes a uniquely named file under the system temporary directory and returns its path.
  - `create_file(write_content, extension)` creates the file and calls `write_content(file, path)` to fill it.
  - `delete_file(path)` removes the file and ignores failures.
- `makeflow.legacy`
  - `get_home()` returns `CARGO_MAKE_HOME`, or else `~/.cargo-make` (`get_legacy_home()`).
  - `migrate(target_directory, file)` moves a file out of `~/.cargo-make`. `migrate_from_directory(target_directory, file, legacy_directory)` does the same from a directory you name.
  - `show_deprecated_attribute_warning(old, new)` logs a warning.
- `makeflow.functions` evaluates `@@name(args)` entries in argument lists.
  - `split(VAR, c)` splits the variable's value by the single character `c`.
  - `remove-empty(VAR)` gives the value, or nothing if the value is empty.
  - `trim(VAR)`, `trim(VAR, start)` and `trim(VAR, end)` strip the value and drop it if the result is empty.
  - Use `modify_arguments(args)` for a whole list and `evaluate_and_run(value)` for one entry.
  - Unknown functions and bad arguments raise `FunctionError`.
- `makeflow.crateinfo`
  - `load()` reads `Cargo.toml` in the current directory into a `CrateInfo`: package, workspace and dependencies. If there is no manifest, it returns an empty `CrateInfo`.
  - For workspaces, member globs are expanded and local `./` path dependencies are added as members. Excludes are then removed.
  - `parse_crate_info(text)` parses manifest text and raises `ValueError` on invalid TOML.
- `makeflow.gitinfo`
  - `load()` runs `git config --list` and `git branch`.
  - It returns a `GitInfo` with the branch, user name and user e-mail.
- `makeflow.workspace`
  - `create_workspace_task(crate_info, task)` returns a `WorkspaceTask`. Its script changes into each member and runs `cargo make ... <task>` there.
  - Members listed in `CARGO_MAKE_WORKSPACE_SKIP_MEMBERS` are skipped. The list is separated by `;` and may contain globs.
  - If `CARGO_MAKE_EXTEND_WORKSPACE_MAKEFILE` is true, the task's env carries `CARGO_MAKE_WORKSPACE_MAKEFILE`.
- `makeflow.environment`
  - `expand_value` replaces `${NAME}` with the value of each defined variable.
  - `set_env(env, additional_profiles)` applies a mapping of values:
    - strings are expanded and stored;
    - booleans are stored as `true`/`false`;
    - `EnvValueScript` stores the script's output: its last line, or all of it when `multi_line` is set;
    - nested mappings are applied only when the active profile matches.
  - `setup_env_for_crate()` and `setup_env_for_git_repo()` export `CARGO_MAKE_CRATE_*` and `CARGO_MAKE_GIT_*` variables.
  - `setup_cwd(dir)` changes directory and records it in `CARGO_MAKE_WORKING_DIRECTORY`.
  - `load_env_file(path)` loads `KEY=VALUE` lines.
  - `get_project_root()` finds the nearest directory that holds `Cargo.toml`.
  - `expand_env(command, args)` expands `${@}` into the entries of `CARGO_MAKE_TASK_ARGS`, then expands variables.
- `makeflow.installer`
  - `install_crate(cargo_command, crate_name, args, validate)` runs `cargo install` when `cargo --list` does not show the command.
  - `install_component(info, validate)` adds a rustup component when its binary check fails.
  - `install_crate_info(info, args, validate)` tries rustup first, then `cargo install --force`.
  - With `validate`, failures raise `InstallError`.

## Example

```python
import os
from makeflow.functions import modify_arguments

os.environ["MEMBERS"] = "a|b|c"
print(modify_arguments(["start", "@@split(MEMBERS, |)", "end"]))
# ['start', 'a', 'b', 'c', 'end']
```

## What this package does not do

There is no command-line program. The package does not read makefiles and does
not build execution plans from task definitions. It does not run tasks either.
It provides the pieces listed above for a runner built on top of it.