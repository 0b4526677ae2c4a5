"""Functions that can be invoked from task arguments as @@name(args)."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence

_log = logging.getLogger(__name__)

_PREFIX = "@@"


class FunctionError(ValueError):
    """Raised when a function is unknown or called with bad arguments."""


def split(function_args: Sequence[str]) -> list[str]:
    """Split an environment variable's value by a single character."""
    if len(function_args) != 2:
        raise FunctionError(
            "split expects only 2 arguments (environment variable name, split by character)"
        )
    env_key, split_by = function_args
    if len(split_by) != 1:
        raise FunctionError("split expects a single character separator")
    value = os.environ.get(env_key, "")
    return value.split(split_by) if value else []


def remove_empty(function_args: Sequence[str]) -> list[str]:
    """Return an environment variable's value, or nothing if it is empty."""
    if len(function_args) != 1:
        raise FunctionError(
            "remove_empty expects only 1 argument (environment variable name)"
        )
    value = os.environ.get(function_args[0], "")
    return [value] if value else []


def trim(function_args: Sequence[str]) -> list[str]:
    """Return an environment variable's value trimmed, or nothing if empty."""
    if not function_args or len(function_args) > 2:
        raise FunctionError(
            "trim expects up to 2 arguments "
            "(environment variable name and optionally start/end trim flag)"
        )
    value = os.environ.get(function_args[0], "")
    if len(function_args) == 1:
        trimmed = value.strip()
    elif function_args[1] == "start":
        trimmed = value.lstrip()
    elif function_args[1] == "end":
        trimmed = value.rstrip()
    else:
        raise FunctionError("Invalid trim type provided, only start or end are supported.")
    return [trimmed] if trimmed else []


_FUNCTIONS: dict[str, Callable[[Sequence[str]], list[str]]] = {
    "split": split,
    "remove-empty": remove_empty,
    "trim": trim,
}


def run_function(function_name: str, function_args: Sequence[str]) -> list[str]:
    """Invoke a named function with its arguments."""
    try:
        function = _FUNCTIONS[function_name]
    except KeyError:
        raise FunctionError(f"Unknown function: {function_name}") from None
    return function(function_args)


def get_function_name(function_string: str) -> str | None:
    """Return the text before the first '(' or None when there is none."""
    index = function_string.find("(")
    return function_string[:index] if index >= 0 else None


def get_function_argument(value: str) -> str:
    """Strip an argument unless it is a single character."""
    return value if len(value) == 1 else value.strip()


def get_function_arguments(function_string: str) -> list[str] | None:
    """Parse '(a, b, ...)' into its arguments, or None if not parenthesised."""
    if not (function_string.startswith("(") and function_string.endswith(")")):
        return None
    inner = function_string[1:-1]
    if not inner:
        return []
    return [get_function_argument(part) for part in inner.split(",")]


def evaluate_and_run(value: str) -> list[str]:
    """Run the function a value names, or return the value unchanged."""
    if not value.startswith(_PREFIX):
        return [value]
    function_string = value[len(_PREFIX):]
    function_name = get_function_name(function_string)
    if function_name is None:
        return [value]
    function_args = get_function_arguments(function_string[len(function_name):])
    if function_args is None:
        return [value]
    return run_function(function_name, function_args)


def modify_arguments(args: Sequence[str] | None) -> list[str] | None:
    """Replace every function call among the arguments by its results."""
    if args is None:
        return None
    return [result for arg in args for result in evaluate_and_run(arg)]