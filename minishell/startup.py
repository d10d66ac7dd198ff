"""Create the shell state at start-up."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Iterable, Mapping
from typing import Optional, Union

from minishell.environment import Environment, ShellContext

_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")

EnvironSource = Union[Mapping[str, str], Iterable[str]]


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def load_environment(env: Environment, entries: Iterable[str]) -> None:
    """Define a variable for each ``KEY=VALUE`` entry; an entry without ``=`` has no value."""
    for entry in entries:
        key, eq, value = entry.partition("=")
        env.set(key, value if eq else None)


def increment_shlvl(env: Environment) -> int:
    """Raise ``SHLVL`` by one (to 1 if unset, never below 0) and return it."""
    current = env.get("SHLVL")
    level = _atoi(current) + 1 if current is not None else 1
    level = max(level, 0)
    env.set("SHLVL", str(level))
    return level


def create_context(
    environ: Optional[EnvironSource] = None,
    interactive: Optional[bool] = None,
) -> ShellContext:
    """Return a fresh shell state loaded from ``environ`` (the process environment by default)."""
    if environ is None:
        environ = os.environ
    if isinstance(environ, Mapping):
        entries: Iterable[str] = [f"{key}={value}" for key, value in environ.items()]
    else:
        entries = environ
    if interactive is None:
        interactive = sys.stdin is not None and sys.stdin.isatty()
    ctx = ShellContext(interactive=interactive)
    load_environment(ctx.env, entries)
    increment_shlvl(ctx.env)
    return ctx